"""Shared configuration, schemas, errors, logging and AWS adapters."""
