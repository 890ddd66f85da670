"""Runnable applications: the SQS consumer and the inbox publisher."""
