"""
Pydantic Schemas - Data Validation Models

Defines the Pydantic schemas shared by the consumer and the publisher:
- TransactionEvent: the queue message and the stored document
- EnrichmentResult: an enriched event plus its object-store key

Usage:
    from utils.schemas import TransactionEvent

    event = TransactionEvent.from_json(body)
    document = event.to_json()
"""

from datetime import datetime
from decimal import Decimal
from typing import NamedTuple, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_local_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Reject date-times carrying a time zone offset."""
    if value is not None and value.tzinfo is not None:
        raise ValueError("transaction date must be a local date-time without offset")
    return value


class TransactionEvent(BaseModel):
    """Transaction event as carried on the queue.

    Field names match the JSON document exactly (camelCase). The model is
    frozen; use ``model_copy(update=...)`` to derive a changed event.

    ``transactionDate`` must be present in the payload but may be null;
    a null date is rejected later, at enrichment.
    """

    model_config = ConfigDict(frozen=True)

    transactionId: str = Field(..., description="Transaction identifier")
    userId: str = Field(..., description="User identifier")
    amount: Decimal = Field(..., description="Transaction amount")
    currency: str = Field(..., description="Currency code")
    transactionDate: Optional[datetime] = Field(..., description="Local transaction date-time")
    status: str = Field(..., description="Processing status")
    originalSource: Optional[str] = Field(default=None, description="Origin of the event")

    @field_validator("transactionDate")
    @classmethod
    def validate_local_datetime(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_local_datetime(v)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "TransactionEvent":
        """Parse and validate a JSON payload.

        Raises:
            orjson.JSONDecodeError: If the payload is not valid JSON
            pydantic.ValidationError: If the payload does not match the schema
        """
        return cls.model_validate(orjson.loads(payload))

    def to_json(self) -> str:
        """Serialize to JSON with ISO-8601 date-times and a numeric amount.

        Keys follow field declaration order. The amount is written with the
        exact digits of the Decimal, so 100.50 stays 100.50.
        """
        document = self.model_dump()
        document["amount"] = orjson.Fragment(str(self.amount))
        return orjson.dumps(document).decode("utf-8")


class EnrichmentResult(NamedTuple):
    """An enriched event and the object-store key it belongs under."""

    event: TransactionEvent
    storage_key: str
