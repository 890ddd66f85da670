"""
CSV Transaction Reader

Parses transaction CSV files into TransactionEvents, separating rows that
fail validation.

Expected header:
    transaction_id,user_id,amount,currency,transaction_date,status
"""

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import ErrorDetails

from utils.schemas import TransactionEvent, ensure_local_datetime

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("transaction_id", "user_id", "amount", "currency", "transaction_date", "status")

REASON_VALIDATION = "Validation Failed"
REASON_TIMESTAMP = "Timestamp Format Error"
REASON_AMOUNT = "Amount Format Error"

# Error types that mean the value is absent or out of range rather than unparseable
_VALIDATION_ERROR_TYPES = frozenset({"missing", "string_too_short", "greater_than_equal"})


class TransactionRow(BaseModel):
    """One CSV row, validated column by column."""

    transaction_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, allow_inf_nan=False)
    currency: str = Field(..., min_length=1)
    transaction_date: datetime
    status: str = Field(..., min_length=1)

    @field_validator("*", mode="before")
    @classmethod
    def strip_value(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("transaction_date")
    @classmethod
    def validate_local_datetime(cls, v: datetime) -> datetime:
        return ensure_local_datetime(v)

    def to_event(self) -> TransactionEvent:
        # Values are already validated; build the event without a second pass.
        return TransactionEvent.model_construct(
            transactionId=self.transaction_id,
            userId=self.user_id,
            amount=self.amount,
            currency=self.currency,
            transactionDate=self.transaction_date,
            status=self.status,
        )


@dataclass(frozen=True)
class RejectedRow:
    """A CSV row that failed validation, with the reason."""

    line_number: int
    row: dict[str, str]
    reason: str


def parse_row(row: dict[str, str]) -> TransactionEvent:
    """
    Convert one CSV row into a TransactionEvent.

    Raises:
        ValidationError: If the row breaks any TransactionRow rule
    """
    return TransactionRow.model_validate(row).to_event()


def rejection_reason(error: ValidationError) -> str:
    """
    Map the first validation error of a row to its rejection reason.

    Blank, missing and negative values are a plain validation failure;
    values that don't parse get the amount or timestamp reason.
    """
    detail: ErrorDetails = error.errors()[0]
    field = detail["loc"][0] if detail["loc"] else None

    if detail["type"] in _VALIDATION_ERROR_TYPES or not str(detail.get("input") or "").strip():
        return REASON_VALIDATION
    if field == "amount":
        return REASON_AMOUNT
    if field == "transaction_date":
        return REASON_TIMESTAMP
    return REASON_VALIDATION

def read_transactions(path: str | Path) -> tuple[list[TransactionEvent], list[RejectedRow]]:
    """
    Read a transactions CSV file.

    Args:
        path: Path to the CSV file

    Returns:
        Tuple of (valid events, rejected rows)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the header is missing required columns
        IOError: If the file can't be read
    """
    csv_path = Path(path)

    if not csv_path.is_file():
        error_msg = f"Transactions CSV not found: {path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    events: list[TransactionEvent] = []
    rejected: list[RejectedRow] = []

    try:
        with open(csv_path, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f, restkey="_extra")

            header = reader.fieldnames or []
            missing_columns = [column for column in REQUIRED_COLUMNS if column not in header]
            if missing_columns:
                error_msg = f"Invalid CSV format: missing columns {missing_columns} in {path}"
                logger.error(error_msg)
                raise ValueError(error_msg)

            for line_number, row in enumerate(reader, 2):  # Start at 2 for header line
                try:
                    events.append(parse_row(row))
                except ValidationError as e:
                    reason = rejection_reason(e)
                    logger.warning(
                        "Rejected row in transactions CSV",
                        extra={"file_path": str(path), "row_number": line_number, "reason": reason, "detail": e.errors()[0]["msg"]},
                    )
                    rejected.append(RejectedRow(line_number=line_number, row=dict(row), reason=reason))

    except csv.Error as e:
        error_msg = f"Invalid CSV format in transactions file: {path} - {str(e)}"
        logger.error(error_msg)
        raise ValueError(error_msg) from e

    return events, rejected
