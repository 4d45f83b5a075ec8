from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value, not binary noise
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


@dataclass(frozen=True)
class TransactionAggregateRow:
    """One summed group of successful transactions."""

    merchant_name: Optional[str]
    total_amount: Optional[Decimal]

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> "TransactionAggregateRow":
        name = row.get("name")
        return cls(
            merchant_name=None if name is None else str(name),
            total_amount=_to_decimal(row.get("total_amount")),
        )


@dataclass(frozen=True)
class ReportWindow:
    hours: int
    since: datetime

    @classmethod
    def ending_at(cls, hours: int, now: Optional[datetime] = None) -> "ReportWindow":
        now = now or datetime.now(timezone.utc)
        return cls(hours=hours, since=now - timedelta(hours=hours))


@dataclass(frozen=True)
class OutboundMessage:
    chat_id: str
    text: str

    def as_payload(self) -> Dict[str, str]:
        return {"chat_id": self.chat_id, "text": self.text}
