"""
Summary message rendering.

Pure functions only: the same rows and window always give the same text.
"""
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from babel.numbers import format_decimal

from reporting.models import TransactionAggregateRow

CURRENCY_SYMBOL = "₹"
AMOUNT_LOCALE = "en_IN"
# Indian grouping (1,23,456.78), always two fraction digits
AMOUNT_PATTERN = "#,##,##0.00"
UNKNOWN_MERCHANT = "Unknown"
NO_TRANSACTIONS_LINE = "No successful transactions in this window."


def grand_total(rows: Iterable[TransactionAggregateRow]) -> Decimal:
    return sum(
        (row.total_amount for row in rows if row.total_amount is not None),
        Decimal("0"),
    )


def format_amount(value: Optional[Decimal]) -> str:
    if value is None:
        value = Decimal("0")
    return format_decimal(value, format=AMOUNT_PATTERN, locale=AMOUNT_LOCALE)


def display_name(raw: Optional[str]) -> str:
    """
    Render the grouping key the way the query builds it: first
    space-delimited token of the trimmed name, newlines flattened.
    A token with nothing printable left is shown as Unknown.
    """
    if not raw:
        return UNKNOWN_MERCHANT
    token = str(raw).strip(" ").split(" ")[0]
    return token.replace("\n", " ").strip() or UNKNOWN_MERCHANT


def header_line(hours: int) -> str:
    noun = "hours" if hours > 1 else "hour"
    return f"✅ Transaction summary (last {hours} {noun}):\n\n"


def build_message(rows: Sequence[TransactionAggregateRow], hours: int) -> str:
    message = header_line(hours)

    if not rows:
        return message + NO_TRANSACTIONS_LINE

    for row in rows:
        message += f"{display_name(row.merchant_name)}: {CURRENCY_SYMBOL}{format_amount(row.total_amount)}\n"

    message += f"\nTotal: {CURRENCY_SYMBOL}{format_amount(grand_total(rows))}"
    return message
