import csv
import logging
import re
from decimal import Decimal, DefaultContext
from typing import Dict, Iterable, Iterator, Optional, TextIO

from client_account import ClientAccount
from errors import InputError
from models import ClientId, Transaction, TransactionId, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
OUTPUT_HEADER = ("client", "available", "held", "total", "locked")

# Plain decimal notation only: no exponent, no NaN/Infinity.
_AMOUNT_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")
_ID_PATTERN = re.compile(r"^[0-9]+$")

# Balances are computed in the default decimal context and must stay exact.
MAX_AMOUNT_DIGITS = DefaultContext.prec


def read_transactions(filepath: str, amount_scale: int = 4) -> Iterator[Transaction]:
    """
    Read transactions from a CSV file with header `type,client,tx,amount`.

    Raises InputError for an unreadable file or any malformed row.
    """
    try:
        f = open(filepath, "r", newline="")
    except OSError as e:
        raise InputError(f"cannot open {filepath}: {e.strerror or e}") from e

    with f:
        reader = csv.DictReader(f)
        _check_header(reader.fieldnames)
        for row in reader:
            yield parse_csv_row(row, amount_scale, line_number=reader.line_num)


def _check_header(fieldnames: Optional[list]) -> None:
    if not fieldnames:
        raise InputError("input is empty, expected header row", line_number=1)
    columns = [name.strip().lower() for name in fieldnames]
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise InputError(f"missing column(s) in header: {', '.join(missing)}", line_number=1)


def parse_csv_row(row: Dict[str, str], amount_scale: int = 4, line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise InputError(f"too many fields: {row[None]}", line_number)

    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items()}

    try:
        transaction_type = TransactionType(normalized["type"].lower())
    except ValueError:
        raise InputError(f"unknown transaction type {normalized['type']!r}", line_number) from None

    client_id = ClientId(_parse_id(normalized["client"], "client", line_number))
    transaction_id = TransactionId(_parse_id(normalized["tx"], "tx", line_number))

    amount_str = normalized.get("amount", "")
    if not transaction_type.carries_amount:
        if amount_str:
            logger.debug(f"Line {line_number}: ignoring amount on {transaction_type.value}")
        return Transaction(transaction_type, client_id, transaction_id)

    if not amount_str:
        raise InputError(f"{transaction_type.value} requires an amount", line_number)

    amount = _parse_amount(amount_str, amount_scale, line_number)
    return Transaction(transaction_type, client_id, transaction_id, amount)


def _parse_id(text: str, column: str, line_number: Optional[int]) -> int:
    if not _ID_PATTERN.match(text):
        raise InputError(f"{column} must be an unsigned integer, got {text!r}", line_number)
    value = int(text)
    max_value = ClientId.MAX_VALUE if column == "client" else TransactionId.MAX_VALUE
    if value > max_value:
        raise InputError(f"{column} {value} out of range 0..{max_value}", line_number)
    return value


def _parse_amount(text: str, amount_scale: int, line_number: Optional[int]) -> Decimal:
    if not _AMOUNT_PATTERN.match(text):
        raise InputError(f"amount must be a plain decimal, got {text!r}", line_number)

    amount = Decimal(text)
    if amount < 0:
        raise InputError(f"amount must not be negative, got {text}", line_number)
    if -amount.as_tuple().exponent > amount_scale:
        raise InputError(f"amount {text} has more than {amount_scale} decimal places", line_number)
    if len(amount.as_tuple().digits) > MAX_AMOUNT_DIGITS:
        raise InputError(f"amount {text} has more than {MAX_AMOUNT_DIGITS} significant digits", line_number)
    return amount


def format_decimal(value: Decimal) -> str:
    """Format decimal exactly, removing trailing zeros and never using exponent notation."""
    if value.is_zero():
        return "0"
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in accounts:
        writer.writerow([
            str(account.client_id),
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
