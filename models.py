"""Transaction and settings records, plus validation at the store boundary."""

import re
from dataclasses import dataclass, asdict
from datetime import date, datetime
from enum import Enum
from typing import Optional


class ValidationError(ValueError):
    """Raised when user-supplied input cannot become a record."""

    def __init__(self, field, message):
        super().__init__(f"{field}: {message}")
        self.field = field


class CorruptRecordError(ValueError):
    """Raised when a persisted row fails the record invariants."""


class TransactionKind(Enum):
    INCOME = 'income'
    EXPENSE = 'expense'


class Source(Enum):
    CASH = 'cash'
    BANK = 'bank'


# Labels used by older clients
KIND_ALIASES = {
    'thu': TransactionKind.INCOME,
    'chi': TransactionKind.EXPENSE,
}
SOURCE_ALIASES = {
    'tiền mặt': Source.CASH,
    'tài khoản': Source.BANK,
}

MAX_CONTENT_LENGTH = 255

# Largest magnitude a BIGINT column holds
MAX_AMOUNT = 2**63 - 1

GROUPED_NUMBER = re.compile(r'^-?\d{1,3}([.,]\d{3})+$')


@dataclass(frozen=True)
class Transaction:
    date: date
    content: str
    kind: TransactionKind
    source: Source
    amount: int
    id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'content': self.content,
            'kind': self.kind.value,
            'source': self.source.value,
            'amount': self.amount,
        }


@dataclass(frozen=True)
class Settings:
    initial_cash: int = 0
    initial_bank: int = 0
    daily_cost: int = 0

    def to_dict(self):
        return asdict(self)


def _parse_enum(enum_cls, aliases, value, field):
    text = str(value or '').strip().lower()
    if text in aliases:
        return aliases[text]
    for member in enum_cls:
        if text in (member.value, member.name.lower()):
            return member
    raise ValidationError(field, f"unknown value {value!r}")


def _parse_int(value, field):
    number = _to_int(value, field)
    if abs(number) > MAX_AMOUNT:
        raise ValidationError(field, "is too large")
    return number


def _to_int(value, field):
    if isinstance(value, bool):
        raise ValidationError(field, "must be a whole number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(field, "must be a whole number")
        return int(value)
    text = str(value if value is not None else '').strip().replace(' ', '')
    # Form input may carry thousands separators ("80.000" / "80,000")
    if GROUPED_NUMBER.match(text):
        text = text.replace(',', '').replace('.', '')
    try:
        return int(text)
    except ValueError:
        raise ValidationError(field, "must be a whole number") from None


def _parse_date(value, today):
    if value in (None, ''):
        return today
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError('date', "expected YYYY-MM-DD") from None


def parse_transaction(data, today, tx_id=None):
    """Build a Transaction from untrusted input.

    ``data`` is any mapping with ``content``, ``amount`` and optionally
    ``kind`` (or ``transaction_type``), ``source`` and ``date``. Missing
    kind defaults to expense, missing source to cash, missing date to
    ``today``.
    """
    content = str(data.get('content') or '').strip()
    if not content:
        raise ValidationError('content', "is required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError('content', f"must be at most {MAX_CONTENT_LENGTH} characters")

    amount = _parse_int(data.get('amount'), 'amount')
    if amount <= 0:
        raise ValidationError('amount', "must be positive")

    kind_value = data.get('kind') or data.get('transaction_type') or TransactionKind.EXPENSE.value
    kind = _parse_enum(TransactionKind, KIND_ALIASES, kind_value, 'kind')
    source = _parse_enum(Source, SOURCE_ALIASES, data.get('source') or Source.CASH.value, 'source')

    return Transaction(
        id=tx_id,
        date=_parse_date(data.get('date'), today),
        content=content,
        kind=kind,
        source=source,
        amount=amount,
    )


def parse_settings(data):
    initial_cash = _parse_int(data.get('initial_cash') or 0, 'initial_cash')
    initial_bank = _parse_int(data.get('initial_bank') or 0, 'initial_bank')
    daily_cost = _parse_int(data.get('daily_cost') or 0, 'daily_cost')
    if daily_cost < 0:
        raise ValidationError('daily_cost', "must not be negative")
    return Settings(initial_cash=initial_cash, initial_bank=initial_bank, daily_cost=daily_cost)


def transaction_from_row(row):
    try:
        tx = Transaction(
            id=row['id'],
            date=row['date'] if isinstance(row['date'], date) else datetime.strptime(row['date'], '%Y-%m-%d').date(),
            content=row['content'],
            kind=TransactionKind(row['kind']),
            source=Source(row['source']),
            amount=int(row['amount']),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptRecordError(f"transaction row {row.get('id')!r} is invalid: {e}") from e
    if tx.amount <= 0 or not tx.content:
        raise CorruptRecordError(f"transaction row {tx.id!r} violates amount/content invariants")
    return tx


def settings_from_row(row):
    if row is None:
        return Settings()
    try:
        settings = Settings(
            initial_cash=int(row['initial_cash']),
            initial_bank=int(row['initial_bank']),
            daily_cost=int(row['daily_cost']),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptRecordError(f"settings row is invalid: {e}") from e
    if settings.daily_cost < 0:
        raise CorruptRecordError("settings row has a negative daily_cost")
    return settings
