"""Financial snapshot derived from a transaction log and user settings."""

from dataclasses import dataclass, asdict

from models import TransactionKind, Source


@dataclass(frozen=True)
class FinancialSnapshot:
    current_cash: int
    current_bank: int
    total: int
    survival_days: int
    total_income: int
    total_expense: int
    today_expense: int
    cumulative_saving: int

    def to_dict(self):
        return asdict(self)


def _sum(transactions, kind, source=None):
    return sum(
        t.amount for t in transactions
        if t.kind is kind and (source is None or t.source is source)
    )


def compute_snapshot(transactions, settings, today):
    """Compute the snapshot for ``transactions`` under ``settings`` as of ``today``.

    Pure: no I/O, no clock access, and the same arguments always give the
    same result. ``today`` is the caller's local calendar date.
    """
    transactions = list(transactions)
    income, expense = TransactionKind.INCOME, TransactionKind.EXPENSE

    current_cash = (settings.initial_cash
                    + _sum(transactions, income, Source.CASH)
                    - _sum(transactions, expense, Source.CASH))
    current_bank = (settings.initial_bank
                    + _sum(transactions, income, Source.BANK)
                    - _sum(transactions, expense, Source.BANK))
    total = current_cash + current_bank

    daily_cost = settings.daily_cost
    # Floor division: a negative total gives a negative day count
    survival_days = total // daily_cost if daily_cost > 0 else 0

    today_expense = sum(t.amount for t in transactions if t.date == today and t.kind is expense)

    total_income = _sum(transactions, income)
    total_expense = _sum(transactions, expense)

    cumulative_saving = 0
    if daily_cost > 0:
        # The window starts at the earliest live transaction, so deleting or
        # backdating it moves the budget window retroactively.
        first_date = min((t.date for t in transactions), default=today)
        diff_days = max(1, (today - first_date).days + 1)
        cumulative_saving = diff_days * daily_cost - total_expense

    return FinancialSnapshot(
        current_cash=current_cash,
        current_bank=current_bank,
        total=total,
        survival_days=survival_days,
        total_income=total_income,
        total_expense=total_expense,
        today_expense=today_expense,
        cumulative_saving=cumulative_saving,
    )


def budget_status(snapshot, settings):
    """Return ``(today_status, survival_status)`` for the dashboard badges.

    ``today_status`` is ``'none'`` without a budget, ``'over'`` when today's
    spending exceeds the daily budget, otherwise ``'ok'``. ``survival_status``
    is ``'danger'`` when the projection is at or below zero days.
    """
    if settings.daily_cost <= 0:
        return 'none', 'none'
    today_status = 'over' if snapshot.today_expense > settings.daily_cost else 'ok'
    survival_status = 'danger' if snapshot.survival_days <= 0 else 'ok'
    return today_status, survival_status
