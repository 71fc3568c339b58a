"""MySQL-backed transaction and settings store.

Every function takes an open cursor created with ``dictionary=True`` and
leaves committing to the caller.
"""

import logging

from models import CorruptRecordError, transaction_from_row, settings_from_row

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = "id, date, content, kind, source, amount"


def _load_transaction(row):
    try:
        return transaction_from_row(row)
    except CorruptRecordError:
        logger.error("Rejected corrupt transaction row id=%s", row.get('id'))
        raise


def list_transactions(cur, user_id):
    cur.execute(
        f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE user_id=%s ORDER BY date DESC, id DESC",
        (user_id,)
    )
    return [_load_transaction(row) for row in cur.fetchall()]


def get_transaction(cur, user_id, tx_id):
    cur.execute(
        f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id=%s AND user_id=%s",
        (tx_id, user_id)
    )
    row = cur.fetchone()
    return _load_transaction(row) if row else None


def add_transaction(cur, user_id, tx):
    cur.execute(
        "INSERT INTO transactions (user_id, date, content, kind, source, amount) VALUES (%s, %s, %s, %s, %s, %s)",
        (user_id, tx.date, tx.content, tx.kind.value, tx.source.value, tx.amount)
    )
    return cur.lastrowid


def update_transaction(cur, user_id, tx_id, tx):
    """Overwrite every field of transaction ``tx_id``. Returns False if it does not exist."""
    cur.execute("SELECT id FROM transactions WHERE id=%s AND user_id=%s", (tx_id, user_id))
    if not cur.fetchone():
        return False
    cur.execute(
        "UPDATE transactions SET date=%s, content=%s, kind=%s, source=%s, amount=%s WHERE id=%s AND user_id=%s",
        (tx.date, tx.content, tx.kind.value, tx.source.value, tx.amount, tx_id, user_id)
    )
    return True


def delete_transaction(cur, user_id, tx_id):
    cur.execute("DELETE FROM transactions WHERE id=%s AND user_id=%s", (tx_id, user_id))


def get_settings(cur, user_id):
    cur.execute(
        "SELECT initial_cash, initial_bank, daily_cost FROM settings WHERE user_id=%s",
        (user_id,)
    )
    row = cur.fetchone()
    try:
        return settings_from_row(row)
    except CorruptRecordError:
        logger.error("Rejected corrupt settings row for user_id=%s", user_id)
        raise


def save_settings(cur, user_id, settings):
    cur.execute(
        """
        INSERT INTO settings (user_id, initial_cash, initial_bank, daily_cost)
        VALUES (%s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
            initial_cash = VALUES(initial_cash),
            initial_bank = VALUES(initial_bank),
            daily_cost = VALUES(daily_cost)
        """,
        (user_id, settings.initial_cash, settings.initial_bank, settings.daily_cost)
    )


def reset_user_data(cur, user_id):
    cur.execute("DELETE FROM transactions WHERE user_id=%s", (user_id,))
    cur.execute("DELETE FROM settings WHERE user_id=%s", (user_id,))
    logger.info("Reset all data for user_id=%s", user_id)


def replace_user_data(cur, user_id, transactions, settings):
    """Replace the user's transactions and settings wholesale (last write wins)."""
    cur.execute("DELETE FROM transactions WHERE user_id=%s", (user_id,))
    for tx in transactions:
        add_transaction(cur, user_id, tx)
    save_settings(cur, user_id, settings)
    logger.info("Replaced data for user_id=%s with %d transactions", user_id, len(transactions))
