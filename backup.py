"""Portable backup codes for moving a user's data between accounts or devices."""

import base64
import binascii
import json
import logging

from models import ValidationError, parse_transaction, parse_settings

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
MAX_CODE_LENGTH = 512 * 1024


class BackupError(ValueError):
    """Raised when a backup code cannot be decoded or validated."""


def generate_backup_code(user_name, transactions, settings, now):
    payload = {
        'version': BACKUP_VERSION,
        'user': {'name': user_name},
        'transactions': [tx.to_dict() for tx in transactions],
        'settings': settings.to_dict(),
        'timestamp': now.isoformat(),
    }
    raw = json.dumps(payload, ensure_ascii=False).encode('utf-8')
    return base64.urlsafe_b64encode(raw).decode('ascii')


def read_backup_code(code, today):
    """Decode ``code`` into ``(transactions, settings)``.

    Every record is validated the same way as form input, so a tampered
    or truncated code is rejected as a whole rather than partially applied.
    """
    text = (code or '').strip()
    if not text:
        raise BackupError("backup code is empty")
    if len(text) > MAX_CODE_LENGTH:
        raise BackupError("backup code is too long")
    try:
        padded = text + '=' * (-len(text) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise BackupError("backup code is not readable") from e

    if not isinstance(payload, dict):
        raise BackupError("backup payload must be an object")
    if payload.get('version') != BACKUP_VERSION:
        raise BackupError(f"unsupported backup version {payload.get('version')!r}")

    raw_transactions = payload.get('transactions') or []
    if not isinstance(raw_transactions, list):
        raise BackupError("transactions must be a list")

    try:
        transactions = [parse_transaction(item, today) for item in raw_transactions]
        settings = parse_settings(payload.get('settings') or {})
    except (ValidationError, AttributeError) as e:
        raise BackupError(f"backup contains an invalid record: {e}") from e

    logger.debug("Read backup from %s with %d transactions", payload.get('timestamp'), len(transactions))
    return transactions, settings
