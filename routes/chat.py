import json
from datetime import date
from flask import Blueprint, render_template, request, redirect, url_for, current_app, session
from assistant import AssistantError, ask_assistant, assistant_enabled
from auth_utils import login_required
from models import ValidationError, parse_transaction
from routes.dashboard import load_snapshot
import store

chat_bp = Blueprint('chat', __name__, url_prefix='/chat')

MAX_HISTORY = 20
MAX_MESSAGE_LENGTH = 2000
# History rides in the signed session cookie, which browsers cap near 4 KB
MAX_ENTRY_BYTES = 600
MAX_HISTORY_BYTES = 2400


def _clip(text):
    """Shorten ``text`` until its JSON encoding fits in MAX_ENTRY_BYTES."""
    clipped = text
    while len(json.dumps(clipped)) > MAX_ENTRY_BYTES:
        clipped = clipped[:len(clipped) * 3 // 4]
    return text if clipped == text else clipped[:-1] + '…'


def _append_history(history, role, text):
    history.append([role, _clip(text)])
    del history[:-MAX_HISTORY]
    while len(history) > 1 and len(json.dumps(history)) > MAX_HISTORY_BYTES:
        del history[0]


@chat_bp.route('/')
@login_required
def index():
    enabled, reason = assistant_enabled(current_app.config)
    return render_template(
        'chat.html',
        history=session.get('chat_history', []),
        enabled=enabled,
        reason=reason,
    )


@chat_bp.route('/send', methods=['POST'])
@login_required
def send():
    message = request.form.get('message', '').strip()
    if not message:
        return "Message is required", 400
    if len(message) > MAX_MESSAGE_LENGTH:
        return f"Message must be at most {MAX_MESSAGE_LENGTH} characters", 400

    user_id = session['user_id']
    today = date.today()
    previous = session.get('chat_history', [])
    history = list(previous)
    _, _, snapshot = load_snapshot(user_id, today)

    try:
        reply = ask_assistant(message, snapshot, previous, current_app.config)
    except AssistantError as e:
        current_app.logger.warning("Assistant unavailable for user_id=%s: %s", user_id, e)
        _append_history(history, 'user', message)
        _append_history(history, 'assistant', "Sorry, the assistant is unavailable right now. Please try again later.")
        session['chat_history'] = history
        return redirect(url_for('chat.index'))

    reply_text = reply.text
    if reply.transaction_args is not None:
        try:
            tx = parse_transaction(reply.transaction_args, today=today)
        except ValidationError as e:
            current_app.logger.warning("Assistant proposed an invalid transaction: %s", e)
            reply_text = f"{reply_text}\n(Could not record that entry: {e})".strip()
        else:
            conn = current_app.db_pool.get_connection()
            try:
                with conn.cursor() as cur:
                    store.add_transaction(cur, user_id, tx)
                    conn.commit()
            finally:
                conn.close()
            note = f"Recorded {tx.kind.value} '{tx.content}' of {tx.amount:,} ({tx.source.value}) on {tx.date.isoformat()}."
            reply_text = f"{reply_text}\n{note}".strip()

    _append_history(history, 'user', message)
    _append_history(history, 'assistant', reply_text or "OK.")
    session['chat_history'] = history
    return redirect(url_for('chat.index'))


@chat_bp.route('/reset', methods=['POST'])
@login_required
def reset():
    session.pop('chat_history', None)
    return redirect(url_for('chat.index'))
