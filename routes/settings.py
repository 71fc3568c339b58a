from datetime import date, datetime, timezone
from flask import Blueprint, render_template, request, redirect, url_for, current_app, session, flash
from auth_utils import login_required
from backup import BackupError, generate_backup_code, read_backup_code
from models import ValidationError, parse_settings
import store

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')


@settings_bp.route('/')
@login_required
def index():
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            settings = store.get_settings(cur, session['user_id'])
    finally:
        conn.close()
    return render_template('settings.html', settings=settings)


@settings_bp.route('/update', methods=['POST'])
@login_required
def update():
    try:
        settings = parse_settings(request.form)
    except ValidationError as e:
        current_app.logger.warning("Rejected settings input: %s", e)
        flash(f"Invalid settings: {e}", "error")
        return redirect(url_for('settings.index'))

    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor() as cur:
            store.save_settings(cur, session['user_id'], settings)
            conn.commit()
    finally:
        conn.close()
    return redirect(url_for('settings.index'))


@settings_bp.route('/reset', methods=['POST'])
@login_required
def reset():
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor() as cur:
            store.reset_user_data(cur, session['user_id'])
            conn.commit()
    finally:
        conn.close()
    session.pop('chat_history', None)
    flash("All transactions and settings were deleted.", "info")
    return redirect(url_for('settings.index'))


@settings_bp.route('/backup')
@login_required
def backup():
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            settings = store.get_settings(cur, session['user_id'])
            transactions = store.list_transactions(cur, session['user_id'])
    finally:
        conn.close()

    code = generate_backup_code(
        session.get('user_name', ''),
        transactions,
        settings,
        now=datetime.now(timezone.utc),
    )
    return render_template('backup.html', code=code, count=len(transactions))


@settings_bp.route('/restore', methods=['POST'])
@login_required
def restore():
    try:
        transactions, settings = read_backup_code(request.form.get('code', ''), today=date.today())
    except BackupError as e:
        current_app.logger.warning("Rejected backup import for user_id=%s: %s", session['user_id'], e)
        flash(f"Could not import backup: {e}", "error")
        return redirect(url_for('settings.backup'))

    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor() as cur:
            store.replace_user_data(cur, session['user_id'], transactions, settings)
            conn.commit()
    finally:
        conn.close()
    flash(f"Imported {len(transactions)} transactions.", "info")
    return redirect(url_for('dashboard.index'))
