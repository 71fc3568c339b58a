from datetime import date
from flask import Blueprint, render_template, current_app, session, jsonify
from auth_utils import login_required
from stats import compute_snapshot, budget_status
import store

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='')


def load_snapshot(user_id, today):
    """Load the user's data and derive the snapshot as of ``today``."""
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            settings = store.get_settings(cur, user_id)
            transactions = store.list_transactions(cur, user_id)
    finally:
        conn.close()
    return transactions, settings, compute_snapshot(transactions, settings, today)


@dashboard_bp.route('/')
@login_required
def index():
    today = date.today()
    transactions, settings, snapshot = load_snapshot(session['user_id'], today)
    today_status, survival_status = budget_status(snapshot, settings)

    return render_template(
        "dashboard.html",
        snapshot=snapshot,
        settings=settings,
        today=today,
        today_status=today_status,
        survival_status=survival_status,
        recent=transactions[:5],
    )


@dashboard_bp.route('/api/snapshot')
@login_required
def snapshot_json():
    today = date.today()
    _, settings, snapshot = load_snapshot(session['user_id'], today)
    today_status, survival_status = budget_status(snapshot, settings)
    return jsonify(
        date=today.isoformat(),
        snapshot=snapshot.to_dict(),
        settings=settings.to_dict(),
        today_status=today_status,
        survival_status=survival_status,
    )
