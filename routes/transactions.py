from datetime import date
from flask import Blueprint, render_template, request, redirect, url_for, current_app, session, flash
from auth_utils import login_required
from models import ValidationError, parse_transaction, TransactionKind, Source
import store

transactions_bp = Blueprint('transactions', __name__, url_prefix='/transactions')


@transactions_bp.route('/')
@login_required
def index():
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            transactions = store.list_transactions(cur, session['user_id'])
    finally:
        conn.close()

    return render_template(
        'transactions.html',
        transactions=transactions,
        current_date=date.today(),
        kinds=list(TransactionKind),
        sources=list(Source),
    )


@transactions_bp.route('/add', methods=['POST'])
@login_required
def add_transaction():
    try:
        tx = parse_transaction(request.form, today=date.today())
    except ValidationError as e:
        current_app.logger.warning("Rejected transaction input: %s", e)
        flash(f"Invalid transaction: {e}", "error")
        return redirect(url_for('transactions.index'))

    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            store.add_transaction(cur, session['user_id'], tx)
            conn.commit()
    finally:
        conn.close()
    return redirect(url_for('transactions.index'))


@transactions_bp.route('/edit/<int:id>', methods=['POST'])
@login_required
def edit_transaction(id):
    try:
        tx = parse_transaction(request.form, today=date.today(), tx_id=id)
    except ValidationError as e:
        current_app.logger.warning("Rejected edit of transaction %s: %s", id, e)
        flash(f"Invalid transaction: {e}", "error")
        return redirect(url_for('transactions.index'))

    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor(dictionary=True) as cur:
            if not store.update_transaction(cur, session['user_id'], id, tx):
                return "Transaction not found", 404
            conn.commit()
    finally:
        conn.close()
    return redirect(url_for('transactions.index'))


@transactions_bp.route('/delete/<int:id>', methods=['POST'])
@login_required
def delete_transaction(id):
    conn = current_app.db_pool.get_connection()
    try:
        with conn.cursor() as cur:
            store.delete_transaction(cur, session['user_id'], id)
            conn.commit()
    finally:
        conn.close()
    return redirect(url_for('transactions.index'))
