"""
Test suite for settings routes.
Tests cover settings update, data reset, backup and restore.
"""

import base64
import json
from datetime import date

from tests.conftest import executed_sql


class TestSettingsPage:

    def test_settings_requires_auth(self, client):
        response = client.get('/settings/')
        assert response.status_code in (302, 308)
        assert '/auth/login' in response.headers.get('Location', '')

    def test_settings_shows_values(self, logged_in_client, mock_db):
        _, cursor = mock_db
        cursor.fetchone.return_value = {'initial_cash': 1500, 'initial_bank': 2500, 'daily_cost': 80}

        response = logged_in_client.get('/settings/')

        assert response.status_code == 200
        assert b'value="1500"' in response.data
        assert b'value="80"' in response.data

    def test_settings_defaults_when_missing(self, logged_in_client, mock_db):
        _, cursor = mock_db
        cursor.fetchone.return_value = None

        response = logged_in_client.get('/settings/')

        assert response.status_code == 200
        assert b'value="0"' in response.data


class TestUpdateSettings:

    def test_update_valid(self, logged_in_client, mock_db):
        conn, cursor = mock_db

        response = logged_in_client.post('/settings/update', data={
            'initial_cash': '1.000.000', 'initial_bank': '-50', 'daily_cost': '80000',
        })

        assert response.status_code == 302
        assert '/settings' in response.headers.get('Location', '')
        assert cursor.execute.call_args.args[1] == (1, 1000000, -50, 80000)
        conn.commit.assert_called_once()

    def test_update_negative_budget_rejected(self, logged_in_client, mock_db):
        conn, cursor = mock_db

        response = logged_in_client.post('/settings/update', data={'daily_cost': '-1'})

        assert response.status_code == 302
        cursor.execute.assert_not_called()

    def test_update_oversized_value_rejected(self, logged_in_client, mock_db):
        conn, cursor = mock_db

        response = logged_in_client.post('/settings/update', data={'initial_bank': '1' + '0' * 30})

        assert response.status_code == 302
        cursor.execute.assert_not_called()
        conn.commit.assert_not_called()

    def test_update_non_numeric_rejected(self, logged_in_client, mock_db):
        _, cursor = mock_db

        logged_in_client.post('/settings/update', data={'initial_cash': 'a lot'})

        cursor.execute.assert_not_called()


class TestReset:

    def test_reset_deletes_everything(self, logged_in_client, mock_db):
        conn, cursor = mock_db
        with logged_in_client.session_transaction() as sess:
            sess['chat_history'] = [['user', 'hi']]

        response = logged_in_client.post('/settings/reset')

        assert response.status_code == 302
        assert executed_sql(cursor) == [
            "DELETE FROM transactions WHERE user_id=%s",
            "DELETE FROM settings WHERE user_id=%s",
        ]
        conn.commit.assert_called_once()
        with logged_in_client.session_transaction() as sess:
            assert 'chat_history' not in sess

    def test_reset_via_get_not_allowed(self, logged_in_client):
        response = logged_in_client.get('/settings/reset')
        assert response.status_code == 405


class TestBackup:

    def test_backup_page_contains_code(self, logged_in_client, mock_db):
        _, cursor = mock_db
        cursor.fetchone.return_value = {'initial_cash': 10, 'initial_bank': 20, 'daily_cost': 30}
        cursor.fetchall.return_value = [
            {'id': 1, 'date': date(2026, 1, 1), 'content': 'Rent', 'kind': 'expense', 'source': 'bank', 'amount': 700},
        ]

        response = logged_in_client.get('/settings/backup')

        assert response.status_code == 200
        assert b'1 transactions' in response.data

    def test_restore_replaces_data(self, logged_in_client, mock_db):
        conn, cursor = mock_db
        payload = {
            'version': 1,
            'transactions': [
                {'date': '2026-01-01', 'content': 'Rent', 'kind': 'expense', 'source': 'bank', 'amount': 700},
                {'date': '2026-01-02', 'content': 'Pay', 'kind': 'income', 'source': 'bank', 'amount': 900},
            ],
            'settings': {'initial_cash': 1, 'initial_bank': 2, 'daily_cost': 3},
        }
        code = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()

        response = logged_in_client.post('/settings/restore', data={'code': code})

        assert response.status_code == 302
        statements = executed_sql(cursor)
        assert statements[0] == "DELETE FROM transactions WHERE user_id=%s"
        assert sum(s.startswith('INSERT INTO transactions') for s in statements) == 2
        conn.commit.assert_called_once()

    def test_restore_oversized_request_rejected(self, logged_in_client, mock_db):
        _, cursor = mock_db

        response = logged_in_client.post('/settings/restore', data={'code': 'A' * (2 * 1024 * 1024)})

        assert response.status_code == 413
        cursor.execute.assert_not_called()

    def test_restore_bad_code_changes_nothing(self, logged_in_client, mock_db):
        conn, cursor = mock_db

        response = logged_in_client.post('/settings/restore', data={'code': 'garbage'})

        assert response.status_code == 302
        assert '/settings/backup' in response.headers.get('Location', '')
        cursor.execute.assert_not_called()
        conn.commit.assert_not_called()
