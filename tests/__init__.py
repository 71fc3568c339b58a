"""
CashFlow Test Suite

- test_stats.py: Financial snapshot calculations
- test_models.py: Record validation at the store boundary
- test_store.py: SQL issued by the transaction/settings store
- test_backup.py: Backup code export and import
- test_assistant.py: Gemini assistant wrapper (no network)
- test_auth.py: Signup, login, logout
- test_dashboard.py: Dashboard page and snapshot JSON
- test_transactions.py: Transaction CRUD
- test_settings.py: Settings, reset, backup and restore
- test_chat.py: Assistant chat flow
- test_security.py: CSRF, headers, access control

Run all tests:
    pytest tests/

Run with coverage:
    pytest tests/ --cov=. --cov-report=html
"""
