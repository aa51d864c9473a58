"""
Storage collaborators: reports, office directory and comment ledger.

Each contract has an in-memory implementation (tests, USE_MOCK_DB) and a
Firestore one.
"""
