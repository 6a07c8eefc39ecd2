"""
Database package — session-scoped chat storage.
"""
