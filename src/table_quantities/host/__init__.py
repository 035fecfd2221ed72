"""
Reference host: in-memory world of items and roll tables, chat log, and a
SQLite inventory that consumes queued quantities at item creation.
"""
