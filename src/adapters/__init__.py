"""Adapters implementing the core ports (SQLite, filesystem, Firebase, Telegram)."""
