"""Adapters that connect the core to the feed API, SQLite, and Telegram."""
