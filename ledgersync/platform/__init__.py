"""Sync platform: cursors, engine and page sources."""
