"""Shared helpers: validation, IDs, session state, errors and logging."""
