"""Entrypoints that expose SupportService operations to callers."""
