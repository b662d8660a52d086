"""Shared helpers: booking references, dates, validation and logging."""
