"""Shared helpers: message formatting and console logging."""
