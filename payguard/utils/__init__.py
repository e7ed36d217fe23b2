"""Shared utilities: sanitized logging and the retry engine."""
