"""Messenger transport adapters."""
