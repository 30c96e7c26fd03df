"""QBOT: conversational WhatsApp assistant for a maritime professional network."""

__version__ = "0.1.0"
