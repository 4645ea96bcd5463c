"""Message composition helpers."""
