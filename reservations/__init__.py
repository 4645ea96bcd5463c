"""Booking requests, slot catalog, and the scheduling core."""
