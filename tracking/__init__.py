"""Lightweight runtime tracking of which code paths execute."""

from .runtime import t, tracked_calls

__all__ = ['t', 'tracked_calls']
