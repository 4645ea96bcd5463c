"""Telegram command handlers."""

from .handlers import CommandHandlers, register_core_handlers

__all__ = ['CommandHandlers', 'register_core_handlers']
