"""Retry logic with exponential backoff."""

from .exponential_backoff import retry_async

__all__ = ["retry_async"]
