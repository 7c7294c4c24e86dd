"""Celery workers for provider trade events.

Usage:
    celery -A copytrade.presentation.workers worker --loglevel=info
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
