"""Presentation layer: entry points (Celery workers)."""
