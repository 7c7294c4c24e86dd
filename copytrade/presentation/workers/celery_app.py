"""Celery app для copy trade workers.

Lifecycle Source кладе provider trade events в чергу "copy_trades";
workers fan-out'ять їх на followers. Beat раз на 5 хвилин репортить
executions, що лишились OPEN після невдалого закриття.

Usage:
    celery -A copytrade.presentation.workers worker -Q copy_trades,maintenance --loglevel=info
    celery -A copytrade.presentation.workers beat --loglevel=info
"""

from celery import Celery
from celery.signals import worker_process_init

from copytrade.config import get_settings, setup_logging

TASKS_MODULE = "copytrade.presentation.workers.tasks.copy_trade_tasks"
COPY_TRADES_QUEUE = "copy_trades"
MAINTENANCE_QUEUE = "maintenance"

STUCK_REPORT_INTERVAL = 300.0

settings = get_settings()

celery_app = Celery(
    "copytrade_workers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[TASKS_MODULE],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    enable_utc=True,
    timezone="UTC",
    # Redelivery never places a second order: (settings, trade) is unique in the ledger
    task_acks_late=settings.celery_task_acks_late,
    task_soft_time_limit=240,
    task_time_limit=300,
    result_expires=3600,
    worker_concurrency=settings.celery_worker_concurrency,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    worker_hijack_root_logger=False,
    broker_connection_retry_on_startup=True,
    task_default_queue="default",
    task_routes={
        f"{TASKS_MODULE}.copy_trade_*": {"queue": COPY_TRADES_QUEUE},
        f"{TASKS_MODULE}.report_stuck_executions": {"queue": MAINTENANCE_QUEUE},
    },
    beat_schedule={
        "report-stuck-executions": {
            "task": f"{TASKS_MODULE}.report_stuck_executions",
            "schedule": STUCK_REPORT_INTERVAL,
            "kwargs": {"limit": 100},
        },
    },
)


@worker_process_init.connect
def configure_worker_logging(**kwargs) -> None:
    """Structured logging в кожному worker process."""
    setup_logging()
