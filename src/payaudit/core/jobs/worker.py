"""ARQ worker configuration.

Run the worker with:
    arq payaudit.core.jobs.worker.WorkerSettings
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from arq.connections import RedisSettings
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from payaudit import models  # noqa: F401 - registers every mapper
from payaudit.config import settings
from payaudit.core.jobs.tasks.cleanup import cleanup_audit_logs
from payaudit.core.logging import configure_logging


log = structlog.get_logger()


async def startup(ctx: dict[str, Any]) -> None:
    """Open the database engine shared by all jobs.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    configure_logging()
    log.info("worker_startup", environment=settings.environment)

    engine = create_async_engine(
        settings.async_database_url,
        pool_size=5,
        max_overflow=10,
        echo=settings.database_echo,
    )
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Dispose of the database engine.

    Args:
        ctx: Worker context dict
    """
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")


class WorkerSettings:
    """ARQ worker settings."""

    functions: ClassVar[list[Any]] = [cleanup_audit_logs]

    cron_jobs: ClassVar[list[Any]] = [
        cron(cleanup_audit_logs, hour=settings.audit_cleanup_hour, minute=0),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = RedisSettings.from_dsn(str(settings.redis_url))

    max_jobs = 10
    job_timeout = 300  # 5 minutes per job
    keep_result = 3600
    retry_jobs = True
    max_tries = 3
