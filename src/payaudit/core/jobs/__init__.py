"""Background job processing with ARQ.

Runs scheduled maintenance such as the audit retention sweep.
"""

from payaudit.core.jobs.worker import WorkerSettings


__all__ = ["WorkerSettings"]
