"""
Access Token Maintenance Workflow.

Expires pending tokens past their expiry, then deletes tokens that reached a
terminal state before the retention window. Designed to run on a schedule
(e.g. daily at 3am UTC via Temporal cron).
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.scopegate.temporal.activities import (
        cleanup_access_tokens,
        expire_stale_access_tokens,
    )

_RETRY = RetryPolicy(maximum_attempts=3, initial_interval=timedelta(seconds=2))


@workflow.defn
class TokenMaintenanceWorkflow:
    @workflow.run
    async def run(self, retention_days: int = 90) -> dict[str, int]:
        """
        Run expiry then cleanup.

        Expiry runs first so tokens expired today start their retention window
        now rather than being deleted straight away.

        Returns:
            {"expired": int, "deleted": int}
        """
        workflow.logger.info(f"Starting token maintenance (retention: {retention_days} days)")

        expired = await workflow.execute_activity(
            expire_stale_access_tokens,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=_RETRY,
        )
        deleted = await workflow.execute_activity(
            cleanup_access_tokens,
            retention_days,
            start_to_close_timeout=timedelta(minutes=5),
            retry_policy=_RETRY,
        )

        workflow.logger.info(f"Token maintenance complete: {expired} expired, {deleted} deleted")
        return {"expired": expired, "deleted": deleted}
