"""Temporal Client - For starting workflows from API and scripts."""

from temporalio.client import Client

from src.scopegate.core.config import get_settings

_client: Client | None = None

TOKEN_MAINTENANCE_WORKFLOW_ID = "access-token-maintenance"


async def get_temporal_client() -> Client:
    """Get or create Temporal client."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = await Client.connect(
            settings.temporal_host, namespace=settings.temporal_namespace
        )
    return _client


async def close_temporal_client() -> None:
    """Close the Temporal client. Call during shutdown."""
    global _client
    if _client is not None:
        await _client.service_client.close()  # type: ignore[attr-defined]
        _client = None


async def start_token_maintenance(retention_days: int | None = None) -> str:
    """Start the token maintenance workflow, on the configured cron if any.

    Returns the workflow id.
    """
    from src.scopegate.temporal.workflows import TokenMaintenanceWorkflow

    settings = get_settings()
    client = await get_temporal_client()
    days = retention_days or settings.access_token_cleanup_retention_days
    await client.start_workflow(
        TokenMaintenanceWorkflow.run,
        days,
        id=TOKEN_MAINTENANCE_WORKFLOW_ID,
        task_queue=settings.temporal_task_queue,
        cron_schedule=settings.token_maintenance_schedule or "",
    )
    return TOKEN_MAINTENANCE_WORKFLOW_ID
