"""
Temporal Worker - Separate process from API.

Run with:
    python -m src.scopegate.temporal.worker
    python -m src.scopegate.temporal.worker --schedule   # also start the maintenance cron
"""

import argparse
import asyncio

import uvicorn
from fastapi import FastAPI
from temporalio.client import Client
from temporalio.worker import Worker

from src.scopegate.core.config import get_settings
from src.scopegate.core.db import dispose_engine
from src.scopegate.core.logging import get_logger, setup_logging
from src.scopegate.temporal.activities import (
    cleanup_access_tokens,
    expire_stale_access_tokens,
)
from src.scopegate.temporal.client import start_token_maintenance
from src.scopegate.temporal.workflows import TokenMaintenanceWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Temporal worker")
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Start the token maintenance workflow on the configured cron",
    )
    return parser.parse_args()


def create_worker(client: Client, task_queue: str) -> Worker:
    """Create the jobs worker polling the maintenance queue."""
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[TokenMaintenanceWorkflow],
        activities=[expire_stale_access_tokens, cleanup_access_tokens],
        max_concurrent_activities=20,
        max_concurrent_workflow_tasks=20,
    )


async def run_health_server(task_queue: str, port: int = WORKER_HEALTH_PORT) -> None:
    """Run a lightweight health server for K8s probes."""
    health_app = FastAPI(title="Temporal Worker Health")

    @health_app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": "temporal-worker",
            "task_queue": task_queue,
        }

    config = uvicorn.Config(health_app, host="0.0.0.0", port=port, log_level="warning")
    server = uvicorn.Server(config)
    logger.info(f"Starting health server on port {port}")
    await server.serve()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings.debug)

    client = await Client.connect(
        settings.temporal_host,
        namespace=settings.temporal_namespace,
    )
    task_queue = settings.temporal_task_queue
    worker = create_worker(client, task_queue)

    if args.schedule:
        workflow_id = await start_token_maintenance()
        logger.info("Token maintenance scheduled", workflow_id=workflow_id)

    logger.info(f"Polling task queue: {task_queue}")
    try:
        await asyncio.gather(worker.run(), run_health_server(task_queue))
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
