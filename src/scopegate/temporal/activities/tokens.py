"""Access token maintenance activities."""

from temporalio import activity

from src.scopegate.core.db import get_session


@activity.defn
async def expire_stale_access_tokens() -> int:
    """
    Mark pending access tokens past their expiry as expired.

    Idempotent: a second run finds no pending tokens past expiry.

    Returns:
        Number of tokens transitioned to expired
    """
    activity.logger.info("Expiring stale access tokens")

    async with get_session() as session:
        from src.scopegate.services.token_service import AccessTokenService

        count = await AccessTokenService.from_session(session).expire_stale()

    activity.logger.info(f"Expired {count} access tokens")
    return count


@activity.defn
async def cleanup_access_tokens(retention_days: int) -> int:
    """
    Delete access tokens that left pending more than retention_days ago.

    Idempotent: DELETE operations are inherently idempotent.

    Args:
        retention_days: Number of days to retain accepted/expired/revoked tokens

    Returns:
        Number of tokens deleted
    """
    activity.logger.info(f"Cleaning up access tokens older than {retention_days} days")

    async with get_session() as session:
        from src.scopegate.services.token_service import AccessTokenService

        count = await AccessTokenService.from_session(session).cleanup(retention_days)

    activity.logger.info(f"Deleted {count} access tokens")
    return count
