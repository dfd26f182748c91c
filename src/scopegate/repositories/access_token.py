"""Repository for AccessToken entity."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import and_, delete, func, or_
from sqlmodel import select, update

from src.scopegate.models import AccessToken, AccessTokenStatus
from src.scopegate.models.base import utc_now
from src.scopegate.repositories.base import BaseRepository

_TERMINAL = [
    AccessTokenStatus.ACCEPTED.value,
    AccessTokenStatus.EXPIRED.value,
    AccessTokenStatus.REVOKED.value,
]


class AccessTokenRepository(BaseRepository[AccessToken]):
    """Repository for engagement access tokens."""

    model = AccessToken

    async def get_by_hash(self, token_hash: str) -> AccessToken | None:
        """Get a token by hash regardless of status."""
        result = await self.session.execute(
            select(AccessToken).where(AccessToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_by_hash_for_update(self, token_hash: str) -> AccessToken | None:
        """Get a token by hash and lock the row until the transaction ends."""
        result = await self.session.execute(
            select(AccessToken).where(AccessToken.token_hash == token_hash).with_for_update()
        )
        return result.scalar_one_or_none()

    async def revoke_pending_for(
        self, engagement_id: UUID, email: str, revoked_by: UUID | None, reason: str
    ) -> None:
        """Revoke any pending token for (engagement, email)."""
        await self.session.execute(
            update(AccessToken)
            .where(AccessToken.engagement_id == engagement_id)  # type: ignore[arg-type]
            .where(AccessToken.email == email)  # type: ignore[arg-type]
            .where(AccessToken.status == AccessTokenStatus.PENDING.value)  # type: ignore[arg-type]
            .values(
                status=AccessTokenStatus.REVOKED.value,
                revoked_at=utc_now(),
                revoked_by=revoked_by,
                revoke_reason=reason,
            )
        )

    async def list_for_engagement_paginated(
        self, engagement_id: UUID, cursor: str | None, limit: int
    ) -> tuple[list[AccessToken], str | None, bool]:
        query = select(AccessToken).where(AccessToken.engagement_id == engagement_id)
        return await self.paginate(query, cursor, limit, AccessToken.created_at)

    async def expire_stale(self) -> int:
        """Mark pending tokens past their expiry as expired.

        Returns:
            Number of tokens transitioned
        """
        result = await self.session.execute(
            update(AccessToken)
            .where(AccessToken.status == AccessTokenStatus.PENDING.value)  # type: ignore[arg-type]
            .where(AccessToken.expires_at <= utc_now())  # type: ignore[arg-type]
            .values(status=AccessTokenStatus.EXPIRED.value)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def cleanup_terminal(self, retention_days: int) -> int:
        """Delete tokens that left pending more than retention_days ago.

        A terminal token ages from accepted_at or revoked_at, falling back to
        expires_at for expired tokens. Pending tokens past expiry for longer
        than the window go too.
        Idempotent: DELETE operations are inherently idempotent.

        Returns:
            Number of tokens deleted
        """
        cutoff = utc_now() - timedelta(days=retention_days)
        pending = AccessTokenStatus.PENDING.value
        result = await self.session.execute(
            delete(AccessToken).where(
                or_(
                    and_(
                        AccessToken.status == pending,  # type: ignore[arg-type]
                        AccessToken.expires_at < cutoff,  # type: ignore[arg-type]
                    ),
                    and_(
                        AccessToken.status.in_(_TERMINAL),  # type: ignore[attr-defined]
                        func.coalesce(
                            AccessToken.accepted_at,
                            AccessToken.revoked_at,
                            AccessToken.expires_at,
                        )
                        < cutoff,
                    ),
                )
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_by_engagements(self, engagement_ids: list[UUID]) -> int:
        if not engagement_ids:
            return 0
        result = await self.session.execute(
            delete(AccessToken).where(
                AccessToken.engagement_id.in_(engagement_ids)  # type: ignore[attr-defined]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
