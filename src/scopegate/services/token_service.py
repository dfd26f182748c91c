"""Engagement access tokens for external parties.

A token is a time-boxed, single-purpose, revocable secret scoped to one
engagement and one permission set. It is evaluated independently of the
membership predicates: holding a token confers only the permissions on the
token until it is consumed, at which point the holder becomes an ordinary
member of the engagement and its tenant.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import validate_role
from src.scopegate.core.config import get_settings
from src.scopegate.core.exceptions import (
    InvalidRoleError,
    MembershipConflictError,
    NotFoundError,
    TokenError,
)
from src.scopegate.core.logging import get_logger
from src.scopegate.core.security import generate_access_secret, hash_token
from src.scopegate.models import (
    AccessToken,
    AccessTokenStatus,
    EngagementRole,
    PortalPermission,
    ScopeKind,
    TenantRole,
)
from src.scopegate.models.base import utc_now
from src.scopegate.repositories import (
    AccessTokenRepository,
    EngagementMembershipRepository,
    EngagementRepository,
    IdentityRepository,
    TenantMembershipRepository,
    TenantRepository,
)

logger = get_logger(__name__)

_PERMISSION_KEYS = frozenset(p.value for p in PortalPermission)

# Roles a token may carry; anything wider goes through a membership grant
TOKEN_ROLES = frozenset(
    {
        EngagementRole.CLIENT_STAKEHOLDER.value,
        EngagementRole.PARTICIPANT.value,
        EngagementRole.VENDOR_PORTAL.value,
    }
)


@dataclass(frozen=True)
class TokenGrant:
    """What a valid, pending token allows its holder to do."""

    token_id: UUID
    engagement_id: UUID
    email: str
    role: str
    permissions: frozenset[str]
    expires_at: datetime

    def allows(self, permission: PortalPermission | str) -> bool:
        value = permission.value if isinstance(permission, PortalPermission) else permission
        return value in self.permissions


@dataclass(frozen=True)
class ConsumeResult:
    token: AccessToken
    tenant_id: UUID
    tenant_membership_created: bool
    engagement_membership_created: bool
    already_accepted: bool = False


class AccessTokenService:
    """Issue, validate, consume and revoke engagement access tokens."""

    def __init__(
        self,
        token_repo: AccessTokenRepository,
        engagement_repo: EngagementRepository,
        tenant_repo: TenantRepository,
        tenant_member_repo: TenantMembershipRepository,
        engagement_member_repo: EngagementMembershipRepository,
        identity_repo: IdentityRepository,
        session: AsyncSession,
    ):
        self.token_repo = token_repo
        self.engagement_repo = engagement_repo
        self.tenant_repo = tenant_repo
        self.tenant_member_repo = tenant_member_repo
        self.engagement_member_repo = engagement_member_repo
        self.identity_repo = identity_repo
        self.session = session

    @classmethod
    def from_session(cls, session: AsyncSession) -> "AccessTokenService":
        return cls(
            AccessTokenRepository(session),
            EngagementRepository(session),
            TenantRepository(session),
            TenantMembershipRepository(session),
            EngagementMembershipRepository(session),
            IdentityRepository(session),
            session,
        )

    async def issue(
        self,
        engagement_id: UUID,
        email: str,
        issued_by: UUID | None,
        permissions: dict[str, bool] | None = None,
        role: str = EngagementRole.CLIENT_STAKEHOLDER.value,
        expires_in_days: int | None = None,
    ) -> tuple[AccessToken, str]:
        """Issue a token. Returns (token, plaintext_secret).

        The secret is returned once and never stored. Issuing again for the same
        (engagement, email) revokes the earlier pending token.

        Raises:
            InvalidRoleError: Role not in the engagement taxonomy, or not one a
                token may carry
            TokenError: Unknown permission key or non-positive lifetime
            NotFoundError: Engagement missing or soft-deleted
        """
        settings = get_settings()
        role = validate_role(ScopeKind.ENGAGEMENT, role)
        if role not in TOKEN_ROLES:
            raise InvalidRoleError(f"Access tokens cannot carry the '{role}' role")
        unknown = set(permissions or {}) - _PERMISSION_KEYS
        if unknown:
            raise TokenError(f"Unknown permissions: {', '.join(sorted(unknown))}")
        days = expires_in_days if expires_in_days is not None else settings.access_token_expire_days
        if days <= 0:
            raise TokenError("Token lifetime must be at least one day")

        email = email.strip().lower()
        granted = settings.access_token_default_permissions if permissions is None else permissions

        try:
            engagement = await self.engagement_repo.get_live(engagement_id)
            if engagement is None:
                raise NotFoundError("Engagement not found")

            await self.token_repo.revoke_pending_for(
                engagement_id, email, issued_by, reason="Superseded by a new token"
            )

            secret = generate_access_secret()
            token = AccessToken(
                engagement_id=engagement_id,
                email=email,
                token_hash=hash_token(secret),
                role=role,
                permissions={key: bool(value) for key, value in granted.items()},
                expires_at=utc_now() + timedelta(days=days),
                issued_by=issued_by,
            )
            self.token_repo.add(token)
            await self.session.commit()
            await self.session.refresh(token)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Access token issued",
            token_id=str(token.id),
            engagement_id=str(engagement_id),
            role=role,
            issued_by=str(issued_by) if issued_by else None,
        )
        return token, secret

    async def validate(self, secret: str) -> TokenGrant | None:
        """Resolve a secret to its grant, or None.

        Valid means: exact hash match, status pending, not past expiry, and the
        engagement still live. A pending token found past expiry is marked
        expired. Each successful validation records an access.
        """
        if not secret:
            return None
        token = await self.token_repo.get_by_hash(hash_token(secret))
        if token is None or token.status != AccessTokenStatus.PENDING.value:
            return None

        now = utc_now()
        if token.is_expired(now):
            token.status = AccessTokenStatus.EXPIRED.value
            await self.session.commit()
            logger.info("Access token expired on validation", token_id=str(token.id))
            return None

        if await self.engagement_repo.get_live(token.engagement_id) is None:
            return None

        token.last_accessed_at = now
        token.access_count += 1
        await self.session.commit()

        return TokenGrant(
            token_id=token.id,
            engagement_id=token.engagement_id,
            email=token.email,
            role=token.role,
            permissions=frozenset(k for k, v in token.permissions.items() if v is True),
            expires_at=token.expires_at,
        )

    async def token_allows(
        self, secret: str, engagement_id: UUID, permission: PortalPermission | str
    ) -> bool:
        """True if the secret is valid for this engagement and grants the permission."""
        grant = await self.validate(secret)
        if grant is None or grant.engagement_id != engagement_id:
            return False
        return grant.allows(permission)

    async def consume(self, secret: str, identity_id: UUID) -> ConsumeResult:
        """Accept a token, turning its holder into a member.

        Only the identity whose email the token was issued to may consume it.
        Locks the token row, transitions pending -> accepted, and creates the
        tenant membership (member) and engagement membership (token role) when
        missing. Consuming an already accepted token again is a success with no
        new rows when the identity is already a member of the token's tenant.

        Raises:
            TokenError: Unknown, revoked or expired token, an identity whose
                email does not match the token, or an accepted token presented
                by a non-member
            MembershipConflictError: Identity's tenant membership is deactivated
        """
        try:
            token = await self.token_repo.get_by_hash_for_update(hash_token(secret))
            if token is None:
                raise TokenError("Invalid access token")

            identity = await self.identity_repo.get_by_id(identity_id)
            if identity is None or identity.email.strip().lower() != token.email:
                raise TokenError("Access token was issued to a different email address")

            engagement = await self.engagement_repo.get_live(token.engagement_id)
            tenant_id = engagement.tenant_id if engagement else None
            if tenant_id is None or await self.tenant_repo.get_live(tenant_id) is None:
                raise TokenError("Engagement is no longer available")

            if token.status == AccessTokenStatus.ACCEPTED.value:
                if await self.tenant_member_repo.get_active_membership(identity_id, tenant_id):
                    await self.session.commit()
                    return ConsumeResult(
                        token=token,
                        tenant_id=tenant_id,
                        tenant_membership_created=False,
                        engagement_membership_created=False,
                        already_accepted=True,
                    )
                raise TokenError("Access token has already been used")

            if token.status != AccessTokenStatus.PENDING.value:
                raise TokenError(f"Access token is {token.status}")

            if token.is_expired():
                token.status = AccessTokenStatus.EXPIRED.value
                await self.session.commit()
                raise TokenError("Access token has expired")

            tenant_created = False
            tenant_membership = await self.tenant_member_repo.get_membership(
                identity_id, tenant_id
            )
            if tenant_membership is None:
                self.tenant_member_repo.create_membership(
                    identity_id, tenant_id, TenantRole.MEMBER.value
                )
                tenant_created = True
            elif not tenant_membership.is_active:
                raise MembershipConflictError(
                    "Tenant membership is deactivated; reactivate it explicitly"
                )

            engagement_created = False
            if (
                await self.engagement_member_repo.get_membership(identity_id, token.engagement_id)
                is None
            ):
                self.engagement_member_repo.create_membership(
                    identity_id, token.engagement_id, token.role
                )
                engagement_created = True

            token.status = AccessTokenStatus.ACCEPTED.value
            token.accepted_at = utc_now()
            token.accepted_by = identity_id
            await self.session.commit()
            await self.session.refresh(token)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Access token accepted",
            token_id=str(token.id),
            engagement_id=str(token.engagement_id),
            identity_id=str(identity_id),
            tenant_membership_created=tenant_created,
            engagement_membership_created=engagement_created,
        )
        return ConsumeResult(
            token=token,
            tenant_id=tenant_id,
            tenant_membership_created=tenant_created,
            engagement_membership_created=engagement_created,
        )

    async def get_token(self, token_id: UUID) -> AccessToken | None:
        return await self.token_repo.get_by_id(token_id)

    async def revoke(
        self, token_id: UUID, revoked_by: UUID | None, reason: str | None = None
    ) -> AccessToken:
        """Revoke a pending token.

        Raises:
            NotFoundError: Unknown token
            TokenError: Token already left pending
        """
        try:
            token = await self.token_repo.get_by_id(token_id)
            if token is None:
                raise NotFoundError("Access token not found")
            if token.status != AccessTokenStatus.PENDING.value:
                raise TokenError(f"Access token is already {token.status}")
            token.status = AccessTokenStatus.REVOKED.value
            token.revoked_at = utc_now()
            token.revoked_by = revoked_by
            token.revoke_reason = reason[:500] if reason else None
            await self.session.commit()
            await self.session.refresh(token)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Access token revoked",
            token_id=str(token_id),
            revoked_by=str(revoked_by) if revoked_by else None,
        )
        return token

    async def expire_stale(self) -> int:
        """Mark every pending token past its expiry as expired."""
        try:
            count = await self.token_repo.expire_stale()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Stale access tokens expired", count=count)
        return count

    async def cleanup(self, retention_days: int | None = None) -> int:
        """Delete tokens that reached a terminal state before the retention window."""
        if retention_days is None:
            retention_days = get_settings().access_token_cleanup_retention_days
        try:
            count = await self.token_repo.cleanup_terminal(retention_days)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Access tokens cleaned up", count=count, retention_days=retention_days)
        return count
