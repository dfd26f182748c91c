"""Shared enums for models.

Role enums hold the *current* taxonomy for each scope level. Retired values
live in `src.scopegate.authz.taxonomy`, never here.
"""

from enum import Enum


class ScopeKind(str, Enum):
    """Level at which memberships and roles are tracked."""

    TENANT = "tenant"
    PROJECT = "project"
    ENGAGEMENT = "engagement"


class TenantRole(str, Enum):
    """Identity role within a tenant."""

    ADMIN = "admin"
    MEMBER = "member"


class ProjectRole(str, Enum):
    """Identity role within a project."""

    SUPPLIER_MANAGER = "supplier_manager"
    SUPPLIER_FINANCE = "supplier_finance"
    CUSTOMER_MANAGER = "customer_manager"
    CUSTOMER_FINANCE = "customer_finance"
    CONTRIBUTOR = "contributor"
    VIEWER = "viewer"


class EngagementRole(str, Enum):
    """Identity role within an evaluation engagement."""

    ADMIN = "admin"
    EVALUATOR = "evaluator"
    CLIENT_STAKEHOLDER = "client_stakeholder"
    PARTICIPANT = "participant"
    VENDOR_PORTAL = "vendor_portal"


class AccessTokenStatus(str, Enum):
    """Access token lifecycle. Every transition out of PENDING is final."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


class PortalPermission(str, Enum):
    """Permissions an access token may carry."""

    VIEW_REQUIREMENTS = "view_requirements"
    APPROVE_REQUIREMENTS = "approve_requirements"
    ADD_COMMENTS = "add_comments"
    VIEW_VENDORS = "view_vendors"
    VIEW_SCORES = "view_scores"
