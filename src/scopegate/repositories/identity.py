"""Repository for Identity entity."""

from src.scopegate.models import Identity
from src.scopegate.repositories.base import BaseRepository


class IdentityRepository(BaseRepository[Identity]):
    """Identities are provisioned externally; this engine only looks them up."""

    model = Identity
