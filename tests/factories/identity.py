"""Identity factory for test data generation."""

from polyfactory import Use

from src.scopegate.models import Identity
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class IdentityFactory(BaseFactory):
    """Factory for generating Identity test data."""

    __model__ = Identity

    id = Use(generate_uuid)
    email = Use(lambda: f"identity-{generate_uuid().hex[:12]}@example.com")
    is_active = True
    is_superuser = False
    created_at = Use(utc_now)

    @classmethod
    def superuser(cls, **kwargs):
        return cls.build(is_superuser=True, **kwargs)
