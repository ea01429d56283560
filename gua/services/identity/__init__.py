"""Identity provider factory."""

from gua.core.config import settings
from gua.services.identity.base import BaseIdentityProvider


def get_identity_provider() -> BaseIdentityProvider:
    """Returns the configured identity provider."""
    if settings.identity_provider == "supabase":
        from gua.services.identity.supabase import SupabaseIdentityProvider
        return SupabaseIdentityProvider()
    else:
        raise ValueError(f"Unknown identity provider: {settings.identity_provider}")
