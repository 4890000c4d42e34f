from __future__ import annotations

from typing import TYPE_CHECKING

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from cloudbook.config import Settings

logger = get_logger(__name__)


def create_supabase_admin_client(settings: Settings) -> Client:
    """Return a Supabase client using the service role key.

    The note and user stores run on this client and scope every query by owner
    themselves; row level security is not relied upon.
    """
    logger.debug("Initializing Supabase admin client")
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("supabase_service_role_key is required for admin client")
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def create_supabase_auth_client(settings: Settings) -> Client:
    """Return an anon-key client used only to validate Supabase Auth JWTs."""
    logger.debug("Initializing Supabase auth client")
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError("supabase_anon_key is required for auth client")
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
