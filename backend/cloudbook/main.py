from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import __version__
from .api.errors import register_exception_handlers
from .api.middleware.security import SecurityMiddleware
from .api.v1.router import api_router
from .config import Settings, get_settings
from .core.services.credential_service import CredentialStore
from .core.services.identity_service import IdentityResolver, SupabaseIdentityProvider
from .dependencies import LoginRateLimiter
from .utils.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from .core.repositories.note_repository import NoteRepository
    from .core.repositories.user_repository import UserRepository
    from .core.services.identity_service import ExternalIdentityProvider

logger = get_logger(__name__)


def build_repositories(settings: Settings) -> tuple[UserRepository, NoteRepository]:
    """Construct the user and note stores for the configured backend."""
    if settings.storage_backend == "memory":
        from .core.repositories.implementations.memory.note_repository import InMemoryNoteRepository
        from .core.repositories.implementations.memory.user_repository import InMemoryUserRepository

        return InMemoryUserRepository(), InMemoryNoteRepository()

    from .core.repositories.implementations.supabase.note_repository import SupabaseNoteRepository
    from .core.repositories.implementations.supabase.user_repository import SupabaseUserRepository
    from .db.base import create_supabase_admin_client

    client = create_supabase_admin_client(settings)
    return SupabaseUserRepository(client), SupabaseNoteRepository(client)


def build_identity_provider(settings: Settings) -> ExternalIdentityProvider | None:
    if not settings.external_auth_enabled:
        return None
    from .db.base import create_supabase_auth_client

    return SupabaseIdentityProvider(create_supabase_auth_client(settings))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # users first: notes reference them
    await app.state.user_repository.ensure_schema()
    await app.state.note_repository.ensure_schema()
    yield


def create_app(
    settings: Settings | None = None,
    *,
    user_repository: UserRepository | None = None,
    note_repository: NoteRepository | None = None,
    identity_provider: ExternalIdentityProvider | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    if user_repository is None or note_repository is None:
        default_users, default_notes = build_repositories(settings)
        user_repository = user_repository or default_users
        note_repository = note_repository or default_notes
    if identity_provider is None:
        identity_provider = build_identity_provider(settings)

    credential_store = CredentialStore(user_repository, settings)

    app = FastAPI(
        title="CloudBook API",
        debug=settings.debug,
        version=__version__,
        root_path=settings.root_path or "",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.user_repository = user_repository
    app.state.note_repository = note_repository
    app.state.credential_store = credential_store
    app.state.identity_resolver = IdentityResolver(
        user_repository,
        credential_store,
        provider=identity_provider,
        cookie_name=settings.session_cookie_name,
    )
    app.state.rate_limiter = LoginRateLimiter(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "Authorization",
            "X-Requested-With",
            "X-CSRF-Token"
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Proxy headers (X-Forwarded-*) when behind ALB/ingress
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    # Trusted hosts (configure in env for production)
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityMiddleware, settings=settings)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    logger.info(
        "Application created",
        extra={"storage_backend": settings.storage_backend, "external_auth": identity_provider is not None},
    )
    return app


app = create_app()
