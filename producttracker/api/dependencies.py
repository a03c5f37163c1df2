"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Database sessions
- Repositories and services
- Authentication (the ``x-auth-token`` gate)
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from producttracker.exceptions import MissingTokenError
from producttracker.security import decode_access_token


DEV_JWT_SECRET = "dev-secret-change-me"

# Largest value an INTEGER primary key holds on PostgreSQL
MAX_ROW_ID = 2**31 - 1

# Integer row id in a path; out-of-range values are a 400, not a driver error
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./producttracker.db"
    database_echo: bool = False

    # Tokens
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60
    bcrypt_rounds: int = 10

    # File uploads
    upload_dir: str = "./uploads"
    max_upload_size_mb: int = 5

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", cls.jwt_expires_minutes)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            upload_dir=os.getenv("UPLOAD_DIR", cls.upload_dir),
            max_upload_size_mb=int(os.getenv("MAX_UPLOAD_SIZE_MB", cls.max_upload_size_mb)),
            environment=os.getenv("PRODUCTTRACKER_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
        )

    def validate(self) -> None:
        """Refuse to start production with the development signing secret."""
        if self.environment == "production" and self.jwt_secret == DEV_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set in production")


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Database
# =============================================================================

# Global engine and session factory (initialized in lifespan)
_engine = None
_async_session_factory = None


def init_database(settings: Settings) -> None:
    """Initialize database engine and session factory."""
    global _engine, _async_session_factory

    engine_kwargs = {"echo": settings.database_echo, "pool_pre_ping": True}
    if settings.database_url.startswith("sqlite") and ":memory:" in settings.database_url:
        # One shared connection, or every session would see an empty database
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    _engine = create_async_engine(settings.database_url, **engine_kwargs)

    _async_session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def dispose_database() -> None:
    """Close all pooled connections."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Yields:
        AsyncSession for database operations.
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database first.")

    async with _async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def session_scope() -> AsyncSession:
    """Open a session outside a request (startup tasks)."""
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database first.")
    return _async_session_factory()


async def create_tables() -> None:
    """Create database tables."""
    from ..storage.models import Base
    if _engine is None:
        raise RuntimeError("Database not initialized.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_database() -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    from sqlalchemy import text
    if _engine is None:
        raise RuntimeError("Database not initialized.")

    async with _engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


# =============================================================================
# Service Dependencies
# =============================================================================

class ServiceContainer:
    """
    Container for process-wide service instances.

    Request-scoped repositories are built per session by the dependencies
    below; only stateless collaborators live here.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._file_storage = None
        self._upload_policy = None
        self._token_config = None

    @property
    def file_storage(self):
        """Get payload storage instance."""
        if self._file_storage is None:
            from ..storage.file_storage import LocalFileStorage
            self._file_storage = LocalFileStorage(self.settings.upload_dir)
        return self._file_storage

    @property
    def upload_policy(self):
        """Get upload size/type policy."""
        if self._upload_policy is None:
            from ..services.document_service import UploadPolicy
            self._upload_policy = UploadPolicy(max_bytes=self.settings.max_upload_bytes)
        return self._upload_policy

    @property
    def token_config(self):
        """Get token signing configuration."""
        if self._token_config is None:
            from ..services.auth_service import TokenConfig
            self._token_config = TokenConfig(
                secret_key=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
                expires_minutes=self.settings.jwt_expires_minutes,
                bcrypt_rounds=self.settings.bcrypt_rounds,
            )
        return self._token_config


# Global service container
_service_container: Optional[ServiceContainer] = None


def init_services(settings: Settings) -> ServiceContainer:
    """Initialize service container."""
    global _service_container
    _service_container = ServiceContainer(settings)
    return _service_container


def get_service_container() -> ServiceContainer:
    """Get service container instance."""
    if _service_container is None:
        # Auto-initialize with default settings if not explicitly initialized
        return init_services(get_settings())
    return _service_container


# =============================================================================
# Individual Service Dependencies
# =============================================================================

def get_product_repository(db: AsyncSession = Depends(get_db)):
    """Dependency for product repository."""
    from ..storage.product_repository import ProductRepository
    return ProductRepository(db)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for auth service."""
    from ..services.auth_service import AuthService
    from ..storage.user_repository import UserRepository
    return AuthService(UserRepository(db), container.token_config)


def get_document_service(
    db: AsyncSession = Depends(get_db),
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for document service."""
    from ..services.document_service import DocumentService
    from ..storage.document_repository import DocumentRepository
    from ..storage.product_repository import ProductRepository
    return DocumentService(
        documents=DocumentRepository(db),
        products=ProductRepository(db),
        storage=container.file_storage,
        policy=container.upload_policy,
    )


# =============================================================================
# Authentication Dependencies
# =============================================================================

@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity decoded from a verified token."""

    id: int
    email: str


async def get_current_user(
    x_auth_token: Optional[str] = Header(None, alias="x-auth-token"),
    container: ServiceContainer = Depends(get_service_container),
) -> AuthenticatedUser:
    """
    Require a valid token on protected endpoints.

    Stateless: the identity comes from the verified token alone. Tokens are
    checked against the same ``token_config`` that ``AuthService`` signs with.

    Raises:
        MissingTokenError: If the header is absent.
        InvalidTokenError: If signature or expiry verification fails.
    """
    if not x_auth_token:
        raise MissingTokenError()

    token_config = container.token_config
    payload = decode_access_token(
        x_auth_token,
        secret_key=token_config.secret_key,
        algorithm=token_config.algorithm,
    )
    return AuthenticatedUser(id=int(payload["id"]), email=payload["email"])
