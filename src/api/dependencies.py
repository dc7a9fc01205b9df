"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Routes never build their own storage client or codec,
so tests can swap them through app.dependency_overrides.
"""

import logging
from typing import Annotated, Optional

from fastapi import Cookie, Depends

from ..config.settings import Settings, get_settings
from ..core.auth.session import SESSION_COOKIE_NAME, AuthorizationError, SessionGate
from ..core.images.normalizer import ImageNormalizer
from ..core.images.service import ImageService, ObjectStore
from ..infrastructure.imaging.encoder import PillowWebPEncoder
from ..infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

# Shared mock store so uploads survive across requests in mock mode
_mock_storage_client = None


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStore:
    """
    Provide the object store.

    Returns either R2 client or mock client based on settings.
    """
    global _mock_storage_client

    if settings.r2_mock_mode:
        if _mock_storage_client is None:
            _mock_storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client for session")
        return _mock_storage_client

    config = StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket_name=settings.r2_bucket_name,
        endpoint_url=settings.r2_endpoint,
    )
    client = create_storage_client(config=config)
    logger.debug("Created R2 storage client")
    return client


def get_image_service(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[ObjectStore, Depends(get_storage_client)],
) -> ImageService:
    return ImageService(
        store=storage,
        normalizer=ImageNormalizer(PillowWebPEncoder()),
        public_url=settings.public_base_url,
        max_file_size=settings.max_file_size,
    )


def get_session_gate(
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionGate:
    return SessionGate(
        admin_password=settings.admin_password,
        signing_key=settings.session_signing_key,
        max_age_seconds=settings.session_max_age_seconds,
    )


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def get_session_token(
    auth_token: Annotated[Optional[str], Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> Optional[str]:
    return auth_token


def require_session(
    gate: Annotated[SessionGate, Depends(get_session_gate)],
    token: Annotated[Optional[str], Depends(get_session_token)],
) -> None:
    """Reject the request with 401 unless it carries a valid session cookie."""
    try:
        gate.require(token)
    except AuthorizationError:
        logger.warning("Request without valid session", extra={"has_cookie": bool(token)})
        raise


def require_management_session(
    settings: Annotated[Settings, Depends(get_settings)],
    gate: Annotated[SessionGate, Depends(get_session_gate)],
    token: Annotated[Optional[str], Depends(get_session_token)],
) -> None:
    """Same as require_session unless management protection is switched off."""
    if settings.protect_management_endpoints:
        require_session(gate, token)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

ImageServiceDep = Annotated[ImageService, Depends(get_image_service)]
SessionGateDep = Annotated[SessionGate, Depends(get_session_gate)]
SessionTokenDep = Annotated[Optional[str], Depends(get_session_token)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
