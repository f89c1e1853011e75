"""Admin token guard."""

import logging
import secrets
from typing import Optional

from litestar.connection import ASGIConnection
from litestar.exceptions import NotAuthorizedException
from litestar.handlers.base import BaseRouteHandler

logger = logging.getLogger("Togetai.auth")


def presented_token(connection: ASGIConnection) -> Optional[str]:
    """Token from ``Authorization: Bearer ...`` or ``X-Admin-Token``."""
    authorization = connection.headers.get("authorization", "")
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return connection.headers.get("x-admin-token") or None


async def require_admin_guard(connection: ASGIConnection, handler: BaseRouteHandler) -> None:
    """Guard admin routes when ADMIN_TOKEN is configured.

    Without a configured token the routes stay open; startup logs a warning.
    """
    expected = connection.app.state.settings.admin_token
    if not expected:
        return

    path = connection.url.path
    token = presented_token(connection)
    if not token:
        logger.warning(f"Admin access attempted without a token: {path}")
        raise NotAuthorizedException("Not authenticated")

    if not secrets.compare_digest(token.encode(), expected.encode()):
        logger.warning(f"Admin access attempted with an invalid token: {path}")
        raise NotAuthorizedException("Unauthorized")
