from __future__ import annotations

import hmac
import logging

logger = logging.getLogger(__name__)


def verify_admin_access(header_value: str | None, expected_token: str | None, env: str) -> int | None:
    """
    Check the static admin access header.
    Returns None when access is granted, otherwise the HTTP status to answer with (401 or 403).
    """
    if not expected_token:
        if env.lower() in {"dev", "local"}:
            logger.warning("ADMIN_ACCESS_TOKEN not set; accepting admin call in dev mode")
            return None
        logger.error("ADMIN_ACCESS_TOKEN not configured; refusing admin call")
        return 403

    if not header_value:
        return 401
    if not hmac.compare_digest(header_value.encode("utf-8"), expected_token.encode("utf-8")):
        return 403
    return None
