"""Caller authentication for the scoring and transition routes.

Clients either sign the raw request body with the shared API secret
(``X-Enquiry-Signature``, hex HMAC-SHA256) or, for trusted internal callers,
send the secret itself (``X-Enquiry-Secret``). A signature header takes
precedence: a bad signature is rejected even if a valid secret is also sent.
"""

import hashlib
import hmac
import logging
from enum import Enum
from fastapi import HTTPException, Request
from ..config import settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Enquiry-Signature"
SECRET_HEADER = "X-Enquiry-Secret"


class AuthScheme(Enum):
    """How a request proved it knows the API secret."""

    SIGNATURE = "signature"
    SHARED_SECRET = "shared_secret"


def sign_body(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of a request body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"success": False, "error": "auth_error", "detail": detail},
    )


async def require_client(request: Request) -> AuthScheme:
    """FastAPI dependency that authenticates the caller or raises 401."""
    secret = settings.api_secret

    signature = request.headers.get(SIGNATURE_HEADER)
    if signature is not None:
        if hmac.compare_digest(signature, sign_body(secret, await request.body())):
            return AuthScheme.SIGNATURE
        logger.warning(f"Rejected request to {request.url.path}: signature mismatch")
        raise _auth_error("Request signature does not match body")

    shared = request.headers.get(SECRET_HEADER)
    if shared is None:
        raise _auth_error(f"Missing {SIGNATURE_HEADER} or {SECRET_HEADER} header")
    if not hmac.compare_digest(shared, secret):
        logger.warning(f"Rejected request to {request.url.path}: wrong shared secret")
        raise _auth_error("Invalid shared secret")
    return AuthScheme.SHARED_SECRET
