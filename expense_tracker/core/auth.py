# expense_tracker/core/auth.py

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import jwt

from .config import settings

logger = logging.getLogger(__name__)


class TokenError(Exception):
    pass


@lru_cache(maxsize=1)
def _jwks_client() -> jwt.PyJWKClient:
    return jwt.PyJWKClient(settings.AUTH_JWKS_URL, cache_keys=True)


def _decode_options() -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    if settings.AUTH_AUDIENCE:
        kwargs["audience"] = settings.AUTH_AUDIENCE
    else:
        kwargs["options"] = {"verify_aud": False}
    if settings.AUTH_ISSUER:
        kwargs["issuer"] = settings.AUTH_ISSUER
    return kwargs


async def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token issued by the identity provider.

    RS256 against the configured JWKS endpoint when there is one, otherwise
    the shared SECRET_KEY with ALGORITHM.
    """
    try:
        if settings.uses_jwks:
            # PyJWKClient fetches keys with blocking I/O
            loop = asyncio.get_running_loop()
            signing_key = await loop.run_in_executor(None, _jwks_client().get_signing_key_from_jwt, token)
            payload = jwt.decode(token, signing_key.key, algorithms=["RS256"], **_decode_options())
        else:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], **_decode_options())
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.PyJWKClientError as e:
        logger.error(f"Could not fetch signing key: {str(e)}")
        raise TokenError("Invalid token")
    except jwt.InvalidTokenError as e:
        logger.warning(f"JWT error: {str(e)}")
        raise TokenError("Invalid token")

    if not payload.get("sub"):
        raise TokenError("Invalid token: missing subject")
    return payload


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None, **claims: Any) -> str:
    """
    Mint an HS256 token for the given subject (auth provider id).
    Used for local development and tests; production tokens come from the identity provider.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
        **claims,
    }
    if settings.AUTH_AUDIENCE:
        payload.setdefault("aud", settings.AUTH_AUDIENCE)
    if settings.AUTH_ISSUER:
        payload.setdefault("iss", settings.AUTH_ISSUER)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
