import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt

from .config import settings

logger = logging.getLogger(__name__)


# =========================
# JWT Token Handling
# =========================
def create_jwt_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Issue an access token the way the identity provider does (used by tooling and tests)."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(hours=1))
    to_encode.update({"exp": expire})
    if settings.JWT_AUDIENCE:
        to_encode.setdefault("aud", settings.JWT_AUDIENCE)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a provider token; None when invalid or expired."""
    options = {} if settings.JWT_AUDIENCE else {"verify_aud": False}
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        logger.info("JWT token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"JWT token rejected: {e}")
        return None
