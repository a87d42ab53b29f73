from jose import JWTError, jwt
from bookkeeping.config import settings
from bookkeeping.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a JWT issued by the hosted auth service.

    Tokens are never issued here; they are only verified with the shared
    SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # Validate expiration (jose checks the value automatically)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    # Extract user_id from 'sub' claim
    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    return payload

