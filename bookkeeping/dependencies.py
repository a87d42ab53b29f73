from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from bookkeeping.core.security import decode_jwt
from bookkeeping.core.exceptions import UnauthorizedException, ValidationException
from bookkeeping.core.guards import enforce_login
from bookkeeping.database import get_db
from bookkeeping.models.access_context import AccessContext
from bookkeeping.repositories.user_repository import UserRepository
from bookkeeping.models.user import User
from bookkeeping.services.access_service import AccessService

# Missing credentials are not an error here: they produce the anonymous
# context, and the access decider answers DENY_UNAUTHENTICATED.
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    FastAPI dependency to validate JWT and get/create user.

    Flow:
    1. Extract token from Authorization: Bearer <token> (None if absent)
    2. Validate JWT using shared SECRET_KEY
    3. Extract user ID from 'sub' claim
    4. Get or auto-create User record
    5. Return User object for use in endpoints

    Raises:
        HTTPException 401: If token invalid or expired
        HTTPException 403: If the account has been deactivated
    """
    if credentials is None:
        return None

    try:
        payload = decode_jwt(credentials.credentials)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_repo = UserRepository(db)
    user = user_repo.get_or_create(payload["sub"], payload.get("email"))

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    return user


async def get_access_context(
    x_business_id: Optional[int] = Header(None, alias="X-Business-Id"),
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccessContext:
    """
    FastAPI dependency building the access context of the request.

    The current business is taken from the X-Business-Id header. Anonymous
    requests get a context without a role.

    Raises:
        NotFoundException: If the selected business does not exist
    """
    if user is None:
        return AccessContext.anonymous()

    service = AccessService(db)
    return service.build_context(user, x_business_id)


async def get_identified_context(
    context: AccessContext = Depends(get_access_context),
) -> AccessContext:
    """
    Access context for endpoints that need an identity.

    Anonymous requests are turned away before any record is looked up, so a
    missing id and an existing one both answer with the login prompt.

    Raises:
        UnauthorizedException: If the request carries no identity
    """
    enforce_login(context)
    return context


async def get_business_context(
    context: AccessContext = Depends(get_identified_context),
) -> AccessContext:
    """
    Access context for endpoints scoped to the current business.

    Raises:
        UnauthorizedException: If the request carries no identity
        ValidationException: If no business is selected
    """
    if context.business_id is None:
        raise ValidationException("No business selected; send the X-Business-Id header")
    return context
