from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_access_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.services.access_service import AccessService
from bookkeeping.schemas.access_schemas import (
    AccessCheckRequest,
    AccessCheckResponse,
    AccessProfileResponse,
    FeatureCheckResponse,
)

router = APIRouter()


@router.get("/me", response_model=AccessProfileResponse)
async def get_access_profile(
    context: AccessContext = Depends(get_access_context),
    db: Session = Depends(get_db),
):
    """
    Role, plan, unlocked features, dashboards and allowed actions of the
    authenticated user in the current business (X-Business-Id).
    """
    service = AccessService(db)
    return service.get_profile(context)


@router.post("/check", response_model=AccessCheckResponse)
async def check_access(
    request: AccessCheckRequest,
    context: AccessContext = Depends(get_access_context),
    db: Session = Depends(get_db),
):
    """
    Ask whether an action would be allowed, and why.

    Never fails on a denial: the outcome tells the client whether to show
    a login prompt, a permission message or an upgrade prompt.
    """
    service = AccessService(db)
    return service.check(context, request)


@router.get("/features/{feature}", response_model=FeatureCheckResponse)
async def check_feature(
    feature: str,
    context: AccessContext = Depends(get_access_context),
    db: Session = Depends(get_db),
):
    """Ask whether the current plan includes a feature"""
    service = AccessService(db)
    return service.check_feature(context, feature)
