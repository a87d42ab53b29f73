from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.services.business_service import BusinessService
from bookkeeping.schemas.business_schemas import (
    BusinessCreate,
    BusinessMemberAdd,
    BusinessMemberRemoveResponse,
    BusinessMemberResponse,
    BusinessResponse,
    BusinessSubscriptionUpdate,
    BusinessSummaryResponse,
    BusinessUpdate,
    UserBusinessResponse,
)

router = APIRouter()


@router.get("", response_model=list[UserBusinessResponse])
async def list_businesses(
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    List businesses the authenticated user belongs to.

    Admins see every business. Useful for business switching.
    """
    service = BusinessService(db)
    return service.list_businesses(context)


@router.post("", response_model=BusinessResponse, status_code=status.HTTP_201_CREATED)
async def create_business(
    data: BusinessCreate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Create a business.

    - The caller becomes its owner
    - Clients and admins only
    """
    service = BusinessService(db)
    return service.create_business(data, context)


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(
    business_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get business details (members and admins)"""
    service = BusinessService(db)
    return service.get_business(business_id, context)


@router.patch("/{business_id}", response_model=BusinessResponse)
async def update_business(
    business_id: int,
    data: BusinessUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Update business details (members and admins)"""
    service = BusinessService(db)
    return service.update_business(business_id, data, context)


@router.put("/{business_id}/subscription", response_model=BusinessResponse)
async def update_subscription(
    business_id: int,
    data: BusinessSubscriptionUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Change the subscription tier of a business.

    - **Requires admin**
    """
    service = BusinessService(db)
    return service.update_subscription(business_id, data, context)


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business(
    business_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Delete a business and all its data.

    - **Requires admin**
    """
    service = BusinessService(db)
    service.delete_business(business_id, context)


@router.get("/{business_id}/summary", response_model=BusinessSummaryResponse)
async def get_business_summary(
    business_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Income, expenses and activity counts of a business"""
    service = BusinessService(db)
    return service.get_summary(business_id, context)


@router.get("/{business_id}/members", response_model=list[BusinessMemberResponse])
async def list_members(
    business_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """List all members of a business with their roles"""
    service = BusinessService(db)
    return service.get_members(business_id, context)


@router.post(
    "/{business_id}/members",
    response_model=BusinessMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    business_id: int,
    data: BusinessMemberAdd,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Add a member to a business.

    - **Requires business owner or admin**
    - Default role: MEMBER; OWNER cannot be assigned
    """
    service = BusinessService(db)
    return service.add_member(business_id, data, context)


@router.delete(
    "/{business_id}/members/{user_id}",
    response_model=BusinessMemberRemoveResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_member(
    business_id: int,
    user_id: str,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Remove a member from a business.

    - **Requires business owner or admin**
    - Cannot remove the owner
    """
    service = BusinessService(db)
    service.remove_member(business_id, user_id, context)

    return {
        "message": "Member removed successfully",
        "removed_user_id": user_id,
    }
