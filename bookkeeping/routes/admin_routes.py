from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.services.user_service import AdminService
from bookkeeping.schemas.user_schemas import AdminOverviewResponse

router = APIRouter()


@router.get("/overview", response_model=AdminOverviewResponse)
async def get_overview(
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Platform overview: users per role, businesses per status and plan,
    income/expense totals and transactions waiting for review.

    - **Requires admin**
    """
    service = AdminService(db)
    return service.get_overview(context)
