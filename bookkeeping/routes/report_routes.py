from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context, get_business_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.models.report import ReportStatus
from bookkeeping.services.report_service import ReportService
from bookkeeping.schemas.report_schemas import ReportGenerate, ReportResponse

router = APIRouter()


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def generate_report(
    data: ReportGenerate,
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Generate a report for the current business (X-Business-Id).

    - profit_loss, cash_flow: basic_reports (every plan)
    - tax_summary, balance_sheet: custom_reports (premium plan or higher)
    - Period bounds are inclusive; omit for all time
    """
    service = ReportService(db)
    return service.generate_report(data, context)


@router.get("", response_model=list[ReportResponse])
def list_reports(
    status: Optional[ReportStatus] = Query(None, description="Filter by status"),
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """List reports of the current business"""
    service = ReportService(db)
    return service.get_reports(context, status)


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(
    report_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get a specific report by ID"""
    service = ReportService(db)
    return service.get_report(report_id, context)


@router.post("/{report_id}/approve", response_model=ReportResponse)
def approve_report(
    report_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Approve a report.

    - Requires an accountant of the business or an admin
    """
    service = ReportService(db)
    return service.approve_report(report_id, context)


@router.get("/{report_id}/export", response_class=Response)
def export_report(
    report_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Download report figures as CSV (section, item, value)"""
    service = ReportService(db)
    report, content = service.export_report(report_id, context)
    filename = f"report-{report.id}-{report.report_type.value}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Delete a report"""
    service = ReportService(db)
    service.delete_report(report_id, context)
