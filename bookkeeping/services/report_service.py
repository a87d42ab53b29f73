from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.report import Report, ReportStatus, ReportType
from bookkeeping.models.role import Action, Resource
from bookkeeping.repositories.report_repository import ReportRepository
from bookkeeping.repositories.transaction_repository import TransactionRepository
from bookkeeping.schemas.report_schemas import ReportGenerate
from bookkeeping.services.report_builder import (
    build_report_data,
    report_csv,
    transactions_frame,
)

# Subscription feature each report type needs
REPORT_FEATURES = {
    ReportType.PROFIT_LOSS: "basic_reports",
    ReportType.CASH_FLOW: "basic_reports",
    ReportType.TAX_SUMMARY: "custom_reports",
    ReportType.BALANCE_SHEET: "custom_reports",
}

REPORT_TITLES = {
    ReportType.PROFIT_LOSS: "Profit & Loss",
    ReportType.CASH_FLOW: "Cash Flow",
    ReportType.TAX_SUMMARY: "Tax Summary",
    ReportType.BALANCE_SHEET: "Balance Sheet",
}


def report_ownership(report: Report) -> RecordOwnership:
    return RecordOwnership(owner_id=report.generated_by, business_id=report.business_id)


def default_title(data: ReportGenerate) -> str:
    title = REPORT_TITLES[data.report_type]
    if data.period_start and data.period_end:
        return f"{title} {data.period_start.isoformat()} to {data.period_end.isoformat()}"
    if data.period_end:
        return f"{title} as of {data.period_end.isoformat()}"
    return title


class ReportService:
    """Service layer for financial reports"""

    def __init__(self, db: Session):
        self.db = db
        self.report_repo = ReportRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def _get(self, report_id: int) -> Report:
        report = self.report_repo.get_by_id(report_id)
        if not report:
            raise NotFoundException(f"Report {report_id} not found")
        return report

    def generate_report(self, data: ReportGenerate, context: AccessContext) -> Report:
        """
        Compute a report over the current business's transactions.

        Figures are stored with the report, so later edits to transactions
        do not change it.

        Raises:
            ForbiddenException: If user may not create reports for the business
            UpgradeRequiredException: If the plan lacks the report type's feature
        """
        enforce_guard(
            context,
            Resource.REPORT,
            Action.CREATE,
            RecordOwnership(business_id=context.business_id),
            feature=REPORT_FEATURES[data.report_type],
        )

        transactions, _ = self.transaction_repo.get_with_filters(
            business_id=context.business_id, limit=None
        )
        figures = build_report_data(
            data.report_type,
            transactions_frame(transactions),
            data.period_start,
            data.period_end,
        )

        report = Report(
            business_id=context.business_id,
            generated_by=context.user_id,
            report_type=data.report_type,
            title=data.title or default_title(data),
            period_start=data.period_start,
            period_end=data.period_end,
            data=figures,
            status=ReportStatus.DRAFT,
        )
        report = self.report_repo.create(report)
        logger.info(
            f"Report {report.id} ({data.report_type.value}) generated for business {report.business_id}"
        )
        return report

    def get_reports(
        self, context: AccessContext, status: Optional[ReportStatus] = None
    ) -> list[Report]:
        """List reports of the current business, newest first"""
        enforce_guard(
            context,
            Resource.REPORT,
            Action.READ,
            RecordOwnership(business_id=context.business_id),
        )
        return self.report_repo.get_by_business(context.business_id, status)

    def get_report(self, report_id: int, context: AccessContext) -> Report:
        """
        Get report by ID with ownership verification.

        Raises:
            NotFoundException: If report doesn't exist
            ForbiddenException: If user has no access to it
        """
        report = self._get(report_id)
        enforce_guard(context, Resource.REPORT, Action.READ, report_ownership(report))
        return report

    def approve_report(self, report_id: int, context: AccessContext) -> Report:
        """
        Approve a draft or pending report.

        Raises:
            ValidationException: If the report is already approved or published
        """
        report = self._get(report_id)
        enforce_guard(
            context,
            Resource.REPORT,
            Action.APPROVE,
            RecordOwnership(business_id=report.business_id),
        )

        if report.status not in (ReportStatus.DRAFT, ReportStatus.PENDING_REVIEW):
            raise ValidationException(f"Report is already {report.status.value}")

        report.status = ReportStatus.APPROVED
        report.approved_by = context.user_id
        report = self.report_repo.update(report)
        logger.info(f"Report {report_id} approved by {context.user_id}")
        return report

    def delete_report(self, report_id: int, context: AccessContext) -> None:
        """Delete a report (accountants of the business, admins)"""
        report = self._get(report_id)
        enforce_guard(context, Resource.REPORT, Action.DELETE, report_ownership(report))

        self.report_repo.delete(report)
        logger.info(f"Report {report_id} deleted by {context.user_id}")

    def export_report(self, report_id: int, context: AccessContext) -> tuple[Report, str]:
        """
        Export report figures as CSV (data_export feature).

        Returns:
            Tuple of (report, csv_text)
        """
        report = self._get(report_id)
        enforce_guard(
            context,
            Resource.REPORT,
            Action.EXPORT,
            report_ownership(report),
            feature="data_export",
        )
        return report, report_csv(report.data)
