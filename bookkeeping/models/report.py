from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, ForeignKey, Date, JSON, Enum
from sqlalchemy.orm import Mapped, mapped_column
from bookkeeping.models.base import Base, TimestampMixin


class ReportType(str, PyEnum):
    PROFIT_LOSS = "profit_loss"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"
    TAX_SUMMARY = "tax_summary"


class ReportStatus(str, PyEnum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    PUBLISHED = "published"


class Report(Base, TimestampMixin):
    """
    Financial report generated from a business's transactions.

    `data` holds the computed figures as JSON so a report stays stable
    even if transactions change later.
    """

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    generated_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    report_type: Mapped[ReportType] = mapped_column(
        Enum(ReportType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ReportStatus.DRAFT,
    )
    approved_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
