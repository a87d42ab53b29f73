from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Any, Optional
from bookkeeping.models.report import ReportStatus, ReportType


class ReportGenerate(BaseModel):
    """Schema for generating a report from the current business's transactions"""

    report_type: ReportType
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @model_validator(mode="after")
    def check_period(self):
        if (
            self.period_start is not None
            and self.period_end is not None
            and self.period_start > self.period_end
        ):
            raise ValueError("period_start must be on or before period_end")
        return self


class ReportResponse(BaseModel):
    """Schema for report response"""

    model_config = {"from_attributes": True}

    id: int
    business_id: int
    generated_by: str
    report_type: ReportType
    title: str
    period_start: Optional[date]
    period_end: Optional[date]
    data: dict[str, Any]
    status: ReportStatus
    approved_by: Optional[str]
    created_at: datetime
    updated_at: datetime
