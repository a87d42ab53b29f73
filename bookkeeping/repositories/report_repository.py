from typing import Optional
from sqlalchemy.orm import Session
from bookkeeping.models.report import Report, ReportStatus


class ReportRepository:
    """Repository for Report data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, report_id: int) -> Optional[Report]:
        """Get report by ID"""
        return self.db.query(Report).filter(Report.id == report_id).first()

    def get_by_business(self, business_id: int, status: Optional[ReportStatus] = None) -> list[Report]:
        """Get reports of a business, newest first"""
        query = self.db.query(Report).filter(Report.business_id == business_id)
        if status is not None:
            query = query.filter(Report.status == status)
        return query.order_by(Report.created_at.desc(), Report.id.desc()).all()

    def create(self, report: Report) -> Report:
        """Create a new report"""
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        return report

    def update(self, report: Report) -> Report:
        """Update a report"""
        self.db.commit()
        self.db.refresh(report)
        return report

    def delete(self, report: Report) -> None:
        """Delete a report"""
        self.db.delete(report)
        self.db.commit()
