"""
Report service: expense reports that show how campaign money was spent.

The caller controls the commit.
"""

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from donation_tracker.errors import NotFoundError
from donation_tracker.models.campaign import Campaign
from donation_tracker.models.report import Report
from donation_tracker.schemas.report import ReportCreate, ReportUpdate, ReportResponse
from donation_tracker.services import cache as cache_keys
from donation_tracker.services.cache import ReadCache


def report_snapshot(report: Report) -> dict:
    return {
        "campaign_id": report.campaign_id,
        "expense_date": report.expense_date,
        "amount": report.amount,
        "description": report.description,
        "receipt_url": report.receipt_url,
        "vendor_name": report.vendor_name,
    }


class ReportService:

    def __init__(self, db: Session, cache: ReadCache | None = None):
        self.db = db
        self.cache = cache or ReadCache()

    def _get_campaign(self, campaign_id: int) -> Campaign:
        campaign = self.db.get(Campaign, campaign_id)
        if not campaign:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    def get_report(self, report_id: int) -> Report:
        report = self.db.get(Report, report_id)
        if not report:
            raise NotFoundError(f"Report {report_id} not found")
        return report

    def campaign_reports(self, campaign_id: int) -> dict:
        """Public view: a campaign's expenses, newest first, with their total."""
        def load():
            campaign = self._get_campaign(campaign_id)
            reports = self.db.execute(
                select(Report)
                .where(Report.campaign_id == campaign_id)
                .order_by(Report.expense_date.desc(), Report.id.desc())
            ).scalars().all()
            total = self.db.execute(
                select(func.coalesce(func.sum(Report.amount), 0))
                .where(Report.campaign_id == campaign_id)
            ).scalar_one()
            return {
                "campaign": {"id": campaign.id, "title": campaign.title},
                "reports": [
                    ReportResponse.model_validate(r).model_dump(mode="json")
                    for r in reports
                ],
                "total_expenses": float(total),
            }

        return self.cache.get_or_set(
            cache_keys.campaign_reports_key(campaign_id),
            load,
            cache_keys.TTL_REPORTS,
        )

    def list_reports(self, campaign_id: int | None = None) -> list[Report]:
        query = select(Report).order_by(Report.created_at.desc(), Report.id.desc())
        if campaign_id is not None:
            query = query.where(Report.campaign_id == campaign_id)
        return list(self.db.execute(query).scalars().all())

    def create_report(self, request: ReportCreate, created_by: int | None) -> Report:
        self._get_campaign(request.campaign_id)
        report = Report(
            campaign_id=request.campaign_id,
            expense_date=request.expense_date,
            amount=request.amount,
            description=request.description.strip(),
            receipt_url=request.receipt_url or None,
            vendor_name=request.vendor_name or None,
            created_by=created_by,
        )
        self.db.add(report)
        self.db.flush()
        return report

    def update_report(self, report_id: int, request: ReportUpdate) -> tuple[Report, dict]:
        report = self.get_report(report_id)
        before = report_snapshot(report)

        for field, value in request.model_dump(exclude_unset=True).items():
            if field in ("receipt_url", "vendor_name"):
                setattr(report, field, value or None)
            elif value is not None:
                setattr(report, field, value)

        self.db.flush()
        return report, before

    def delete_report(self, report_id: int) -> dict:
        report = self.get_report(report_id)
        before = report_snapshot(report)
        campaign_id = report.campaign_id
        self.db.delete(report)
        self.db.flush()
        return before
