from datetime import date
from types import SimpleNamespace

import pytest

from bookkeeping.models.report import ReportType
from bookkeeping.models.transaction import TransactionStatus, TransactionType
from bookkeeping.services.report_builder import (
    build_report_data,
    filter_period,
    report_csv,
    summarize,
    transactions_csv,
    transactions_frame,
)


def txn(id, day, type, amount, category=None, status=TransactionStatus.APPROVED):
    return SimpleNamespace(
        id=id,
        date=day,
        type=type,
        amount=amount,
        category=category,
        description=None,
        status=status,
    )


@pytest.fixture
def frame():
    return transactions_frame(
        [
            txn(1, date(2024, 1, 5), TransactionType.INCOME, 1000, "sales"),
            txn(2, date(2024, 1, 20), TransactionType.EXPENSE, 300, "rent"),
            txn(3, date(2024, 2, 3), TransactionType.INCOME, 500, "sales"),
            txn(4, date(2024, 2, 10), TransactionType.EXPENSE, 50, None, TransactionStatus.PENDING),
            txn(5, date(2024, 3, 1), TransactionType.EXPENSE, 200, "rent"),
        ]
    )


class TestFrame:
    """DataFrame construction"""

    def test_signed_amounts(self, frame):
        assert frame["signed_amount"].tolist() == [1000.0, -300.0, 500.0, -50.0, -200.0]
        assert frame.loc[frame["id"] == 4, "category"].item() == "uncategorized"

    def test_empty(self):
        frame = transactions_frame([])
        assert frame.empty
        assert summarize(frame)["transaction_count"] == 0
        assert summarize(frame)["monthly"] == []

    def test_filter_period_inclusive(self, frame):
        subset = filter_period(frame, date(2024, 1, 20), date(2024, 2, 10))
        assert subset["id"].tolist() == [2, 3, 4]


class TestReports:
    """Figures per report type"""

    def test_profit_loss(self, frame):
        data = build_report_data(ReportType.PROFIT_LOSS, frame, date(2024, 1, 1), date(2024, 2, 29))
        assert data["total_income"] == 1500.0
        assert data["total_expenses"] == 350.0
        assert data["net_income"] == 1150.0
        assert data["transaction_count"] == 4
        assert data["income_by_category"] == {"sales": 1500.0}
        assert data["expenses_by_category"] == {"rent": 300.0, "uncategorized": 50.0}

    def test_cash_flow_running_balance(self, frame):
        data = build_report_data(ReportType.CASH_FLOW, frame)
        months = {row["month"]: row for row in data["monthly"]}
        assert list(months) == ["2024-01", "2024-02", "2024-03"]
        assert months["2024-01"]["net"] == 700.0
        assert months["2024-02"]["running_balance"] == 1150.0
        assert months["2024-03"]["outflow"] == 200.0
        assert months["2024-03"]["inflow"] == 0.0
        assert months["2024-03"]["running_balance"] == 950.0

    def test_tax_summary_only_approved(self, frame):
        data = build_report_data(ReportType.TAX_SUMMARY, frame)
        assert data["gross_income"] == 1500.0
        assert data["deductible_expenses"] == 500.0
        assert data["taxable_income"] == 1000.0
        assert data["approved_transactions"] == 4
        assert data["excluded_unapproved"] == 1
        assert data["deductions_by_category"] == {"rent": 500.0}

    def test_balance_sheet_accumulates(self, frame):
        data = build_report_data(ReportType.BALANCE_SHEET, frame, date(2024, 2, 1), date(2024, 2, 29))
        assert data["as_of"] == "2024-02-29"
        assert data["retained_earnings"] == 1150.0
        assert data["period_net_income"] == 450.0
        assert data["transaction_count"] == 4


class TestCsv:
    """CSV rendering"""

    def test_transactions_csv(self, frame):
        lines = transactions_csv(frame).strip().splitlines()
        assert lines[0] == "id,date,type,category,description,status,amount"
        assert lines[1].startswith("1,2024-01-05,income,sales,")
        assert len(lines) == 6

    def test_report_csv_flattens_sections(self, frame):
        data = build_report_data(ReportType.CASH_FLOW, frame)
        lines = report_csv(data).strip().splitlines()
        assert lines[0] == "section,item,value"
        assert "summary,net_income,950.0" in lines
        assert "monthly,2024-01:inflow,1000.0" in lines
