"""
Aggregation of transactions into report figures.

Transactions are loaded into a pandas DataFrame with one row per
transaction and a signed amount (income positive, expenses negative), then
aggregated by category and by month. Each report type picks the figures
it needs:

- profit_loss: income and expenses per category, net income
- cash_flow: monthly inflow/outflow/net with a running balance
- tax_summary: approved transactions only, taxable income
- balance_sheet: retained earnings accumulated up to the period end

Functions here do no I/O and never touch the database session.
"""

from datetime import date
from typing import Iterable, Optional

import pandas as pd

from bookkeeping.models.report import ReportType
from bookkeeping.models.transaction import Transaction, TransactionStatus, TransactionType

FRAME_COLUMNS = ["id", "date", "type", "category", "description", "status", "amount", "signed_amount"]

UNCATEGORIZED = "uncategorized"


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    Build the long-format DataFrame used by every report.

    Returns:
        DataFrame with FRAME_COLUMNS, `date` as datetime64
    """
    rows = []
    for txn in transactions:
        amount = float(txn.amount)
        txn_type = TransactionType(txn.type)
        rows.append(
            {
                "id": txn.id,
                "date": txn.date,
                "type": txn_type.value,
                "category": txn.category or UNCATEGORIZED,
                "description": txn.description or "",
                "status": TransactionStatus(txn.status).value,
                "amount": amount,
                "signed_amount": amount if txn_type == TransactionType.INCOME else -amount,
            }
        )

    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    df["amount"] = df["amount"].astype(float)
    df["signed_amount"] = df["signed_amount"].astype(float)
    return df


def _round(value) -> float:
    return round(float(value), 2)


def _totals(df: pd.DataFrame) -> dict:
    income = df.loc[df["type"] == TransactionType.INCOME.value, "amount"].sum()
    expenses = df.loc[df["type"] == TransactionType.EXPENSE.value, "amount"].sum()
    return {
        "total_income": _round(income),
        "total_expenses": _round(expenses),
        "net_income": _round(income - expenses),
        "transaction_count": int(len(df)),
    }


def _by_category(df: pd.DataFrame, txn_type: TransactionType) -> dict[str, float]:
    subset = df[df["type"] == txn_type.value]
    if subset.empty:
        return {}
    grouped = subset.groupby("category")["amount"].sum().sort_values(ascending=False)
    return {category: _round(amount) for category, amount in grouped.items()}


def _by_month(df: pd.DataFrame) -> list[dict]:
    if df.empty:
        return []

    monthly = df.assign(month=df["date"].dt.to_period("M").astype(str))
    pivot = (
        monthly.groupby(["month", "type"])["amount"]
        .sum()
        .unstack(fill_value=0.0)
        .reindex(columns=[t.value for t in TransactionType], fill_value=0.0)
        .sort_index()
    )
    pivot["net"] = pivot[TransactionType.INCOME.value] - pivot[TransactionType.EXPENSE.value]
    pivot["running_balance"] = pivot["net"].cumsum()

    return [
        {
            "month": month,
            "inflow": _round(row[TransactionType.INCOME.value]),
            "outflow": _round(row[TransactionType.EXPENSE.value]),
            "net": _round(row["net"]),
            "running_balance": _round(row["running_balance"]),
        }
        for month, row in pivot.iterrows()
    ]


def filter_period(
    df: pd.DataFrame, period_start: Optional[date], period_end: Optional[date]
) -> pd.DataFrame:
    """Keep rows whose date falls within [period_start, period_end]"""
    mask = pd.Series(True, index=df.index)
    if period_start is not None:
        mask &= df["date"] >= pd.Timestamp(period_start)
    if period_end is not None:
        mask &= df["date"] <= pd.Timestamp(period_end)
    return df[mask]


def summarize(df: pd.DataFrame) -> dict:
    """Totals, per-category breakdown and monthly series"""
    summary = _totals(df)
    summary["income_by_category"] = _by_category(df, TransactionType.INCOME)
    summary["expenses_by_category"] = _by_category(df, TransactionType.EXPENSE)
    summary["monthly"] = _by_month(df)
    return summary


def build_report_data(
    report_type: ReportType,
    df: pd.DataFrame,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
) -> dict:
    """
    Compute the figures stored in a report.

    Args:
        report_type: Kind of report
        df: Every transaction of the business (see transactions_frame)
        period_start: First day included (None for open start)
        period_end: Last day included (None for open end)

    Returns:
        JSON-serializable dict of figures
    """
    in_period = filter_period(df, period_start, period_end)

    if report_type == ReportType.PROFIT_LOSS:
        data = _totals(in_period)
        data["income_by_category"] = _by_category(in_period, TransactionType.INCOME)
        data["expenses_by_category"] = _by_category(in_period, TransactionType.EXPENSE)
        return data

    if report_type == ReportType.CASH_FLOW:
        data = _totals(in_period)
        data["monthly"] = _by_month(in_period)
        return data

    if report_type == ReportType.TAX_SUMMARY:
        approved = in_period[in_period["status"] == TransactionStatus.APPROVED.value]
        totals = _totals(approved)
        return {
            "taxable_income": totals["net_income"],
            "gross_income": totals["total_income"],
            "deductible_expenses": totals["total_expenses"],
            "approved_transactions": totals["transaction_count"],
            "excluded_unapproved": int(len(in_period) - len(approved)),
            "deductions_by_category": _by_category(approved, TransactionType.EXPENSE),
        }

    # Balance sheet: everything recorded up to the end of the period
    to_date = filter_period(df, None, period_end)
    totals = _totals(to_date)
    return {
        "as_of": period_end.isoformat() if period_end else None,
        "retained_earnings": totals["net_income"],
        "period_net_income": _totals(in_period)["net_income"],
        "transaction_count": totals["transaction_count"],
    }


def transactions_csv(df: pd.DataFrame) -> str:
    """Export transactions as CSV text"""
    export = df.drop(columns=["signed_amount"]).copy()
    export["date"] = export["date"].dt.strftime("%Y-%m-%d")
    return export.to_csv(index=False)


def report_csv(data: dict) -> str:
    """
    Flatten report figures into section/item/value rows as CSV text.

    Nested dicts become one row per item; lists of monthly rows become one
    row per (month, measure).
    """
    rows = []
    for key, value in data.items():
        if isinstance(value, dict):
            for item, amount in value.items():
                rows.append({"section": key, "item": item, "value": amount})
        elif isinstance(value, list):
            for entry in value:
                label = entry.get("month", "")
                for measure, amount in entry.items():
                    if measure == "month":
                        continue
                    rows.append({"section": key, "item": f"{label}:{measure}", "value": amount})
        else:
            rows.append({"section": "summary", "item": key, "value": value})

    return pd.DataFrame(rows, columns=["section", "item", "value"]).to_csv(index=False)
