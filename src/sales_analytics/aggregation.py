from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta

from .data import orders_to_frame
from .exceptions import EmptyOrdersError, InvalidConfigError
from .schema import (
    CategorySales,
    Metrics,
    MonthlySales,
    Order,
    ProductSales,
    add_months,
    month_timestamp,
    round_currency,
)

GROWTH_WINDOW_MONTHS = 3


def _descending(frame: pd.DataFrame, column: str) -> pd.DataFrame:
    # Stable on ties, so equal totals keep first-seen order.
    order = np.argsort(-frame[column].to_numpy(dtype=float), kind="stable")
    return frame.iloc[order]


def aggregate_monthly_sales(orders: Sequence[Order]) -> List[MonthlySales]:
    """Sum sales per calendar month, oldest month first. Months without orders are omitted."""
    df = orders_to_frame(orders)
    if df.empty:
        return []

    df["month"] = df["order_date"].dt.strftime("%Y-%m")
    totals = df.groupby("month", sort=False)["sales_amount"].sum()

    monthly = [
        MonthlySales(month=month, sales=round_currency(sales), timestamp=month_timestamp(month))
        for month, sales in totals.items()
    ]
    return sorted(monthly, key=lambda point: point.timestamp)


def fill_month_gaps(series: Sequence[MonthlySales]) -> List[MonthlySales]:
    """Insert zero-sales points for months missing between the first and last entry."""
    if not series:
        return []
    ordered = sorted(series, key=lambda point: point.timestamp)
    observed = {point.month: point for point in ordered}
    filled: List[MonthlySales] = []
    month = ordered[0].month
    while True:
        filled.append(observed.get(month) or MonthlySales(month=month, sales=0.0, timestamp=month_timestamp(month)))
        if month == ordered[-1].month:
            break
        month = add_months(month, 1)
    return filled


def get_top_products(orders: Sequence[Order], top_n: int = 5) -> List[ProductSales]:
    if top_n < 0:
        raise InvalidConfigError("top_n must be non-negative")
    df = orders_to_frame(orders)
    if df.empty:
        return []

    grouped = df.groupby("product_name", sort=False).agg(
        total_sales=("sales_amount", "sum"),
        order_count=("sales_amount", "size"),
    )
    grouped["total_sales"] = grouped["total_sales"].map(round_currency)
    ranked = _descending(grouped, "total_sales").head(top_n)

    return [
        ProductSales(product_name=name, total_sales=float(row.total_sales), order_count=int(row.order_count))
        for name, row in ranked.iterrows()
    ]


def get_category_sales(orders: Sequence[Order]) -> List[CategorySales]:
    df = orders_to_frame(orders)
    if df.empty:
        raise EmptyOrdersError("Category distribution requires at least one order.")

    grand_total = float(df["sales_amount"].sum())
    totals = df.groupby("category", sort=False)["sales_amount"].sum().to_frame("raw_sales")
    totals["total_sales"] = totals["raw_sales"].map(round_currency)
    ranked = _descending(totals, "total_sales")

    return [
        CategorySales(
            category=category,
            total_sales=float(row.total_sales),
            # All-zero revenue has no meaningful share; report 0 rather than NaN.
            percentage=round_currency(row.raw_sales / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, row in ranked.iterrows()
    ]


def growth_rate(recent: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``recent``; 0 when there is no prior baseline."""
    if previous <= 0:
        return 0.0
    return (recent - previous) / previous * 100


def growth_anchor(orders: Sequence[Order]) -> date:
    """First day of the month after the latest order, so that month is fully inside the recent window."""
    latest = max(order.order_date for order in orders)
    return date(latest.year, latest.month, 1) + relativedelta(months=1)


def calculate_metrics(orders: Sequence[Order], as_of: Optional[date] = None) -> Metrics:
    """
    Revenue, order count, average order value and growth rate.

    The growth rate compares the ``GROWTH_WINDOW_MONTHS`` months before the
    anchor with the same span before that, lower bounds inclusive. The
    anchor is ``as_of`` when given, otherwise ``growth_anchor(orders)``.
    """
    df = orders_to_frame(orders)
    if df.empty:
        raise EmptyOrdersError("Metrics require at least one order.")

    total_revenue = float(df["sales_amount"].sum())
    total_orders = len(df)

    anchor = as_of if as_of is not None else growth_anchor(orders)
    recent_start = anchor - relativedelta(months=GROWTH_WINDOW_MONTHS)
    previous_start = anchor - relativedelta(months=2 * GROWTH_WINDOW_MONTHS)

    order_dates = df["order_date"]
    in_recent = (order_dates >= pd.Timestamp(recent_start)) & (order_dates < pd.Timestamp(anchor))
    in_previous = (order_dates >= pd.Timestamp(previous_start)) & (order_dates < pd.Timestamp(recent_start))
    recent_sales = float(df.loc[in_recent, "sales_amount"].sum())
    previous_sales = float(df.loc[in_previous, "sales_amount"].sum())

    return Metrics(
        total_revenue=round_currency(total_revenue),
        total_orders=total_orders,
        average_order_value=round_currency(total_revenue / total_orders),
        growth_rate=round_currency(growth_rate(recent_sales, previous_sales)),
    )
