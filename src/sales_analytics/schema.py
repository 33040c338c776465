from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from .exceptions import InvalidOrderError

CENT = Decimal("0.01")


def round_currency(value: float) -> float:
    """Round half-up on the cent boundary, using the shortest repr of ``value``."""
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_start(month: str) -> date:
    year, _, mon = month.partition("-")
    return date(int(year), int(mon), 1)


def month_timestamp(month: str) -> int:
    """Epoch milliseconds (UTC) at the first day of ``month``."""
    return int(pd.Timestamp(month_start(month)).value // 1_000_000)


def add_months(month: str, steps: int) -> str:
    return month_key(month_start(month) + relativedelta(months=steps))


@dataclass(frozen=True)
class Order:
    order_id: str
    order_date: date
    product_name: str
    category: str
    sales_amount: float
    quantity: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.order_date, datetime):
            object.__setattr__(self, "order_date", self.order_date.date())
        elif not isinstance(self.order_date, date):
            raise InvalidOrderError(
                f"Order {self.order_id!r}: order_date must be a date, got {type(self.order_date).__name__}"
            )
        if isinstance(self.sales_amount, bool) or not isinstance(self.sales_amount, numbers.Real):
            raise InvalidOrderError(
                f"Order {self.order_id!r}: sales_amount must be a number, got {type(self.sales_amount).__name__}"
            )
        if math.isnan(self.sales_amount) or self.sales_amount < 0:
            raise InvalidOrderError(f"Order {self.order_id!r}: sales_amount must be >= 0")
        if self.quantity is not None and self.quantity <= 0:
            raise InvalidOrderError(f"Order {self.order_id!r}: quantity must be positive")


@dataclass(frozen=True)
class MonthlySales:
    month: str
    sales: float
    # Milliseconds since the epoch (UTC) at the first day of ``month``.
    timestamp: int


@dataclass(frozen=True)
class ProductSales:
    product_name: str
    total_sales: float
    order_count: int


@dataclass(frozen=True)
class CategorySales:
    category: str
    total_sales: float
    percentage: float


@dataclass(frozen=True)
class SalesPrediction:
    month: str
    predicted_sales: float
    actual_sales: Optional[float] = None


@dataclass(frozen=True)
class Metrics:
    total_revenue: float
    total_orders: int
    average_order_value: float
    growth_rate: float


def to_frame(records: Sequence, record_type: Optional[type] = None) -> pd.DataFrame:
    """Tabulate a sequence of schema dataclasses, one column per field.

    ``record_type`` supplies the columns when ``records`` is empty.
    """
    if records:
        return pd.DataFrame.from_records([asdict(record) for record in records])
    columns = [field.name for field in fields(record_type)] if record_type is not None else []
    return pd.DataFrame(columns=columns)
