from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from .exceptions import InvalidOrderError
from .schema import Order

# Dashboard export headers first, then the camelCase names used by the JSON feed.
COLUMN_ALIASES: Mapping[str, Sequence[str]] = {
    "order_id": ("OrderID", "orderId"),
    "order_date": ("Date", "orderDate"),
    "product_name": ("ProductName", "productName"),
    "category": ("Category", "category"),
    "sales_amount": ("Sales", "salesAmount"),
    "quantity": ("Quantity", "quantity"),
}
REQUIRED_FIELDS: Sequence[str] = ("order_id", "order_date", "product_name", "category", "sales_amount")
FRAME_COLUMNS: Sequence[str] = tuple(COLUMN_ALIASES)


def _is_missing(value: Any) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value))


def parse_order_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_missing(value):
        raise InvalidOrderError("Order date is missing.")
    try:
        parsed = pd.to_datetime(str(value).strip(), errors="raise")
    except (ValueError, TypeError, OverflowError) as exc:
        raise InvalidOrderError(f"Unparseable order date: {value!r}") from exc
    if pd.isna(parsed):
        raise InvalidOrderError(f"Unparseable order date: {value!r}")
    return parsed.date()


def _lookup(record: Mapping[str, Any], field: str) -> Any:
    for column in (field,) + tuple(COLUMN_ALIASES[field]):
        if column in record and not _is_missing(record[column]):
            return record[column]
    return None


def order_from_record(record: Mapping[str, Any]) -> Order:
    """Build an ``Order`` from a CSV row or JSON object keyed by any known alias."""
    values = {field: _lookup(record, field) for field in COLUMN_ALIASES}
    missing = [field for field in REQUIRED_FIELDS if values[field] is None]
    if missing:
        raise InvalidOrderError(f"Order record missing required fields: {missing}")

    try:
        sales_amount = float(values["sales_amount"])
    except (TypeError, ValueError) as exc:
        raise InvalidOrderError(f"Invalid sales amount: {values['sales_amount']!r}") from exc

    quantity = values["quantity"]
    if quantity is not None:
        try:
            quantity = int(quantity)
        except (TypeError, ValueError) as exc:
            raise InvalidOrderError(f"Invalid quantity: {quantity!r}") from exc

    return Order(
        order_id=str(values["order_id"]).strip(),
        order_date=parse_order_date(values["order_date"]),
        product_name=str(values["product_name"]),
        category=str(values["category"]),
        sales_amount=sales_amount,
        quantity=quantity,
    )


def load_orders(orders_path: Path) -> List[Order]:
    df = pd.read_csv(orders_path, skip_blank_lines=True)
    missing = [
        field
        for field in REQUIRED_FIELDS
        if not any(column in df.columns for column in (field,) + tuple(COLUMN_ALIASES[field]))
    ]
    if missing:
        raise InvalidOrderError(f"Order data missing required columns: {sorted(missing)}")

    orders: List[Order] = []
    for row_number, record in enumerate(df.to_dict("records"), start=2):
        try:
            orders.append(order_from_record(record))
        except InvalidOrderError as exc:
            raise InvalidOrderError(f"{orders_path}, line {row_number}: {exc}") from exc
    return orders


def orders_to_frame(orders: Iterable[Order]) -> pd.DataFrame:
    records = [
        {
            "order_id": order.order_id,
            "order_date": order.order_date,
            "product_name": order.product_name,
            "category": order.category,
            "sales_amount": order.sales_amount,
            "quantity": order.quantity,
        }
        for order in orders
    ]
    df = pd.DataFrame.from_records(records, columns=list(FRAME_COLUMNS))
    df["order_date"] = pd.to_datetime(df["order_date"])
    df["sales_amount"] = df["sales_amount"].astype(float)
    return df


def filter_orders_by_date_range(orders: Iterable[Order], start: date, end: date) -> List[Order]:
    return [order for order in orders if start <= order.order_date <= end]


def get_recent_orders(orders: Iterable[Order], months: int = 12, as_of: Optional[date] = None) -> List[Order]:
    if as_of is None:
        as_of = date.today()
    cutoff = as_of - relativedelta(months=months)
    return [order for order in orders if order.order_date >= cutoff]
