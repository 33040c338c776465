"""
Test Suite Configuration
"""
from datetime import date
from typing import Callable, List, Sequence

import pytest

from sales_analytics.logging_config import configure_logging
from sales_analytics.schema import MonthlySales, Order, add_months, month_timestamp


@pytest.fixture(scope="session", autouse=True)
def quiet_logging() -> None:
    """Keep library debug events out of captured output"""
    configure_logging("WARNING")


@pytest.fixture
def sample_orders() -> List[Order]:
    """Seven orders over four months, deliberately not in date order"""
    return [
        Order("ord-1", date(2024, 1, 5), "Laptop", "Electronics", 1000.0, 1),
        Order("ord-2", date(2024, 1, 20), "Mouse", "Electronics", 25.5, 1),
        Order("ord-3", date(2024, 2, 3), "Jeans", "Fashion", 80.0, 2),
        Order("ord-4", date(2024, 2, 14), "Laptop", "Electronics", 1200.0, 1),
        Order("ord-5", date(2024, 3, 9), "Novel", "Books", 15.25),
        Order("ord-6", date(2024, 3, 30), "Jeans", "Fashion", 80.0, 2),
        Order("ord-7", date(2023, 12, 31), "Mouse", "Electronics", 30.0, 1),
    ]


@pytest.fixture
def make_series() -> Callable[..., List[MonthlySales]]:
    """Build a contiguous monthly series from plain sales values"""

    def _make(values: Sequence[float], start: str = "2024-01") -> List[MonthlySales]:
        series = []
        for offset, sales in enumerate(values):
            month = add_months(start, offset)
            series.append(MonthlySales(month=month, sales=float(sales), timestamp=month_timestamp(month)))
        return series

    return _make


@pytest.fixture
def orders_csv(tmp_path):
    """Orders CSV using the dashboard export headers"""
    path = tmp_path / "sales_data.csv"
    path.write_text(
        "OrderID,Date,ProductName,Category,Sales,Quantity\n"
        "ORD-001,2024-01-05,Laptop,Electronics,1000.00,1\n"
        "ORD-002,2024-01-20,Mouse,Electronics,25.50,1\n"
        "ORD-003,2024-02-03,Jeans,Fashion,80.00,2\n"
        "ORD-004,2024-02-14,Laptop,Electronics,1200.00,1\n"
        "ORD-005,2024-03-09,Novel,Books,15.25,\n"
        "ORD-006,2024-03-30,Jeans,Fashion,80.00,2\n",
        encoding="utf-8",
    )
    return path
