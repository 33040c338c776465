from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from .aggregation import aggregate_monthly_sales, calculate_metrics, get_category_sales, get_top_products
from .exceptions import EmptyOrdersError
from .logging_config import get_logger
from .models import ensemble_forecast
from .schema import CategorySales, Metrics, MonthlySales, Order, ProductSales, SalesPrediction

logger = get_logger(__name__)


@dataclass
class AnalyticsConfig:
    top_n: int = 5
    months_to_predict: int = 3
    window_size: int = 3
    # Growth-rate anchor; None anchors on the month after the latest order.
    as_of: Optional[date] = None


@dataclass
class AnalyticsResult:
    monthly_sales: List[MonthlySales]
    top_products: List[ProductSales]
    category_sales: List[CategorySales]
    metrics: Metrics
    predictions: List[SalesPrediction]


def build_analytics(orders: Sequence[Order], config: Optional[AnalyticsConfig] = None) -> AnalyticsResult:
    """Run the full analytics pass: aggregation first, then the ensemble forecast."""
    config = config or AnalyticsConfig()
    if not orders:
        raise EmptyOrdersError("Analytics require at least one order.")

    monthly_sales = aggregate_monthly_sales(orders)
    result = AnalyticsResult(
        monthly_sales=monthly_sales,
        top_products=get_top_products(orders, config.top_n),
        category_sales=get_category_sales(orders),
        metrics=calculate_metrics(orders, as_of=config.as_of),
        predictions=ensemble_forecast(monthly_sales, config.months_to_predict, config.window_size),
    )

    logger.info(
        "Analytics pass complete",
        orders=len(orders),
        months=len(monthly_sales),
        first_month=monthly_sales[0].month,
        last_month=monthly_sales[-1].month,
        total_revenue=result.metrics.total_revenue,
        forecast_months=len(result.predictions),
    )
    return result
