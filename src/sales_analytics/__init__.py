"""E-commerce sales analytics: monthly aggregation, rankings and an ensemble sales forecast."""

from .aggregation import aggregate_monthly_sales, calculate_metrics, fill_month_gaps, get_category_sales, get_top_products
from .backtest import BacktestConfig, BacktestResult, overlay_actuals, rolling_backtest
from .data import filter_orders_by_date_range, get_recent_orders, load_orders, order_from_record
from .exceptions import (
    AnalyticsError,
    DegenerateInputError,
    EmptyOrdersError,
    EmptySeriesError,
    InvalidConfigError,
    InvalidOrderError,
)
from .models import (
    calculate_moving_average,
    ensemble_forecast,
    linear_regression,
    predict_with_linear_regression,
    predict_with_moving_average,
    predict_with_weighted_moving_average,
)
from .pipeline import AnalyticsConfig, AnalyticsResult, build_analytics
from .schema import CategorySales, Metrics, MonthlySales, Order, ProductSales, SalesPrediction

__all__ = [
    "AnalyticsConfig",
    "AnalyticsError",
    "AnalyticsResult",
    "BacktestConfig",
    "BacktestResult",
    "CategorySales",
    "DegenerateInputError",
    "EmptyOrdersError",
    "EmptySeriesError",
    "InvalidConfigError",
    "InvalidOrderError",
    "Metrics",
    "MonthlySales",
    "Order",
    "ProductSales",
    "SalesPrediction",
    "aggregate_monthly_sales",
    "build_analytics",
    "calculate_metrics",
    "calculate_moving_average",
    "ensemble_forecast",
    "fill_month_gaps",
    "filter_orders_by_date_range",
    "get_category_sales",
    "get_recent_orders",
    "get_top_products",
    "linear_regression",
    "load_orders",
    "order_from_record",
    "overlay_actuals",
    "predict_with_linear_regression",
    "predict_with_moving_average",
    "predict_with_weighted_moving_average",
    "rolling_backtest",
]

__version__ = "0.1.0"
