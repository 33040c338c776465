from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .backtest import BacktestConfig, BacktestResult, rolling_backtest
from .data import load_orders
from .exceptions import AnalyticsError
from .logging_config import configure_logging, get_logger
from .pipeline import AnalyticsConfig, AnalyticsResult, build_analytics
from .schema import CategorySales, MonthlySales, ProductSales, SalesPrediction, to_frame

logger = get_logger(__name__)


def _money(value: float) -> str:
    return f"{value:,.2f}"


def summarize_analytics(result: AnalyticsResult) -> str:
    metrics = result.metrics
    lines: list[str] = [
        "Summary:",
        f"  Total revenue:       {_money(metrics.total_revenue)}",
        f"  Total orders:        {metrics.total_orders}",
        f"  Average order value: {_money(metrics.average_order_value)}",
        f"  Growth rate:         {metrics.growth_rate:.2f}%",
    ]

    sections = (
        ("Top products:", result.top_products, ProductSales),
        ("Category distribution:", result.category_sales, CategorySales),
        ("Monthly sales (last 6 months):", result.monthly_sales[-6:], MonthlySales),
        ("Forecast:", result.predictions, SalesPrediction),
    )
    for title, records, record_type in sections:
        frame = to_frame(records, record_type)
        if "timestamp" in frame.columns:
            frame = frame.drop(columns=["timestamp"])
        if "actual_sales" in frame.columns and frame["actual_sales"].isna().all():
            frame = frame.drop(columns=["actual_sales"])
        lines.append(f"\n{title}")
        lines.append(frame.to_string(index=False, float_format=lambda x: f"{x:.2f}") if not frame.empty else "  (none)")

    return "\n".join(lines)


def summarize_backtest(result: BacktestResult) -> str:
    metrics = result.metrics
    if metrics.empty:
        return "Backtest: not enough history for a single fold."

    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return "Backtest: every fold failed; inspect the error column."

    aggregate = valid.groupby("model")[["wmape", "mae"]].mean().sort_values("wmape")
    lines = [
        "Backtest accuracy (lower is better):",
        aggregate.to_string(float_format=lambda x: f"{x:.4f}"),
        f"\nFolds: {metrics['cutoff'].nunique()}",
        f"Best model: {result.model_selection}",
    ]
    return "\n".join(lines)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="E-commerce sales analytics with a linear regression / moving average ensemble forecast.",
    )
    parser.add_argument(
        "--orders-path",
        type=Path,
        required=True,
        help="Path to the orders CSV (columns: OrderID, Date, ProductName, Category, Sales, Quantity).",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=5,
        help="Number of top products to report (default: 5).",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=3,
        help="Number of future months to forecast (default: 3).",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=3,
        help="Window for the moving average estimators (default: 3).",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Anchor date (YYYY-MM-DD) for the growth-rate windows. Defaults to the month after the latest order.",
    )
    parser.add_argument(
        "--backtest",
        action="store_true",
        help="Also run a rolling backtest of every estimator over the monthly series.",
    )
    parser.add_argument(
        "--min-train",
        type=int,
        default=3,
        help="Minimum history (months) before the first backtest fold (default: 3).",
    )
    parser.add_argument(
        "--monthly-output",
        type=Path,
        help="Optional path to write the monthly sales series as CSV.",
    )
    parser.add_argument(
        "--forecast-output",
        type=Path,
        help="Optional path to write the ensemble forecast as CSV.",
    )
    parser.add_argument(
        "--metrics-output",
        type=Path,
        help="Optional path to write fold-level backtest metrics as CSV.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines.",
    )
    return parser


def _write_csv(frame: pd.DataFrame, path: Path, label: str) -> None:
    frame.to_csv(path, index=False)
    print(f"Saved {label} to {path}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_logs=args.json_logs)

    config = AnalyticsConfig(
        top_n=args.top_n,
        months_to_predict=args.horizon,
        window_size=args.window_size,
        as_of=args.as_of,
    )
    try:
        orders = load_orders(args.orders_path)
        result = build_analytics(orders, config)
        backtest_result = None
        if args.backtest:
            backtest_cfg = BacktestConfig(horizon=args.horizon, min_train=args.min_train, window_size=args.window_size)
            backtest_result = rolling_backtest(result.monthly_sales, backtest_cfg)
    except AnalyticsError as exc:
        logger.error("Analytics failed", path=str(args.orders_path), error=str(exc))
        raise SystemExit(1) from exc

    print(summarize_analytics(result))
    if backtest_result is not None:
        print()
        print(summarize_backtest(backtest_result))

    if args.monthly_output:
        _write_csv(to_frame(result.monthly_sales, MonthlySales), args.monthly_output, "monthly sales")
    if args.forecast_output:
        _write_csv(to_frame(result.predictions, SalesPrediction), args.forecast_output, "forecast")
    if args.metrics_output and backtest_result is not None:
        _write_csv(backtest_result.metrics, args.metrics_output, "backtest metrics")


if __name__ == "__main__":
    main()
