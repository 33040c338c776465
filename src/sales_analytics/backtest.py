from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import pandas as pd

from .exceptions import AnalyticsError, InvalidConfigError
from .logging_config import get_logger
from .metrics import mae, wmape
from .models import ESTIMATORS
from .schema import MonthlySales, SalesPrediction

logger = get_logger(__name__)

METRIC_COLUMNS = ("model", "cutoff", "wmape", "mae", "error")


@dataclass
class BacktestConfig:
    horizon: int = 3
    min_train: int = 3
    window_size: int = 3


@dataclass
class BacktestResult:
    metrics: pd.DataFrame
    model_selection: Optional[str]


def overlay_actuals(predictions: Sequence[SalesPrediction], series: Sequence[MonthlySales]) -> List[SalesPrediction]:
    """Copy ``predictions`` with ``actual_sales`` filled in for months already observed in ``series``."""
    observed = {point.month: point.sales for point in series}
    return [replace(prediction, actual_sales=observed.get(prediction.month)) for prediction in predictions]


def rolling_backtest(series: Sequence[MonthlySales], config: BacktestConfig) -> BacktestResult:
    if config.min_train < 1:
        raise InvalidConfigError("min_train must be at least 1")
    if config.horizon < 1:
        raise InvalidConfigError("horizon must be at least 1")

    records: List[dict] = []

    for cutoff in range(config.min_train, len(series) - config.horizon + 1):
        train = list(series[:cutoff])
        holdout = series[cutoff : cutoff + config.horizon]
        cutoff_month = train[-1].month

        for name, estimator in ESTIMATORS.items():
            try:
                forecast = overlay_actuals(estimator(train, config.horizon, config.window_size), holdout)
            except AnalyticsError as exc:
                logger.warning("Backtest fold failed", model=name, cutoff=cutoff_month, error=str(exc))
                records.append(
                    {"model": name, "cutoff": cutoff_month, "wmape": float("nan"), "mae": float("nan"), "error": str(exc)}
                )
                continue

            actual = [prediction.actual_sales for prediction in forecast]
            predicted = [prediction.predicted_sales for prediction in forecast]
            records.append(
                {
                    "model": name,
                    "cutoff": cutoff_month,
                    "wmape": wmape(actual, predicted),
                    "mae": mae(actual, predicted),
                    "error": "",
                }
            )

    metrics = pd.DataFrame.from_records(records, columns=list(METRIC_COLUMNS))
    if metrics.empty:
        logger.info("Backtest skipped", months=len(series), min_train=config.min_train, horizon=config.horizon)
        return BacktestResult(metrics=metrics, model_selection=None)

    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return BacktestResult(metrics=metrics, model_selection=None)

    scores = valid.groupby("model", sort=False)["wmape"].mean().sort_values(kind="stable")
    best = str(scores.index[0])
    logger.info("Backtest complete", folds=metrics["cutoff"].nunique(), best_model=best, wmape=float(scores.iloc[0]))
    return BacktestResult(metrics=metrics, model_selection=best)
