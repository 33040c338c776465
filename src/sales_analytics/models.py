from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .exceptions import DegenerateInputError, EmptySeriesError, InvalidConfigError
from .logging_config import get_logger
from .schema import MonthlySales, SalesPrediction, add_months, month_timestamp, round_currency

logger = get_logger(__name__)


def linear_regression(points: Iterable[Tuple[float, float]]) -> Tuple[float, float]:
    """Closed-form ordinary least squares fit of ``y = slope * x + intercept``."""
    data = np.asarray(list(points), dtype=float).reshape(-1, 2)
    n = len(data)
    if n == 0:
        return 0.0, 0.0

    x, y = data[:, 0], data[:, 1]
    # Compare x directly; the closed-form denominator carries rounding noise.
    if np.all(x == x[0]):
        raise DegenerateInputError("Linear regression needs at least two distinct x values.")

    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()
    denominator = n * sum_xx - sum_x * sum_x

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return float(slope), float(intercept)


def _next_point(series: Sequence[MonthlySales], sales: float) -> MonthlySales:
    month = add_months(series[-1].month, 1)
    return MonthlySales(month=month, sales=sales, timestamp=month_timestamp(month))


def predict_with_linear_regression(series: Sequence[MonthlySales], months_to_predict: int = 3) -> List[SalesPrediction]:
    if not series:
        return []

    n = len(series)
    if n == 1:
        # One observation has no trend; project it flat.
        slope, intercept = 0.0, series[0].sales
    else:
        slope, intercept = linear_regression((index, point.sales) for index, point in enumerate(series))

    last_month = series[-1].month
    predictions = []
    for step in range(1, months_to_predict + 1):
        predicted = slope * (n - 1 + step) + intercept
        predictions.append(
            SalesPrediction(month=add_months(last_month, step), predicted_sales=max(0.0, round_currency(predicted)))
        )
    return predictions


def calculate_moving_average(series: Sequence[MonthlySales], window_size: int = 3) -> float:
    """Mean of the last ``window_size`` points, or of every point when the series is shorter."""
    if window_size < 1:
        raise InvalidConfigError("window_size must be at least 1")
    if not series:
        raise EmptySeriesError("Moving average requires a non-empty series.")
    recent = series[-window_size:]
    return float(np.mean([point.sales for point in recent]))


def predict_with_moving_average(
    series: Sequence[MonthlySales],
    months_to_predict: int = 3,
    window_size: int = 3,
) -> List[SalesPrediction]:
    """
    Iterated simple moving average.

    Each unrounded prediction is appended to a working copy of the series,
    so later windows average over earlier predictions as well as history.
    """
    if window_size < 1:
        raise InvalidConfigError("window_size must be at least 1")
    if not series:
        return []

    working = list(series)
    predictions = []
    for _ in range(months_to_predict):
        predicted = calculate_moving_average(working, window_size)
        point = _next_point(working, predicted)
        predictions.append(SalesPrediction(month=point.month, predicted_sales=round_currency(predicted)))
        working.append(point)
    return predictions


def predict_with_weighted_moving_average(
    series: Sequence[MonthlySales],
    months_to_predict: int = 3,
    window_size: int = 3,
) -> List[SalesPrediction]:
    """
    Iterated linearly weighted moving average.

    Weights run 1..k from the oldest to the newest point of the trailing
    window. Like the simple variant, predictions feed back into a working
    copy; the caller's series is left untouched.
    """
    if window_size < 1:
        raise InvalidConfigError("window_size must be at least 1")
    if not series:
        return []

    working = list(series)
    predictions = []
    for _ in range(months_to_predict):
        recent = np.asarray([point.sales for point in working[-window_size:]], dtype=float)
        weights = np.arange(1, len(recent) + 1, dtype=float)
        predicted = float((recent * weights).sum() / weights.sum())
        point = _next_point(working, predicted)
        predictions.append(SalesPrediction(month=point.month, predicted_sales=round_currency(predicted)))
        working.append(point)
    return predictions


def ensemble_forecast(
    series: Sequence[MonthlySales],
    months_to_predict: int = 3,
    window_size: int = 3,
) -> List[SalesPrediction]:
    """Average of the regression, moving average and weighted moving average forecasts."""
    lr_pred = predict_with_linear_regression(list(series), months_to_predict)
    ma_pred = predict_with_moving_average(list(series), months_to_predict, window_size)
    wma_pred = predict_with_weighted_moving_average(list(series), months_to_predict, window_size)

    logger.debug(
        "Estimators evaluated",
        months=len(series),
        linear_regression=[p.predicted_sales for p in lr_pred],
        moving_average=[p.predicted_sales for p in ma_pred],
        weighted_moving_average=[p.predicted_sales for p in wma_pred],
    )

    return [
        SalesPrediction(
            month=lr.month,
            predicted_sales=round_currency((lr.predicted_sales + ma.predicted_sales + wma.predicted_sales) / 3),
        )
        for lr, ma, wma in zip(lr_pred, ma_pred, wma_pred)
    ]


Estimator = Callable[[Sequence[MonthlySales], int, int], List[SalesPrediction]]

ESTIMATORS: Dict[str, Estimator] = {
    "linear_regression": lambda series, horizon, window_size: predict_with_linear_regression(series, horizon),
    "moving_average": predict_with_moving_average,
    "weighted_moving_average": predict_with_weighted_moving_average,
    "ensemble": ensemble_forecast,
}
