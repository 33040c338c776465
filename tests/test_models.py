"""
Unit Tests - Forecasting estimators
"""
import pytest

from sales_analytics.exceptions import DegenerateInputError, EmptySeriesError, InvalidConfigError
from sales_analytics.models import (
    ESTIMATORS,
    calculate_moving_average,
    ensemble_forecast,
    linear_regression,
    predict_with_linear_regression,
    predict_with_moving_average,
    predict_with_weighted_moving_average,
)
from sales_analytics.schema import round_currency


class TestLinearRegression:
    """Tests for the closed-form least squares fit"""

    def test_perfect_line(self):
        slope, intercept = linear_regression([(0, 100), (1, 200), (2, 300)])

        assert slope == pytest.approx(100.0)
        assert intercept == pytest.approx(100.0)

    def test_no_points(self):
        assert linear_regression([]) == (0.0, 0.0)

    def test_identical_x_values_rejected(self):
        with pytest.raises(DegenerateInputError):
            linear_regression([(1, 5), (1, 7), (1, 9)])

    @pytest.mark.parametrize("x", [0.7, 3.3, 12345.678, 0.1, 1e8 + 0.1])
    def test_identical_float_x_values_rejected(self, x):
        with pytest.raises(DegenerateInputError):
            linear_regression([(x, 1), (x, 2), (x, 3)])

    def test_single_point_rejected(self):
        with pytest.raises(DegenerateInputError):
            linear_regression([(0, 42)])


class TestPredictWithLinearRegression:
    """Tests for predict_with_linear_regression"""

    def test_extends_linear_series(self, make_series):
        series = make_series([100, 200, 300], start="2024-09")

        result = predict_with_linear_regression(series, 3)

        assert [p.month for p in result] == ["2024-12", "2025-01", "2025-02"]
        assert [p.predicted_sales for p in result] == [400.0, 500.0, 600.0]

    def test_floors_negative_forecasts(self, make_series):
        series = make_series([300, 200, 100])

        result = predict_with_linear_regression(series, 3)

        assert [p.predicted_sales for p in result] == [0.0, 0.0, 0.0]

    def test_single_month_projects_flat(self, make_series):
        result = predict_with_linear_regression(make_series([250.5]), 2)

        assert [p.predicted_sales for p in result] == [250.5, 250.5]

    def test_empty_series(self):
        assert predict_with_linear_regression([], 3) == []


class TestMovingAverage:
    """Tests for the simple moving average estimator"""

    def test_full_window(self, make_series):
        assert calculate_moving_average(make_series([10, 20, 30]), 3) == pytest.approx(20.0)

    def test_window_larger_than_series(self, make_series):
        assert calculate_moving_average(make_series([10, 20, 30]), 5) == pytest.approx(20.0)

    def test_uses_trailing_points(self, make_series):
        assert calculate_moving_average(make_series([1000, 10, 20, 30]), 3) == pytest.approx(20.0)

    def test_empty_series_rejected(self):
        with pytest.raises(EmptySeriesError):
            calculate_moving_average([], 3)

    @pytest.mark.parametrize(
        "estimator", [predict_with_moving_average, predict_with_weighted_moving_average]
    )
    def test_non_positive_window_rejected(self, make_series, estimator):
        with pytest.raises(InvalidConfigError):
            estimator(make_series([10, 20, 30]), 3, window_size=0)

    def test_predictions_feed_back(self, make_series):
        result = predict_with_moving_average(make_series([10, 20, 30]), 3)

        assert [p.month for p in result] == ["2024-04", "2024-05", "2024-06"]
        assert [p.predicted_sales for p in result] == [20.0, 23.33, 24.44]

    def test_input_not_mutated(self, make_series):
        series = make_series([10, 20, 30])

        predict_with_moving_average(series, 3)

        assert len(series) == 3


class TestWeightedMovingAverage:
    """Tests for the weighted moving average estimator"""

    def test_weights_favour_recent_months(self, make_series):
        result = predict_with_weighted_moving_average(make_series([10, 20, 30]), 1)

        assert result[0].predicted_sales == 23.33

    def test_predictions_feed_back(self, make_series):
        result = predict_with_weighted_moving_average(make_series([10, 20, 30]), 3)

        assert [p.predicted_sales for p in result] == [23.33, 25.0, 25.28]

    def test_short_series_uses_available_points(self, make_series):
        result = predict_with_weighted_moving_average(make_series([10, 40]), 1, window_size=3)

        # (10*1 + 40*2) / 3
        assert result[0].predicted_sales == 30.0

    def test_input_not_mutated(self, make_series):
        series = make_series([10, 20, 30])
        snapshot = list(series)

        predict_with_weighted_moving_average(series, 3)

        assert series == snapshot

    def test_empty_series(self):
        assert predict_with_weighted_moving_average([], 3) == []


class TestEnsembleForecast:
    """Tests for ensemble_forecast"""

    def test_mean_of_estimators(self, make_series):
        series = make_series([10, 20, 30])

        lr = predict_with_linear_regression(series, 3)
        ma = predict_with_moving_average(series, 3)
        wma = predict_with_weighted_moving_average(series, 3)
        result = ensemble_forecast(series, 3)

        assert [p.month for p in result] == [p.month for p in lr]
        for index, prediction in enumerate(result):
            expected = round_currency(
                (lr[index].predicted_sales + ma[index].predicted_sales + wma[index].predicted_sales) / 3
            )
            assert prediction.predicted_sales == expected

    def test_known_values(self, make_series):
        result = ensemble_forecast(make_series([10, 20, 30]), 3)

        assert [p.predicted_sales for p in result] == [27.78, 32.78, 36.57]

    def test_months_continue_across_year_end(self, make_series):
        result = ensemble_forecast(make_series([5, 6, 7], start="2024-09"), 3)

        assert [p.month for p in result] == ["2024-12", "2025-01", "2025-02"]

    def test_caller_series_untouched(self, make_series):
        series = make_series([10, 20, 30])

        ensemble_forecast(series, 3)
        ensemble_forecast(series, 3)

        assert len(series) == 3

    def test_repeatable(self, make_series):
        series = make_series([120, 90, 150, 170])

        assert ensemble_forecast(series, 3) == ensemble_forecast(series, 3)

    def test_empty_series(self):
        assert ensemble_forecast([], 3) == []


class TestEstimatorRegistry:
    """Tests for the estimator registry"""

    def test_all_estimators_share_month_labels(self, make_series):
        series = make_series([100, 150, 125, 175], start="2023-11")

        labels = {name: [p.month for p in estimator(series, 3, 3)] for name, estimator in ESTIMATORS.items()}

        assert all(months == ["2024-03", "2024-04", "2024-05"] for months in labels.values())
