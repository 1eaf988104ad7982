"""
Unit tests for TemporalAnalysisService

Author: TM3
Date: 2026-02-17
"""
from datetime import datetime, timedelta

import pandas as pd
import pytest

from stockcast.domain.forecast import CycleKind, TemporalProfile, TrendDirection
from stockcast.services.temporal_analysis_service import (
    ExitWindow,
    TemporalAnalysisService,
    autocorrelation,
)


def monthly_series(values, start='2023-07'):
    index = pd.period_range(start, periods=len(values), freq='M')
    return pd.Series([float(v) for v in values], index=index)


class TestWindowSelection:
    """Test lookback window selection"""

    def test_default_window_when_enough_exits(self, config, now, steady_history):
        window = TemporalAnalysisService(config).select_window(steady_history, now)

        assert window.window_days == 90
        assert window.sample_count == 9
        assert window.total_quantity == 90
        assert window.widened is False

    def test_widens_to_extended_window_when_sparse(self, config, now, make_exit):
        movements = [
            make_exit(1, now - timedelta(days=10), 5),
            make_exit(1, now - timedelta(days=20), 5),
            make_exit(1, now - timedelta(days=30), 5),
            make_exit(1, now - timedelta(days=120), 5),
            make_exit(1, now - timedelta(days=150), 5),
            make_exit(1, now - timedelta(days=200), 5),  # outside both windows
        ]

        window = TemporalAnalysisService(config).select_window(movements, now)

        assert window.window_days == 180
        assert window.sample_count == 5
        assert window.widened is True

    def test_ignores_entries(self, config, now, steady_history, make_entry):
        movements = steady_history + [make_entry(1, now - timedelta(days=3), 500)]

        window = TemporalAnalysisService(config).select_window(movements, now)

        assert window.total_quantity == 90
        assert window.sample_count == 9

    def test_movement_count_includes_entries_in_final_span(self, config, now, make_exit, make_entry):
        movements = [make_exit(1, now - timedelta(days=d), 5) for d in (10, 120, 150)]
        movements += [make_entry(1, now - timedelta(days=d), 50) for d in (20, 100, 170, 200)]

        window = TemporalAnalysisService(config).select_window(movements, now)

        assert window.widened is True
        assert window.sample_count == 3
        # Entry at 200 days is outside the extended span
        assert window.movement_count == 6

    def test_cutoff_is_exclusive(self, config, now, make_exit):
        movements = [make_exit(1, now - timedelta(days=d), 2) for d in (5, 15, 25, 35, 45)]
        movements.append(make_exit(1, now - timedelta(days=90), 7))

        window = TemporalAnalysisService(config).select_window(movements, now)

        assert window.window_days == 90
        assert window.sample_count == 5
        assert window.total_quantity == 10


class TestAggregation:
    """Test monthly aggregation"""

    def test_sums_exits_per_calendar_month(self, make_exit):
        records = [
            make_exit(1, datetime(2024, 5, 2), 4),
            make_exit(1, datetime(2024, 5, 28), 6),
            make_exit(1, datetime(2024, 4, 10), 3),
        ]

        monthly = TemporalAnalysisService.aggregate_monthly(records)

        assert [str(p) for p in monthly.index] == ['2024-04', '2024-05']
        assert monthly.tolist() == [3.0, 10.0]

    def test_empty_records(self):
        assert TemporalAnalysisService.aggregate_monthly([]).empty


class TestProfile:
    """Test seasonality, cycle and trend detection"""

    def test_short_history_yields_neutral_profile(self, config, now, make_exit):
        window = ExitWindow(
            records=(make_exit(1, now - timedelta(days=5), 3), make_exit(1, now - timedelta(days=6), 3)),
            window_days=180
        )

        profile = TemporalAnalysisService(config).analyze(window)

        assert profile == TemporalProfile.insufficient_data()
        assert profile.factor_for(7) == 1.0

    def test_steady_consumption_is_flat(self, config):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series([30, 30, 30]))

        assert profile.seasonal is False
        assert profile.trend == TrendDirection.STABLE
        assert profile.cycle == CycleKind.IRREGULAR
        assert profile.trend_rate == 0.0

    def test_twelve_month_factors_average_to_one(self, config):
        values = [12, 8, 15, 20, 9, 11, 30, 14, 7, 10, 25, 18]

        profile = TemporalAnalysisService(config).analyze_series(monthly_series(values))

        factors = list(profile.seasonal_factors.values())
        assert len(factors) == 12
        assert sum(factors) / len(factors) == pytest.approx(1.0)

    def test_detects_seasonal_peak(self, config):
        # July 2023 .. June 2024, peak in May and June
        values = [10] * 10 + [40, 40]

        profile = TemporalAnalysisService(config).analyze_series(monthly_series(values))

        assert profile.seasonal is True
        assert profile.factor_for(6) == pytest.approx(8 / 3)
        assert profile.factor_for(1) == pytest.approx(2 / 3)

    def test_short_seasonal_history_assumes_annual_cycle(self, config):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series([10, 10, 10, 40]))

        assert profile.seasonal is True
        assert profile.cycle == CycleKind.ANNUAL

    def test_alternating_series_is_semiannual(self, config):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series([10, 30] * 6))

        assert profile.cycle == CycleKind.SEMIANNUAL

    def test_linear_growth_is_monthly_cycle_and_growing(self, config):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series(range(1, 13)))

        assert profile.cycle == CycleKind.MONTHLY
        assert profile.trend == TrendDirection.GROWING

    @pytest.mark.parametrize("values, direction, rate", [
        ([10, 10, 20, 20], TrendDirection.GROWING, 100.0),
        ([20, 20, 10, 10], TrendDirection.DECLINING, -50.0),
        ([10, 20, 30], TrendDirection.GROWING, 150.0),
        ([10, 10, 10.5, 10.5], TrendDirection.STABLE, 5.0),
    ])
    def test_trend_from_half_split(self, config, values, direction, rate):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series(values))

        assert profile.trend == direction
        assert profile.trend_rate == pytest.approx(rate)

    def test_no_consumption_is_neutral(self, config):
        profile = TemporalAnalysisService(config).analyze_series(monthly_series([0, 0, 0]))

        assert profile == TemporalProfile.insufficient_data()


class TestAutocorrelation:
    """Test the autocorrelation coefficient"""

    def test_constant_series_is_zero(self):
        assert autocorrelation([5, 5, 5, 5], 1) == 0.0

    def test_lag_beyond_series_is_zero(self):
        assert autocorrelation([1, 2, 3], 3) == 0.0

    def test_alternating_series(self):
        values = [10, 30] * 6

        assert autocorrelation(values, 1) == pytest.approx(-11 / 12)
        assert autocorrelation(values, 6) == pytest.approx(0.5)
