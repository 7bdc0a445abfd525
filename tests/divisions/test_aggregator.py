"""Tests for per-division aggregation."""

import numpy as np
import pandas as pd
import pytest

from climdivs.contracts import ConfigError, SizeMismatchError
from climdivs.divisions.aggregator import (
    DivisionTotals,
    aggregate,
    aggregate_to_divisions,
    compute_averages,
)
from climdivs.divisions.map_loader import DivisionMap
from climdivs.grid.decoder import GriddedField, decode_grid
from climdivs.schemas import GridGeometry

from tests.helpers.fake_inputs import grid_bytes

pytestmark = pytest.mark.unit

SENTINEL = -9999.0


def make_map(codes, geometry=None):
    codes = np.asarray(codes, dtype=np.int32)
    coords = np.zeros(codes.size)
    return DivisionMap(codes=codes, lons=coords, lats=coords, geometry=geometry)


class TestAggregate:

    def test_example_grid(self):
        totals = aggregate([10.0, 20.0, -9999.0, 30.0], [5, 5, 5, 7], SENTINEL)
        assert totals == {5: DivisionTotals(30.0, 2), 7: DivisionTotals(30.0, 1)}

    def test_accepts_decoded_grid_and_loaded_map(self):
        field = decode_grid(grid_bytes([1.0, 3.0]))
        totals = aggregate(field, make_map([2, 2]), SENTINEL)
        assert totals == {2: DivisionTotals(4.0, 2)}

    def test_no_division_points_skipped(self):
        totals = aggregate([100.0, 1.0], [0, 3], SENTINEL)
        assert totals == {3: DivisionTotals(1.0, 1)}

    def test_sentinel_sample_does_not_change_totals(self):
        with_sentinel = aggregate([4.0, -9999.0, 6.0], [1, 1, 1], SENTINEL)
        without = aggregate([4.0, 6.0], [1, 1], SENTINEL)
        assert with_sentinel == without

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf, -10000.0, -9999.0])
    def test_invalid_samples_skipped(self, bad):
        totals = aggregate([bad, 2.0], [1, 1], SENTINEL)
        assert totals == {1: DivisionTotals(2.0, 1)}

    def test_value_just_above_sentinel_counts(self):
        totals = aggregate([-9998.5], [1], SENTINEL)
        assert totals[1].count == 1

    def test_all_missing_division_kept_with_zero_count(self):
        totals = aggregate([-9999.0, 5.0], [8, 9], SENTINEL)
        assert totals[8] == DivisionTotals(0.0, 0)
        assert totals[9] == DivisionTotals(5.0, 1)

    def test_custom_sentinel(self):
        totals = aggregate([-999.0, -500.0], [1, 1], -999.0)
        assert totals == {1: DivisionTotals(-500.0, 1)}

    def test_sums_in_float64(self):
        # float32 accumulation would drift on this many points
        n = 200_000
        values = np.full(n, 0.1, dtype=np.float32)
        totals = aggregate(GriddedField(values=values), np.ones(n, dtype=np.int32), SENTINEL)
        expected = float(np.float32(0.1)) * n
        assert totals[1].sum == pytest.approx(expected, rel=1e-9)

    @pytest.mark.parametrize("n_grid,n_map", [(3, 4), (5, 4), (0, 1)])
    def test_size_mismatch(self, n_grid, n_map):
        with pytest.raises(SizeMismatchError, match=f"{n_grid} samples"):
            aggregate([1.0] * n_grid, [1] * n_map, SENTINEL)

    def test_geometry_mismatch(self):
        a = GridGeometry(resolution=1.0, lon_min=0, lon_max=1, lat_min=0, lat_max=0)
        b = GridGeometry(resolution=1.0, lon_min=1, lon_max=2, lat_min=0, lat_max=0)
        field = GriddedField(values=np.ones(2, dtype=np.float32), geometry=a)
        with pytest.raises(SizeMismatchError, match="geometry"):
            aggregate(field, make_map([1, 1], geometry=b), SENTINEL)

    def test_one_sided_geometry_is_accepted(self):
        a = GridGeometry(resolution=1.0, lon_min=0, lon_max=1, lat_min=0, lat_max=0)
        field = GriddedField(values=np.ones(2, dtype=np.float32), geometry=a)
        assert aggregate(field, make_map([1, 1]), SENTINEL)[1].count == 2

    def test_rejects_out_of_range_codes(self):
        with pytest.raises(ConfigError, match="1..344"):
            aggregate([1.0], [345], SENTINEL)


class TestComputeAverages:

    def test_mean_and_missing(self):
        averages = compute_averages(
            {5: DivisionTotals(30.0, 2), 7: DivisionTotals(30.0, 1), 9: DivisionTotals(0.0, 0)},
            SENTINEL,
        )
        assert averages == {5: 15.0, 7: 30.0, 9: SENTINEL}

    def test_identity_averaging(self):
        v = 17.3
        totals = aggregate([v] * 7, [4] * 7, SENTINEL)
        assert compute_averages(totals, SENTINEL)[4] == pytest.approx(v, rel=1e-6)


class TestAggregateToDivisions:

    def test_end_to_end_example(self):
        report = aggregate_to_divisions([10.0, 20.0, -9999.0, 30.0], [5, 5, 5, 7], SENTINEL)
        assert isinstance(report, pd.Series)
        assert len(report) == 344
        assert list(report.index[:3]) == [1, 2, 3]
        assert report[5] == 15.0
        assert report[7] == 30.0
        others = report.drop([5, 7])
        assert (others == SENTINEL).all()
        assert len(others) == 342

    def test_all_missing(self):
        report = aggregate_to_divisions([-9999.0, -9999.0], [1, 2], SENTINEL)
        assert (report == SENTINEL).all()

    def test_size_mismatch_before_anything(self):
        with pytest.raises(SizeMismatchError):
            aggregate_to_divisions([1.0, 2.0], [1], SENTINEL)
