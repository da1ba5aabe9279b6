"""
Tests for the Wald inference engine.

Validates:
    - SE, statistic, CI and p against scipy
    - Normal fallback for infinite and (non-strict) missing df
    - Strict propagation of missing df
    - Degenerate variances never raise
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pyparameters.core.exceptions import DimensionError, ValidationError
from pyparameters.inference import ComponentTag, DofTable, infer
from pyparameters.inference._engine import wald_columns


EST = np.array([2.0, -1.0, 0.5])
COV = np.array([
    [0.25, 0.01, 0.0],
    [0.01, 0.16, 0.0],
    [0.0, 0.0, 0.09],
])


class TestWaldColumns:
    """Vectorised computation."""

    def test_t_based(self):
        cols = wald_columns(EST, COV, [10.0, 20.0, 5.0], 0.95)
        se = np.sqrt(np.diag(COV))
        df = np.array([10.0, 20.0, 5.0])
        assert_allclose(cols['se'], se)
        assert_allclose(cols['statistic'], EST / se)
        assert_allclose(cols['p'], 2 * stats.t.sf(np.abs(EST / se), df))
        crit = stats.t.ppf(0.975, df)
        assert_allclose(cols['ci_low'], EST - crit * se)
        assert_allclose(cols['ci_high'], EST + crit * se)

    def test_infinite_df_is_normal(self):
        cols = wald_columns(EST, COV, [np.inf] * 3, 0.9)
        se = np.sqrt(np.diag(COV))
        assert_allclose(cols['p'], 2 * stats.norm.sf(np.abs(EST / se)))
        assert_allclose(cols['ci_low'], EST - stats.norm.ppf(0.95) * se)

    def test_missing_df_non_strict_is_normal(self):
        cols = wald_columns(EST, COV, [None, 10.0, np.nan])
        assert cols['p'][0] == pytest.approx(2 * stats.norm.sf(4.0))
        assert cols['p'][2] == pytest.approx(2 * stats.norm.sf(0.5 / 0.3))
        assert math.isnan(cols['dof'][0])

    def test_missing_df_strict_propagates(self):
        cols = wald_columns(EST, COV, [None, 10.0, 0.0], strict_dof=True)
        assert np.isnan(cols['p'][[0, 2]]).all()
        assert np.isnan(cols['ci_low'][[0, 2]]).all()
        assert not np.isnan(cols['p'][1])
        # SE and statistic do not depend on df
        assert cols['se'][0] == pytest.approx(0.5)
        assert cols['statistic'][0] == pytest.approx(4.0)

    def test_strict_table_implies_strict(self):
        table = DofTable(
            column='df', terms=('a', 'b', 'c'),
            components=(ComponentTag.CONDITIONAL,) * 3,
            values=(None, 10.0, 5.0), strict=True,
        )
        cols = wald_columns(EST, COV, table)
        assert np.isnan(cols['p'][0])

    def test_zero_and_nan_variance(self):
        cov = np.diag([0.0, np.nan, 0.04])
        cols = wald_columns(EST, cov, [10.0, 10.0, 10.0])
        for key in ('statistic', 'p', 'ci_low', 'ci_high'):
            assert np.isnan(cols[key][:2]).all()
            assert not np.isnan(cols[key][2])

    def test_p_in_unit_interval(self, rng):
        est = rng.normal(0, 3, 50)
        cov = np.diag(rng.uniform(0.01, 2.0, 50))
        df = rng.uniform(1, 100, 50)
        p = wald_columns(est, cov, df)['p']
        assert np.all((p >= 0) & (p <= 1))

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionError):
            wald_columns(EST, COV, [1.0, 2.0])
        with pytest.raises(DimensionError):
            wald_columns(EST, np.eye(2), [1.0, 2.0, 3.0])

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            wald_columns(EST, COV, [1.0] * 3, ci_level=95)


class TestInfer:
    """Row construction."""

    def test_rows(self):
        rows = infer(EST, COV, [10.0, np.inf, None], terms=['a', 'b', 'c'])
        assert [r.term for r in rows] == ['a', 'b', 'c']
        assert rows[1].dof == math.inf
        assert rows[2].dof is None
        assert rows[2].p is not None
        assert all(r.component is ComponentTag.CONDITIONAL for r in rows)

    def test_default_names(self):
        rows = infer(EST, COV, [10.0] * 3)
        assert [r.term for r in rows] == ['b0', 'b1', 'b2']

    def test_names_from_table(self):
        table = DofTable(
            column='df', terms=('x', 'y', 'z'),
            components=(ComponentTag.CONDITIONAL,) * 2 + (ComponentTag.ZERO_INFLATED,),
            values=(3.0, 4.0, 5.0),
        )
        rows = infer(EST, COV, table)
        assert rows[2].term == 'z'
        assert rows[2].component is ComponentTag.ZERO_INFLATED

    def test_zero_se_row(self):
        rows = infer([1.0], [[0.0]], [10.0])
        row = rows[0]
        assert row.se == 0.0
        assert row.statistic is None and row.p is None
        assert row.ci_low is None and row.ci_high is None

    def test_term_count_mismatch(self):
        with pytest.raises(DimensionError):
            infer(EST, COV, [1.0] * 3, terms=['a'])
