"""
Tests for p_adjust() matching R p.adjust().

R reference values from R 4.5.2.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyparameters import p_adjust
from pyparameters.core.exceptions import ValidationError


PV = np.array([0.001, 0.01, 0.05, 0.1, 0.5, 0.9])

R_HOLM = np.array([0.006, 0.05, 0.2, 0.3, 1.0, 1.0])
R_HOCHBERG = np.array([0.006, 0.05, 0.2, 0.3, 0.9, 0.9])
R_HOMMEL = np.array([0.006, 0.05, 0.2, 0.3, 0.9, 0.9])
R_BH = np.array([0.006, 0.03, 0.1, 0.15, 0.6, 0.9])
R_BY = np.array([0.0147, 0.0735, 0.245, 0.3675, 1.0, 1.0])
R_BONFERRONI = np.array([0.006, 0.06, 0.3, 0.6, 1.0, 1.0])


class TestPAdjustMethods:
    """Each method against R."""

    @pytest.mark.parametrize('method,expected', [
        ('holm', R_HOLM),
        ('hochberg', R_HOCHBERG),
        ('hommel', R_HOMMEL),
        ('BH', R_BH),
        ('fdr', R_BH),
        ('BY', R_BY),
        ('bonferroni', R_BONFERRONI),
    ])
    def test_against_r(self, method, expected):
        assert_allclose(p_adjust(PV, method=method), expected, rtol=1e-3)

    def test_none(self):
        assert_allclose(p_adjust(PV, method='none'), PV)

    def test_input_order_preserved(self):
        shuffled = PV[[3, 0, 5, 1, 4, 2]]
        assert_allclose(
            p_adjust(shuffled, method='holm'), R_HOLM[[3, 0, 5, 1, 4, 2]], rtol=1e-3
        )


class TestPAdjustN:
    def test_holm_n_larger(self):
        assert_allclose(p_adjust([0.01, 0.05], method='holm', n=10), [0.1, 0.45])

    def test_bh_n_larger(self):
        assert_allclose(p_adjust([0.01, 0.05], method='BH', n=10), [0.1, 0.25])

    def test_hommel_single_with_n(self):
        # R: p.adjust(0.01, "hommel", n = 3)
        assert_allclose(p_adjust([0.01], method='hommel', n=3), [0.03])

    def test_n_too_small(self):
        with pytest.raises(ValidationError):
            p_adjust([0.01, 0.02, 0.03], n=2)


class TestPAdjustMissing:
    """Missing p-values are skipped and do not count as tests."""

    def test_none_and_nan(self):
        result = p_adjust([0.01, None, 0.04, np.nan], method='bonferroni')
        assert_allclose(result[[0, 2]], [0.02, 0.08])
        assert np.isnan(result[[1, 3]]).all()

    def test_all_missing(self):
        result = p_adjust([None, None])
        assert np.isnan(result).all()

    def test_empty(self):
        assert len(p_adjust([])) == 0

    def test_single(self):
        for method in ['holm', 'hochberg', 'hommel', 'BH', 'BY', 'bonferroni']:
            assert p_adjust([0.05], method=method)[0] == pytest.approx(0.05)

    def test_invalid_method(self):
        with pytest.raises(ValidationError):
            p_adjust([0.05], method='tukey')
