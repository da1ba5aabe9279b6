"""
Tests for the statsmodels adapter.

Fits small models with statsmodels and checks that the adapter exposes
the fixed effects, their covariance and the grouping factor, and that
residual-df inference reproduces statsmodels' own t-based output.
"""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

sm = pytest.importorskip("statsmodels.api")
smf = pytest.importorskip("statsmodels.formula.api")

from pyparameters import ci, dof_ml1, model_parameters, p_value, standard_error
from pyparameters.core.exceptions import MissingAccessorError
from pyparameters.inference import ComponentTag, Level, classify_terms
from pyparameters.models import from_statsmodels


@pytest.fixture
def clustered(rng):
    """10 clusters x 6 observations, x within, w between."""
    n_groups, n_per = 10, 6
    g = np.repeat(np.arange(n_groups), n_per)
    x = rng.normal(size=n_groups * n_per)
    w = np.repeat(rng.normal(size=n_groups), n_per)
    u = np.repeat(rng.normal(0, 1.0, n_groups), n_per)
    y = 1.0 + 0.5 * x - 0.7 * w + u + rng.normal(0, 0.5, n_groups * n_per)
    return pd.DataFrame({'y': y, 'x': x, 'w': w, 'g': g})


class TestMixedLM:
    @pytest.fixture
    def fit(self, clustered):
        return smf.mixedlm('y ~ x + w', clustered, groups='g').fit(reml=True)

    def test_fixed_effects(self, fit):
        model = from_statsmodels(fit)
        assert list(model.coefficients()) == ['Intercept', 'x', 'w']
        assert_allclose(
            standard_error(model).to_numpy(),
            fit.bse_fe.to_numpy(), rtol=1e-8,
        )

    def test_grouping_factor(self, fit):
        (factor,) = from_statsmodels(fit).grouping_factors()
        assert factor.n_levels == 10
        assert len(factor) == 60

    def test_classification(self, fit):
        classes = classify_terms(from_statsmodels(fit))
        assert classes['Intercept'].level is Level.BETWEEN
        assert classes['x'].level is Level.WITHIN
        assert classes['w'].level is Level.BETWEEN

    def test_ml1_dof(self, fit):
        df = dof_ml1(from_statsmodels(fit))
        assert df.values == (9.0, 60.0 - 10.0 - 1.0, 9.0)

    def test_wald_matches_statsmodels(self, fit):
        model = from_statsmodels(fit)
        sol = ci(model)
        assert_allclose(sol.ci_low, fit.conf_int().loc[['Intercept', 'x', 'w'], 0], rtol=1e-6)
        assert_allclose(
            p_value(model).to_numpy(),
            fit.pvalues.loc[['Intercept', 'x', 'w']], rtol=1e-6,
        )


class TestOLS:
    @pytest.fixture
    def fit(self, clustered):
        return smf.ols('y ~ x + w', clustered).fit()

    def test_residual_matches_t_inference(self, fit):
        model = from_statsmodels(fit)
        mp = model_parameters(model, method='residual')
        assert_allclose(mp['CI_low'], fit.conf_int()[0], rtol=1e-8)
        assert_allclose(mp['CI_high'], fit.conf_int()[1], rtol=1e-8)
        assert_allclose(mp['p'], fit.pvalues, rtol=1e-8)
        assert_allclose(mp['df_error'], fit.df_resid)

    def test_no_grouping_factors(self, fit):
        model = from_statsmodels(fit)
        assert model.grouping_factors() == ()
        with pytest.warns(UserWarning, match='no grouping factors'):
            df = dof_ml1(model)
        assert set(df.values) == {float(fit.df_resid)}

    def test_array_interface(self, clustered):
        X = sm.add_constant(clustered[['x', 'w']].to_numpy())
        fit = sm.OLS(clustered['y'].to_numpy(), X).fit()
        model = from_statsmodels(fit)
        assert list(model.coefficients()) == ['const', 'x1', 'x2']


class TestZeroInflated:
    def test_inflate_terms_tagged(self, rng):
        n = 400
        x = rng.normal(size=n)
        counts = rng.poisson(np.exp(0.5 + 0.3 * x))
        counts[rng.uniform(size=n) < 0.3] = 0
        exog = sm.add_constant(pd.DataFrame({'x': x}))
        fit = sm.ZeroInflatedPoisson(
            counts, exog, exog_infl=np.ones((n, 1)), inflation='logit',
        ).fit(disp=0, maxiter=200)
        model = from_statsmodels(fit)
        inflate = [n for n in model.coefficients() if n.startswith('inflate_')]
        assert len(inflate) == 1
        assert model.component_of(inflate[0]) is ComponentTag.ZERO_INFLATED
        assert model.component_of('x') is ComponentTag.CONDITIONAL
        assert len(ci(model, component='zi')) == 1
        assert len(ci(model, component='cond')) == 2


class TestInvalidInput:
    def test_no_params(self):
        with pytest.raises(MissingAccessorError):
            from_statsmodels(object())
