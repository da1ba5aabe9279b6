"""
Adapter for fitted statsmodels results.

Supported:
    MixedLMResults       - fixed effects, their covariance block, the
                           grouping factor and the formula data frame
    RegressionResults,
    GLMResults, count
    models               - all parameters, no grouping factors

Zero-inflated count models (ZeroInflatedPoisson, ...) name their
inflation parameters 'inflate_*'; those are tagged ZERO_INFLATED and
'alpha' of negative binomial models is tagged DISPERSION.

statsmodels is an optional dependency and is never imported here: the
adapter only reads attributes of the results object.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from pyparameters.core.exceptions import MissingAccessorError
from pyparameters.inference._common import ComponentTag, GroupingFactor
from pyparameters.models.base import ModelSnapshot


def _component(name: str, is_count: bool) -> ComponentTag:
    if name.startswith('inflate_'):
        return ComponentTag.ZERO_INFLATED
    if is_count and name == 'alpha':
        return ComponentTag.DISPERSION
    return ComponentTag.CONDITIONAL


def _exog_frame(model: Any, names: list[str]) -> pd.DataFrame | None:
    exog = getattr(model, 'exog', None)
    exog_names = getattr(model, 'exog_names', None)
    if exog is None or exog_names is None:
        return None
    X = np.asarray(exog, dtype=np.float64)
    if X.ndim != 2 or X.shape[1] != len(exog_names):
        return None
    frame = pd.DataFrame(X, columns=list(exog_names))
    return frame[[c for c in frame.columns if c in names]]


def _formula_data(model: Any) -> pd.DataFrame | None:
    data = getattr(getattr(model, 'data', None), 'frame', None)
    if isinstance(data, pd.DataFrame):
        return data.reset_index(drop=True)
    return None


def _from_mixedlm(results: Any) -> ModelSnapshot:
    model = results.model
    fe = results.fe_params
    names = [str(n) for n in fe.index]
    vcov = results.cov_params().loc[fe.index, fe.index].copy()
    vcov.index = names
    vcov.columns = names

    group_name = getattr(model, 'group_name', None) or 'Group'
    factor = GroupingFactor.from_labels(str(group_name), np.asarray(model.groups))

    return ModelSnapshot(
        estimates={n: float(v) for n, v in zip(names, fe.to_numpy())},
        vcov=vcov,
        groups=(factor,),
        data=_formula_data(model),
        components={},
        design=_exog_frame(model, names),
        n_obs=int(np.asarray(model.endog).shape[0]),
        df_resid=None,
    )


def _from_regression(results: Any) -> ModelSnapshot:
    model = results.model
    params = results.params
    if isinstance(params, pd.Series):
        names = [str(n) for n in params.index]
        values = params.to_numpy(dtype=np.float64)
    else:
        values = np.asarray(params, dtype=np.float64)
        names = list(getattr(model, 'exog_names', None)
                     or [f'x{i}' for i in range(len(values))])
        if len(names) != len(values):
            names = [f'x{i}' for i in range(len(values))]

    cov = results.cov_params()
    cov = np.asarray(cov, dtype=np.float64)
    vcov = pd.DataFrame(cov, index=names, columns=names)

    is_count = any(n == 'alpha' for n in names) and hasattr(model, 'loglike')
    df_resid = getattr(results, 'df_resid', None)
    nobs = getattr(results, 'nobs', None)
    if nobs is None:
        nobs = np.asarray(model.endog).shape[0]

    return ModelSnapshot(
        estimates={n: float(v) for n, v in zip(names, values)},
        vcov=vcov,
        groups=(),
        data=_formula_data(model),
        components={n: _component(n, is_count) for n in names},
        design=_exog_frame(model, names),
        n_obs=int(nobs),
        df_resid=None if df_resid is None else float(df_resid),
    )


def from_statsmodels(results: Any) -> ModelSnapshot:
    """Wrap a fitted statsmodels results object as a FittedModel.

    Args:
        results: Result of ``model.fit()``. MixedLM results provide the
            grouping factor used by the m-l-1 approximation; other
            results are treated as ungrouped models.

    Returns:
        ModelSnapshot.

    Raises:
        MissingAccessorError: If the object lacks params/cov_params.

    Examples:
        >>> import statsmodels.formula.api as smf
        >>> fit = smf.mixedlm('y ~ x', df, groups='subject').fit()
        >>> model_parameters(from_statsmodels(fit), method='ml1')
    """
    model_type = type(results).__name__
    if not hasattr(results, 'params'):
        raise MissingAccessorError(
            f"{model_type} has no params",
            accessor='coefficients', model_type=model_type,
        )
    if not callable(getattr(results, 'cov_params', None)):
        raise MissingAccessorError(
            f"{model_type} has no cov_params()",
            accessor='covariance_matrix', model_type=model_type,
        )

    if hasattr(results, 'fe_params') and hasattr(getattr(results, 'model', None), 'groups'):
        return _from_mixedlm(results)
    return _from_regression(results)
