"""
Public inference API.

    ci()               - confidence intervals (and full inference rows)
    standard_error()   - standard errors from the covariance diagonal
    p_value()          - two-sided p-values for any dof method
    p_value_ml1()      - p-values with m-l-1 df
    dof()              - degrees of freedom for any dof method
    dof_ml1()          - m-l-1 df
    dof_residual()     - residual df
    se_ml1()           - standard errors implied by m-l-1 p-values
    model_parameters() - coefficient table as a pandas DataFrame

Every function takes a FittedModel (see pyparameters.models for
adapters) and an optional component. A component the model does not
have returns None.
"""

from __future__ import annotations

import dataclasses
import math
import warnings
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats

from pyparameters.core.exceptions import ValidationError
from pyparameters.core.result import Result
from pyparameters.core.validation import check_ci_level
from pyparameters.inference._common import (
    ComponentTag, DofTable, InferenceParams, TermValues, optional,
)
from pyparameters.inference._components import ALL, component_mask, resolve_component
from pyparameters.inference._dof import ML1Dof, ResidualDof, resolve_method
from pyparameters.inference._engine import infer
from pyparameters.inference._p_adjust import VALID_METHODS, p_adjust as _p_adjust
from pyparameters.inference.design import InferenceDesign
from pyparameters.inference.solution import InferenceSolution


def _warn(messages: tuple[str, ...]) -> None:
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=3)


def _select_values(table: TermValues, component: str | ComponentTag) -> TermValues | None:
    mask = component_mask(table.components, component)
    if mask is None:
        return None
    if mask.all():
        return table

    def keep(seq):
        return tuple(v for v, k in zip(seq, mask) if k)

    changes = dict(terms=keep(table.terms), components=keep(table.components),
                   values=keep(table.values))
    if isinstance(table, DofTable) and table.levels:
        changes['levels'] = keep(table.levels)
    return dataclasses.replace(table, **changes)


def _solve(
    model: Any,
    level: float,
    method: Any,
    dof: Any,
) -> InferenceSolution:
    """Full inference over every component of the model."""
    level = check_ci_level(level)
    design = InferenceDesign.validate(model)
    strategy = resolve_method(method, dof)
    table = strategy.compute(design)
    _warn(table.warnings)

    rows = infer(
        design.estimates,
        design.covariance,
        table,
        level,
        strict_dof=strategy.strict,
        terms=design.names,
        components=design.components,
    )
    normal = all(
        r.dof is None or math.isinf(r.dof) for r in rows
    ) and not strategy.strict
    classifications = dict(zip(design.names, table.levels)) if table.levels else {}

    result = Result(
        params=InferenceParams(
            rows=rows,
            ci_level=level,
            statistic_name='z' if normal else 't',
            classifications=classifications,
            responses=design.responses,
        ),
        info={
            'ci_level': level,
            'component': ALL,
            'method': table.method,
            'n_observations': design.n_observations,
            'n_groups': {g.name: g.n_levels for g in design.grouping_factors},
            'model_type': design.model_type,
        },
        method_name=table.method,
        warnings=table.warnings,
    )
    return InferenceSolution(result)


def ci(
    model: Any,
    level: float = 0.95,
    component: str | ComponentTag = ALL,
    method: Any = 'wald',
    dof: Any = None,
) -> InferenceSolution | None:
    """Confidence intervals for the fixed-effect coefficients.

    Args:
        model: A FittedModel.
        level: Confidence level, default 0.95.
        component: 'all' (default), 'conditional'/'cond',
            'zero_inflated'/'zi', ...
        method: Dof method: 'wald' (default, normal-based), 'ml1',
            'residual', or a DofMethod instance.
        dof: Explicit df (DofTable, mapping or sequence) overriding the
            method's own computation, e.g. Kenward-Roger df.

    Returns:
        InferenceSolution with one row per coefficient of the requested
        component, or None if the model has no such component.

    Examples:
        >>> ci(model).ci_low
        >>> ci(model, component='zi', method='ml1').to_frame()
    """
    resolve_component(component)
    return _solve(model, level, method, dof).select(component)


def standard_error(
    model: Any,
    component: str | ComponentTag = ALL,
) -> TermValues | None:
    """Standard errors, sqrt(diag(V)); None entries for negative/NaN variance."""
    resolve_component(component)
    design = InferenceDesign.validate(model)
    with np.errstate(invalid='ignore'):
        se = np.sqrt(np.diag(design.covariance))
    table = TermValues(
        column='SE',
        terms=design.names,
        components=design.components,
        values=tuple(optional(v) for v in se),
    )
    return _select_values(table, component)


def p_value(
    model: Any,
    method: Any = 'wald',
    component: str | ComponentTag = ALL,
    dof: Any = None,
) -> TermValues | None:
    """Two-sided p-values for the fixed effects under a dof method."""
    resolve_component(component)
    sol = _solve(model, 0.95, method, dof)
    table = TermValues(
        column='p',
        terms=sol.terms,
        components=sol.components,
        values=sol.p_values,
    )
    return _select_values(table, component)


def dof(
    model: Any,
    method: Any = 'ml1',
    component: str | ComponentTag = ALL,
) -> DofTable | None:
    """Degrees of freedom per coefficient under a dof method."""
    resolve_component(component)
    design = InferenceDesign.validate(model)
    table = resolve_method(method).compute(design)
    _warn(table.warnings)
    return _select_values(table, component)


def dof_ml1(model: Any, component: str | ComponentTag = ALL) -> DofTable | None:
    """Approximate df based on the "m-l-1" heuristic.

    Between-cluster effects get m - 1 df (m clusters); within-cluster
    effects get N - m - p_w. Inferential statistics may be biased in
    mixed models when the number of clusters is small, even with many
    level-1 units; this heuristic uses a t-distribution with fewer df
    for such effects. It also applies to generalized mixed models, where
    Kenward-Roger or Satterthwaite are not available.

    Returns:
        DofTable, one entry per fixed effect; None (NA) entries where the
        df would be non-positive.
    """
    return dof(model, ML1Dof(), component)


def dof_residual(model: Any, component: str | ComponentTag = ALL) -> DofTable | None:
    """Residual df (N - p, or as reported by the model) for every term."""
    return dof(model, ResidualDof(), component)


def p_value_ml1(
    model: Any,
    dof: Any = None,
    component: str | ComponentTag = ALL,
) -> TermValues | None:
    """p-values with m-l-1 degrees of freedom.

    Args:
        model: A mixed model.
        dof: Degrees of freedom; computed with dof_ml1() when None.
            Passing dof_ml1(model) gives the same result.
        component: Component to return.

    Returns:
        TermValues of p-values; None entries where the df are missing.
    """
    resolve_component(component)
    if dof is None:
        dof = dof_ml1(model)
    return p_value(model, method=ML1Dof(), component=component, dof=dof)


def se_ml1(model: Any, component: str | ComponentTag = ALL) -> TermValues | None:
    """Standard errors consistent with the m-l-1 p-values.

    The SE a normal-based Wald test would need to reproduce the m-l-1
    p-value: |estimate| / z_{1 - p/2}.
    """
    resolve_component(component)
    design = InferenceDesign.validate(model)
    pvals = p_value_ml1(model)
    values = []
    for est, p in zip(design.estimates, pvals.values):
        if p is None:
            values.append(None)
            continue
        z = stats.norm.isf(p / 2.0)
        values.append(optional(abs(est) / z) if z > 0 else None)
    table = TermValues(
        column='SE',
        terms=design.names,
        components=design.components,
        values=tuple(values),
    )
    return _select_values(table, component)


def model_parameters(
    model: Any,
    ci_level: float = 0.95,
    method: Any = 'wald',
    component: str | ComponentTag = ALL,
    dof: Any = None,
    p_adjust: str | None = None,
    exponentiate: bool = False,
) -> pd.DataFrame | None:
    """Coefficient table of a fitted model.

    Args:
        model: A FittedModel.
        ci_level: Confidence level, default 0.95.
        method: Dof method (see ci()).
        component: Component to return; 'all' by default.
        dof: Explicit df overriding the method.
        p_adjust: If given, one of the R p.adjust methods ('holm', 'BH',
            'bonferroni', ...), applied to the returned rows.
        exponentiate: Exponentiate coefficients and interval bounds
            (odds ratios, incidence rate ratios). Standard errors are
            multiplied by the exponentiated coefficient.

    Returns:
        DataFrame with columns Parameter, Coefficient, SE, CI_low,
        CI_high, t or z, df_error, p; plus Component for models with
        more than one component and Response for multi-response models.
        None if the model has no such component.
    """
    sol = ci(model, level=ci_level, component=component, method=method, dof=dof)
    if sol is None:
        return None
    frame = sol.to_frame()

    if p_adjust is not None:
        canonical = {m.lower(): m for m in VALID_METHODS}
        if p_adjust.lower() not in canonical:
            raise ValidationError(
                f"p_adjust must be one of {VALID_METHODS}, got {p_adjust!r}"
            )
        frame['p'] = _p_adjust(frame['p'].to_numpy(), method=canonical[p_adjust.lower()])
        frame.attrs['p_adjust'] = canonical[p_adjust.lower()]

    if exponentiate:
        coef = np.exp(frame['Coefficient'].to_numpy())
        frame['SE'] = frame['SE'].to_numpy() * coef
        frame['Coefficient'] = coef
        frame['CI_low'] = np.exp(frame['CI_low'].to_numpy())
        frame['CI_high'] = np.exp(frame['CI_high'].to_numpy())
        frame.attrs['exponentiate'] = True

    if frame['Component'].nunique() <= 1:
        del frame['Component']
    return frame
