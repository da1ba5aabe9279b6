"""
Wald-type inference from estimates, covariance and degrees of freedom.

For each coefficient k:

    SE_k   = sqrt(V_kk)
    stat_k = β̂_k / SE_k
    p_k    = 2 × P(T_df > |stat_k|)
    CI_k   = β̂_k ± t_{df, 1-α/2} × SE_k

where T_df is Student's t with the coefficient's own df. A df that is
infinite, or missing while ``strict_dof`` is False, uses the standard
normal instead.

Degenerate coefficients (SE of 0 or NaN, negative variance) have no
statistic, interval or p-value. This never raises: it marks the
parameter as unidentifiable.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pyparameters.core.validation import (
    check_array, check_1d, check_square, check_ci_level,
)
from pyparameters.core.exceptions import DimensionError
from pyparameters.inference._common import (
    ComponentTag, DofTable, InferenceRow, optional, to_nan_array,
)


def wald_columns(
    estimates: ArrayLike,
    covariance: ArrayLike,
    dof: DofTable | ArrayLike,
    ci_level: float = 0.95,
    *,
    strict_dof: bool = False,
) -> dict[str, NDArray]:
    """Vectorised core of infer(): NaN-coded columns.

    Args:
        estimates: Coefficient vector (p,).
        covariance: Covariance matrix (p, p).
        dof: DofTable or array of df (p,). None/NaN means missing,
            non-positive values are treated as missing.
        ci_level: Confidence level in (0, 1).
        strict_dof: If True, a missing df yields NaN p and CI.

    Returns:
        Dict with keys 'estimate', 'se', 'statistic', 'dof', 'ci_low',
        'ci_high', 'p'; each an array of shape (p,).
    """
    est = check_array(estimates, 'estimates')
    check_1d(est, 'estimates')
    p = est.shape[0]
    cov = check_array(covariance, 'covariance')
    check_square(cov, p, 'covariance')
    level = check_ci_level(ci_level, 'ci_level')

    if isinstance(dof, DofTable):
        strict_dof = strict_dof or dof.strict
        df = dof.to_numpy()
    else:
        df = to_nan_array(list(np.ravel(np.asarray(dof, dtype=object))))
    if df.shape[0] != p:
        raise DimensionError(
            f"dof has {df.shape[0]} entries, expected {p} (one per coefficient)"
        )

    with np.errstate(invalid='ignore', divide='ignore'):
        df = np.where(df > 0, df, np.nan)

        var = np.diag(cov).copy()
        se = np.full(p, np.nan)
        nonneg = var >= 0
        se[nonneg] = np.sqrt(var[nonneg])

        identified = np.isfinite(se) & (se > 0) & np.isfinite(est)
        statistic = np.where(identified, est / se, np.nan)

    normal = np.isinf(df) | (np.isnan(df) & (not strict_dof))
    usable = identified & (normal | np.isfinite(df))
    t_rows = usable & ~normal
    z_rows = usable & normal

    q = 1.0 - (1.0 - level) / 2.0
    crit = np.full(p, np.nan)
    crit[z_rows] = stats.norm.ppf(q)
    crit[t_rows] = stats.t.ppf(q, df[t_rows])

    p_val = np.full(p, np.nan)
    abs_stat = np.abs(statistic)
    p_val[z_rows] = 2.0 * stats.norm.sf(abs_stat[z_rows])
    p_val[t_rows] = 2.0 * stats.t.sf(abs_stat[t_rows], df[t_rows])
    p_val = np.clip(p_val, 0.0, 1.0)

    ci_low = est - crit * se
    ci_high = est + crit * se

    return {
        'estimate': est,
        'se': se,
        'statistic': statistic,
        'dof': df,
        'ci_low': ci_low,
        'ci_high': ci_high,
        'p': p_val,
    }


def infer(
    estimates: ArrayLike,
    covariance: ArrayLike,
    dof: DofTable | ArrayLike,
    ci_level: float = 0.95,
    *,
    strict_dof: bool = False,
    terms: Sequence[str] | None = None,
    components: Sequence[ComponentTag] | None = None,
) -> tuple[InferenceRow, ...]:
    """Compute SE, statistic, CI and p for every coefficient.

    Purely functional over its inputs.

    Args:
        estimates: Coefficient vector (p,).
        covariance: Covariance matrix (p, p), parameter order.
        dof: DofTable or per-coefficient df (p,). Term names and
            components are taken from a DofTable when not given.
        ci_level: Confidence level, default 0.95.
        strict_dof: Propagate a missing df to p and CI instead of
            falling back to the normal distribution. A DofTable built
            with ``strict=True`` implies it.
        terms: Coefficient names; defaults to 'b0', 'b1', ...
        components: Component per coefficient; defaults to conditional.

    Returns:
        Tuple of InferenceRow in parameter order.
    """
    cols = wald_columns(estimates, covariance, dof, ci_level, strict_dof=strict_dof)
    p = cols['estimate'].shape[0]

    if terms is None:
        terms = dof.terms if isinstance(dof, DofTable) else [f'b{i}' for i in range(p)]
    if components is None:
        if isinstance(dof, DofTable):
            components = dof.components
        else:
            components = [ComponentTag.CONDITIONAL] * p
    if len(terms) != p or len(components) != p:
        raise DimensionError(
            f"terms ({len(terms)}) and components ({len(components)}) "
            f"must both have {p} entries"
        )

    return tuple(
        InferenceRow(
            term=terms[k],
            component=components[k],
            estimate=optional(cols['estimate'][k]),
            se=optional(cols['se'][k]),
            ci_low=optional(cols['ci_low'][k]),
            ci_high=optional(cols['ci_high'][k]),
            statistic=optional(cols['statistic'][k]),
            dof=optional(cols['dof'][k]),
            p=optional(cols['p'][k]),
        )
        for k in range(p)
    )
