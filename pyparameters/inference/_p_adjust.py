"""
Multiple testing correction matching R's p.adjust().

Used by model_parameters(p_adjust=...) to correct the p-values of a
coefficient table. Missing p-values (None or NaN) are left missing and
do not count towards the number of comparisons unless ``n`` says so.

Methods: holm, hochberg, hommel, bonferroni, BH, BY, fdr (alias for BH),
none.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyparameters.core.exceptions import ValidationError


def _ranked(pv: NDArray, descending: bool) -> tuple[NDArray, NDArray]:
    order = np.argsort(pv, kind='stable')
    if descending:
        order = order[::-1]
    return order, pv[order]


def _unsort(order: NDArray, values: NDArray) -> NDArray:
    out = np.empty_like(values)
    out[order] = values
    return out


def _bonferroni(pv: NDArray, n: int) -> NDArray:
    return pv * n


def _holm(pv: NDArray, n: int) -> NDArray:
    """Step-down; multiplier n - i + 1 for the i-th smallest p."""
    order, sp = _ranked(pv, descending=False)
    scaled = sp * (n - np.arange(len(sp)))
    return _unsort(order, np.maximum.accumulate(scaled))


def _hochberg(pv: NDArray, n: int) -> NDArray:
    """Step-up; multiplier n - i + 1, cumulative min from the largest p."""
    order, sp = _ranked(pv, descending=True)
    i = np.arange(len(sp), 0, -1)
    scaled = sp * (n - i + 1)
    return _unsort(order, np.minimum.accumulate(scaled))


def _bh(pv: NDArray, n: int) -> NDArray:
    order, sp = _ranked(pv, descending=True)
    i = np.arange(len(sp), 0, -1)
    return _unsort(order, np.minimum.accumulate(sp * n / i))


def _by(pv: NDArray, n: int) -> NDArray:
    q = np.sum(1.0 / np.arange(1, n + 1))
    return _bh(pv, n) * q


def _hommel(pv: NDArray, n: int) -> NDArray:
    """Hommel's method, following the loop in R's stats::p.adjust."""
    if n <= 1:
        return pv.copy()
    lp = len(pv)
    p = np.concatenate([pv, np.ones(n - lp)]) if n > lp else pv.copy()
    m = len(p)
    order = np.argsort(p, kind='stable')
    sp = p[order]

    q = np.full(m, np.min(m * sp / np.arange(1, m + 1)))
    pa = q.copy()
    for j in range(m - 1, 1, -1):
        head = m - j + 1                      # size of the first block
        tail = sp[head:]
        q1 = np.min(j * tail / np.arange(2, j + 1))
        q[:head] = np.minimum(j * sp[:head], q1)
        q[head:] = q[head - 1]
        pa = np.maximum(pa, q)

    adjusted = _unsort(order, np.maximum(pa, sp))
    return adjusted[:lp]


_METHODS: dict[str, Callable[[NDArray, int], NDArray]] = {
    'holm': _holm,
    'hochberg': _hochberg,
    'hommel': _hommel,
    'bonferroni': _bonferroni,
    'BH': _bh,
    'fdr': _bh,
    'BY': _by,
    'none': lambda pv, n: pv.copy(),
}

VALID_METHODS = tuple(_METHODS)


def p_adjust(
    p: ArrayLike,
    method: str = "holm",
    n: int | None = None,
) -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons. Matches R p.adjust().

    Parameters
    ----------
    p : array-like
        p-values; None and NaN mark missing values.
    method : str
        One of "holm" (default), "hochberg", "hommel", "bonferroni",
        "BH", "BY", "fdr", "none".
    n : int or None
        Number of comparisons. Default: number of non-missing p-values.

    Returns
    -------
    ndarray
        Adjusted p-values in input order, clipped to [0, 1], NaN where
        the input was missing.
    """
    if method not in _METHODS:
        raise ValidationError(
            f"method must be one of {VALID_METHODS}, got {method!r}"
        )
    arr = np.array(
        [np.nan if v is None else v for v in np.ravel(np.asarray(p, dtype=object))],
        dtype=np.float64,
    )
    valid = ~np.isnan(arr)
    n_valid = int(valid.sum())
    if n is None:
        n = n_valid
    elif n < n_valid:
        raise ValidationError(
            f"n ({n}) must be >= number of non-missing p-values ({n_valid})"
        )

    out = arr.copy()
    if n_valid == 0:
        return out
    out[valid] = np.clip(_METHODS[method](arr[valid], n), 0.0, 1.0)
    return out
