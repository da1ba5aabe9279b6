"""
Common data types for parameter inference.

Contains the frozen payloads that go inside Result[P] envelopes and the
small value types shared by the grouping, dof and engine modules.

Missing values are None, never a NaN sentinel: every numeric field of a
row is ``float | None`` so callers have to branch on absence explicitly.
Internally the engine works on float arrays with NaN and converts at the
row boundary.

References:
    Elff, M.; Heisig, J.P.; Schaeffer, M.; Shikano, S. (2019).
    Multilevel Analysis with Few Clusters: Improving Likelihood-based
    Methods to Provide Unbiased Estimates and Accurate Inference.
    British Journal of Political Science.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from pyparameters.core.exceptions import ValidationError


class ComponentTag(str, Enum):
    """Linear predictor a coefficient belongs to."""
    CONDITIONAL = 'conditional'
    ZERO_INFLATED = 'zero_inflated'
    PRECISION = 'precision'
    DISPERSION = 'dispersion'
    SCALE = 'scale'
    EXTRA = 'extra'


class Level(str, Enum):
    """Variation of a term relative to a grouping factor."""
    WITHIN = 'within'
    BETWEEN = 'between'
    BOTH = 'both'          # varies in some clusters, constant in others
    UNKNOWN = 'unknown'    # values could not be located


@dataclass(frozen=True)
class GroupingFactor:
    """A categorical variable partitioning observations into clusters.

    Attributes:
        name: Grouping factor name (e.g. 'subject').
        codes: Integer cluster code per observation (n,). Observations
               with a missing label carry code -1.
        n_levels: Number of distinct clusters.
        n_obs_per_level: Cluster sizes, in code order.
    """
    name: str
    codes: NDArray = field(repr=False, compare=False)
    n_levels: int
    n_obs_per_level: tuple[int, ...] = field(repr=False)

    @classmethod
    def from_labels(cls, name: str, labels: ArrayLike) -> GroupingFactor:
        """Build a grouping factor from per-observation labels."""
        codes, uniques = pd.factorize(pd.Series(np.asarray(labels)), sort=True)
        codes = np.asarray(codes, dtype=np.int64)
        n_levels = len(uniques)
        sizes = np.bincount(codes[codes >= 0], minlength=n_levels)
        return cls(
            name=str(name),
            codes=codes,
            n_levels=int(n_levels),
            n_obs_per_level=tuple(int(s) for s in sizes),
        )

    def __len__(self) -> int:
        return len(self.codes)


@dataclass(frozen=True)
class Classification:
    """Within/between classification of one fixed-effect term.

    Attributes:
        level: Overall level used for dof purposes.
        by_group: Level per grouping factor name.
        variables: Data columns the term was matched to (empty when the
                   values came from the design matrix or were not found).
    """
    level: Level
    by_group: dict[str, Level] = field(default_factory=dict)
    variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class Term:
    """A fixed-effect predictor.

    Attributes:
        name: Coefficient name as reported by the model.
        component: Linear predictor the coefficient belongs to.
        level: Within/between classification, if computed.
        variables: Base data column(s) the term refers to.
    """
    name: str
    component: ComponentTag = ComponentTag.CONDITIONAL
    level: Level = Level.UNKNOWN
    variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class InferenceRow:
    """Inferential statistics for one coefficient.

    Every numeric field is None when undefined (unidentifiable parameter
    or missing degrees of freedom). ``dof`` is ``inf`` for normal-based
    inference.
    """
    term: str
    component: ComponentTag
    estimate: float | None
    se: float | None
    ci_low: float | None
    ci_high: float | None
    statistic: float | None
    dof: float | None
    p: float | None


def optional(value: float) -> float | None:
    """Convert a NaN-coded float to ``float | None``.

    Infinite values are kept; they are meaningful for dof.
    """
    value = float(value)
    return None if math.isnan(value) else value


def to_nan_array(values: Sequence[float | None]) -> NDArray:
    """Convert ``float | None`` values to a float array with NaN."""
    return np.array(
        [np.nan if v is None else float(v) for v in values], dtype=np.float64
    )


@dataclass(frozen=True)
class TermValues:
    """One named value per coefficient, in parameter-vector order.

    Iterating yields ``(term, value)`` pairs.

    Attributes:
        column: Name of the value column (e.g. 'SE', 'p', 'df').
        terms: Coefficient names.
        components: Component of each coefficient.
        values: Value per coefficient, None when undefined.
    """
    column: str
    terms: tuple[str, ...]
    components: tuple[ComponentTag, ...]
    values: tuple[float | None, ...]

    def __post_init__(self):
        if not (len(self.terms) == len(self.components) == len(self.values)):
            raise ValidationError(
                f"{self.column}: terms ({len(self.terms)}), components "
                f"({len(self.components)}) and values ({len(self.values)}) "
                f"must have the same length"
            )

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> Iterator[tuple[str, float | None]]:
        return iter(zip(self.terms, self.values))

    def __getitem__(self, term: str) -> float | None:
        try:
            return self.values[self.terms.index(term)]
        except ValueError:
            raise KeyError(
                f"{self.column} has no term '{term}'. Available: {self.terms}"
            ) from None

    def as_dict(self) -> dict[str, float | None]:
        return dict(zip(self.terms, self.values))

    def to_numpy(self) -> NDArray:
        """Values as a float array, NaN where undefined."""
        return to_nan_array(self.values)

    def to_series(self) -> pd.Series:
        return pd.Series(self.to_numpy(), index=list(self.terms), name=self.column)


@dataclass(frozen=True)
class DofTable(TermValues):
    """Degrees of freedom per coefficient.

    A defined value is strictly positive (``inf`` means normal
    approximation); non-positive values are stored as None.

    Attributes:
        method: Name of the approximation that produced the table.
        levels: Within/between classification per term, when known.
        strict: If True, a None dof propagates to p-values and intervals
                instead of falling back to the normal distribution.
        warnings: Non-fatal issues met while computing the table.
    """
    method: str = 'fixed'
    levels: tuple[Level, ...] = ()
    strict: bool = False
    warnings: tuple[str, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        for term, value in zip(self.terms, self.values):
            if value is not None and not value > 0:
                raise ValidationError(
                    f"df for '{term}' must be positive or None, got {value}"
                )
        if self.levels and len(self.levels) != len(self.terms):
            raise ValidationError(
                f"levels ({len(self.levels)}) must match terms ({len(self.terms)})"
            )


@dataclass(frozen=True)
class InferenceParams:
    """
    Parameter payload for an inference query.

    Attributes:
        rows: One InferenceRow per coefficient, parameter-vector order.
        ci_level: Confidence level of the intervals.
        statistic_name: 'z' when every row is normal-based, else 't'.
        classifications: Within/between level per term, for m-l-1 queries.
        responses: Response name per row for multivariate-response models.
    """
    rows: tuple[InferenceRow, ...]
    ci_level: float
    statistic_name: str
    classifications: dict[str, Level] = field(default_factory=dict)
    responses: tuple[str | None, ...] | None = None
