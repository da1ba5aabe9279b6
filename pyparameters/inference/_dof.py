"""
Degrees-of-freedom approximations for fixed effects.

Every method implements the DofMethod protocol: ``compute(design)``
returns a DofTable with one entry per coefficient, so the inference
engine is independent of the heuristic.

The "m-l-1" heuristic (Elff et al., 2019; Li & Redden, 2015) assigns
fewer df to effects that vary only between clusters. With m clusters,
N observations and p_w within-cluster slopes in the linear predictor:

    between-cluster term:  df = m - 1
    within-cluster term:   df = N - m - p_w

With several grouping factors a between-cluster term uses the smallest
cluster count among the factors it is constant within, and a
within-cluster term uses the factor with the most clusters. This is an
approximation; for cross-classified designs a Kenward-Roger or
Satterthwaite vector supplied through FixedDof is more accurate.

A non-positive df is never returned: the entry becomes None.

References:
    Elff, M.; Heisig, J.P.; Schaeffer, M.; Shikano, S. (2019).
    British Journal of Political Science.

    Li, P., Redden, D. T. (2015). Comparing denominator degrees of
    freedom approximations for the generalized linear mixed model in
    analyzing binary outcome in small sample cluster-randomized trials.
    BMC Medical Research Methodology, 15(1), 38.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from pyparameters.core.exceptions import DimensionError, ValidationError
from pyparameters.inference._common import DofTable, Level
from pyparameters.inference._grouping import classify_design, is_intercept
from pyparameters.inference.design import InferenceDesign


def _positive(value: float) -> float | None:
    if value is None or math.isnan(value) or value <= 0:
        return None
    return float(value)


def residual_df(design: InferenceDesign) -> float | None:
    """Residual df: reported by the model, else N - p."""
    if design.df_residual is not None:
        return _positive(design.df_residual)
    return _positive(float(design.n_observations - design.p))


@dataclass(frozen=True)
class WaldDof:
    """Infinite df for every coefficient (normal-based inference)."""
    name: str = 'wald'
    strict: bool = False

    def compute(self, design: InferenceDesign) -> DofTable:
        return DofTable(
            column='df',
            terms=design.names,
            components=design.components,
            values=tuple(math.inf for _ in design.names),
            method=self.name,
        )


@dataclass(frozen=True)
class ResidualDof:
    """Residual df (N - p) for every coefficient."""
    name: str = 'residual'
    strict: bool = True

    def compute(self, design: InferenceDesign) -> DofTable:
        df = residual_df(design)
        return DofTable(
            column='df',
            terms=design.names,
            components=design.components,
            values=tuple(df for _ in design.names),
            method=self.name,
            strict=self.strict,
        )


@dataclass(frozen=True)
class FixedDof:
    """Externally supplied df (e.g. Kenward-Roger or Satterthwaite).

    Attributes:
        values: Either a mapping term -> df, or a sequence aligned with
            the coefficient vector. None, NaN and non-positive entries
            are stored as None.
        name: Method name recorded in results.
        strict: Propagate missing df to p and CI.
    """
    values: Any = field(repr=False)
    name: str = 'fixed'
    strict: bool = False

    @classmethod
    def from_table(cls, table: DofTable) -> 'FixedDof':
        """Reuse a previously computed table, keeping its semantics."""
        return cls(values=table.as_dict(), name=table.method, strict=table.strict)

    def compute(self, design: InferenceDesign) -> DofTable:
        if isinstance(self.values, dict):
            missing = [n for n in design.names if n not in self.values]
            if missing:
                raise DimensionError(f"dof has no entries for {missing}")
            raw = [self.values[n] for n in design.names]
        else:
            raw = list(self.values)
            if len(raw) != design.p:
                raise DimensionError(
                    f"dof has {len(raw)} entries, expected {design.p} "
                    f"(one per coefficient)"
                )
        values = tuple(None if v is None else _positive(float(v)) for v in raw)
        return DofTable(
            column='df',
            terms=design.names,
            components=design.components,
            values=values,
            method=self.name,
            strict=self.strict,
        )


@dataclass(frozen=True)
class ML1Dof:
    """The "m-l-1" heuristic for mixed models."""
    name: str = 'ml1'
    strict: bool = True

    def compute(self, design: InferenceDesign) -> DofTable:
        factors = design.grouping_factors
        fallback = residual_df(design)
        notes: list[str] = []

        if not factors:
            notes.append(
                "Model has no grouping factors; m-l-1 df fall back to "
                "residual df."
            )
            return DofTable(
                column='df',
                terms=design.names,
                components=design.components,
                values=tuple(fallback for _ in design.names),
                method=self.name,
                levels=tuple(Level.UNKNOWN for _ in design.names),
                strict=self.strict,
                warnings=tuple(notes),
            )

        classes = classify_design(design)
        n_levels = {g.name: g.n_levels for g in factors}
        N = design.n_observations

        # within-cluster slopes per linear predictor
        p_within = {c: 0 for c in design.present_components}
        for name, comp in zip(design.names, design.components):
            level = classes[name].level
            if not is_intercept(name) and level in (Level.WITHIN, Level.BOTH):
                p_within[comp] += 1

        values: list[float | None] = []
        unknown: list[str] = []
        both: list[str] = []
        for name, comp in zip(design.names, design.components):
            cls = classes[name]
            if cls.level is Level.UNKNOWN:
                unknown.append(name)
                values.append(fallback)
            elif cls.level is Level.BETWEEN:
                between = [g for g, lv in cls.by_group.items() if lv is Level.BETWEEN]
                m = min(n_levels[g] for g in between)
                values.append(_positive(m - 1))
            else:
                if cls.level is Level.BOTH:
                    both.append(name)
                m = max(n_levels.values())
                values.append(_positive(N - m - p_within[comp]))

        if unknown:
            notes.append(
                f"Could not classify {unknown} as within- or between-cluster "
                f"(original data unavailable or not matched); using residual "
                f"df for these terms."
            )
        if both:
            notes.append(
                f"Terms {both} vary within some clusters only; treated as "
                f"within-cluster."
            )
        if len(factors) > 1:
            notes.append(
                "m-l-1 df are approximate for models with several grouping "
                "factors (e.g. cross-classified designs)."
            )

        return DofTable(
            column='df',
            terms=design.names,
            components=design.components,
            values=tuple(values),
            method=self.name,
            levels=tuple(classes[n].level for n in design.names),
            strict=self.strict,
            warnings=tuple(notes),
        )


_SHORTCUTS = {
    'ml1': ML1Dof,
    'm-l-1': ML1Dof,
    'residual': ResidualDof,
    'wald': WaldDof,
    'normal': WaldDof,
}


def resolve_method(method: Any, dof: Any = None) -> Any:
    """Turn a method argument (and optional explicit dof) into a DofMethod.

    Args:
        method: A DofMethod instance, or one of 'ml1', 'residual',
            'wald' / 'normal'.
        dof: Explicit df overriding the method: a DofTable, a mapping
            term -> df, or a sequence aligned with the coefficients.

    Raises:
        ValidationError: If the method is unknown.
    """
    if dof is not None:
        if isinstance(dof, DofTable):
            return FixedDof.from_table(dof)
        base = resolve_method(method)
        if not isinstance(dof, dict):
            dof = list(np.ravel(np.asarray(dof, dtype=object)))
        return FixedDof(values=dof, name=base.name, strict=base.strict)

    if isinstance(method, str):
        try:
            return _SHORTCUTS[method.strip().lower()]()
        except KeyError:
            raise ValidationError(
                f"Unknown dof method {method!r}. Use one of {sorted(_SHORTCUTS)} "
                f"or pass a DofMethod / explicit dof."
            ) from None
    if hasattr(method, 'compute') and hasattr(method, 'name'):
        return method
    raise ValidationError(
        f"method must be a string or a DofMethod, got {type(method).__name__}"
    )
