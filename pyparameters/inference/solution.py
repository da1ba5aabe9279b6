"""
Solution wrapper for parameter inference.

InferenceSolution wraps a Result[InferenceParams] and provides column
accessors, component selection, conversion to pandas and an R-style
coefficient table via summary().
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pandas as pd

from pyparameters.core.result import Result
from pyparameters.inference._common import (
    ComponentTag, InferenceParams, InferenceRow, to_nan_array,
)
from pyparameters.inference._components import ALL, component_mask

_COLUMNS = {
    'Parameter': 'term',
    'Coefficient': 'estimate',
    'SE': 'se',
    'CI_low': 'ci_low',
    'CI_high': 'ci_high',
    'Statistic': 'statistic',
    'df_error': 'dof',
    'p': 'p',
}


def _significance_stars(p: float | None) -> str:
    """Return significance stars like R."""
    if p is None:
        return ' '
    if p < 0.001:
        return '***'
    elif p < 0.01:
        return '**'
    elif p < 0.05:
        return '*'
    elif p < 0.1:
        return '.'
    else:
        return ' '


def _format_pvalue(p: float | None) -> str:
    """Format p-value like R."""
    if p is None:
        return 'NA'
    if p < 2e-16:
        return '< 2e-16'
    elif p < 0.001:
        return f'{p:.2e}'
    else:
        return f'{p:.4f}'


def _fmt(value: float | None, fmt: str) -> str:
    if value is None:
        return 'NA'
    if np.isinf(value):
        return 'Inf'
    return format(value, fmt)


class InferenceSolution:
    """Inferential statistics for the coefficients of a fitted model.

    Rows are in parameter-vector order. Numeric accessors return tuples
    of ``float | None``; use to_frame() for a NaN-coded DataFrame.
    """

    def __init__(self, _result: Result[InferenceParams]):
        self._result = _result

    @property
    def params(self) -> InferenceParams:
        return self._result.params

    @property
    def rows(self) -> tuple[InferenceRow, ...]:
        return self.params.rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[InferenceRow]:
        return iter(self.rows)

    def column(self, name: str) -> tuple:
        """Values of one column, by its table name ('CI_low') or field name."""
        attr = _COLUMNS.get(name, name)
        if attr == 'component':
            return tuple(r.component for r in self.rows)
        if attr not in InferenceRow.__dataclass_fields__:
            raise KeyError(
                f"Unknown column '{name}'. Available: {list(_COLUMNS)}"
            )
        return tuple(getattr(r, attr) for r in self.rows)

    # --- Columns ---

    @property
    def terms(self) -> tuple[str, ...]:
        return self.column('term')

    @property
    def components(self) -> tuple[ComponentTag, ...]:
        return self.column('component')

    @property
    def estimates(self) -> tuple[float | None, ...]:
        return self.column('estimate')

    @property
    def se(self) -> tuple[float | None, ...]:
        """Standard errors, sqrt of the covariance diagonal."""
        return self.column('se')

    @property
    def ci_low(self) -> tuple[float | None, ...]:
        return self.column('ci_low')

    @property
    def ci_high(self) -> tuple[float | None, ...]:
        return self.column('ci_high')

    @property
    def statistics(self) -> tuple[float | None, ...]:
        return self.column('statistic')

    @property
    def dof(self) -> tuple[float | None, ...]:
        return self.column('dof')

    @property
    def p_values(self) -> tuple[float | None, ...]:
        return self.column('p')

    # --- Metadata ---

    @property
    def ci_level(self) -> float:
        return self.params.ci_level

    @property
    def method(self) -> str:
        """Name of the dof method used."""
        return self._result.method_name

    @property
    def info(self) -> dict:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def has_warning(self, substring: str) -> bool:
        return self._result.has_warning(substring)

    # --- Selection / conversion ---

    def select(self, component: str | ComponentTag = ALL) -> InferenceSolution | None:
        """Rows of one component, or None if the model lacks it."""
        mask = component_mask(self.components, component)
        if mask is None:
            return None
        rows = tuple(r for r, keep in zip(self.rows, mask) if keep)
        responses = self.params.responses
        if responses is not None:
            responses = tuple(resp for resp, keep in zip(responses, mask) if keep)
        kept = {r.term for r in rows}
        params = InferenceParams(
            rows=rows,
            ci_level=self.params.ci_level,
            statistic_name=self.params.statistic_name,
            classifications={
                k: v for k, v in self.params.classifications.items()
                if k in kept
            },
            responses=responses,
        )
        info = dict(self._result.info)
        info['component'] = component if isinstance(component, str) else component.value
        return InferenceSolution(Result(
            params=params,
            info=info,
            method_name=self._result.method_name,
            warnings=self._result.warnings,
            provenance=self._result.provenance,
        ))

    def to_frame(self) -> pd.DataFrame:
        """Coefficient table with NaN for missing values.

        Columns: Parameter, Coefficient, SE, CI_low, CI_high, t or z,
        df_error, p, Component, and Response for multi-response models.
        """
        frame = pd.DataFrame({
            'Parameter': list(self.terms),
            'Coefficient': to_nan_array(self.estimates),
            'SE': to_nan_array(self.se),
            'CI_low': to_nan_array(self.ci_low),
            'CI_high': to_nan_array(self.ci_high),
            self.params.statistic_name: to_nan_array(self.statistics),
            'df_error': to_nan_array(self.dof),
            'p': to_nan_array(self.p_values),
            'Component': [c.value for c in self.components],
        })
        if self.params.responses is not None:
            frame['Response'] = list(self.params.responses)
        frame.attrs['ci_level'] = self.ci_level
        frame.attrs['method'] = self.method
        return frame

    # --- Summary ---

    def summary(self) -> str:
        """R-style coefficient table, one block per component."""
        params = self.params
        stat = params.statistic_name
        pct = f'{100 * params.ci_level:g}%'

        lines = [f"Parameter inference ({self.method} df, {pct} CI)", ""]
        for tag in dict.fromkeys(self.components):
            lines.append(f"Component: {tag.value}")
            lines.append(
                f" {'':>18s} {'Estimate':>10s} {'Std. Error':>10s} "
                f"{'CI_low':>10s} {'CI_high':>10s} {'df':>8s} "
                f"{stat + ' value':>10s} {'Pr(>|' + stat + '|)':>10s}"
            )
            for r in self.rows:
                if r.component is not tag:
                    continue
                lines.append(
                    f" {r.term:>18s} {_fmt(r.estimate, '10.4f'):>10s} "
                    f"{_fmt(r.se, '10.4f'):>10s} {_fmt(r.ci_low, '10.4f'):>10s} "
                    f"{_fmt(r.ci_high, '10.4f'):>10s} {_fmt(r.dof, '8.2f'):>8s} "
                    f"{_fmt(r.statistic, '10.3f'):>10s} "
                    f"{_format_pvalue(r.p):>10s} {_significance_stars(r.p)}"
                )
            lines.append("")

        lines.append("---")
        lines.append("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        comps = ', '.join(c.value for c in dict.fromkeys(self.components))
        return (
            f"InferenceSolution({self.method}, "
            f"n_terms={len(self)}, "
            f"ci={self.ci_level:g}, "
            f"components=[{comps}])"
        )
