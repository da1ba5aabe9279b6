"""
Design validation for parameter inference.

InferenceDesign validates a FittedModel and takes an immutable snapshot
of everything the inference core reads from it: coefficients, their
covariance, component tags, grouping factors and data.

This is the only place a structural contract violation is raised. A
model missing a required accessor fails fast with MissingAccessorError;
everything downstream works on the snapshot and never touches the model
again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from pyparameters.core.capabilities import (
    CAPABILITY_DESIGN_MATRIX, CAPABILITY_DF_RESIDUAL, CAPABILITY_RESPONSE,
    supports,
)
from pyparameters.core.exceptions import (
    DimensionError, MissingAccessorError, ValidationError,
)
from pyparameters.core.protocols import REQUIRED_ACCESSORS
from pyparameters.core.validation import check_array, check_square
from pyparameters.inference._common import ComponentTag, GroupingFactor
from pyparameters.inference._components import parse_component_tag


@dataclass(frozen=True)
class InferenceDesign:
    """Validated snapshot of a fitted model.

    Attributes:
        names: Coefficient names, parameter-vector order.
        estimates: Coefficient vector (p,).
        covariance: Covariance matrix (p, p), aligned with names.
        components: Component tag per coefficient.
        grouping_factors: Random-effect grouping factors (may be empty).
        data: Original data frame, or None if unavailable.
        design_matrix: Fixed-effect model matrix, or None.
        n_observations: Number of observations used for fitting.
        df_residual: Residual df reported by the model, or None.
        responses: Response name per coefficient, or None.
        model_type: Type name of the source model (for messages).
    """
    names: tuple[str, ...]
    estimates: NDArray = field(repr=False)
    covariance: NDArray = field(repr=False)
    components: tuple[ComponentTag, ...]
    grouping_factors: tuple[GroupingFactor, ...]
    data: pd.DataFrame | None = field(repr=False)
    design_matrix: pd.DataFrame | None = field(repr=False)
    n_observations: int
    df_residual: float | None = None
    responses: tuple[str | None, ...] | None = None
    model_type: str = ''

    @property
    def p(self) -> int:
        return len(self.names)

    @property
    def present_components(self) -> tuple[ComponentTag, ...]:
        """Components present in the model, first-appearance order."""
        return tuple(dict.fromkeys(self.components))

    @staticmethod
    def validate(model: Any) -> 'InferenceDesign':
        """Validate a fitted model and snapshot its contents.

        Args:
            model: Any object satisfying the FittedModel protocol.

        Returns:
            Validated InferenceDesign.

        Raises:
            MissingAccessorError: If a required accessor is absent.
            DimensionError: If the covariance does not match the
                coefficients.
            ValidationError: On other malformed inputs.
        """
        model_type = type(model).__name__
        for accessor in REQUIRED_ACCESSORS:
            if not hasattr(model, accessor):
                raise MissingAccessorError(
                    f"{model_type} does not provide required accessor "
                    f"'{accessor}'. Wrap the model with an adapter from "
                    f"pyparameters.models.",
                    accessor=accessor,
                    model_type=model_type,
                )

        coefs = model.coefficients()
        if coefs is None:
            raise MissingAccessorError(
                f"{model_type}.coefficients() returned None",
                accessor='coefficients', model_type=model_type,
            )
        coefs = dict(coefs)
        names = tuple(str(k) for k in coefs)
        estimates = check_array(list(coefs.values()), 'coefficients')

        cov_raw = model.covariance_matrix()
        if cov_raw is None:
            raise MissingAccessorError(
                f"{model_type}.covariance_matrix() returned None",
                accessor='covariance_matrix', model_type=model_type,
            )
        covariance = _align_covariance(cov_raw, names)

        components = tuple(
            parse_component_tag(model.component_of(name)) for name in names
        )

        groups = tuple(model.grouping_factors() or ())
        for g in groups:
            if not isinstance(g, GroupingFactor):
                raise ValidationError(
                    f"grouping_factors() must return GroupingFactor objects, "
                    f"got {type(g).__name__}"
                )

        data = model.original_data()
        if data is not None and not isinstance(data, pd.DataFrame):
            data = pd.DataFrame(data)

        design_matrix = None
        if supports(model, CAPABILITY_DESIGN_MATRIX):
            design_matrix = model.design_matrix()
            if design_matrix is not None and not isinstance(design_matrix, pd.DataFrame):
                X = np.asarray(design_matrix)
                if X.ndim != 2 or X.shape[1] != len(names):
                    raise DimensionError(
                        f"design_matrix: expected {len(names)} columns "
                        f"(one per coefficient), got shape {X.shape}"
                    )
                design_matrix = pd.DataFrame(X, columns=list(names))

        n_obs = model.n_observations
        if n_obs is None or int(n_obs) < 1:
            raise ValidationError(f"n_observations must be >= 1, got {n_obs}")

        df_residual = None
        if supports(model, CAPABILITY_DF_RESIDUAL):
            value = model.df_residual
            df_residual = float(value() if callable(value) else value)

        responses = None
        if supports(model, CAPABILITY_RESPONSE):
            responses = tuple(model.response_of(name) for name in names)

        return InferenceDesign(
            names=names,
            estimates=estimates,
            covariance=covariance,
            components=components,
            grouping_factors=groups,
            data=data,
            design_matrix=design_matrix,
            n_observations=int(n_obs),
            df_residual=df_residual,
            responses=responses,
            model_type=model_type,
        )


def _align_covariance(cov: Any, names: tuple[str, ...]) -> NDArray:
    """Return the covariance as an array in coefficient order.

    A labelled DataFrame is reindexed by name, so extra rows (e.g.
    variance parameters) are dropped; a bare array is taken positionally.
    """
    if isinstance(cov, pd.DataFrame):
        labels = [str(c) for c in cov.columns]
        frame = cov.copy()
        frame.index = [str(i) for i in cov.index]
        frame.columns = labels
        missing = [n for n in names if n not in frame.index or n not in frame.columns]
        if missing:
            raise DimensionError(
                f"covariance matrix has no entries for {missing}"
            )
        arr = check_array(frame.loc[list(names), list(names)].to_numpy(), 'covariance')
    else:
        arr = check_array(cov, 'covariance')
    check_square(arr, len(names), 'covariance')
    return arr
