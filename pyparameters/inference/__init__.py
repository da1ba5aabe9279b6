"""
Parameter inference for fitted models.

Public API:
    ci()               - confidence intervals and full inference rows
    standard_error()   - standard errors
    p_value()          - p-values for any dof method
    p_value_ml1()      - p-values with "m-l-1" df
    dof(), dof_ml1(), dof_residual() - degrees of freedom
    se_ml1()           - SEs consistent with m-l-1 p-values
    model_parameters() - coefficient table (pandas DataFrame)
    classify_terms()   - within/between-cluster classification
    infer()            - engine over raw estimates, covariance and df
    p_adjust()         - R-compatible multiple testing correction
    ML1Dof, ResidualDof, WaldDof, FixedDof - dof methods
    InferenceSolution  - result wrapper
"""

from pyparameters.inference.solvers import (
    ci,
    standard_error,
    p_value,
    p_value_ml1,
    dof,
    dof_ml1,
    dof_residual,
    se_ml1,
    model_parameters,
)
from pyparameters.inference.solution import InferenceSolution
from pyparameters.inference.design import InferenceDesign
from pyparameters.inference._common import (
    ComponentTag,
    Level,
    GroupingFactor,
    Classification,
    Term,
    InferenceRow,
    TermValues,
    DofTable,
    InferenceParams,
)
from pyparameters.inference._components import select
from pyparameters.inference._grouping import classify_terms, describe_terms
from pyparameters.inference._dof import ML1Dof, ResidualDof, WaldDof, FixedDof
from pyparameters.inference._engine import infer
from pyparameters.inference._p_adjust import p_adjust

__all__ = [
    "ci",
    "standard_error",
    "p_value",
    "p_value_ml1",
    "dof",
    "dof_ml1",
    "dof_residual",
    "se_ml1",
    "model_parameters",
    "InferenceSolution",
    "InferenceDesign",
    "ComponentTag",
    "Level",
    "GroupingFactor",
    "Classification",
    "Term",
    "InferenceRow",
    "TermValues",
    "DofTable",
    "InferenceParams",
    "select",
    "classify_terms",
    "describe_terms",
    "ML1Dof",
    "ResidualDof",
    "WaldDof",
    "FixedDof",
    "infer",
    "p_adjust",
]
