"""
PyParameters: inference for the parameters of fitted models.

Confidence intervals, standard errors, degrees of freedom and p-values
for fixed effects, including the "m-l-1" degrees-of-freedom heuristic
for mixed models whose fitting library reports none.

Submodules:
    inference: ci, p_value, dof, model_parameters and friends
    models: Adapters (from_arrays, from_statsmodels)
    core: Protocols, Result envelope, exceptions
"""

__version__ = "0.1.0"

from pyparameters import inference
from pyparameters import models
from pyparameters.inference import (
    ci,
    standard_error,
    p_value,
    p_value_ml1,
    dof,
    dof_ml1,
    dof_residual,
    se_ml1,
    model_parameters,
    classify_terms,
    p_adjust,
)
from pyparameters.models import from_arrays, from_statsmodels

__all__ = [
    "__version__",
    "inference",
    "models",
    "ci",
    "standard_error",
    "p_value",
    "p_value_ml1",
    "dof",
    "dof_ml1",
    "dof_residual",
    "se_ml1",
    "model_parameters",
    "classify_terms",
    "p_adjust",
    "from_arrays",
    "from_statsmodels",
]
