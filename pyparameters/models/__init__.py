"""
Adapters that expose fitted models through the FittedModel protocol.

    from_arrays()       - estimates, covariance and optional data/groups
    from_statsmodels()  - fitted statsmodels results (MixedLM, OLS, GLM, ...)
    ModelSnapshot       - the immutable FittedModel both return
"""

from pyparameters.models.base import ModelSnapshot, from_arrays
from pyparameters.models._statsmodels import from_statsmodels

__all__ = [
    "ModelSnapshot",
    "from_arrays",
    "from_statsmodels",
]
