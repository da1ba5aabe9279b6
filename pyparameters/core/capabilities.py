"""
Capability string constants for PyParameters.

This module is the SINGLE SOURCE OF TRUTH for the optional accessors a
fitted model may expose beyond the required FittedModel contract.
Import from here, never use raw strings.

Usage:
    from pyparameters.core.capabilities import CAPABILITY_DESIGN_MATRIX

    if supports(model, CAPABILITY_DESIGN_MATRIX):
        X = model.design_matrix()
"""

# Fixed-effect model matrix with columns named like the coefficients
CAPABILITY_DESIGN_MATRIX = 'design_matrix'

# Residual degrees of freedom reported by the fitting library
CAPABILITY_DF_RESIDUAL = 'df_residual'

# Response name per coefficient (multivariate-response models)
CAPABILITY_RESPONSE = 'response_of'

# All capabilities mapped to the attribute that provides them
ALL_CAPABILITIES = frozenset({
    CAPABILITY_DESIGN_MATRIX,
    CAPABILITY_DF_RESIDUAL,
    CAPABILITY_RESPONSE,
})


def supports(model: object, capability: str) -> bool:
    """
    Check if a fitted model supports an optional capability.

    Unknown capabilities return False, never raise.
    """
    if capability not in ALL_CAPABILITIES:
        return False
    return getattr(model, capability, None) is not None


__all__ = [
    'CAPABILITY_DESIGN_MATRIX',
    'CAPABILITY_DF_RESIDUAL',
    'CAPABILITY_RESPONSE',
    'ALL_CAPABILITIES',
    'supports',
]
