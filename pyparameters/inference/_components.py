"""
Component selection for models with several linear predictors.

Zero-inflated, hurdle, beta and location-scale models estimate more than
one linear predictor. Every row is tagged with a ComponentTag and queries
may ask for one component or for all of them.

A component the model does not have is "not applicable": selection
returns None rather than raising, so callers can tell it apart from a
computation failure.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

import numpy as np
from numpy.typing import NDArray

from pyparameters.core.exceptions import ValidationError
from pyparameters.inference._common import ComponentTag

ALL = 'all'

_ALIASES = {
    'conditional': ComponentTag.CONDITIONAL,
    'cond': ComponentTag.CONDITIONAL,
    'count': ComponentTag.CONDITIONAL,
    'zero_inflated': ComponentTag.ZERO_INFLATED,
    'zero-inflated': ComponentTag.ZERO_INFLATED,
    'zero_inflation': ComponentTag.ZERO_INFLATED,
    'zero-inflation': ComponentTag.ZERO_INFLATED,
    'zi': ComponentTag.ZERO_INFLATED,
    'zero': ComponentTag.ZERO_INFLATED,
    'precision': ComponentTag.PRECISION,
    'dispersion': ComponentTag.DISPERSION,
    'disp': ComponentTag.DISPERSION,
    'scale': ComponentTag.SCALE,
    'extra': ComponentTag.EXTRA,
}

R = TypeVar('R')


def resolve_component(component: str | ComponentTag) -> ComponentTag | None:
    """Normalise a component query.

    Args:
        component: 'all', a ComponentTag, or one of its aliases
            ('cond', 'zi', 'zero-inflation', ...). Case-insensitive.

    Returns:
        The ComponentTag, or None for 'all'.

    Raises:
        ValidationError: If the name is not a known component.
    """
    if isinstance(component, ComponentTag):
        return component
    if not isinstance(component, str):
        raise ValidationError(
            f"component must be a string or ComponentTag, got {type(component).__name__}"
        )
    key = component.strip().lower()
    if key == ALL:
        return None
    try:
        return _ALIASES[key]
    except KeyError:
        raise ValidationError(
            f"Unknown component {component!r}. "
            f"Use 'all' or one of: {sorted(_ALIASES)}"
        ) from None


def parse_component_tag(value: str | ComponentTag) -> ComponentTag:
    """Parse the component reported by a model; 'all' is not a tag."""
    tag = resolve_component(value)
    if tag is None:
        raise ValidationError("'all' is a query value, not a component tag")
    return tag


def component_mask(
    components: Sequence[ComponentTag],
    component: str | ComponentTag,
) -> NDArray | None:
    """Boolean mask of rows belonging to the requested component.

    Returns None when the component is absent from ``components``.
    """
    tag = resolve_component(component)
    mask = np.ones(len(components), dtype=bool)
    if tag is None:
        return mask
    mask = np.array([c is tag for c in components], dtype=bool)
    if not mask.any():
        return None
    return mask


def select(rows: Sequence[R], component: str | ComponentTag = ALL) -> tuple[R, ...] | None:
    """Filter rows (anything with a ``component`` attribute) by component.

    Order within the component follows the parameter vector.

    Returns:
        The matching rows, or None if the model has no such component.
    """
    mask = component_mask([r.component for r in rows], component)
    if mask is None:
        return None
    return tuple(r for r, keep in zip(rows, mask) if keep)
