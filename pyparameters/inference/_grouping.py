"""
Within/between-cluster classification of fixed-effect terms.

A term is between-cluster for grouping factor G when its value is
constant inside every level of G (a subject-level covariate in a
repeated-measures design), and within-cluster otherwise. Terms that vary
in some clusters but are constant in others are classified as BOTH and
treated like within-cluster terms by the m-l-1 approximation.

Term values are read from the fixed-effect design matrix when the model
provides one, else from the original data columns the term refers to.
Coefficients of other linear predictors carry a component prefix
('zi_child') and are matched on the bare name.
Clusters with a single observation carry no information about
within-cluster variation and are ignored.
"""

from __future__ import annotations

import re
from typing import Any

import pandas as pd

from pyparameters.inference._common import Classification, GroupingFactor, Level, Term
from pyparameters.inference.design import InferenceDesign

INTERCEPT_NAMES = frozenset({
    '(Intercept)', 'Intercept', 'intercept', '(intercept)', 'const',
})

# Prefixes that keep coefficient names of non-conditional linear
# predictors unique ('zi_child', statsmodels' 'inflate_child').
COMPONENT_PREFIXES = (
    'zi_', 'zero_', 'inflate_', 'zoi_', 'coi_', 'disp_', 'dispersion_',
    'phi_', 'precision_', 'sigma_', 'scale_',
)

_TOKEN = re.compile(r'([A-Za-z_.][A-Za-z0-9_.]*)(\()?')


def is_intercept(name: str) -> bool:
    """True for the intercept of any linear predictor (e.g. 'zi_(Intercept)')."""
    return name in INTERCEPT_NAMES or name.endswith('(Intercept)')


def strip_component_prefix(name: str) -> str:
    """'zi_child' -> 'child'; names without a component prefix are returned as is."""
    for prefix in COMPONENT_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            return name[len(prefix):]
    return name


def _dummy_column(piece: str, labels: dict[str, Any], data: pd.DataFrame | None) -> str | None:
    """Column whose name prefixes ``piece`` followed by a level suffix.

    The suffix must be all digits ('camper1') or, when the data are
    given, one of the column's values ('sitenorth').
    """
    candidates = sorted(
        (c for c in labels if piece.startswith(c) and len(piece) > len(c)),
        key=len, reverse=True,
    )
    for col in candidates:
        rest = piece[len(col):]
        if rest.isdigit():
            return col
        if data is not None:
            levels = {str(v).lower() for v in pd.unique(data[labels[col]].dropna())}
            if rest.lower() in levels:
                return col
    return None


def _match_pieces(
    term: str, labels: dict[str, Any], data: pd.DataFrame | None,
) -> tuple[str, ...]:
    found: list[str] = []
    for piece in re.split(r'[:*]', term):
        piece = piece.strip()
        if not piece:
            continue
        if piece in labels:
            found.append(piece)
            continue
        matches = [
            m.group(1) for m in _TOKEN.finditer(piece)
            if m.group(2) is None and m.group(1) in labels
        ]
        if not matches:
            col = _dummy_column(piece, labels, data)
            if col is None:
                return ()
            matches = [col]
        found.extend(matches)
    return tuple(dict.fromkeys(found))


def term_variables(
    term: str,
    columns: Any,
    data: pd.DataFrame | None = None,
) -> tuple[str, ...]:
    """Find the data columns a coefficient name refers to.

    Interaction pieces are separated by ':' or '*'. Each piece is matched
    exactly, then by the identifiers it contains (``C(f)[T.b]`` -> ``f``,
    ``np.log(x)`` -> ``x``), then by a column name followed by a level
    suffix (R-style dummy names such as ``camper1``). A name that does
    not match as given is retried without its component prefix, so
    ``zi_child`` refers to ``child``.

    Args:
        term: Coefficient name.
        columns: Candidate column names.
        data: Optional frame holding those columns; its values let
            non-numeric level suffixes be recognised.

    Returns:
        Matched column names in order of appearance; empty if any piece
        could not be matched.
    """
    labels = {str(c): c for c in columns}
    found = _match_pieces(term, labels, data)
    if not found:
        bare = strip_component_prefix(term)
        if bare != term:
            found = _match_pieces(bare, labels, data)
    return found


def variation_level(values: pd.DataFrame, factor: GroupingFactor) -> Level:
    """Classify a block of term values against one grouping factor.

    Args:
        values: Term values, one column per piece (n rows).
        factor: Grouping factor with per-observation codes (n,).

    Returns:
        BETWEEN if constant within every cluster, WITHIN if varying
        within every cluster, BOTH otherwise. UNKNOWN when the values and
        the grouping codes do not line up.
    """
    if len(values) != len(factor):
        return Level.UNKNOWN
    frame = values.reset_index(drop=True).copy()
    frame.columns = [f'v{i}' for i in range(frame.shape[1])]
    frame['_cluster'] = factor.codes
    frame = frame[frame['_cluster'] >= 0]

    sizes = frame.groupby('_cluster').size()
    informative = sizes.index[sizes > 1]
    if len(informative) == 0:
        return Level.BETWEEN

    distinct = (
        frame[frame['_cluster'].isin(informative)]
        .groupby('_cluster')
        .nunique(dropna=False)
        .max(axis=1)
    )
    varies = distinct > 1
    if not varies.any():
        return Level.BETWEEN
    if varies.all():
        return Level.WITHIN
    return Level.BOTH


def combine_levels(by_group: dict[str, Level]) -> Level:
    """Overall level of a term from its per-factor levels.

    A term that is between-cluster for at least one factor is limited by
    that factor's cluster count and counts as BETWEEN.
    """
    levels = set(by_group.values())
    if not levels or Level.UNKNOWN in levels:
        return Level.UNKNOWN
    if Level.BETWEEN in levels:
        return Level.BETWEEN
    if Level.BOTH in levels:
        return Level.BOTH
    return Level.WITHIN


def _term_values(design: InferenceDesign, name: str) -> tuple[pd.DataFrame | None, tuple[str, ...]]:
    X = design.design_matrix
    if X is not None:
        for label in (name, strip_component_prefix(name)):
            if label in X.columns:
                return X[[label]], ()
    data = design.data
    if data is not None:
        variables = term_variables(name, data.columns, data)
        if variables:
            return data[list(variables)], variables
    return None, ()


def classify_design(design: InferenceDesign) -> dict[str, Classification]:
    """Classify every coefficient of a validated design.

    Returns:
        Mapping coefficient name -> Classification, parameter order.
    """
    factors = design.grouping_factors
    has_values = design.data is not None or design.design_matrix is not None
    out: dict[str, Classification] = {}
    for name in design.names:
        if not factors:
            out[name] = Classification(level=Level.UNKNOWN)
            continue
        if is_intercept(name) and has_values:
            by_group = {g.name: Level.BETWEEN for g in factors}
            out[name] = Classification(level=Level.BETWEEN, by_group=by_group)
            continue
        values, variables = _term_values(design, name)
        if values is None:
            by_group = {g.name: Level.UNKNOWN for g in factors}
        else:
            by_group = {g.name: variation_level(values, g) for g in factors}
        out[name] = Classification(
            level=combine_levels(by_group),
            by_group=by_group,
            variables=variables,
        )
    return out


def classify_terms(model: Any) -> dict[str, Classification]:
    """Classify each fixed-effect term of a fitted model.

    Args:
        model: A FittedModel, or an already validated InferenceDesign.

    Returns:
        Mapping coefficient name -> Classification. Terms whose values
        cannot be located (no data, unmatched names, or data rows not
        aligned with the grouping factor) are UNKNOWN.
    """
    design = model if isinstance(model, InferenceDesign) else InferenceDesign.validate(model)
    return classify_design(design)


def describe_terms(model: Any) -> tuple[Term, ...]:
    """Fixed-effect terms with their component and classification."""
    design = model if isinstance(model, InferenceDesign) else InferenceDesign.validate(model)
    classes = classify_design(design)
    return tuple(
        Term(
            name=name,
            component=comp,
            level=classes[name].level,
            variables=classes[name].variables,
        )
        for name, comp in zip(design.names, design.components)
    )
