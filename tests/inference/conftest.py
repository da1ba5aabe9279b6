"""
Shared fixtures for inference tests.

Two models reproduce published GLMMadaptive fits (estimates and
standard errors only; inference is recomputed from them):

    fish_zi:  count ~ child + camper, zi ~ child + livebait,
              random = ~ 1 | persons, zero-inflated Poisson
    cbpp:     cbind(incidence, size - incidence) ~ period,
              random = ~ 1 | herd, binomial

The repeated-measures dataset has a known within/between structure.
"""

import numpy as np
import pandas as pd
import pytest

from pyparameters.models import from_arrays


FISH_NAMES = [
    '(Intercept)', 'child', 'camper1',
    'zi_(Intercept)', 'zi_child', 'zi_livebait1',
]
FISH_COEF = np.array([1.14549, -1.17125, 0.76937, -0.08243, 1.33197, -1.12165])
FISH_SE = np.array([0.54002, 0.09485, 0.09356, 0.46812, 0.29416, 0.50763])
FISH_CI_LOW = np.array([0.08708, -1.35715, 0.58599, -0.99993, 0.75543, -2.1166])
FISH_P = np.array([0.0339, 0.0, 0.0, 0.86023, 1e-05, 0.02713])

CBPP_NAMES = ['(Intercept)', 'period2', 'period3', 'period4']
CBPP_COEF = np.array([-1.39946, -0.99138, -1.1278, -1.57945])
CBPP_SE = np.array([0.23354, 0.30678, 0.32678, 0.42761])
CBPP_CI_LOW = np.array([-1.8572, -1.59265, -1.76827, -2.41754])
CBPP_P = np.array([0.0, 0.00123, 0.00056, 0.00022])


@pytest.fixture
def fish_zi():
    """Zero-inflated Poisson mixed model: 3 conditional + 3 zi terms."""
    n = 250
    return from_arrays(
        FISH_COEF,
        np.diag(FISH_SE ** 2),
        names=FISH_NAMES,
        components=['conditional'] * 3 + ['zi'] * 3,
        groups={'persons': np.arange(n) % 4},
        n_observations=n,
    )


@pytest.fixture
def cbpp():
    """Binomial mixed model without a zero-inflation part."""
    n = 56
    return from_arrays(
        CBPP_COEF,
        np.diag(CBPP_SE ** 2),
        names=CBPP_NAMES,
        groups={'herd': np.arange(n) % 15},
        n_observations=n,
    )


@pytest.fixture
def repeated_measures(rng):
    """Repeated-measures design: 6 subjects x 4 time points.

    time varies within every subject, treat is a subject-level
    covariate, so (Intercept) and treat are between-cluster and time and
    time:treat are within-cluster.
    """
    n_subjects, n_times = 6, 4
    subject = np.repeat([f's{i}' for i in range(n_subjects)], n_times)
    time = np.tile(np.arange(n_times, dtype=float), n_subjects)
    treat = np.repeat([0.0, 1.0] * (n_subjects // 2), n_times)
    y = 1.0 + 0.5 * time - 0.8 * treat + rng.normal(0, 0.5, n_subjects * n_times)
    return pd.DataFrame({'subject': subject, 'time': time, 'treat': treat, 'y': y})


@pytest.fixture
def rm_model(repeated_measures):
    """Random-intercept model y ~ time * treat + (1 | subject)."""
    names = ['(Intercept)', 'time', 'treat', 'time:treat']
    return from_arrays(
        {'(Intercept)': 1.0, 'time': 0.5, 'treat': -0.8, 'time:treat': 0.2},
        pd.DataFrame(
            np.diag([0.04, 0.01, 0.09, 0.0225]), index=names, columns=names,
        ),
        data=repeated_measures,
        groups=['subject'],
    )


@pytest.fixture
def fish_reference():
    """Published GLMMadaptive results for fish_zi (normal-based)."""
    return {'coef': FISH_COEF, 'se': FISH_SE, 'ci_low': FISH_CI_LOW, 'p': FISH_P}


@pytest.fixture
def cbpp_reference():
    """Published GLMMadaptive results for cbpp (normal-based)."""
    return {'coef': CBPP_COEF, 'se': CBPP_SE, 'ci_low': CBPP_CI_LOW, 'p': CBPP_P}
