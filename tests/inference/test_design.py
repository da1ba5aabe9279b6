"""
Tests for InferenceDesign validation.

Validates:
    - Missing accessors fail fast with MissingAccessorError
    - Covariance alignment by name
    - Optional capabilities
"""

import numpy as np
import pandas as pd
import pytest

from pyparameters.core.exceptions import (
    DimensionError,
    MissingAccessorError,
    ValidationError,
)
from pyparameters.core.protocols import FittedModel
from pyparameters.inference import ComponentTag, ci
from pyparameters.inference.design import InferenceDesign
from pyparameters.models import ModelSnapshot, from_arrays


class CoefficientsOnly:
    """A model object that exposes estimates and nothing else."""

    def coefficients(self):
        return {'a': 1.0}


class NoCovariance:
    n_observations = 10

    def coefficients(self):
        return {'a': 1.0}

    def covariance_matrix(self):
        return None

    def grouping_factors(self):
        return ()

    def original_data(self):
        return None

    def component_of(self, name):
        return 'conditional'


class TestMissingAccessors:
    def test_missing_accessor_named(self):
        with pytest.raises(MissingAccessorError) as excinfo:
            InferenceDesign.validate(CoefficientsOnly())
        assert excinfo.value.accessor == 'covariance_matrix'
        assert excinfo.value.model_type == 'CoefficientsOnly'

    def test_public_api_fails_fast(self):
        with pytest.raises(MissingAccessorError):
            ci(CoefficientsOnly())

    def test_none_covariance(self):
        with pytest.raises(MissingAccessorError) as excinfo:
            InferenceDesign.validate(NoCovariance())
        assert excinfo.value.accessor == 'covariance_matrix'

    def test_is_validation_error(self):
        with pytest.raises(ValidationError):
            InferenceDesign.validate(object())

    def test_plain_class_satisfies_protocol(self):
        assert isinstance(NoCovariance(), FittedModel)
        assert not isinstance(CoefficientsOnly(), FittedModel)


class TestCovarianceAlignment:
    def test_reordered_frame(self):
        cov = pd.DataFrame(
            [[4.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 9.0]],
            index=['b', 'a', 'Group Var'], columns=['b', 'a', 'Group Var'],
        )
        model = from_arrays({'a': 1.0, 'b': 2.0}, cov, n_observations=10)
        design = InferenceDesign.validate(model)
        np.testing.assert_allclose(design.covariance, np.diag([1.0, 4.0]))

    def test_missing_name(self):
        cov = pd.DataFrame(np.eye(2), index=['a', 'c'], columns=['a', 'c'])
        model = from_arrays({'a': 1.0, 'b': 2.0}, cov, n_observations=10)
        with pytest.raises(DimensionError):
            InferenceDesign.validate(model)

    def test_array_shape(self):
        with pytest.raises(DimensionError):
            from_arrays({'a': 1.0, 'b': 2.0}, np.eye(3), n_observations=10)


class TestSnapshot:
    def test_fields(self, rm_model):
        design = InferenceDesign.validate(rm_model)
        assert design.names == ('(Intercept)', 'time', 'treat', 'time:treat')
        assert design.p == 4
        assert design.n_observations == 24
        assert design.present_components == (ComponentTag.CONDITIONAL,)
        assert design.df_residual is None
        assert design.responses is None

    def test_design_matrix_array_checked(self):
        model = ModelSnapshot(
            estimates={'a': 1.0, 'b': 2.0},
            vcov=pd.DataFrame(np.eye(2), index=['a', 'b'], columns=['a', 'b']),
            design=np.ones((5, 3)),
            n_obs=5,
        )
        with pytest.raises(DimensionError):
            InferenceDesign.validate(model)

    def test_bad_n_observations(self):
        model = from_arrays({'a': 1.0}, [[1.0]], n_observations=0)
        with pytest.raises(ValidationError):
            InferenceDesign.validate(model)

    def test_bad_component(self):
        with pytest.raises(ValidationError):
            from_arrays({'a': 1.0}, [[1.0]], components=['hurdle'], n_observations=3)
