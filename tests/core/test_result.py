"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

import pyparameters
from pyparameters.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


class TestResultConstruction:
    """Result can be created with any payload type."""

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={"ci_level": 0.95},
            method_name="ml1",
        )
        assert result.params.value == 42.0
        assert result.info["ci_level"] == 0.95
        assert result.method_name == "ml1"

    def test_default_warnings_empty(self):
        result = Result(params=FakeParams(1.0), info={}, method_name="wald")
        assert result.warnings == ()

    def test_frozen(self):
        result = Result(params=FakeParams(1.0), info={}, method_name="wald")
        with pytest.raises(FrozenInstanceError):
            result.method_name = "ml1"


class TestWarnings:
    def test_has_warning_substring(self):
        result = Result(
            params=FakeParams(1.0),
            info={},
            method_name="ml1",
            warnings=("Could not classify ['x'] as within- or between-cluster",),
        )
        assert result.has_warning("Could not classify")
        assert not result.has_warning("grouping factors")


class TestProvenance:
    def test_keys(self):
        prov = _default_provenance()
        assert set(prov) == {'pyparameters_version', 'numpy_version', 'scipy_version'}
        assert prov['pyparameters_version'] == pyparameters.__version__

    def test_attached_by_default(self):
        result = Result(params=FakeParams(1.0), info={}, method_name="wald")
        assert 'numpy_version' in result.provenance
