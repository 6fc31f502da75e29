"""
Shared fixtures and configuration for the tinyppl test suite.
"""

import jax

# Tolerances below 1e-7 are only meaningful in double precision.
jax.config.update("jax_enable_x64", True)

import jax.random as jrand  # noqa: E402
import pytest  # noqa: E402

# Installs the JAX/TFP compatibility shim before test modules import TFP.
import tinyppl  # noqa: E402, F401


@pytest.fixture
def key():
    """Standard random key for reproducible tests."""
    return jrand.key(42)


@pytest.fixture
def strict_tolerance():
    """Strict tolerance for exact comparisons."""
    return 1e-9


@pytest.fixture
def standard_tolerance():
    """Standard tolerance for numerical comparisons."""
    return 1e-6


@pytest.fixture
def loose_tolerance():
    """Loose tolerance for stochastic/convergence tests."""
    return 1e-2
