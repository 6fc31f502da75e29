"""Standard probability distributions for tinyppl.

Every distribution exposes the two capabilities the engine relies on:
`sample(key)` draws a value from a JAX PRNG key, and `log_density(value)`
scores a value (returning `-inf` outside the support). All families are
built using TensorFlow Probability's JAX substrate as the backend.
"""

from dataclasses import dataclass

import jax
import jax.numpy as jnp
import jax.tree_util as jtu

from tinyppl._compat import ensure_jax_tfp_compat

ensure_jax_tfp_compat()

from tensorflow_probability.substrates import jax as tfp  # noqa: E402

from tinyppl.core import (  # noqa: E402
    Any,
    ArrayLike,
    Callable,
    Density,
    PRNGKey,
)

tfd = tfp.distributions


@dataclass(frozen=True)
class Distribution:
    """A probability distribution with `sample` and `log_density`.

    Attributes:
        dist: The underlying TFP distribution object.
        name: Optional name for the family (used in `repr`).
    """

    dist: Any
    name: str | None = None

    def sample(self, key: PRNGKey, sample_shape: tuple[int, ...] = ()) -> Any:
        return self.dist.sample(sample_shape=sample_shape, seed=key)

    def log_density(self, value: ArrayLike) -> Density:
        return self.dist.log_prob(value)

    def __repr__(self):
        return f"{self.name or type(self.dist).__name__}({self.dist.parameters})"


def _is_traced(params) -> bool:
    return any(isinstance(leaf, jax.core.Tracer) for leaf in jtu.tree_leaves(params))


def tfp_distribution(
    dist: Callable[..., Any],
    /,
    name: str | None = None,
) -> Callable[..., Distribution]:
    """Wrap a TFP distribution constructor as a `Distribution` factory.

    Parameters are validated when they are concrete, so out-of-domain
    arguments (e.g. a negative Poisson rate) raise at construction. Traced
    parameters (inside `jax.vmap` or `jax.jit`) are not checked. Events
    are scored without support assertions, so values outside the support
    get log-density `-inf` instead of raising.
    """

    def make(*args, **kwargs) -> Distribution:
        if not _is_traced((args, kwargs)):
            # Parameter checks only; the checked instance is discarded.
            dist(*args, validate_args=True, **kwargs)
        return Distribution(dist(*args, **kwargs), name=name)

    make.__name__ = name or getattr(dist, "__name__", "distribution")
    return make


# Discrete distributions
bernoulli = tfp_distribution(
    tfd.Bernoulli,
    name="Bernoulli",
)
"""Bernoulli distribution for binary outcomes.

Args:
    logits: Log-odds of success, or
    probs: Probability of success.
"""

flip = tfp_distribution(
    lambda p, **kwargs: tfd.Bernoulli(probs=p, dtype=jnp.bool_, **kwargs),
    name="Flip",
)
"""Flip distribution (Bernoulli with boolean output).

Args:
    p: Probability of True outcome.
"""

categorical = tfp_distribution(
    tfd.Categorical,
    name="Categorical",
)
"""Categorical distribution over `0..K-1`.

Args:
    logits: Log-probabilities for each category, or
    probs: Probabilities for each category.
"""


def _uniform_discrete(low, high, **kwargs):
    outcomes = jnp.arange(low, high + 1)
    return tfd.FiniteDiscrete(
        outcomes,
        probs=jnp.full(outcomes.shape, 1.0 / outcomes.shape[0]),
        **kwargs,
    )


uniform_discrete = tfp_distribution(
    _uniform_discrete,
    name="UniformDiscrete",
)
"""Uniform distribution over the integers `low..high` (inclusive).

Args:
    low: Smallest outcome (Python int).
    high: Largest outcome (Python int, >= low).
"""

poisson = tfp_distribution(
    tfd.Poisson,
    name="Poisson",
)
"""Poisson distribution for count data.

Args:
    rate: Expected number of events (lambda parameter), or
    log_rate: Log of the rate parameter.
"""

# Continuous distributions
normal = tfp_distribution(
    tfd.Normal,
    name="Normal",
)
"""Normal (Gaussian) distribution.

Args:
    loc: Mean of the distribution.
    scale: Standard deviation (> 0).
"""

uniform = tfp_distribution(
    tfd.Uniform,
    name="Uniform",
)
"""Uniform distribution on an interval.

Args:
    low: Lower bound of the distribution.
    high: Upper bound of the distribution.
"""

beta = tfp_distribution(
    tfd.Beta,
    name="Beta",
)
"""Beta distribution on the interval [0, 1].

Args:
    concentration1: Alpha parameter (> 0).
    concentration0: Beta parameter (> 0).
"""

exponential = tfp_distribution(
    tfd.Exponential,
    name="Exponential",
)
"""Exponential distribution for positive continuous values.

Args:
    rate: Rate parameter (> 0).
"""

gamma = tfp_distribution(
    tfd.Gamma,
    name="Gamma",
)
"""Gamma distribution for positive continuous values.

Args:
    concentration: Shape parameter (alpha > 0).
    rate: Rate parameter (beta > 0), or
    scale: Scale parameter (1/rate).
"""

dirichlet = tfp_distribution(
    tfd.Dirichlet,
    name="Dirichlet",
)
"""Dirichlet distribution for probability vectors.

Args:
    concentration: Concentration parameters (all > 0).
                  Shape determines the dimension of the distribution.
"""
