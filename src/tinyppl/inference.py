"""
Self-normalizing importance sampling (SNIS) for generative programs.

A generative program is run once per particle, each run with its own
accumulator (see `tinyppl.core.trace`) and its own PRNG substream derived by
`jax.random.split`. The particles' log-weights are normalized in log space and
used to weight the program's return values.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import jax
import jax.numpy as jnp
import jax.random as jrand
import jax.scipy.special

from .core import (
    Any,
    Array,
    ArrayLike,
    Callable,
    DegenerateWeightsError,
    Optional,
    PRNGKey,
    Program,
    Pytree,
    Sequence,
    Weight,
    trace,
)

logger = logging.getLogger(__name__)

STRATEGIES = ("sequential", "vmap", "threads")


def normalize(log_weights: ArrayLike | Sequence[float]) -> Array:
    """
    Turn log-weights into normalized probabilities using the log-sum-exp shift.

    Args:
        log_weights: Non-empty array of log importance weights. Entries may be
            `-inf`; `NaN` and `+inf` are rejected.

    Returns:
        Probabilities `exp(w_i - max(w)) / sum_j exp(w_j - max(w))`.

    Raises:
        ValueError: If `log_weights` is empty or holds `NaN` or `+inf`.
        DegenerateWeightsError: If every log-weight is `-inf`.
    """
    log_weights = jnp.asarray(log_weights)
    if log_weights.size == 0:
        raise ValueError("Cannot normalize an empty sequence of log-weights.")
    if jnp.any(jnp.isnan(log_weights)) or jnp.any(jnp.isposinf(log_weights)):
        raise ValueError("Log-weights must not contain NaN or +inf.")

    max_log_weight = jnp.max(log_weights)
    if jnp.isneginf(max_log_weight):
        logger.debug("All %d log-weights are -inf", log_weights.size)
        raise DegenerateWeightsError(
            "Every particle has log-weight -inf: the model assigns zero "
            "likelihood to the observed data."
        )
    exponentiated = jnp.exp(log_weights - max_log_weight)
    return exponentiated / jnp.sum(exponentiated)


@Pytree.dataclass
class ParticleCollection(Pytree):
    """Result of importance sampling: per-particle values and log-weights,
    index-aligned along the leading axis."""

    values: Any
    log_weights: Weight

    @property
    def n_particles(self) -> int:
        return self.log_weights.shape[0]

    def normalized_weights(self) -> Array:
        return normalize(self.log_weights)

    def estimate(self, fn: Optional[Callable[[Any], Any]] = None) -> Array:
        """
        Compute the self-normalized importance sampling estimate of `fn`.

        Args:
            fn: Function applied to each particle's value. Defaults to the
                identity, giving the posterior expectation of the program's
                return value.

        Returns:
            Weighted estimate: sum(w_i * fn(v_i)) with normalized weights w_i.
            For array-valued programs the reduction is over the particle
            axis only.

        Examples:
            >>> # particles.estimate()  # Posterior mean
            >>> # particles.estimate(lambda v: v**2) - mean**2  # Variance
        """
        values = self.values if fn is None else jax.vmap(fn)(self.values)
        values = jnp.asarray(values)
        return jnp.tensordot(self.normalized_weights(), values, axes=1)

    def log_marginal_likelihood(self) -> Array:
        """
        Estimate the log marginal likelihood of the observed data.

        Returns:
            logsumexp(log_weights) - log(n_particles). `-inf` when every
            particle has zero likelihood.
        """
        return jax.scipy.special.logsumexp(self.log_weights) - jnp.log(
            self.n_particles
        )


def _run_sequential(program: Program, keys: Array) -> list[tuple[Any, Any]]:
    return [trace(program, keys[i]) for i in range(keys.shape[0])]


def _run_threads(
    program: Program,
    keys: Array,
    max_workers: Optional[int],
) -> list[tuple[Any, Any]]:
    # Each task writes only its own index; a worker thread has its own
    # context, so accumulators are never visible across particles.
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(trace, program, keys[i]) for i in range(keys.shape[0])
        ]
        return [future.result() for future in futures]


def importance_sample(
    key: PRNGKey,
    program: Program,
    n_particles: int,
    *,
    strategy: str = "sequential",
    max_workers: Optional[int] = None,
) -> ParticleCollection:
    """
    Run `program` on `n_particles` independent PRNG substreams.

    The substream of particle `i` is `jax.random.split(key, n_particles)[i]`,
    so every strategy sees the same draws per particle regardless of the
    degree of parallelism or completion order.

    Args:
        key: PRNG key the particle substreams are split from.
        program: Generative program `program(key) -> value`.
        n_particles: Number of particles (> 0).
        strategy: "sequential" (Python loop, supports any Python control flow),
            "vmap" (`jax.vmap` over particles, program must be JAX-traceable)
            or "threads" (a thread pool of `max_workers` workers).
            Under "vmap" distribution parameters that depend on a draw are
            traced and cannot be validated, so out-of-domain parameters give
            NaN or invalid draws instead of raising. Use "sequential" or
            "threads" to have them checked.
        max_workers: Worker count for the "threads" strategy.

    Returns:
        ParticleCollection with the particles' values and log-weights.
    """
    if n_particles <= 0:
        raise ValueError(f"n_particles must be positive, got {n_particles}")
    if strategy not in STRATEGIES:
        raise ValueError(
            f"Unknown strategy: {strategy!r} (expected one of {STRATEGIES})"
        )

    logger.debug(
        "Importance sampling with %d particles (strategy=%s)", n_particles, strategy
    )
    keys = jrand.split(key, n_particles)

    if strategy == "vmap":
        values, log_weights = jax.vmap(partial(trace, program))(keys)
        return ParticleCollection(values=values, log_weights=log_weights)

    if strategy == "threads":
        particles = _run_threads(program, keys, max_workers)
    else:
        particles = _run_sequential(program, keys)

    values = jnp.stack([jnp.asarray(value) for value, _ in particles])
    log_weights = jnp.stack([log_weight for _, log_weight in particles])
    return ParticleCollection(values=values, log_weights=log_weights)


def posterior(
    key: PRNGKey,
    program: Program,
    n_particles: int,
    *,
    strategy: str = "sequential",
    max_workers: Optional[int] = None,
) -> Array:
    """
    Self-normalized importance sampling estimate of E[f(X) | observations].

    `f(X)` is the return value of `program`; the posterior is the one implied
    by the program's prior draws and its `observe` calls.

    Args:
        key: PRNG key the particle substreams are split from.
        program: Generative program `program(key) -> value`.
        n_particles: Number of particles (> 0).
        strategy: Execution strategy, see `importance_sample`. "vmap" does
            not validate distribution parameters that depend on a draw.
        max_workers: Worker count for the "threads" strategy.

    Returns:
        The weighted average of the particles' return values.

    Raises:
        ValueError: If `n_particles <= 0` or the strategy is unknown.
        DegenerateWeightsError: If every particle has log-weight `-inf`.

    Example:
        >>> import jax.random as jrand
        >>> from tinyppl import observe, posterior
        >>> from tinyppl.distributions import bernoulli, uniform_discrete
        >>>
        >>> def coins(key):
        ...     coin = uniform_discrete(0, 2).sample(key)
        ...     for _ in range(3):
        ...         observe(1, bernoulli(probs=coin / 2))
        ...     return (coin == 1).astype(float)
        >>>
        >>> posterior(jrand.key(1), coins, 100_000, strategy="vmap")  # ~0.0714
    """
    particles = importance_sample(
        key,
        program,
        n_particles,
        strategy=strategy,
        max_workers=max_workers,
    )
    return particles.estimate()
