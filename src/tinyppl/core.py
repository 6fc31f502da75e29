import contextvars
from dataclasses import dataclass, field
from typing import overload

import beartype.typing as btyping
import jax.numpy as jnp
import jaxtyping as jtyping
import penzai.pz as pz
from typing_extensions import dataclass_transform

##########
# Typing #
##########

Any = btyping.Any
PRNGKey = jtyping.PRNGKeyArray
Array = jtyping.Array
ArrayLike = jtyping.ArrayLike
FloatArray = jtyping.Float[jtyping.Array, "..."]
Callable = btyping.Callable
Optional = btyping.Optional
Sequence = btyping.Sequence
TypeVar = btyping.TypeVar

R = TypeVar("R")

#######################
# Probabilistic types #
#######################

Weight = FloatArray
Density = FloatArray

# A generative program: takes a PRNG key, may `observe`, returns f(X).
Program = Callable[[PRNGKey], Any]

##########
# Pytree #
##########


class Pytree(pz.Struct):
    """`Pytree` registers a class with JAX's `Pytree` system, so that instances
    can cross JAX-transformed function boundaries (`jax.jit`, `jax.vmap`).

    * `Pytree.static(...)`: the value of the field cannot be a JAX traced
    value, it must be a Python literal or a constant, and is embedded in the
    `PyTreeDef` of the instance.
    * `Pytree.field(...)` or no annotation: the value may be a JAX traced
    value.
    """

    @staticmethod
    @overload
    def dataclass(
        incoming: None = None,
        /,
        **kwargs,
    ) -> Callable[[type[R]], type[R]]: ...

    @staticmethod
    @overload
    def dataclass(
        incoming: type[R],
        /,
        **kwargs,
    ) -> type[R]: ...

    @dataclass_transform(
        frozen_default=True,
    )
    @staticmethod
    def dataclass(
        incoming: type[R] | None = None,
        /,
        **kwargs,
    ) -> type[R] | Callable[[type[R]], type[R]]:
        """Declare a class inheriting `Pytree` to be a (frozen) dataclass whose
        fields are flattened and unflattened by JAX."""
        return pz.pytree_dataclass(
            incoming,
            overwrite_parent_init=True,
            **kwargs,
        )

    @staticmethod
    def static(**kwargs):
        """Declare a field of a `Pytree` dataclass to be static."""
        return field(metadata={"pytree_node": False}, **kwargs)

    @staticmethod
    def field(**kwargs):
        """Declare a field of a `Pytree` dataclass to be dynamic.
        Alternatively, one can leave the annotation off in the declaration."""
        return field(**kwargs)


##########
# Errors #
##########


class DegenerateWeightsError(ValueError):
    """Every particle has log-weight `-inf`: the model assigns zero
    likelihood to the observed data under every sampled trajectory."""


class ObserveOutsideTraceError(RuntimeError):
    """`observe` was called while no particle was executing."""


##########################
# Likelihood accumulator #
##########################


@dataclass
class LikelihoodAccumulator:
    """Cumulative log-likelihood of exactly one executing particle.

    A fresh instance is created by `trace` for every particle; it is never
    shared between particles, so concurrent particles need no locking.
    """

    log_weight: Any = None

    def reset(self) -> None:
        self.log_weight = jnp.array(0.0)

    def accumulate(self, delta: ArrayLike) -> None:
        if self.log_weight is None:
            raise ObserveOutsideTraceError(
                "accumulate() called before reset(); no particle is executing."
            )
        self.log_weight = self.log_weight + delta

    def read(self) -> Weight:
        if self.log_weight is None:
            raise ObserveOutsideTraceError(
                "read() called before reset(); no particle is executing."
            )
        return jnp.asarray(self.log_weight)


# The accumulator bound to the particle executing in the current context.
# Each thread starts with its own (empty) context.
_current_accumulator = contextvars.ContextVar(
    "tinyppl_current_accumulator", default=None
)


def observe(observed_value: Any, distribution: Any) -> None:
    """Score `observed_value` under `distribution` and add the log-density to
    the log-weight of the currently executing particle.

    `distribution` is anything exposing `log_density(value)`. A value outside
    the distribution's support contributes `-inf`, which is a valid weight.
    An array of data is scored elementwise and summed into one log-weight.

    Example:
        >>> import jax.random as jrand
        >>> from tinyppl import observe, trace
        >>> from tinyppl.distributions import normal
        >>>
        >>> def program(key):
        ...     mu = normal(0.0, 1.0).sample(key)
        ...     observe(0.5, normal(mu, 1.0))
        ...     return mu
        >>>
        >>> value, log_weight = trace(program, jrand.key(0))
    """
    accumulator = _current_accumulator.get()
    if accumulator is None:
        raise ObserveOutsideTraceError(
            "observe() must be called from inside a program run by trace()."
        )
    accumulator.accumulate(jnp.sum(distribution.log_density(observed_value)))


def trace(
    program: Program,
    key: PRNGKey,
) -> tuple[Any, Weight]:
    """Run `program` once against `key` and return `(value, log_weight)`.

    The particle's log-weight is the sum of the log-densities of every
    `observe` made while the program ran; a program which never observes
    gets log-weight `0.0`. Exceptions raised by the program propagate
    unmodified and the partial log-weight is discarded.

    `trace` adds no randomness of its own and is JAX-traceable whenever
    `program` is, so `jax.vmap(partial(trace, program))(keys)` runs a batch
    of particles.
    """
    accumulator = LikelihoodAccumulator()
    accumulator.reset()
    token = _current_accumulator.set(accumulator)
    try:
        value = program(key)
    finally:
        _current_accumulator.reset(token)
    return value, accumulator.read()
