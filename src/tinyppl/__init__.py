from beartype import BeartypeConf
from beartype.claw import beartype_this_package

conf = BeartypeConf(
    is_color=True,
    is_debug=False,
    is_pep484_tower=True,
    violation_type=TypeError,
)

beartype_this_package(conf=conf)

from .core import (
    DegenerateWeightsError,
    LikelihoodAccumulator,
    ObserveOutsideTraceError,
    Pytree,
    observe,
    trace,
)
from .distributions import (
    Distribution,
    bernoulli,
    beta,
    categorical,
    dirichlet,
    exponential,
    flip,
    gamma,
    normal,
    poisson,
    tfp_distribution,
    uniform,
    uniform_discrete,
)
from .inference import (
    ParticleCollection,
    importance_sample,
    normalize,
    posterior,
)

__all__ = [
    "DegenerateWeightsError",
    "Distribution",
    "LikelihoodAccumulator",
    "ObserveOutsideTraceError",
    "ParticleCollection",
    "Pytree",
    "bernoulli",
    "beta",
    "categorical",
    "dirichlet",
    "exponential",
    "flip",
    "gamma",
    "importance_sample",
    "normal",
    "normalize",
    "observe",
    "poisson",
    "posterior",
    "tfp_distribution",
    "trace",
    "uniform",
    "uniform_discrete",
]
