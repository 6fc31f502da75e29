import jax.numpy as jnp
import jax.random as jrand
import pytest

from examples.coins.core import analytic_fair_coin_posterior, make_three_coins
from examples.hmm.core import create_simple_hmm_params, forward_filter, make_hmm
from examples.mixture.core import make_mixture
from tinyppl import importance_sample, posterior


def test_analytic_fair_coin_posterior():
    assert analytic_fair_coin_posterior(3) == pytest.approx((1 / 24) / (1 / 24 + 1 / 3))
    assert analytic_fair_coin_posterior(0) == pytest.approx(0.5)


def test_three_coins_without_heads_matches_prior():
    estimate = posterior(jrand.key(0), make_three_coins(0), 100_000, strategy="vmap")
    assert abs(float(estimate) - 1 / 3) < 0.01


def test_hmm_matches_forward_filter():
    observations = jnp.array([0, 0, 1, 1, 1])
    params = create_simple_hmm_params()
    filtered, log_marginal = forward_filter(observations, *params)
    assert jnp.allclose(jnp.sum(filtered), 1.0)

    particles = importance_sample(
        jrand.key(11), make_hmm(observations, *params), 100_000, strategy="vmap"
    )
    assert abs(float(particles.estimate()) - float(filtered[1])) < 0.02
    assert abs(float(particles.log_marginal_likelihood() - log_marginal)) < 0.02


def test_hmm_single_observation_forward_filter():
    initial_probs, transition_matrix, emission_matrix = create_simple_hmm_params()
    filtered, log_marginal = forward_filter(
        jnp.array([1]), initial_probs, transition_matrix, emission_matrix
    )
    joint = initial_probs * emission_matrix[:, 1]
    assert jnp.allclose(filtered, joint / jnp.sum(joint))
    assert jnp.allclose(log_marginal, jnp.log(jnp.sum(joint)))


def test_mixture_cluster_count_runs_sequentially():
    estimate = posterior(jrand.key(5), make_mixture(), 100)
    assert float(estimate) >= 1.0


def test_mixture_on_threads_matches_sequential():
    sequential = posterior(jrand.key(5), make_mixture(), 40)
    threaded = posterior(
        jrand.key(5), make_mixture(), 40, strategy="threads", max_workers=4
    )
    assert jnp.allclose(sequential, threaded)
