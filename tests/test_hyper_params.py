import pytest
pytest_param = pytest.mark.parametrize

from numpy import array, linspace, logspace, zeros, exp, log
from numpy.testing import assert_allclose
from scipy.stats import norm, lognorm, gamma, t

from pygpcf import HyperPrior, Uniform, Jeffreys, Normal, LogNormal, Gamma, StudentT

δ = 1e-6


@pytest_param("prior_type", [Uniform, Jeffreys, Normal, LogNormal, Gamma, StudentT])
def test_hyper_priors(prior_type):
    if prior_type == Uniform:
        x = linspace(-3, 3, 7)
        lnp_gs = zeros(7)
        prior = prior_type()
    elif prior_type == Jeffreys:
        x = logspace(-4, 4, 9)
        lnp_gs = log(1 / x)
        prior = prior_type()
    elif prior_type == Normal:
        μ, s = 1.1, 0.65
        x = linspace(-1, 3, 11)
        lnp_gs = norm(loc=μ, scale=s).logpdf(x)
        prior = prior_type(μ=μ, s=s)
    elif prior_type == LogNormal:
        μ, s = 1.1, 0.65
        x = logspace(-1, 1.5, 11)
        lnp_gs = lognorm(s=s, scale=exp(μ)).logpdf(x)
        prior = prior_type(μ=μ, s=s)
    elif prior_type == Gamma:
        mean, std = 3.0, 1.5
        x = logspace(-1, 1.5, 11)
        lnp_gs = gamma(a=(mean / std)**2, scale=std**2 / mean).logpdf(x)
        prior = prior_type(mean, std)
    elif prior_type == StudentT:
        μ, s, ν = 0.3, 1.2, 4.5
        x = linspace(-5, 5, 11)
        lnp_gs = t(df=ν, loc=μ, scale=s).logpdf(x)
        prior = prior_type(μ=μ, s=s, nu=ν)
    assert_allclose(prior(x), lnp_gs, rtol=1e-12, atol=1e-14)
    assert_allclose(prior.energy(x), -lnp_gs.sum(), rtol=1e-12, atol=1e-14)


@pytest_param("prior", [Uniform(), Jeffreys(), Normal(μ=1.1, s=0.65), LogNormal(μ=1.1, s=0.65),
                        Gamma(3.0, 1.5), StudentT(μ=0.3, s=1.2, nu=4.5)])
def test_hyper_prior_gradient(prior):
    x = array([0.4, 1.3, 2.9])
    g_fd = array([(prior.energy(xi + δ) - prior.energy(xi - δ)) / (2 * δ) for xi in x])
    assert_allclose(prior.gradient(x), g_fd, rtol=1e-6, atol=1e-9)


@pytest_param("prior, name", [(Normal(μ=1.1, s=0.65), 's'),
                              (LogNormal(μ=1.1, s=0.65), 's'),
                              (StudentT(μ=0.3, s=1.2, nu=4.5), 's'),
                              (StudentT(μ=0.3, s=1.2, nu=4.5), 'nu')])
def test_hyper_prior_param_gradient(prior, name):
    x = array([0.4, 1.3, 2.9])
    value = prior.params[name]
    prior.params[name] = value + δ
    e_up = prior.energy(x)
    prior.params[name] = value - δ
    e_down = prior.energy(x)
    prior.params[name] = value
    assert_allclose(prior.gradient(x, wrt=name), (e_up - e_down) / (2 * δ), rtol=1e-6)


def test_hierarchical_names():
    prior = StudentT(hyper_priors=dict(nu=Jeffreys()))
    assert list(prior.hyper_priors) == ['nu']
    with pytest.raises(ValueError):
        Normal(hyper_priors=dict(nu=Jeffreys()))
    with pytest.raises(NotImplementedError):
        Jeffreys().gradient(1.0, wrt='s')


def test_base_prior_call_is_a_placeholder():
    class Flat(HyperPrior):
        def __call__(self, x, ret_grad=False):
            lnp = zeros(x.shape)
            return (lnp, zeros(x.shape)) if ret_grad else lnp

    assert HyperPrior()(array([1.0])) is None
    assert Flat().energy([1.0, 2.0]) == 0
    assert_allclose(Flat().gradient([1.0, 2.0]), [0, 0])
