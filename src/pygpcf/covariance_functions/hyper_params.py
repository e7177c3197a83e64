# -*- coding: utf-8 -*-
"""
The module for the hyper-priors

Prior distributions for the parameters of covariance functions.  Each prior provides the log of
its density (and, if requested, its derivative) through `__call__`, from which the base class
derives the energy (negative log density) and its gradients as they are consumed by the
covariance functions.

A prior's own distribution parameters are kept in the dict `params` (e.g. the scale `s` and the
degrees of freedom `nu` of a Student-t).  Those named in `hierarchical` may carry a prior of their
own, given in `hyper_priors`; the covariance function then treats them as additional unknowns.
"""
from numpy import asarray, zeros_like, sum, log, pi as π
from scipy.special import gammaln, digamma

LOG2PI = log(2 * π)


class HyperPrior:
    """Base class for hyper-parameter prior-distributions."""
    hierarchical = ()  # distribution parameters that may be given a prior of their own

    def __init__(self, hyper_priors=None, **params):
        """
        Arguments:
            hyper_priors - dict (optional), priors for the distribution parameters,
            **params - distribution-specific parameter values.
        """
        self.params = params
        self.hyper_priors = dict() if hyper_priors is None else dict(hyper_priors)
        for name in self.hyper_priors:
            if name not in self.hierarchical:
                raise ValueError(f"{type(self).__name__} has no hierarchical parameter '{name}'.")

    def __call__(self, x, ret_grad=False):
        """
        Arguments:
            x - current hyper-parameter value(s),
            ret_grad - bool (optional), when ret_grad is True also return dlnpdf.
        Returns:
            lnpdf - ln of hyper-parameter prior (elementwise),
            dlnpdf - derivative of lnpdf wrt x (elementwise, optional).
        """
        pass

    def dparam(self, x, name):
        """Derivative of the summed ln-density wrt the distribution parameter `name`."""
        raise NotImplementedError(f"{type(self).__name__} is not differentiable wrt '{name}'.")

    def energy(self, x):
        """Energy, -Σ ln p(x), of the value(s) x."""
        return -sum(self(asarray(x, dtype='float64')))

    def gradient(self, x, wrt='x'):
        """
        Gradient of the energy either wrt the value(s) x (elementwise) or wrt the named
        distribution parameter (summed over x).
        """
        x = asarray(x, dtype='float64')
        if wrt == 'x':
            return -self(x, ret_grad=True)[1]
        return -self.dparam(x, wrt)


class Uniform(HyperPrior):
    """
    Improper uniform (flat) hyper-parameter prior:
        f(x) = const.,
        ln(f) = 0 (the constant is dropped).
    """
    def __call__(self, x, ret_grad=False):
        lnpdf = zeros_like(x, dtype='float64')
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, zeros_like(x, dtype='float64')


class Jeffreys(HyperPrior):
    """
    Jeffreys' distribution for hyper-parameter priors (non-informative) for a variable with a
    support on [0, inf) such as magnitudes & length scales:
        f(x) = 1 / x,
        ln(f) = -ln(x)
    """
    def __call__(self, x, ret_grad=False):
        lnpdf = -log(x)
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, -1 / x


class Normal(HyperPrior):
    """
    Normal (a.k.a. Gaussian) hyper-parameter prior distribution w/ a support on (-inf, inf):
        f(x; μ, s) = 1 / \\sqrt(2 π s^2) * \\exp(-(x - μ)^2 / (2 s^2)),
        ln(f; μ, s) = -1/2 [ ln(2 π) + 2 ln(s) + ([x - μ] / s)^2 ].
    The scale, s, can be given a prior of its own.
    """
    hierarchical = ('s',)

    def __init__(self, μ=0, s=1, hyper_priors=None):
        super().__init__(hyper_priors=hyper_priors, μ=μ, s=s)

    def __call__(self, x, ret_grad=False):
        μ, s = self.params['μ'], self.params['s']
        lnpdf = -0.5 * (LOG2PI + 2 * log(s) + ((x - μ) / s)**2)
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, -(x - μ) / s**2

    def dparam(self, x, name):
        if name != 's':
            return super().dparam(x, name)
        μ, s = self.params['μ'], self.params['s']
        return sum(-1 / s + (x - μ)**2 / s**3)


class LogNormal(HyperPrior):
    """
    Log-normal distribution for hyper-parameter priors w/ a support on [0, inf):
        f(x; μ, s) = 1 / (x \\sqrt(2 π s^2)) * \\exp(-(ln(x) - μ)^2 / (2 s^2)), x > 0,
        ln(f; μ, s) = -1/2 [ ln(2 π s^2) + 2 ln(x) + ([ln(x) - μ] / s)^2 ], x > 0.
    The scale, s, can be given a prior of its own.
    """
    hierarchical = ('s',)

    def __init__(self, μ=0, s=1, hyper_priors=None):
        super().__init__(hyper_priors=hyper_priors, μ=μ, s=s)

    def __call__(self, x, ret_grad=False):
        μ, s = self.params['μ'], self.params['s']
        lnx = log(x)
        lnpdf = -log(s * x) - 0.5 * LOG2PI - 0.5 * ((lnx - μ) / s)**2
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, -1 / x - (lnx - μ) / (s**2 * x)

    def dparam(self, x, name):
        if name != 's':
            return super().dparam(x, name)
        μ, s = self.params['μ'], self.params['s']
        return sum(-1 / s + (log(x) - μ)**2 / s**3)


class Gamma(HyperPrior):
    """
    Gamma hyper-parameter priors w/ a support on [0, inf):
        f(x ; α , θ) = x^(α - 1) * exp(-x / θ) / (θ^α * Γ(α)),
        ln(f; α, θ) = (α - 1) ln(x) - x / θ - α ln(θ) - lnΓ(α)
    Specified by its mean & standard deviation.
    """
    def __init__(self, mean, std):
        super().__init__(α=(mean / std)**2, θ=std**2 / mean)
        self.denominator = self.params['α'] * log(self.params['θ']) + gammaln(self.params['α'])

    def __call__(self, x, ret_grad=False):
        k = self.params['α'] - 1.
        θ = self.params['θ']
        lnpdf = k * log(x) - x / θ - self.denominator
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, k / x - 1 / θ


class StudentT(HyperPrior):
    """
    Student-t hyper-parameter prior w/ a support on (-inf, inf):
        ln(f; μ, s, ν) = lnΓ((ν+1)/2) - lnΓ(ν/2) - 1/2 ln(ν π s^2)
                         - (ν+1)/2 ln(1 + (x - μ)^2 / (ν s^2)).
    Both the scale, s, and the degrees of freedom, ν, can be given priors of their own.
    """
    hierarchical = ('s', 'nu')

    def __init__(self, μ=0, s=1, nu=4, hyper_priors=None):
        super().__init__(hyper_priors=hyper_priors, μ=μ, s=s, nu=nu)

    def __call__(self, x, ret_grad=False):
        μ, s, ν = self.params['μ'], self.params['s'], self.params['nu']
        r = x - μ
        lnpdf = (gammaln((ν + 1) / 2) - gammaln(ν / 2) - 0.5 * log(ν * π * s**2)
                 - (ν + 1) / 2 * log(1 + r**2 / (ν * s**2)))
        if not ret_grad:
            return lnpdf
        else:
            return lnpdf, -(ν + 1) * r / (ν * s**2 + r**2)

    def dparam(self, x, name):
        μ, s, ν = self.params['μ'], self.params['s'], self.params['nu']
        r2 = (x - μ)**2
        if name == 's':
            return sum(-1 / s + (ν + 1) * r2 / (s * (ν * s**2 + r2)))
        elif name == 'nu':
            return sum(0.5 * digamma((ν + 1) / 2) - 0.5 * digamma(ν / 2) - 1 / (2 * ν)
                       - 0.5 * log(1 + r2 / (ν * s**2))
                       + (ν + 1) * r2 / (2 * ν * (ν * s**2 + r2)))
        return super().dparam(x, name)
