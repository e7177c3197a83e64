# -*- coding: utf-8 -*-
"""
Metrics that replace the default scaled-Euclidean distance of a covariance function.

A covariance function with a `metric` leaves the distance, its parameters, their priors & their
gradients to the metric.  It consumes a metric only through the interface of `Metric`.
"""
from abc import ABCMeta, abstractmethod
from numpy import (asarray, atleast_1d, concatenate, stack, zeros, full, ones, sum, sqrt, log)
from .kernels import (radius, as_inputs, check_dims, prior_energy, prior_gradient, InputError)


class Metric(metaclass=ABCMeta):
    """
    Provide the interface of distance metrics for covariance functions.

    Gradients of the distance are wrt the log of the metric's parameters.  The prior gradients are
    those of `energy`, in the order of `pack`.
    """
    @property
    @abstractmethod
    def n_params(self):
        """Number of parameters the metric packs."""

    @abstractmethod
    def distance(self, x, x2=None):
        """Distance matrix between the points of x & x2 (default x)."""

    @abstractmethod
    def pack(self, w):
        """Append the parameters to the vector `w` and return it."""

    @abstractmethod
    def unpack(self, w):
        """Take the parameters from the front of `w`; return (self, remaining w)."""

    @abstractmethod
    def energy(self, x, t=None):
        """Energy of the parameters under their priors (log-transformed space)."""

    @abstractmethod
    def grad_hyper(self, x, x2=None, mask=None):
        """Return (distance gradients wrt each log-parameter, prior gradients)."""

    @abstractmethod
    def grad_input(self, x, x2=None):
        """Return (distance gradients wrt each input coordinate, prior gradients)."""


class EuclideanMetric(Metric):
    r"""
    Euclidean metric with one length scale per group of input dimensions.
    .. math::
        d(x, x') = \sqrt{ \sum_g \sum_{k \in g} (x_k - x'_k)^2 / l_g^2 }.
    Dimensions in no group do not contribute to the distance.

    Arguments
    ---------
    components:  list of lists of ints,
        the input dimensions of each group.
    length_scale:  array-1D (optional),
        one length scale per group (default 1).
    length_scale_prior:  HyperPrior (optional),
        prior shared by the length scales; improper uniform when omitted.
    """
    def __init__(self, components, length_scale=None, length_scale_prior=None):
        self.components = [list(atleast_1d(c)) for c in components]
        if length_scale is None:
            length_scale = full(len(self.components), 1.0)
        self.length_scale = atleast_1d(asarray(length_scale, dtype='float64')).ravel().copy()
        if self.length_scale.size != len(self.components):
            raise InputError("EuclideanMetric needs one length scale per component.", length_scale)
        self.length_scale_prior = length_scale_prior

    def __repr__(self):
        return (f"EuclideanMetric(components={self.components}, "
                f"length_scale={self.length_scale.tolist()})")

    @property
    def n_params(self):
        return self.length_scale.size

    def _inputs(self, x, x2):
        x = as_inputs(x)
        x2 = x if x2 is None else as_inputs(x2)
        check_dims(x, x2)
        return x, x2

    def _group_r2(self, x, x2):
        """Scaled squared distance of each group, stacked along the last axis."""
        R = radius(x, x2, ones(x.shape[1]))
        return stack([(R[:, :, c]**2).sum(axis=2) / l**2
                      for c, l in zip(self.components, self.length_scale)], axis=2)

    def _scale2(self, n_dims):
        """1 / l^2 of each input dimension (zero for dimensions in no group)."""
        s2 = zeros(n_dims)
        for c, l in zip(self.components, self.length_scale):
            s2[c] = 1 / l**2
        return s2

    def distance(self, x, x2=None):
        x, x2 = self._inputs(x, x2)
        return sqrt(self._group_r2(x, x2).sum(axis=2))

    def pack(self, w):
        return concatenate((asarray(w, dtype='float64'), self.length_scale))

    def unpack(self, w):
        w = asarray(w, dtype='float64')
        n = self.n_params
        if w.size < n:
            raise InputError(f"The parameter vector has {w.size} values where at least {n} are "
                             "required by the metric.", w)
        self.length_scale = w[:n].copy()
        return self, w[n:]

    def energy(self, x, t=None):
        l = self.length_scale
        return prior_energy(self.length_scale_prior, l) - sum(log(l))

    def grad_hyper(self, x, x2=None, mask=None):
        l = self.length_scale
        gprior = prior_gradient(self.length_scale_prior, l) * l - 1
        x, x2 = self._inputs(x, x2)
        if mask is not None:
            return [zeros(x.shape[0]) for _ in range(self.n_params)], gprior
        G = self._group_r2(x, x2)
        dist = sqrt(G.sum(axis=2))
        nz = dist != 0
        gdist = []
        for g in range(self.n_params):
            D = -G[:, :, g]
            D[nz] /= dist[nz]
            gdist.append(D)
        return gdist, gprior

    def grad_input(self, x, x2=None):
        symmetric = x2 is None
        x, x2 = self._inputs(x, x2)
        n_pts, n_dims = x.shape
        s2 = self._scale2(n_dims)
        R = radius(x, x2, ones(n_dims))
        dist = sqrt((R**2 * s2).sum(axis=2))
        nz = dist != 0
        gdist = []
        for i in range(n_dims):
            for j in range(n_pts):
                D = zeros(dist.shape)
                D[j, :] = s2[i] * R[j, :, i]
                if symmetric:
                    D = D + D.T
                D[nz] /= dist[nz]
                gdist.append(D)
        return gdist, zeros(len(gdist))
