# -*- coding: utf-8 -*-
"""
Covariance functions for Gaussian-process models.  An overview of the approach:
   -A covariance-function object holds the current values of its parameters in their natural
    (untransformed) space.  Optimizers and samplers work with the logarithm of those values, so
    every gradient returned here is with respect to the log-parameters: dK/dlog(p) = p * dK/dp.
   -`pack` & `unpack` move the parameters to & from a flat vector shared with other covariance
    functions (and a likelihood); the order of `pack` is exactly the order `unpack` consumes.
   -Priors (`HyperPrior` objects) are kept in the dict `priors`, keyed by parameter name.  A
    missing prior is the improper uniform prior.  The energies & prior gradients include the
    Jacobian of the log transformation.
   -Distances are either the default scaled-Euclidean ones (`ScaledEuclidean`, holding one
    length scale or one per input dimension) or those of a pluggable `Metric`.  Exactly one of the
    two is the `distance_model` of a covariance function.
"""
from abc import ABCMeta, abstractmethod
from copy import deepcopy
from warnings import warn
from numpy import (asarray, ascontiguousarray, atleast_1d, concatenate, empty, zeros, zeros_like,
                   full, tril_indices, diag_indices, finfo, sum, sqrt, exp, log)
from numba import jit
from numba.core.errors import NumbaError
from .records import CovarianceRecord

EPS = finfo('float64').eps
MAGN_SIGMA2_DEFAULT = 0.1
LENGTH_SCALE_DEFAULT = 10.0


@jit(nopython=True)
def radius(x, y, scale):
    """Calculate the scaled difference in each direction between all pairs of points."""
    n_xpts, n_dims = x.shape
    n_ypts, n_dims = y.shape
    r = empty((n_xpts, n_ypts, n_dims))
    for i in range(n_xpts):
        for j in range(n_ypts):
            for k in range(n_dims):
                r[i, j, k] = (x[i, k] - y[j, k]) / scale[k]
    return r


@jit(nopython=True)
def _exp_trcov(x, s2, magn):
    # Only the lower triangle is evaluated; the upper is its mirror.
    n_pts, n_dims = x.shape
    C = empty((n_pts, n_pts))
    c0 = magn if magn >= EPS else 0.0
    for i in range(n_pts):
        C[i, i] = c0
        for j in range(i):
            d2 = 0.0
            for k in range(n_dims):
                d2 += s2[k] * (x[i, k] - x[j, k])**2
            c = magn * exp(-sqrt(d2))
            if c < EPS:
                c = 0.0
            C[i, j] = c
            C[j, i] = c
    return C


def trcov_compiled(x, s2, magn):
    """
    Compiled training covariance of the exponential kernel.

    Returns
    -------
    C: array-2D or None,
        the covariance matrix, or None when it was not computed (numba could not compile for these
        inputs).  The caller then falls back to the numpy implementation.
    """
    try:
        return _exp_trcov(ascontiguousarray(x, dtype='float64'),
                          ascontiguousarray(s2, dtype='float64'), float(magn))
    except NumbaError as e:
        warn(f"The compiled training covariance is unavailable ({type(e).__name__}); "
             "using the numpy implementation.", RuntimeWarning)
        return None


def as_inputs(x):
    """Return inputs as a 2D float array (a 1D array is taken as points of a 1D space)."""
    x = asarray(x, dtype='float64')
    if x.ndim == 1:
        return x.reshape((-1, 1))
    elif x.ndim == 2:
        return x
    raise InputError("Inputs must be a 1D or 2D array.", x)


def check_dims(x1, x2):
    if x1.shape[1] != x2.shape[1]:
        raise DimensionMismatch(f"The number of columns in x ({x1.shape[1]}) and x2 "
                                f"({x2.shape[1]}) has to be the same.", x2)


def prior_energy(prior, x):
    """Energy of `x` under `prior`; zero for a missing (improper uniform) prior."""
    if prior is None:
        return 0.0
    return prior.energy(x)


def prior_gradient(prior, x, wrt='x'):
    """Gradient of the energy under `prior`; zero for a missing (improper uniform) prior."""
    if prior is None:
        return zeros_like(asarray(x, dtype='float64'))
    return prior.gradient(x, wrt)


class ScaledEuclidean:
    """
    The default distance model: Euclidean distance after dividing each input direction by its
    length scale.  A single length scale is isotropic, one per input dimension is ARD.
    """
    def __init__(self, length_scale):
        self.length_scale = atleast_1d(asarray(length_scale, dtype='float64')).ravel().copy()

    @property
    def ard(self):
        return self.length_scale.size > 1

    def scales(self, n_dims):
        """Length scale of every one of `n_dims` directions."""
        if not self.ard:
            return full(n_dims, self.length_scale[0])
        if n_dims != self.length_scale.size:
            raise DimensionMismatch(f"Inputs have {n_dims} columns but there are "
                                    f"{self.length_scale.size} length scales.", n_dims)
        return self.length_scale


class CovarianceFunction(metaclass=ABCMeta):
    """
    Provide the interface for covariance functions, as consumed by a GP framework.

    Specific covariance functions inherit this base class and define the parameter handling
    (`set`, `pack`, `unpack`, `energy`), the covariance evaluations (`cov`, `training_cov`,
    `training_var`), the gradients (`grad_hyper`, `grad_input`) and `append_record`.
    """
    type = None

    def __init__(self, n_in):
        self.n_in = n_in
        self.n_out = 1

    def __call__(self, x1, x2=None):
        return self.cov(x1, x2)

    @classmethod
    def init_record(cls, n_in):
        """Create an empty record for the parameters of this type of covariance function."""
        return CovarianceRecord(cls.type, n_in, covariance_function=cls)

    @abstractmethod
    def set(self, *pairs, **fields):
        """Set named fields from (name, value) pairs and/or keyword arguments."""

    @abstractmethod
    def pack(self, w=None):
        """Append the parameters to the vector `w` (new vector when omitted) and return it."""

    @abstractmethod
    def unpack(self, w):
        """Take the parameters from the front of `w`; return (self, remaining w)."""

    @abstractmethod
    def energy(self, x, t=None):
        """Energy of the parameters under their priors (log-transformed space)."""

    @abstractmethod
    def cov(self, x1, x2=None):
        """Covariance between all pairs of the points x1 & x2."""

    @abstractmethod
    def training_cov(self, x):
        """Symmetric covariance matrix of the training inputs x."""

    @abstractmethod
    def training_var(self, x):
        """Variance of each of the training inputs x."""

    @abstractmethod
    def grad_hyper(self, x, x2=None, mask=None):
        """Gradients of the covariance & of the prior energy wrt the log-parameters."""

    @abstractmethod
    def grad_input(self, x, x2=None):
        """Gradients of the covariance wrt every coordinate of the inputs x."""

    @abstractmethod
    def append_record(self, record, index):
        """Write the current parameters into row `index` of `record`."""


class Exponential(CovarianceFunction):
    r"""
    Exponential covariance function object.
    .. math::
        K(x, x'; σ^2, l) = σ^2 \exp( -\sqrt{ \sum_k (x_k - x'_k)^2 / l_k^2 } ),
    with the magnitude, σ^2 (`magn_sigma2`), and the length scale, l (`length_scale`).  The length
    can be a single value applied to all directions or one value per direction (ARD).  Instead of
    length scales, a `Metric` object can supply the distance, K = σ^2 \exp(-d(x, x')).
    The exponential covariance is continuous but not differentiable at zero distance.

    Examples
    --------
    >>> from numpy import array
    >>> from pygpcf import Exponential
    >>> K = Exponential(2, magn_sigma2=1.0, length_scale=[1.0, 1.0])
    >>> K.training_cov(array([[0., 0.], [1., 0.]])).round(4)
    array([[1.    , 0.3679],
           [0.3679, 1.    ]])
    """
    type = 'exponential'

    def __init__(self, n_in, *pairs, fast=True, **fields):
        """
        Create an exponential covariance function w/ default values, then set any given fields.

        Arguments
        ---------
        n_in:  int,
            number of input dimensions.
        pairs:  alternating field names & values (optional),
        fast:  bool (optional),
            whether `training_cov` first tries the compiled implementation.
        fields:  field values (optional),
            any of: `magn_sigma2`, `length_scale`, `metric`, `sampler`, `magn_sigma2_prior` or
            `length_scale_prior`.  Defaults: magn_sigma2=0.1, length_scale=[10]*n_in, no metric,
            no priors.

        Raises
        ------
        ArgumentCountError, InvalidParameterName, InputError:
            see `set`.
        """
        super().__init__(n_in)
        self.magn_sigma2 = MAGN_SIGMA2_DEFAULT
        self.distance_model = ScaledEuclidean(full(n_in, LENGTH_SCALE_DEFAULT))
        self.priors = dict(magn_sigma2=None, length_scale=None)
        self.sampler = None
        self.fast = fast
        self.set(*pairs, **fields)

    def __repr__(self):
        if self.metric is None:
            dist = f"length_scale={self.length_scale.tolist()}"
        else:
            dist = f"metric={self.metric!r}"
        return f"Exponential(n_in={self.n_in}, magn_sigma2={self.magn_sigma2}, {dist})"

    @property
    def metric(self):
        if isinstance(self.distance_model, ScaledEuclidean):
            return None
        return self.distance_model

    @property
    def length_scale(self):
        if isinstance(self.distance_model, ScaledEuclidean):
            return self.distance_model.length_scale
        return None

    def set(self, *pairs, **fields):
        """
        Set the values of the named fields.

        Arguments
        ---------
        pairs:  alternating field names & values,
        fields:  field values as keyword arguments.
        Setting `metric` replaces the length scales; setting `length_scale` replaces a metric.

        Returns
        -------
        self

        Raises
        ------
        ArgumentCountError:
            the names & values in `pairs` are unbalanced.
        InvalidParameterName:
            an unknown field name.
        InputError:
            a non-positive magnitude or length scale, or the wrong number of length scales.
        """
        if len(pairs) % 2 != 0:
            raise ArgumentCountError("Field names & values must be given in pairs.", pairs)
        for name, val in list(zip(pairs[::2], pairs[1::2])) + list(fields.items()):
            if name == 'magn_sigma2':
                if not val > 0:
                    raise InputError("magn_sigma2 must be positive.", val)
                self.magn_sigma2 = float(val)
            elif name == 'length_scale':
                model = ScaledEuclidean(val)
                if model.length_scale.size not in (1, self.n_in):
                    raise InputError(f"length_scale must have 1 or {self.n_in} values.", val)
                if not (model.length_scale > 0).all():
                    raise InputError("length_scale must be positive.", val)
                self.distance_model = model
            elif name == 'metric':
                if val is None:
                    raise InputError("metric must be a Metric object; to remove a metric, set "
                                     "length_scale instead.", val)
                self.distance_model = deepcopy(val)
            elif name == 'sampler':
                self.sampler = val
            elif name in ('magn_sigma2_prior', 'length_scale_prior'):
                self.priors[name[:-len('_prior')]] = deepcopy(val)
            else:
                raise InvalidParameterName(f"Wrong parameter name: '{name}'.", name)
        return self

    def _length_hypers(self):
        """Names of the length-scale prior's parameters that have priors of their own."""
        lp = self.priors['length_scale']
        if lp is None:
            return []
        return [name for name in ('s', 'nu') if name in lp.hyper_priors]

    def pack(self, w=None):
        """
        Combine the parameters into a vector, appended to `w`.  The order is:
            [magn_sigma2, length_scale..., s, nu]  (s & nu only when they have priors),
        or, with a metric:
            [magn_sigma2, (the metric's parameters)...].
        """
        w = zeros(0) if w is None else asarray(w, dtype='float64')
        w = concatenate((w, [self.magn_sigma2]))
        if self.metric is not None:
            return self.metric.pack(w)
        lp = self.priors['length_scale']
        hypers = [lp.params[name] for name in self._length_hypers()]
        return concatenate((w, self.length_scale, hypers))

    def unpack(self, w):
        """
        Set the parameters from the front of `w`, in the order of `pack`.

        Returns
        -------
        self:  the covariance function,
        w:  array-1D, the remainder of `w` for the following covariance functions.
        """
        w = asarray(w, dtype='float64')
        if self.metric is not None:
            n_own = 1
        else:
            n_own = 1 + self.length_scale.size + len(self._length_hypers())
        if w.size < n_own:
            raise InputError(f"The parameter vector has {w.size} values where at least {n_own} "
                             "are required.", w)
        if (w[:n_own] <= 0).any():
            warn("Unpacking non-positive covariance-function parameters.", RuntimeWarning)
        self.magn_sigma2 = float(w[0])
        if self.metric is not None:
            metric, w = self.metric.unpack(w[1:])
            self.distance_model = metric
            return self, w
        n_l = self.length_scale.size
        self.distance_model.length_scale = w[1:1 + n_l].copy()
        lp = self.priors['length_scale']
        for i, name in enumerate(self._length_hypers()):
            lp.params[name] = w[1 + n_l + i]
        return self, w[n_own:]

    def energy(self, x, t=None):
        """
        Evaluate the energy of the prior of the parameters: -ln p(θ) - ln J, where J is the
        Jacobian of the transformation θ = exp(w), since the parameters are log transformed when
        optimized or sampled.  (See Gelman et al., 2004, Bayesian Data Analysis, 2nd ed., p. 24.)
        """
        eprior = prior_energy(self.priors['magn_sigma2'], self.magn_sigma2) - log(self.magn_sigma2)
        if self.metric is not None:
            return eprior + self.metric.energy(x, t)
        lp = self.priors['length_scale']
        for name in self._length_hypers():
            a = lp.params[name]
            eprior += lp.hyper_priors[name].energy(a) - log(a)
        l = self.length_scale
        return eprior + prior_energy(lp, l) - sum(log(l))

    def cov(self, x1, x2=None):
        """
        Evaluate the covariance matrix between two sets of input points.

        Arguments
        ---------
        x1:  array-2D (or 1D for a single dimension),
            points, one per row.
        x2:  array-2D (optional),
            points, one per row; the default is x1.

        Returns
        -------
        C:  array-2D,
            C[i, j] is the covariance between x1[i] & x2[j].

        Raises
        ------
        DimensionMismatch:
            x1 & x2 have different numbers of columns.
        """
        x1 = as_inputs(x1)
        x2 = x1 if x2 is None else as_inputs(x2)
        check_dims(x1, x2)
        if self.metric is not None:
            dist = self.metric.distance(x1, x2)
            dist[dist < EPS] = 0
            return self.magn_sigma2 * exp(-dist)
        R = radius(x1, x2, self.distance_model.scales(x1.shape[1]))
        return self.magn_sigma2 * exp(-sqrt((R**2).sum(axis=2)))

    def training_cov(self, x):
        """
        Evaluate the covariance matrix of the training inputs.  Values below machine epsilon are
        set to zero.  The compiled implementation is tried first (unless `fast` is False).
        """
        x = as_inputs(x)
        if self.metric is not None:
            dist = self.metric.distance(x)
            dist[dist < EPS] = 0
            return self.magn_sigma2 * exp(-dist)
        n_pts, n_dims = x.shape
        s2 = 1 / self.distance_model.scales(n_dims)**2
        C = trcov_compiled(x, s2, self.magn_sigma2) if self.fast else None
        if C is None:
            i, j = tril_indices(n_pts, -1)
            d2 = ((x[i] - x[j])**2 * s2).sum(axis=1)
            C = empty((n_pts, n_pts))
            C[i, j] = C[j, i] = self.magn_sigma2 * exp(-sqrt(d2))
            C[diag_indices(n_pts)] = self.magn_sigma2
            C[C < EPS] = 0
        return C

    def training_var(self, x):
        """Evaluate the variance of each training input (the diagonal of `training_cov`)."""
        x = as_inputs(x)
        C = full(x.shape[0], self.magn_sigma2)
        C[C < EPS] = 0
        return C

    def grad_hyper(self, x, x2=None, mask=None):
        """
        Evaluate the gradients of the covariance matrix & of the prior energy wrt the
        log-parameters.

        Arguments
        ---------
        x:  array-2D,
            input points.
        x2:  array-2D (optional),
            second set of points for the gradients of cov(x, x2); when omitted, the gradients of
            training_cov(x).
        mask:  any (optional),
            when given, the gradients of the variance, training_var(x), only.

        Returns
        -------
        DK:  list of arrays,
            dK/dlog(magn_sigma2) followed by dK/dlog(l) for each length scale (or each metric
            parameter).  The length-scale prior's own parameters have no entry.
        gprior:  array-1D,
            gradient of `energy` wrt each packed parameter, in the order of `pack`.

        Raises
        ------
        DimensionMismatch:
            x & x2 have different numbers of columns.
        """
        x = as_inputs(x)
        metric = self.metric
        gprior_dist = None
        if mask is not None:
            var = self.training_var(x)
            if metric is not None:
                _, gprior_dist = metric.grad_hyper(x, mask=mask)
                n_dist = metric.n_params
            else:
                n_dist = self.length_scale.size
            DK = [var] + [zeros_like(var) for _ in range(n_dist)]
        else:
            if x2 is None:
                C = self.training_cov(x)
            else:
                x2 = as_inputs(x2)
                check_dims(x, x2)
                C = self.cov(x, x2)
            DK = [C]
            if metric is not None:
                gdist, gprior_dist = metric.grad_hyper(x, x2)
                DK += [-C * g for g in gdist]
            else:
                R = radius(x, x if x2 is None else x2, self.distance_model.scales(x.shape[1]))
                R2 = R**2
                dist = sqrt(R2.sum(axis=2))
                if not self.distance_model.ard:
                    DK.append(C * dist)
                else:
                    nz = dist != 0
                    for k in range(x.shape[1]):
                        D = C * R2[:, :, k]
                        D[nz] /= dist[nz]
                        DK.append(D)

        magn = self.magn_sigma2
        gprior = [prior_gradient(self.priors['magn_sigma2'], magn) * magn - 1]
        if metric is not None:
            gprior.extend(gprior_dist)
        else:
            lp = self.priors['length_scale']
            l = self.length_scale
            gprior.extend(prior_gradient(lp, l) * l - 1)
            for name in self._length_hypers():
                a = lp.params[name]
                gprior.append(lp.hyper_priors[name].gradient(a) * a - 1
                              + lp.gradient(l, wrt=name) * a)
        return DK, asarray(gprior, dtype='float64')

    def grad_input(self, x, x2=None):
        """
        Evaluate the gradients of the covariance matrix wrt the inputs x: one matrix for each
        coordinate, ordered by dimension then point (x[0, 0], x[1, 0], ..., x[0, 1], ...).
        With x2, the gradients of cov(x, x2); otherwise of training_cov(x).

        Returns
        -------
        DK:  list of arrays-2D,
        gprior:  array-1D,
            zeros (the inputs have no prior), one per entry of DK.
        """
        x = as_inputs(x)
        if x2 is None:
            K = self.training_cov(x)
        else:
            x2 = as_inputs(x2)
            check_dims(x, x2)
            K = self.cov(x, x2)
        if self.metric is not None:
            gdist, gprior_dist = self.metric.grad_input(x, x2)
            return [-K * g for g in gdist], asarray(gprior_dist, dtype='float64')
        n_pts, n_dims = x.shape
        l = self.distance_model.scales(n_dims)
        R = radius(x, x if x2 is None else x2, l)
        dist = sqrt((R**2).sum(axis=2))
        nz = dist != 0
        DK = []
        for i in range(n_dims):
            for j in range(n_pts):
                D = zeros(K.shape)
                D[j, :] = -R[j, :, i] / l[i]
                if x2 is None:
                    D = D + D.T
                D[nz] /= dist[nz]
                DK.append(D * K)
        return DK, zeros(len(DK))

    def append_record(self, record, index):
        """
        Append the current parameters into row `index` of `record` (see `init_record`).  The
        length scale & the length-scale prior's parameters are recorded only without a metric.
        """
        if self.metric is None:
            lp = self.priors['length_scale']
            if lp is not None and 's' in lp.params:
                record.store('length_hyper', index, lp.params['s'])
                if 'nu' in lp.hyper_priors:
                    record.store('length_hyper_nu', index, lp.params['nu'])
            record.store('length_scale', index, self.length_scale)
        record.store('magn_sigma2', index, self.magn_sigma2)
        return record


def create(n_in, *pairs, **fields):
    """Create an exponential covariance function (see `Exponential`)."""
    return Exponential(n_in, *pairs, **fields)


def configure(kernel, *pairs, **fields):
    """Set named fields of a covariance function (see `Exponential.set`)."""
    return kernel.set(*pairs, **fields)


class KernelError(Exception):
    """Base class for exceptions in the kernels module."""
    pass


class InputError(KernelError):
    """Exception raised for errors in input arguments."""
    def __init__(self, msg, input_argument=None):
        """
        Initialize an InputError.

        Arguments
        ---------
            msg:  string,
                explanation of the error.
            input_argument:  any (optional),
                input argument that is the source of error. Provided so the value can be reported
                when the error is caught.
        """
        self.args = (msg,)
        self.input_argument = input_argument


class ArgumentCountError(InputError):
    """Field names & values that do not come in pairs."""


class InvalidParameterName(InputError):
    """An unknown field name."""


class DimensionMismatch(InputError):
    """Two sets of inputs with different numbers of columns."""
