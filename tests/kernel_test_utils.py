"""
Shared fixtures & finite-difference helpers for the covariance-function tests.
"""
from numpy import array, log, exp
from numpy.random import default_rng

δ = 1e-6  # step in log-parameter (or input) space for central differences


def example_inputs(n_pts=6, n_dims=2, seed=42, spread=2.0):
    """Random, distinct input points."""
    rng = default_rng(seed=seed)
    return spread * rng.standard_normal((n_pts, n_dims))


def log_param_fd(kernel, func, i, h=δ):
    """
    Central difference of `func(kernel)` wrt the log of the i-th packed parameter.  The kernel is
    restored before returning.
    """
    w = kernel.pack()
    lw = log(w)
    up, down = lw.copy(), lw.copy()
    up[i] += h
    down[i] -= h
    kernel.unpack(exp(up))
    f_up = func(kernel)
    kernel.unpack(exp(down))
    f_down = func(kernel)
    kernel.unpack(w)
    return (f_up - f_down) / (2 * h)


def input_fd(func, x, j, i, h=δ):
    """Central difference of `func(x)` wrt the coordinate x[j, i]."""
    up, down = x.copy(), x.copy()
    up[j, i] += h
    down[j, i] -= h
    return (func(up) - func(down)) / (2 * h)


three_points = array([[0.0, 0.0],
                      [1.0, 0.0],
                      [0.0, 1.0]])
