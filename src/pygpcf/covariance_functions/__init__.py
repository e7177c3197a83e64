__all__ = ['CovarianceFunction', 'Exponential', 'ScaledEuclidean', 'create', 'configure',
           'radius', 'trcov_compiled', 'EPS',
           'KernelError', 'InputError', 'ArgumentCountError', 'InvalidParameterName',
           'DimensionMismatch',
           'Metric', 'EuclideanMetric',
           'HyperPrior', 'Uniform', 'Jeffreys', 'Normal', 'LogNormal', 'Gamma', 'StudentT',
           'CovarianceRecord']

from .kernels import (CovarianceFunction, Exponential, ScaledEuclidean, create, configure,
                      radius, trcov_compiled, EPS,
                      KernelError, InputError, ArgumentCountError, InvalidParameterName,
                      DimensionMismatch)
from .metrics import Metric, EuclideanMetric
from .hyper_params import HyperPrior, Uniform, Jeffreys, Normal, LogNormal, Gamma, StudentT
from .records import CovarianceRecord
