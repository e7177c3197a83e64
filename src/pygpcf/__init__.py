# -*- coding: utf-8 -*-
__author__ = 'Sean .T. Smith & Benjamin B. Schroeder'

__all__ = ['CovarianceFunction', 'Exponential', 'ScaledEuclidean', 'create', 'configure',
           'radius', 'trcov_compiled', 'EPS',
           'KernelError', 'InputError', 'ArgumentCountError', 'InvalidParameterName',
           'DimensionMismatch',
           'Metric', 'EuclideanMetric',
           'HyperPrior', 'Uniform', 'Jeffreys', 'Normal', 'LogNormal', 'Gamma', 'StudentT',
           'CovarianceRecord']

from .covariance_functions import *
