import pytest
pytest_param = pytest.mark.parametrize

from numpy import arange, isnan
from numpy.testing import assert_array_equal

from pygpcf import Exponential, EuclideanMetric, StudentT, LogNormal, Jeffreys, CovarianceRecord


def test_init_record():
    record = Exponential.init_record(3)
    assert isinstance(record, CovarianceRecord)
    assert record.type == 'exponential'
    assert record.n_in == 3 and record.n_out == 1
    assert record.covariance_function is Exponential
    assert len(record) == 0
    assert record['magn_sigma2'].shape == (0, 0)


def test_append_record_grows():
    record = Exponential.init_record(2)
    K = Exponential(2)
    n = 40  # beyond the initial allocation
    for i in range(n):
        K.set(magn_sigma2=1.0 + i, length_scale=[0.5 + i, 2.0])
        K.append_record(record, i)
    assert len(record) == n
    assert_array_equal(record['magn_sigma2'][:, 0], 1.0 + arange(n))
    assert_array_equal(record['length_scale'][:, 0], 0.5 + arange(n))
    assert_array_equal(record['length_scale'][:, 1], 2.0)
    assert 'length_hyper' not in record


def test_append_record_hierarchical():
    prior = StudentT(s=0.8, nu=5, hyper_priors=dict(s=LogNormal(), nu=Jeffreys()))
    K = Exponential(2, length_scale_prior=prior)
    record = K.append_record(Exponential.init_record(2), 0)
    K.priors['length_scale'].params['s'] = 0.9
    K.append_record(record, 1)
    assert_array_equal(record['length_hyper'][:, 0], [0.8, 0.9])
    assert_array_equal(record['length_hyper_nu'][:, 0], [5, 5])


def test_append_record_metric():
    K = Exponential(2, magn_sigma2=0.3, metric=EuclideanMetric([[0, 1]]))
    record = K.append_record(Exponential.init_record(2), 0)
    assert_array_equal(record['magn_sigma2'], [[0.3]])
    assert 'length_scale' not in record
    assert record['length_scale'].shape == (1, 0)


def test_record_skipped_rows():
    record = Exponential.init_record(1)
    Exponential(1, magn_sigma2=2.0).append_record(record, 3)
    assert len(record) == 4
    assert isnan(record['magn_sigma2'][:3]).all()
    assert record['magn_sigma2'][3, 0] == 2.0


def test_record_kernel():
    record = Exponential.init_record(2)
    Exponential(2, magn_sigma2=0.4, length_scale=[1.5, 2.5]).append_record(record, 0)
    Exponential(2, magn_sigma2=0.6, length_scale=[3.5, 4.5]).append_record(record, 1)
    K = record.kernel(1)
    assert isinstance(K, Exponential)
    assert K.magn_sigma2 == 0.6
    assert_array_equal(K.length_scale, [3.5, 4.5])


def test_record_errors():
    record = Exponential.init_record(2)
    Exponential(2, length_scale=[1.0, 2.0]).append_record(record, 0)
    with pytest.raises(ValueError):
        Exponential(2, length_scale=1.0).append_record(record, 1)
    with pytest.raises(KeyError):
        record['noise']
    with pytest.raises(IndexError):
        record.store('magn_sigma2', -1, 1.0)
