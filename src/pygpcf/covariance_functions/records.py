# -*- coding: utf-8 -*-
"""
Records of covariance-function parameters, as collected over the samples of an MCMC run (or the
iterations of an optimizer).  Each field is an array with one row per recorded sample.
"""
from numpy import asarray, atleast_1d, full, empty, nan


class CovarianceRecord:
    """
    Append-only record of the parameters of one covariance function.

    Created empty by `CovarianceFunction.init_record` and filled, one row at a time, by
    `CovarianceFunction.append_record`.  Storage is allocated on the first write to a field and
    doubles whenever a row index beyond the current capacity is written.  Rows that were never
    written for a field hold NaN.
    """
    fields = ('magn_sigma2', 'length_scale', 'length_hyper', 'length_hyper_nu')
    initial_capacity = 16

    def __init__(self, type, n_in, covariance_function=None):
        self.type = type
        self.n_in = n_in
        self.n_out = 1
        self.covariance_function = covariance_function
        self.n_rows = 0
        self._data = dict()

    def __len__(self):
        return self.n_rows

    def __contains__(self, name):
        return name in self._data

    def __getitem__(self, name):
        if name not in self.fields:
            raise KeyError(name)
        if name not in self._data:
            return empty((self.n_rows, 0))
        return self._data[name][:self.n_rows]

    def store(self, name, index, value):
        """Write `value` into row `index` of field `name`."""
        if name not in self.fields:
            raise KeyError(name)
        if index < 0:
            raise IndexError(f"Record index must be non-negative, got {index}.")
        value = atleast_1d(asarray(value, dtype='float64')).ravel()
        data = self._data.get(name)
        if data is None:
            data = full((max(self.initial_capacity, index + 1), value.size), nan)
        elif data.shape[1] != value.size:
            raise ValueError(f"Record field '{name}' holds {data.shape[1]} values per row, "
                             f"got {value.size}.")
        if index >= data.shape[0]:
            grown = full((max(2 * data.shape[0], index + 1), data.shape[1]), nan)
            grown[:data.shape[0]] = data
            data = grown
        data[index] = value
        self._data[name] = data
        self.n_rows = max(self.n_rows, index + 1)
        return self

    def kernel(self, index):
        """Rebuild a covariance function holding the magnitude & length scale of row `index`."""
        fields = dict(magn_sigma2=self['magn_sigma2'][index, 0])
        if 'length_scale' in self:
            fields['length_scale'] = self['length_scale'][index]
        return self.covariance_function(self.n_in, **fields)
