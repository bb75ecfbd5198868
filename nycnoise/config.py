#!/usr/bin/env python

"""File: config.py
Module defining the default analysis parameters, the immutable parameter
object passed through the analysis pipeline, and logging setup

"""
# Copyright 2015 Daniel Wennberg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging

from .utils import AlmostImmutable

# Geographic CRS of raw 311 coordinates, and the NY Long Island state plane
# (US survey feet) that all distances are measured in
GEOGRAPHIC_CRS = 'EPSG:4326'
DEFAULT_CRS = 'EPSG:2263'

RSAMPLES = 49
BANDWIDTH = 500.0
RESOLUTION = 128
NSIMS = 999

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class AnalysisConfig(AlmostImmutable):
    """
    Immutable set of parameters for a complete clustering analysis

    Parameters
    ----------
    crs : str, optional
        Planar CRS to project longitude/latitude pairs into.
    margin : scalar, optional
        Padding added on each side of the bounding box of the projected points
        when deriving the observation window.
    bandwidth : scalar, optional
        Kernel bandwidth (standard deviation) for the intensity estimate, in
        the units of `crs`.
    resolution : integer, optional
        Number of intensity grid cells along the longer side of the window.
    kernel : str, optional
        Kernel name, see `nycnoise.kde.kernels`.
    nsims : integer, optional
        Number of simulated patterns under the null model.
    process : str {'poisson', 'binomial'}, optional
        Point count distribution for homogeneous simulations.
    null_model : str {'homogeneous', 'inhomogeneous'}, optional
        Whether to simulate CSR at the standard intensity of the observed
        pattern, or an inhomogeneous Poisson process with the estimated
        intensity surface.
    rank : integer, optional
        Rank of the envelope bounds among the simulated curves.
    rmax : scalar, optional
        Largest distance to evaluate the K-function at. If None, the radius of
        the circle inscribed in the window is used.
    nrvals : integer, optional
        Number of distances to evaluate the K-function at.
    rmin : scalar, optional
        Envelope exceedances at distances up to and including `rmin` are
        ignored by the verdict.
    min_run : integer, optional
        Number of consecutive distances the observed curve must stay outside
        the envelope for the verdict to be other than 'csr'.
    statistic : str {'K', 'L'}, optional
        Whether to test on the K-function or the L-function.
    edge_correction : str {'isotropic', 'translation', 'periodic', 'none'}
        Edge correction for the K-function.
    reference_r : scalar, optional
        Distance at which to compute the Monte Carlo p-value. If None, the
        p-value of the global deviation statistic is computed.
    seed : None, int, SeedSequence or Generator, optional
        Seed for the simulations.
    n_jobs : integer, optional
        Number of joblib workers for the simulations and the K-functions.

    """

    _defaults = dict(
        crs=DEFAULT_CRS,
        margin=0.0,
        bandwidth=BANDWIDTH,
        resolution=RESOLUTION,
        kernel='gaussian',
        nsims=NSIMS,
        process='poisson',
        null_model='homogeneous',
        rank=1,
        rmax=None,
        nrvals=RSAMPLES,
        rmin=0.0,
        min_run=3,
        statistic='K',
        edge_correction='isotropic',
        reference_r=None,
        seed=None,
        n_jobs=1,
    )

    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(self._defaults)
        if unknown:
            raise TypeError("unknown configuration parameters: {}"
                            .format(sorted(unknown)))
        if kwargs.get('null_model', 'homogeneous') not in ('homogeneous',
                                                           'inhomogeneous'):
            raise ValueError("unknown null model: {}"
                             .format(kwargs['null_model']))
        for (name, default) in self._defaults.items():
            setattr(self, name, kwargs.get(name, default))

    def as_dict(self):
        """
        Return the parameters as a new dict

        """
        return {name: getattr(self, name) for name in self._defaults}

    def replace(self, **changes):
        """
        Create a new configuration with some parameters changed

        :changes: parameters to change
        :returns: new AnalysisConfig instance

        """
        params = self.as_dict()
        params.update(changes)
        return type(self)(**params)

    def __eq__(self, other):
        if not isinstance(other, AnalysisConfig):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self):
        return hash(tuple(sorted((k, repr(v))
                                 for (k, v) in self.as_dict().items())))

    def __repr__(self):
        params = ', '.join('{}={!r}'.format(k, v)
                           for (k, v) in self.as_dict().items())
        return '{}({})'.format(type(self).__name__, params)


def configure_logging(level=logging.INFO):
    """
    Send log records from this package to stderr

    :level: logging level for the root handler

    """
    logging.basicConfig(format=LOG_FORMAT, level=level)
    logging.getLogger(__package__).setLevel(level)
