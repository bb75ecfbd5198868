#!/usr/bin/env python

"""File: pipeline.py
Module composing the complete clustering analysis: projection, intensity
estimation, simulation under the null model and the envelope test

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

from .config import AnalysisConfig
from .errors import InsufficientPointsError
from .kde import estimate_intensity
from .pointpatterns import PointPattern, PointPatternCollection
from .transform import build_pattern
from .utils import AlmostImmutable

logger = logging.getLogger(__name__)


class AnalysisResult(AlmostImmutable):
    """
    Container for the values produced by each stage of `analyze`

    :pattern: the observed PointPattern
    :surface: the estimated IntensitySurface
    :simulations: PointPatternCollection of patterns under the null model
    :result: ClusteringResult of the envelope test
    :config: the AnalysisConfig used

    """

    def __init__(self, pattern, surface, simulations, result, config):
        self.pattern = pattern
        self.surface = surface
        self.simulations = simulations
        self.result = result
        self.config = config

    @property
    def verdict(self):
        return self.result.verdict

    @property
    def pvalue(self):
        return self.result.pvalue


def analyze(data, config=None):
    """
    Test a set of locations for spatial clustering

    Parameters
    ----------
    data : PointPattern or array-like, shape (n, 2)
        Either a pattern in planar coordinates, or (longitude, latitude)
        pairs to be projected into `config.crs`.
    config : AnalysisConfig, optional
        Parameters of the analysis. If None, the defaults are used.

    Returns
    -------
    AnalysisResult
        The observed pattern, intensity surface, simulated patterns and the
        test result.

    """
    if config is None:
        config = AnalysisConfig()

    if isinstance(data, PointPattern):
        pattern = data
    else:
        pattern = build_pattern(data, crs=config.crs, margin=config.margin,
                                edge_correction=config.edge_correction)
    if len(pattern) < 2:
        raise InsufficientPointsError("a clustering analysis needs at least "
                                      "two points, got {}"
                                      .format(len(pattern)),
                                      parameter='data')
    logger.info("analyzing %d points in a window of area %g", len(pattern),
                pattern.window.area)

    surface = estimate_intensity(pattern, config.bandwidth,
                                 resolution=config.resolution,
                                 kernel=config.kernel, n_jobs=config.n_jobs)
    logger.info("estimated intensity on a %dx%d grid with bandwidth %g; "
                "total mass %.1f", surface.shape[0], surface.shape[1],
                config.bandwidth, surface.total_mass())

    if config.null_model == 'inhomogeneous':
        intensity = surface
    else:
        intensity = pattern.intensity()
    simulations = PointPatternCollection.from_simulation(
        config.nsims, pattern.window, intensity, process=config.process,
        seed=config.seed, n_jobs=config.n_jobs,
        edge_correction=config.edge_correction)
    logger.info("simulated %d %s patterns with %d points in total",
                len(simulations), config.null_model, simulations.npoints)

    r = pattern.rvals(rmax=config.rmax, nrvals=config.nrvals)
    result = simulations.ktest(pattern, r=r, rank=config.rank,
                               statistic=config.statistic, rmin=config.rmin,
                               min_run=config.min_run,
                               reference_r=config.reference_r,
                               n_jobs=config.n_jobs)
    logger.info("verdict: %s (p = %.4g, rank %d envelope, alpha %.3g)",
                result.verdict, result.pvalue, result.rank, result.alpha)
    if result.onset is not None:
        logger.info("envelope exceeded from r = %.4g", result.onset)
    return AnalysisResult(pattern, surface, simulations, result, config)
