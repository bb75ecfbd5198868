#!/usr/bin/env python

"""File: kde.py
Module defining kernels, kernel density estimates of the intensity of planar
point patterns, and the gridded intensity surfaces they produce

"""
# Copyright 2016 Daniel Wennberg
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
import numbers

import numpy
import pandas
from scipy.special import gamma, ndtr
from scipy.spatial.distance import cdist
from sklearn.model_selection import GridSearchCV, KFold
from sklearn.neighbors import KernelDensity
from matplotlib import pyplot

from .config import RESOLUTION
from .errors import (InvalidBandwidthError, DegenerateWindowError,
                     InsufficientPointsError)
from .utils import AlmostImmutable, readonly, parallel_map

logger = logging.getLogger(__name__)

_PI = numpy.pi
_2PI = 2.0 * _PI

# Upper limit on the number of kernel evaluations held in memory at once
_BLOCK_SIZE = 2 ** 20


def _vn(dim):
    dim_2 = 0.5 * dim
    return (_PI ** (dim_2)) / gamma(dim_2 + 1)


def _sn(dim):
    return _2PI * _vn(dim - 1)


def _tophat_form(u):
    uabs = numpy.abs(u)
    out = numpy.zeros_like(uabs, dtype=float)
    out[uabs < 1.0] = 1.0
    return out


def _tophat_volume(dim):
    return _vn(dim)


def _linear_form(u):
    uabs = numpy.abs(u)
    return numpy.clip(1.0 - uabs, 0.0, None)


def _linear_volume(dim):
    return _vn(dim) / (dim + 1)


def _epanechnikov_form(u):
    uabs = numpy.abs(u)
    return numpy.clip(1.0 - uabs * uabs, 0.0, None)


def _epanechnikov_volume(dim):
    return _vn(dim) * 2.0 / (dim + 2)


def _biweight_form(u):
    uweight = _epanechnikov_form(u)
    return uweight * uweight


def _biweight_volume(dim):
    return 8 * _vn(dim) / ((dim + 2) * (dim + 4))


def _triweight_form(u):
    uweight = _epanechnikov_form(u)
    return uweight * uweight * uweight


def _triweight_volume(dim):
    return 48 * _vn(dim) / ((dim + 2) * (dim + 4) * (dim + 6))


def _exponential_form(u):
    return numpy.exp(-numpy.abs(u))


def _exponential_volume(dim):
    return _sn(dim - 1) * gamma(dim)


def _gaussian_form(u):
    uabs = numpy.abs(u)
    return numpy.exp(-0.5 * (uabs * uabs))


def _gaussian_volume(dim):
    return _2PI ** (0.5 * dim)


kernel_pieces = {
    'tophat': (_tophat_form, _tophat_volume),
    'linear': (_linear_form, _linear_volume),
    'epanechnikov': (_epanechnikov_form, _epanechnikov_volume),
    'biweight': (_biweight_form, _biweight_volume),
    'triweight': (_triweight_form, _triweight_volume),
    'exponential': (_exponential_form, _exponential_volume),
    'gaussian': (_gaussian_form, _gaussian_volume),
}


def _normalized_kernel(form, volume):
    # Scale factor giving every kernel the variance of the gaussian
    sigma = numpy.sqrt(volume(3) / (_2PI * volume(1)))

    def normalized_kernel(u, bandwidth, dim=2):
        k = sigma / bandwidth
        return (1.0 / volume(dim)) * (k ** dim) * form(k * u)
    return normalized_kernel


kernels = {
    name: _normalized_kernel(*pieces)
    for name, pieces in kernel_pieces.items()
}


def _check_bandwidth(bandwidth):
    try:
        bw = float(bandwidth)
    except (TypeError, ValueError):
        raise InvalidBandwidthError("bandwidth must be a positive number, got "
                                    "{!r}".format(bandwidth),
                                    parameter='bandwidth')
    if not (numpy.isfinite(bw) and bw > 0.0):
        raise InvalidBandwidthError("bandwidth must be a positive number, got "
                                    "{}".format(bw), parameter='bandwidth')
    return bw


def grid_edges(window, resolution=RESOLUTION):
    """
    Compute the cell edges of a regular grid covering a window

    Parameters
    ----------
    window : Window
        Window to cover. Must have positive area.
    resolution : integer, optional
        Number of cells along the longer side of the window. The shorter side
        gets a proportional number of cells, but at least one.

    Returns
    -------
    xedges, yedges : ndarray
        Cell edges along each axis.

    """
    if (isinstance(resolution, bool) or
            not isinstance(resolution, numbers.Integral) or resolution < 1):
        raise ValueError("'resolution' must be a positive integer, got {!r}"
                         .format(resolution))
    width, height = window.width, window.height
    longest = max(width, height)
    nx = max(1, int(round(resolution * width / longest)))
    ny = max(1, int(round(resolution * height / longest)))
    return (numpy.linspace(window.xmin, window.xmax, nx + 1),
            numpy.linspace(window.ymin, window.ymax, ny + 1))


class IntensitySurface(AlmostImmutable):
    """
    Represent an intensity function, piecewise constant over the cells of a
    rectangular grid

    Parameters
    ----------
    data : array-like, shape (nx, ny)
        Intensity in each cell, indexed [ix, iy].
    xedges, yedges : array-like
        Strictly increasing cell edges along each axis, of lengths nx + 1 and
        ny + 1.
    window : Window
        The window the surface is defined over.
    bandwidth : scalar, optional
        Bandwidth of the estimate that produced the surface, if any.
    kernel : str, optional
        Kernel of the estimate that produced the surface, if any.

    """

    def __init__(self, data, xedges, yedges, window, bandwidth=None,
                 kernel=None):
        data = readonly(data)
        xedges, yedges = readonly(xedges), readonly(yedges)
        if data.shape != (xedges.size - 1, yedges.size - 1):
            raise ValueError("shape of 'data' {} does not match the edges"
                             .format(data.shape))
        for edges in (xedges, yedges):
            if not numpy.all(numpy.diff(edges) > 0.0):
                raise ValueError("cell edges must be strictly increasing")

        self.data = data
        self.xedges = xedges
        self.yedges = yedges
        self.window = window
        self.bandwidth = bandwidth
        self.kernel = kernel

    @property
    def shape(self):
        return self.data.shape

    @property
    def xcenters(self):
        return 0.5 * (self.xedges[:-1] + self.xedges[1:])

    @property
    def ycenters(self):
        return 0.5 * (self.yedges[:-1] + self.yedges[1:])

    @property
    def cmesh(self):
        """
        Meshgrid of the cell centers, in 'ij' indexing

        """
        return numpy.meshgrid(self.xcenters, self.ycenters, indexing='ij')

    @property
    def mesh(self):
        """
        Meshgrid of the cell edges, in 'ij' indexing

        """
        return numpy.meshgrid(self.xedges, self.yedges, indexing='ij')

    @property
    def cell_area(self):
        """
        Array of the area of each cell

        """
        return numpy.outer(numpy.diff(self.xedges), numpy.diff(self.yedges))

    def total_mass(self):
        """
        Integrate the intensity over the grid: the expected number of points

        """
        return float(numpy.sum(self.data * self.cell_area))

    def max(self):
        return float(numpy.max(self.data))

    def min(self):
        return float(numpy.min(self.data))

    def value_at(self, x, y):
        """
        Look up the intensity at arbitrary locations

        Locations outside the grid get the value of the nearest cell. Locations
        on an interior cell edge get the value of the cell above.

        :x, y: array-like coordinates
        :returns: array of intensities of the broadcast shape of x and y

        """
        x, y = numpy.broadcast_arrays(numpy.asarray(x, dtype=float),
                                      numpy.asarray(y, dtype=float))
        nx, ny = self.shape
        ix = numpy.clip(numpy.searchsorted(self.xedges, x, side='right') - 1,
                        0, nx - 1)
        iy = numpy.clip(numpy.searchsorted(self.yedges, y, side='right') - 1,
                        0, ny - 1)
        return self.data[ix, iy]

    def to_frame(self):
        """
        Return the surface as a DataFrame of (x, y, value) triples, one per
        cell center

        """
        xc, yc = self.cmesh
        return pandas.DataFrame({'x': xc.ravel(), 'y': yc.ravel(),
                                 'value': self.data.ravel()})

    def plot(self, axes=None, cax=None, cmap=None, cbar=True, cbar_kw=None,
             **kwargs):
        """
        Plot the intensity surface

        The surface can be added to an existing plot via the optional 'axes'
        argument.

        :axes: Axes instance to add the surface to. If None (default), the
               current Axes instance with equal aspect ratio is used if any, or
               a new one created.
        :cax: Axes instance to plot the colorbar into. If None (default),
              matplotlib automatically makes space for a colorbar on the
              right-hand side of the plot.
        :cmap: colormap to use. If None, the default colormap is used.
        :cbar: if True, add a colorbar to the plot, otherwise, don't.
        :cbar_kw: dict of keyword arguments to pass to the pyplot.colorbar()
                  function. Default: None (empty dict)
        :kwargs: additional keyword arguments passed on to axes.pcolormesh()
        :returns: QuadMesh instance, and Colorbar instance if cbar is True

        """
        if axes is None:
            axes = pyplot.gca()
            axes.set_aspect('equal')

        x, y = self.mesh
        mesh = axes.pcolormesh(x, y, self.data, cmap=cmap, **kwargs)
        axes.set(xlim=(self.xedges[0], self.xedges[-1]),
                 ylim=(self.yedges[0], self.yedges[-1]))

        if cbar:
            if cbar_kw is None:
                cbar_kw = {}
            colorbar = pyplot.colorbar(mesh, ax=axes, cax=cax, **cbar_kw)
            return mesh, colorbar

        return mesh


def _gaussian_window_mass(points, window, bandwidth):
    """
    Compute the mass of gaussian kernels centered on each point that falls
    inside a rectangular window

    """
    x, y = points[:, 0], points[:, 1]
    massx = (ndtr((window.xmax - x) / bandwidth) -
             ndtr((window.xmin - x) / bandwidth))
    massy = (ndtr((window.ymax - y) / bandwidth) -
             ndtr((window.ymin - y) / bandwidth))
    return massx * massy


def _kernel_matrix(centers, points, kernel, bandwidth):
    return kernels[kernel](cdist(centers, points), bandwidth, dim=2)


def _kernel_masses(centers, points, kernel, bandwidth):
    return numpy.sum(_kernel_matrix(centers, points, kernel, bandwidth),
                     axis=0)


def _kernel_sums(centers, points, kernel, bandwidth, weights):
    return numpy.dot(_kernel_matrix(centers, points, kernel, bandwidth),
                     weights)


def estimate_intensity(pattern, bandwidth, resolution=RESOLUTION,
                       kernel='gaussian', edge_correction=True, n_jobs=1):
    """
    Compute a kernel density estimate of the intensity of a point pattern

    The estimate at a cell center c is sum_i w_i * k(|c - p_i|), with k the
    kernel normalized to unit mass in the plane and scaled to `bandwidth`.

    Parameters
    ----------
    pattern : PointPattern
        Pattern to estimate the intensity of. The surface covers its window.
    bandwidth : positive scalar
        Kernel bandwidth. For the gaussian kernel, this is the standard
        deviation; other kernels are scaled to the same variance.
    resolution : integer, optional
        Number of grid cells along the longer side of the window.
    kernel : str, optional
        Name of the kernel to use. See `kernels`.
    edge_correction : bool, optional
        If True, the contribution of each point is divided by the mass of its
        kernel inside the window, such that the surface integrates to
        approximately the number of points. The gaussian kernel mass is
        computed exactly; other kernels are integrated over the grid.
    n_jobs : integer, optional
        Number of joblib workers to distribute blocks of grid cells over.

    Returns
    -------
    IntensitySurface
        The estimated intensity.

    """
    bandwidth = _check_bandwidth(bandwidth)
    if kernel not in kernels:
        raise ValueError("unknown kernel: {}".format(kernel))
    window = pattern.window
    if not window.area > 0.0:
        raise DegenerateWindowError("cannot estimate the intensity in a "
                                    "window of zero area", parameter='window')

    xedges, yedges = grid_edges(window, resolution)
    nx, ny = xedges.size - 1, yedges.size - 1
    points = numpy.asarray(pattern.points)
    npoints = len(points)

    if npoints == 0:
        data = numpy.zeros((nx, ny))
    else:
        xc = 0.5 * (xedges[:-1] + xedges[1:])
        yc = 0.5 * (yedges[:-1] + yedges[1:])
        xmesh, ymesh = numpy.meshgrid(xc, yc, indexing='ij')
        centers = numpy.column_stack((xmesh.ravel(), ymesh.ravel()))
        nblocks = max(1, (centers.shape[0] * npoints) // _BLOCK_SIZE)
        blocks = numpy.array_split(centers, nblocks)

        if not edge_correction:
            weights = numpy.ones(npoints)
        else:
            if kernel == 'gaussian':
                masses = _gaussian_window_mass(points, window, bandwidth)
            else:
                cell_area = (xedges[1] - xedges[0]) * (yedges[1] - yedges[0])
                block_masses = parallel_map(
                    _kernel_masses,
                    ((block, points, kernel, bandwidth) for block in blocks),
                    n_jobs=n_jobs)
                masses = cell_area * numpy.sum(block_masses, axis=0)
            # Points whose kernel misses every cell center contribute nothing
            # anyway
            weights = numpy.zeros(npoints)
            positive = masses > 0.0
            weights[positive] = 1.0 / masses[positive]

        values = parallel_map(
            _kernel_sums,
            ((block, points, kernel, bandwidth, weights) for block in blocks),
            n_jobs=n_jobs)
        data = numpy.hstack(values).reshape((nx, ny))

    logger.debug("estimated %s intensity of %d points on a %dx%d grid "
                 "(bandwidth %g)", kernel, npoints, nx, ny, bandwidth)
    return IntensitySurface(data, xedges, yedges, window,
                            bandwidth=bandwidth, kernel=kernel)


def select_bandwidth(pattern, n_folds=5, n_bw=20):
    """
    Estimate the optimal gaussian KDE bandwidth for a point pattern using
    cross validation

    Parameters
    ----------
    pattern : PointPattern or array-like, shape (n, 2)
        The points.
    n_folds : integer, optional
        Number of folds to use for cross validation.
    n_bw : integer, optional
        Number of bandwidths to try out. Increasing this number increases the
        accuracy of the best bandwidth estimate, but also increases the
        computational demands of the function.

    Returns
    -------
    float
        Estimated optimal bandwidth.

    """
    points = numpy.asarray(getattr(pattern, 'points', pattern), dtype=float)
    points = points.reshape((-1, 2))
    npoints = len(points)
    if npoints < max(n_folds, 2):
        raise InsufficientPointsError("cross validation with {} folds needs "
                                      "at least as many points, got {}"
                                      .format(n_folds, npoints),
                                      parameter='pattern')

    # Use the silverman rule times 1.1 as the maximal candidate bandwidth,
    # and one tenth of this as the minimal
    silverman_constant = (0.75 * npoints) ** (-0.2)
    std = numpy.sqrt(numpy.mean(numpy.var(points, axis=0)))
    if not std > 0.0:
        raise InvalidBandwidthError("cannot select a bandwidth for points "
                                    "without spread", parameter='pattern')
    max_bw = 1.1 * silverman_constant * std

    grid = GridSearchCV(
        KernelDensity(kernel='gaussian'),
        dict(bandwidth=numpy.linspace(0.1 * max_bw, max_bw, n_bw)),
        cv=KFold(n_splits=n_folds, shuffle=True, random_state=0))
    grid.fit(points)
    bandwidth = float(grid.best_params_['bandwidth'])
    logger.debug("selected bandwidth %g among %d candidates", bandwidth, n_bw)
    return bandwidth
