#!/usr/bin/env python

"""File: pointpatterns.py
Module to facilitate point pattern analysis in rectangular 2D windows:
Ripley's K-function with edge corrections, simulation of Poisson processes,
and Monte Carlo envelope tests for complete spatial randomness.

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
import numbers
from collections.abc import Sequence

import numpy
import pandas
from scipy.spatial import cKDTree
from shapely import geometry
from matplotlib import pyplot, patches

from .config import RSAMPLES
from .envelopes import Envelope, ClusteringResult
from .errors import (EmptyInputError, DegenerateWindowError,
                     InvalidRepetitionCountError, InvalidIntensityError,
                     InsufficientPointsError, InconsistentWindowError)
from .kde import IntensitySurface
from .utils import (AlmostImmutable, readonly, sensibly_divide,
                    spawn_generators, parallel_map)

logger = logging.getLogger(__name__)

_PI = numpy.pi
_2PI = 2.0 * _PI
_PI_2 = 0.5 * _PI

EDGE_CORRECTIONS = ('isotropic', 'translation', 'periodic', 'none')
# Largest weight an isotropically corrected pair can get
ISOTROPIC_MAX_WEIGHT = 100.0
PROCESSES = ('poisson', 'binomial')
_STATISTIC_ATTRS = {'K': 'kfunction', 'L': 'lfunction'}


class Window(AlmostImmutable):
    """
    Represent an axis-aligned rectangular window in the Euclidean plane, and
    provide methods for computing quantities related to it.

    Parameters
    ----------
    xmin, xmax, ymin, ymax : scalar
        The edges of the window. Windows of zero width or height are valid,
        but most computations refuse them.

    """

    def __init__(self, xmin, xmax, ymin, ymax):
        bounds = numpy.array((xmin, xmax, ymin, ymax), dtype=float)
        if not numpy.all(numpy.isfinite(bounds)):
            raise ValueError("window bounds must be finite")
        if bounds[1] < bounds[0] or bounds[3] < bounds[2]:
            raise ValueError("window bounds must satisfy xmin <= xmax and "
                             "ymin <= ymax")
        self.xmin, self.xmax, self.ymin, self.ymax = bounds.tolist()

    @classmethod
    def from_points(cls, points, margin=0.0):
        """
        Construct the bounding rectangle of a set of points

        Parameters
        ----------
        points : array-like, shape (n, 2)
            Point coordinates.
        margin : non-negative scalar, optional
            Distance to pad the bounding box by on every side.

        Returns
        -------
        Window
            The padded bounding rectangle.

        """
        points = numpy.asarray(points, dtype=float).reshape((-1, 2))
        if len(points) == 0:
            raise EmptyInputError("cannot derive a window from zero points",
                                  parameter='points')
        if not margin >= 0.0:
            raise ValueError("'margin' must be a non-negative number")
        xmin, ymin = numpy.min(points, axis=0) - margin
        xmax, ymax = numpy.max(points, axis=0) + margin
        return cls(xmin, xmax, ymin, ymax)

    @classmethod
    def from_geometry(cls, geom, margin=0.0):
        """
        Construct the bounding rectangle of a shapely geometry, such as a
        borough boundary

        :geom: shapely geometry instance
        :margin: distance to pad the bounding box by on every side
        :returns: new Window instance

        """
        xmin, ymin, xmax, ymax = geom.bounds
        return cls(xmin - margin, xmax + margin, ymin - margin, ymax + margin)

    def __eq__(self, other):
        if not isinstance(other, Window):
            return NotImplemented
        return self.bounds == other.bounds

    def __hash__(self):
        return hash(self.bounds)

    def __repr__(self):
        return "{}({!r}, {!r}, {!r}, {!r})".format(
            type(self).__name__, *self.bounds)

    @property
    def bounds(self):
        """
        The tuple (xmin, xmax, ymin, ymax)

        """
        return (self.xmin, self.xmax, self.ymin, self.ymax)

    @property
    def width(self):
        return self.xmax - self.xmin

    @property
    def height(self):
        return self.ymax - self.ymin

    @property
    def area(self):
        return self.width * self.height

    @property
    def inscribed_radius(self):
        """
        Radius of the largest circle that can be inscribed in the window

        """
        return 0.5 * min(self.width, self.height)

    @property
    def longest_diagonal(self):
        return numpy.hypot(self.width, self.height)

    @property
    def polygon(self):
        """
        The window as a shapely Polygon

        """
        return geometry.box(self.xmin, self.ymin, self.xmax, self.ymax)

    def contains(self, x, y):
        """
        Check whether locations lie inside the window or on its boundary

        :x, y: array-like coordinates
        :returns: boolean array of the broadcast shape of `x` and `y`

        """
        x, y = numpy.asarray(x), numpy.asarray(y)
        return ((x >= self.xmin) & (x <= self.xmax) &
                (y >= self.ymin) & (y <= self.ymax))

    def circle_fraction(self, x, y, r):
        """
        Compute the fraction of the circumference of circles that lies inside
        the window

        The computation is exact for circles centered inside the window: each
        edge closer to the center than `r` cuts off an arc, and arcs cut off
        by adjacent edges overlap beyond the corner between them.

        Parameters
        ----------
        x, y : array-like
            Circle centers. Must lie inside the window.
        r : array-like
            Circle radii, broadcastable against `x` and `y`.

        Returns
        -------
        ndarray
            Fraction of each circumference inside the window, between 0.0 and
            1.0. Circles of zero radius count as fully inside.

        """
        x, y, r = numpy.broadcast_arrays(numpy.asarray(x, dtype=float),
                                         numpy.asarray(y, dtype=float),
                                         numpy.asarray(r, dtype=float))

        # Distances to the edges, ordered such that neighbors in the cycle
        # are adjacent edges
        edists = numpy.stack((x - self.xmin, y - self.ymin,
                              self.xmax - x, self.ymax - y))
        ratio = numpy.where(r > 0.0, sensibly_divide(edists, r), 1.0)
        half_angles = numpy.arccos(numpy.clip(ratio, 0.0, 1.0))

        outside = 2.0 * numpy.sum(half_angles, axis=0)
        overlaps = half_angles + numpy.roll(half_angles, -1, axis=0) - _PI_2
        outside -= numpy.sum(numpy.clip(overlaps, 0.0, None), axis=0)
        return numpy.clip(1.0 - outside / _2PI, 0.0, 1.0)

    def patch(self, **kwargs):
        """
        Return a matplotlib.patches.Polygon instance for this window

        :kwargs: passed through to the matplotlib.patches.Polygon constructor
        :returns: matplotlib.patches.Polygon instance

        """
        return patches.Polygon(numpy.asarray(self.polygon.exterior.coords),
                               **kwargs)

    def plot(self, axes=None, linewidth=2.0, fill=False, **kwargs):
        """
        Plot the window

        The window can be added to an existing plot via the optional 'axes'
        argument.

        :axes: Axes instance to add the window to. If None (default), the
               current Axes instance is used if any, or a new one created, and
               its limits are set to show the window.
        :linewidth: the linewidth to use for the window boundary. Defaults to
                    2.0.
        :fill: if True, plot a filled window. If False (default), only plot the
               boundary.
        :kwargs: additional keyword arguments passed on to the
                 patches.Polygon() constructor. Note in particular the keywords
                 'edgecolor', 'facecolor' and 'label'.
        :returns: the plotted matplotlib.patches.Polygon instance

        """
        if axes is None:
            axes = pyplot.gca()
            axes.set_aspect('equal')
            pad = 0.05 * self.longest_diagonal
            axes.set(xlim=(self.xmin - pad, self.xmax + pad),
                     ylim=(self.ymin - pad, self.ymax + pad))

        wpatch = self.patch(linewidth=linewidth, fill=fill, **kwargs)
        return axes.add_patch(wpatch)


class PointPattern(AlmostImmutable, Sequence):
    """
    Represent a planar point pattern and its associated window, and provide
    methods for analyzing its statistical properties

    Parameters
    ----------
    points : array-like, shape (n, 2)
        Coordinates of the points in the pattern. Coincident points are
        allowed.
    window : Window or sequence
        A Window instance, or the sequence (xmin, xmax, ymin, ymax), defining
        the set within which the point pattern takes values. A ValueError is
        raised if the window does not contain all points in `points`.
    edge_correction : str {'isotropic', 'translation', 'periodic', 'none'},
                      optional
        String to select the default edge handling to apply in computations:

        ``isotropic``
            Ripley's rotational edge correction: each pair is weighted by the
            reciprocal of the fraction of the circle centered on the first
            point and passing through the second that lies inside the window.
            Weights are capped at `ISOTROPIC_MAX_WEIGHT`, since the fraction
            vanishes for circles reaching past the far corner of the window.
        ``translation``
            Translational edge correction: each pair is weighted by the ratio
            of the window area to the area of the intersection of the window
            and its translate by the pair vector.
        ``periodic``
            No weighting, but distances are measured on the torus obtained by
            identifying opposite window edges.
        ``none``
            No edge correction. The K-function is then biased downwards,
            increasingly so for larger distances, since neighbors outside the
            window are never counted.

    """

    def __init__(self, points, window, edge_correction='isotropic'):
        if not isinstance(window, Window):
            window = Window(*window)

        points = numpy.array(points, dtype=float)
        if points.size == 0:
            points = points.reshape((0, 2))
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError("'points' must be a sequence of (x, y) pairs")
        if not numpy.all(numpy.isfinite(points)):
            raise ValueError("'points' contains non-finite coordinates")
        if not numpy.all(window.contains(points[:, 0], points[:, 1])):
            raise ValueError("Not all points in 'points' are contained inside "
                             "'window'.")
        if edge_correction not in EDGE_CORRECTIONS:
            raise ValueError("unknown edge correction: {}"
                             .format(edge_correction))

        points.setflags(write=False)
        self._points = points
        self.window = window
        self.edge_correction = edge_correction
        # Pairs by edge correction, grown to the largest distance requested
        self._pair_cache = {}

    @classmethod
    def from_points(cls, points, margin=0.0, edge_correction='isotropic'):
        """
        Create a PointPattern in the (padded) bounding rectangle of its points

        :points: array-like of shape (n, 2) with point coordinates
        :margin: distance to pad the bounding rectangle by on every side
        :edge_correction: default edge correction for the pattern
        :returns: new PointPattern instance

        """
        window = Window.from_points(points, margin=margin)
        return cls(points, window, edge_correction=edge_correction)

    # Implement abstract methods
    def __getitem__(self, index):
        return self._points[index]

    def __len__(self):
        return len(self._points)

    # Override possibly slow mixin
    def __iter__(self):
        return iter(self._points)

    @property
    def points(self):
        """
        Read-only array of shape (n, 2) with the point coordinates

        """
        return self._points

    def intensity(self):
        """
        Compute the standard intensity estimate, assuming a stationary point
        pattern: the number of points divided by the area of the window

        """
        return float(sensibly_divide(len(self), self.window.area))

    def rmax(self):
        """
        Return the default largest distance to evaluate the K-function at: the
        radius of the largest circle inscribed in the window

        """
        return self.window.inscribed_radius

    def rvals(self, rmax=None, nrvals=RSAMPLES):
        """
        Construct an evenly spaced array of distances from 0.0 to `rmax`

        :rmax: largest distance. If None, `PointPattern.rmax` is used.
        :nrvals: number of distances
        :returns: array of distances

        """
        if rmax is None:
            rmax = self.rmax()
        if not rmax >= 0.0:
            raise ValueError("'rmax' must be a non-negative number")
        return numpy.linspace(0.0, rmax, nrvals)

    @staticmethod
    def pair_weights(window, x, y, dx, dy, d, edge_correction):
        """
        Compute the weights that pairs of points in a window contribute in the
        estimation of second-order summary characteristics

        Parameters
        ----------
        window : Window
            Window in which the points take values.
        x, y : array
            Coordinates of the first point in each pair.
        dx, dy, d : array
            Vector components and length of the vector from the first to the
            second point in each pair.
        edge_correction : str {'isotropic', 'translation', 'periodic', 'none'}
            String to select the edge handling to apply in computations. See
            the documentation for `PointPattern` for details.

        Returns
        -------
        array
            Array containing the weight of each pair.

        """
        if edge_correction in ('periodic', 'none'):
            return numpy.ones_like(d)

        elif edge_correction == 'translation':
            overlap = ((window.width - numpy.abs(dx)) *
                       (window.height - numpy.abs(dy)))
            return sensibly_divide(window.area, overlap)

        elif edge_correction == 'isotropic':
            weights = sensibly_divide(1.0, window.circle_fraction(x, y, d))
            return numpy.minimum(weights, ISOTROPIC_MAX_WEIGHT)

        else:
            raise ValueError("unknown edge correction: {}"
                             .format(edge_correction))

    def _estimator_base(self, edge_correction, rmax):
        """
        Compute the distances between ordered pairs of distinct points in the
        pattern that are at most `rmax` apart, and the weights they contribute
        in the estimation of second-order characteristics

        The pairs are cached per edge correction. A request for a larger
        `rmax` than any before replaces the cached pairs.

        Parameters
        ----------
        edge_correction : str {'isotropic', 'translation', 'periodic', 'none'}
            String to select the edge handling to apply in computations. See
            the documentation for `PointPattern` for details.
        rmax : scalar
            Largest distance to include.

        Returns
        -------
        r : array
            Array containing the pairwise distances, sorted from small to
            large. Each pair appears twice, once in each order.
        weights : array
            Array containing the weights associated with pairs in the point
            pattern, sorted such that weights[i] gives the weight of the pair
            with distance r[i].

        """
        if edge_correction not in EDGE_CORRECTIONS:
            raise ValueError("unknown edge correction: {}"
                             .format(edge_correction))

        try:
            rcached, d, weights = self._pair_cache[edge_correction]
        except KeyError:
            rcached = None
        if rcached is None or rmax > rcached:
            d, weights = self._pairs(edge_correction, rmax)
            self._pair_cache[edge_correction] = (rmax, d, weights)
            return d, weights

        nkeep = numpy.searchsorted(d, rmax, side='right')
        return d[:nkeep], weights[:nkeep]

    def _pairs(self, edge_correction, rmax):
        """Compute sorted distances and weights of pairs within `rmax`"""
        window = self.window
        points = self._points
        if edge_correction == 'periodic':
            size = numpy.array((window.width, window.height))
            data = (points - (window.xmin, window.ymin)) % size
            tree = cKDTree(data, boxsize=size)
        else:
            data = points
            tree = cKDTree(data)

        pairs = tree.query_pairs(rmax, output_type='ndarray')
        i = numpy.hstack((pairs[:, 0], pairs[:, 1]))
        j = numpy.hstack((pairs[:, 1], pairs[:, 0]))

        disp = data[j] - data[i]
        if edge_correction == 'periodic':
            # Minimum image convention
            disp -= size * numpy.round(disp / size)
        dx, dy = disp[:, 0], disp[:, 1]
        d = numpy.hypot(dx, dy)

        weights = self.pair_weights(window, points[i, 0], points[i, 1],
                                    dx, dy, d, edge_correction)

        sort_ind = numpy.argsort(d, kind='stable')
        return readonly(d[sort_ind]), readonly(weights[sort_ind])

    def kfunction(self, r, edge_correction=None):
        """
        Evaluate the empirical K-function of the point pattern

        The estimator is

            K(r) = (area / n^2) * sum_i sum_{j != i} 1[d_ij <= r] * w_ij,

        with `w_ij` the edge correction weight of the pair. Patterns with
        fewer than two points have no pairs, and K is identically zero.

        Parameters
        ----------
        r : array-like
            array of values at which to evaluate the empirical K-function.
        edge_correction : str {'isotropic', 'translation', 'periodic',
                               'none'}, optional
            String to select the edge handling to apply in computations. See
            the documentation for `PointPattern` for details.  If None, the
            edge correction falls back to the default value (set at instance
            initialization).

        Returns
        -------
        array
            Values of the empirical K-function evaluated at `r`.

        """
        if edge_correction is None:
            edge_correction = self.edge_correction

        r = numpy.asarray(r, dtype=float)
        n = len(self)
        if n < 2:
            return numpy.zeros_like(r)

        area = self.window.area
        if area == 0.0:
            raise DegenerateWindowError("cannot evaluate the K-function in a "
                                        "window of zero area",
                                        parameter='window')

        rmax = float(numpy.max(r)) if r.size > 0 else 0.0
        rsteps, weights = self._estimator_base(edge_correction,
                                               max(rmax, 0.0))
        cweights = numpy.hstack((0.0, numpy.cumsum(weights)))
        indices = numpy.searchsorted(rsteps, r, side='right')
        return (area / (n * n)) * cweights[indices]

    def lfunction(self, r, edge_correction=None):
        """
        Evaluate the empirical L-function of the point pattern, the variance
        stabilized transform sqrt(K(r) / pi)

        Parameters
        ----------
        r : array-like
            array of values at which to evaluate the empirical L-function.
        edge_correction : str {'isotropic', 'translation', 'periodic',
                               'none'}, optional
            See `PointPattern.kfunction`.

        Returns
        -------
        array
            Values of the empirical L-function evaluated at `r`.

        """
        return numpy.sqrt(self.kfunction(r, edge_correction=edge_correction) /
                          _PI)

    def simulate(self, nsims=100, intensity=None, process='poisson',
                 seed=None, n_jobs=1, edge_correction=None):
        """
        Simulate a number of point processes in the same window as this
        pattern

        Parameters
        ----------
        nsims : int, optional
            The number of point patterns to generate.
        intensity : scalar or IntensitySurface, optional
            Intensity of the simulated process. If None, the standard
            intensity estimate of this pattern is used, giving patterns under
            complete spatial randomness.
        process, seed, n_jobs
            See `PointPatternCollection.from_simulation`.
        edge_correction : str {'isotropic', 'translation', 'periodic',
                               'none'}, optional
            String to select the default edge handling for the simulated
            patterns. If None, the default edge correction for this pattern is
            used.

        Returns
        -------
        PointPatternCollection
            Collection of the simulated patterns.

        """
        if intensity is None:
            intensity = self.intensity()
        if edge_correction is None:
            edge_correction = self.edge_correction
        return PointPatternCollection.from_simulation(
            nsims, self.window, intensity, process=process, seed=seed,
            n_jobs=n_jobs, edge_correction=edge_correction)

    def to_frame(self):
        """
        Return the points as a DataFrame with columns 'x' and 'y'

        """
        return pandas.DataFrame(numpy.array(self._points), columns=['x', 'y'])

    def plot_pattern(self, axes=None, marker='o', window=False,
                     window_kw=None, **kwargs):
        """
        Plot point pattern

        The point pattern can be added to an existing plot via the optional
        'axes' argument.

        :axes: Axes instance to add the point pattern to. If None (default),
               the current Axes instance is used if any, or a new one created,
               with equal aspect ratio.
        :marker: a valid matplotlib marker specification. Defaults to 'o'
        :window: if True, the window boundaries are added to the plot.
        :window_kw: dict of keyword arguments to pass to the Window.plot()
                    method. Default: None (empty dict)
        :kwargs: additional keyword arguments passed on to axes.scatter()
                 method used to plot the point pattern. Note especially the
                 keywords 'c' (colors), 's' (marker sizes) and 'label'.
        :returns: list of the artists added to the plot: a
                  matplotlib.collections.PathCollection instance for the point
                  pattern, and optionally a matplotlib.patches.Polygon instance
                  for the window.

        """
        if axes is None:
            axes = pyplot.gca()
            axes.set_aspect('equal')

        pp = self._points
        h = [axes.scatter(pp[:, 0], pp[:, 1], marker=marker, **kwargs)]

        if window:
            if window_kw is None:
                window_kw = {}
            h.append(self.window.plot(axes=axes, **window_kw))

        return h


def _check_rate(intensity):
    try:
        rate = float(intensity)
    except (TypeError, ValueError):
        raise InvalidIntensityError("intensity must be a positive number or "
                                    "an IntensitySurface, got {!r}"
                                    .format(intensity),
                                    parameter='intensity')
    if not (numpy.isfinite(rate) and rate > 0.0):
        raise InvalidIntensityError("intensity must be a positive number, "
                                    "got {}".format(rate),
                                    parameter='intensity')
    return rate


def _check_surface(surface):
    data = surface.data
    if not numpy.all(numpy.isfinite(data)):
        raise InvalidIntensityError("intensity surface contains non-finite "
                                    "values", parameter='intensity')
    if numpy.any(data < 0.0):
        raise InvalidIntensityError("intensity surface contains negative "
                                    "values", parameter='intensity')
    if not numpy.any(data > 0.0):
        raise InvalidIntensityError("intensity surface is zero everywhere",
                                    parameter='intensity')


def _simulate_homogeneous(window, rate, process, rng):
    """
    Draw the points of a homogeneous process: a Poisson or fixed number of
    points, uniformly distributed in the window

    """
    nmean = rate * window.area
    if process == 'poisson':
        n = rng.poisson(nmean)
    else:
        n = int(round(nmean))
    x = rng.uniform(window.xmin, window.xmax, size=n)
    y = rng.uniform(window.ymin, window.ymax, size=n)
    return numpy.column_stack((x, y))


def _simulate_inhomogeneous(window, surface, process, rng):
    """
    Draw the points of an inhomogeneous Poisson process by thinning a
    homogeneous process at the maximal intensity

    """
    lmax = surface.max()
    candidates = _simulate_homogeneous(window, lmax, process, rng)
    x, y = candidates[:, 0], candidates[:, 1]
    keep = rng.uniform(0.0, lmax, size=len(x)) < surface.value_at(x, y)
    return candidates[keep]


def _evaluate(pattern, attr, r, edge_correction):
    return getattr(pattern, attr)(r, edge_correction=edge_correction)


class PointPatternCollection(AlmostImmutable, Sequence):
    """
    Represent a collection of planar point patterns defined in the same window,
    and provide methods to compute statistics over them.

    Parameters
    ----------
    patterns : sequence
        List of PointPattern instances to include in the collection.
    edge_correction : str {'isotropic', 'translation', 'periodic', 'none'},
                      optional
        String to select the default edge handling to apply in computations.
        See the documentation for `PointPattern` for details.

    """

    def __init__(self, patterns, edge_correction='isotropic'):
        self.patterns = tuple(patterns)
        self.edge_correction = edge_correction

    @classmethod
    def from_simulation(cls, nsims, window, intensity, process='poisson',
                        seed=None, n_jobs=1, edge_correction='isotropic'):
        """
        Create a PointPatternCollection instance by simulating a number of
        Poisson point patterns in the same window

        Parameters
        ----------
        nsims : integer
            The number of point patterns to generate.
        window : Window or None
            Window instance to simulate the process within. May be None if
            `intensity` is an `IntensitySurface`, in which case the window of
            the surface is used.
        intensity : scalar or IntensitySurface
            The intensity (density of points) of the process. A scalar gives
            a homogeneous process with points placed uniformly in the window.
            An `IntensitySurface` gives an inhomogeneous process, simulated by
            thinning a homogeneous process at the maximal intensity of the
            surface.
        process : str {'poisson', 'binomial'}, optional
            For homogeneous processes, whether the number of points is Poisson
            distributed, or fixed at the expected number (rounded).
        seed : None, int, SeedSequence or Generator, optional
            Source of randomness. Each simulation gets its own generator
            spawned from it, so the result does not depend on `n_jobs`. See
            `nycnoise.utils.spawn_generators` for details.
        n_jobs : integer, optional
            Number of joblib workers to distribute the simulations over.
        edge_correction : str {'isotropic', 'translation', 'periodic',
                               'none'}, optional
            String to select the default edge handling to apply in
            computations. See the documentation for `PointPattern` for details.

        Returns
        -------
        PointPatternCollection
            Collection of the simulated processes, in the order of the
            spawned generators.

        """
        if (isinstance(nsims, bool) or
                not isinstance(nsims, numbers.Integral) or nsims < 1):
            raise InvalidRepetitionCountError(
                "'nsims' must be a positive integer, got {!r}".format(nsims),
                parameter='nsims')
        if process not in PROCESSES:
            raise ValueError("unknown point process: {}".format(process))

        if isinstance(intensity, IntensitySurface):
            if window is None:
                window = intensity.window
            elif window != intensity.window:
                raise InconsistentWindowError("the intensity surface is "
                                              "defined over a different "
                                              "window", parameter='window')
            if process != 'poisson':
                raise ValueError("inhomogeneous simulation is only "
                                 "implemented for the 'poisson' process")
            _check_surface(intensity)
            simulate = _simulate_inhomogeneous
        else:
            if window is None:
                raise ValueError("'window' must be given when 'intensity' is "
                                 "a scalar")
            if not isinstance(window, Window):
                window = Window(*window)
            intensity = _check_rate(intensity)
            simulate = _simulate_homogeneous

        logger.debug("simulating %d %s %s patterns in %r", nsims,
                     simulate.__name__.split('_')[-1], process, window)
        generators = spawn_generators(seed, nsims)
        pointsets = parallel_map(
            simulate,
            ((window, intensity, process, rng) for rng in generators),
            n_jobs=n_jobs)

        patterns = [PointPattern(points, window,
                                 edge_correction=edge_correction)
                    for points in pointsets]
        return cls(patterns, edge_correction=edge_correction)

    # Implement abstract methods
    def __getitem__(self, index):
        return self.patterns[index]

    def __len__(self):
        return len(self.patterns)

    # Override possibly slow mixin
    def __iter__(self):
        return iter(self.patterns)

    @property
    def npoints(self):
        """
        The total number of points in the whole collection

        """
        return sum(len(pp) for pp in self.patterns)

    def _pp_attr_r_frame(self, attr, r, edge_correction, n_jobs):
        """
        Compute a DataFrame containing values of some PointPattern attribute
        which is a function of a distance.

        Parameters
        ----------
        attr : string
            Name of `PointPattern` attribute to use.
        r : array-like
            Array of values at which to evaluate the `PointPattern` attribute.
        edge_correction : str {'isotropic', 'translation', 'periodic',
                               'none'}, optional
            String to select the edge handling to apply in computations. See
            the documentation for `PointPattern` for details.  If None, the
            edge correction falls back to the default value (set at instance
            initialization).
        n_jobs : integer
            Number of joblib workers to distribute the patterns over.

        Returns
        -------
        DataFrame
            DataFrame where each row contains values of the
            `PointPattern` attribute from one pattern, evaluated at `r`.

        """
        if edge_correction is None:
            edge_correction = self.edge_correction

        r = numpy.asarray(r, dtype=float)
        rows = parallel_map(
            _evaluate,
            ((pp, attr, r, edge_correction) for pp in self.patterns),
            n_jobs=n_jobs)
        return pandas.DataFrame(rows, columns=r)

    def kframe(self, r, edge_correction=None, n_jobs=1):
        """
        Compute a DataFrame containing values of the empirical K-functions of
        the patterns

        Parameters
        ----------
        r : array-like
            Array of values at which to evaluate the empirical K-functions.
        edge_correction : str, optional
            See `PointPatternCollection._pp_attr_r_frame`.
        n_jobs : integer, optional
            Number of joblib workers to distribute the patterns over.

        Returns
        -------
        DataFrame
            DataFrame where each row contains values of the empirical
            K-function from one pattern, evaluated at `r`.

        """
        return self._pp_attr_r_frame('kfunction', r, edge_correction, n_jobs)

    def lframe(self, r, edge_correction=None, n_jobs=1):
        """
        Compute a DataFrame containing values of the empirical L-functions of
        the patterns

        See `PointPatternCollection.kframe`.

        """
        return self._pp_attr_r_frame('lfunction', r, edge_correction, n_jobs)

    def _statistic_frame(self, statistic, r, edge_correction, n_jobs):
        try:
            attr = _STATISTIC_ATTRS[statistic]
        except KeyError:
            raise ValueError("unknown statistic: {}".format(statistic))
        return self._pp_attr_r_frame(attr, r, edge_correction, n_jobs)

    def kenvelope(self, r, rank=1, statistic='K', edge_correction=None,
                  n_jobs=1):
        """
        Compute the rank envelope of the empirical K- or L-functions of the
        patterns

        Parameters
        ----------
        r : array-like
            Array of values at which to evaluate the envelope.
        rank : integer, optional
            The lower (upper) bound at each r is the `rank`-th smallest
            (largest) value among the patterns.
        statistic : str {'K', 'L'}, optional
            Whether to envelope the K-functions or the L-functions.
        edge_correction, n_jobs
            See `PointPatternCollection.kframe`.

        Returns
        -------
        Envelope
            The envelope.

        """
        frame = self._statistic_frame(statistic, r, edge_correction, n_jobs)
        return Envelope.from_curves(r, frame.to_numpy(), rank=rank,
                                    statistic=statistic)

    def ktest(self, pattern, r=None, rank=1, statistic='K', rmin=0.0,
              min_run=3, reference_r=None, edge_correction=None, n_jobs=1):
        """
        Test a PointPattern for complete spatial randomness (or any other null
        model represented by this collection) by comparing its K- or
        L-function with the envelope of the functions of the patterns in this
        collection.

        Parameters
        ----------
        pattern : PointPattern
            PointPattern to perform the test on. Must be defined in the same
            window as every pattern in the collection, and contain at least
            two points.
        r : array-like, optional
            Distances to evaluate the functions at. If None,
            `pattern.rvals()` is used.
        rank, statistic
            See `PointPatternCollection.kenvelope`.
        rmin, min_run, reference_r
            See `nycnoise.envelopes.ClusteringResult.from_curves`.
        edge_correction : str, optional
            Edge correction for all K-functions. If None, the default edge
            correction of this collection is used.
        n_jobs : integer, optional
            Number of joblib workers to distribute the patterns over.

        Returns
        -------
        ClusteringResult
            Curves, envelope, verdict and Monte Carlo p-value.

        """
        if len(pattern) < 2:
            raise InsufficientPointsError(
                "the tested pattern must contain at least two points to "
                "define interpoint distances, got {}".format(len(pattern)),
                parameter='pattern')
        window = pattern.window
        if window.area == 0.0:
            raise DegenerateWindowError("cannot test a pattern in a window of "
                                        "zero area", parameter='pattern')
        for (i, pp) in enumerate(self.patterns):
            if pp.window != window:
                raise InconsistentWindowError(
                    "simulated pattern {} is defined in {!r}, while the "
                    "tested pattern is defined in {!r}"
                    .format(i, pp.window, window), parameter='patterns')

        if edge_correction is None:
            edge_correction = self.edge_correction
        if r is None:
            r = pattern.rvals()
        r = numpy.asarray(r, dtype=float)

        frame = self._statistic_frame(statistic, r, edge_correction, n_jobs)
        observed = _evaluate(pattern, _STATISTIC_ATTRS[statistic], r,
                             edge_correction)

        result = ClusteringResult.from_curves(
            r, observed, frame.to_numpy(), rank=rank, statistic=statistic,
            rmin=rmin, min_run=min_run, reference_r=reference_r)
        logger.info("%s-function test of %d points against %d patterns: %s "
                    "(p = %.4g)", statistic, len(pattern), len(self),
                    result.verdict, result.pvalue)
        return result
