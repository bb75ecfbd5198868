import matplotlib
matplotlib.use('Agg')

import numpy
import pytest
from matplotlib import pyplot

from nycnoise import Window, PointPattern

SIDE = 1e4


def uniform_points(rng, n=200, side=SIDE):
    return rng.uniform(0.0, side, size=(n, 2))


def clustered_points(rng, nclusters=10, per_cluster=20, radius=100.0,
                     side=SIDE):
    centers = rng.uniform(0.1 * side, 0.9 * side, size=(nclusters, 2))
    angles = rng.uniform(0.0, 2.0 * numpy.pi, size=nclusters * per_cluster)
    radii = radius * numpy.sqrt(rng.uniform(size=nclusters * per_cluster))
    offsets = numpy.column_stack((radii * numpy.cos(angles),
                                  radii * numpy.sin(angles)))
    return numpy.repeat(centers, per_cluster, axis=0) + offsets


@pytest.fixture
def window():
    return Window(0.0, SIDE, 0.0, SIDE)


@pytest.fixture
def uniform_pattern(window):
    rng = numpy.random.default_rng(12345)
    return PointPattern(uniform_points(rng), window)


@pytest.fixture
def clustered_pattern(window):
    rng = numpy.random.default_rng(2023)
    return PointPattern(clustered_points(rng), window)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    pyplot.close('all')
