#!/usr/bin/env python

"""File: transform.py
Module providing functions to reproject geographic complaint locations into a
planar coordinate system and assemble them into point patterns

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

import numpy
import geopandas
from pyproj.exceptions import CRSError

from .config import GEOGRAPHIC_CRS, DEFAULT_CRS
from .errors import EmptyInputError, ProjectionError
from .pointpatterns import PointPattern, Window

logger = logging.getLogger(__name__)


def project(lon, lat, crs=DEFAULT_CRS):
    """
    Reproject geographic coordinates into a planar coordinate reference system

    :lon: array-like of longitudes, in degrees
    :lat: array-like of latitudes, in degrees
    :crs: target CRS, in any form accepted by pyproj. Defaults to the NY Long
          Island state plane (EPSG:2263, US survey feet).
    :returns: arrays x, y of projected coordinates

    """
    lon = numpy.asarray(lon, dtype=float).ravel()
    lat = numpy.asarray(lat, dtype=float).ravel()
    if lon.shape != lat.shape:
        raise ValueError("'lon' and 'lat' must have the same length")

    finite = numpy.isfinite(lon) & numpy.isfinite(lat)
    if not numpy.all(finite):
        raise ProjectionError("{} coordinate pairs are not finite"
                              .format(numpy.count_nonzero(~finite)),
                              parameter='lonlat')
    in_range = (numpy.abs(lon) <= 180.0) & (numpy.abs(lat) <= 90.0)
    if not numpy.all(in_range):
        i = numpy.flatnonzero(~in_range)[0]
        raise ProjectionError("coordinate pair ({}, {}) is outside the "
                              "geographic domain".format(lon[i], lat[i]),
                              parameter='lonlat')

    points = geopandas.GeoSeries(geopandas.points_from_xy(lon, lat),
                                 crs=GEOGRAPHIC_CRS)
    try:
        projected = points.to_crs(crs)
    except CRSError as err:
        raise ProjectionError("cannot project to {!r}: {}".format(crs, err),
                              parameter='crs') from err

    x = numpy.asarray(projected.x, dtype=float)
    y = numpy.asarray(projected.y, dtype=float)
    if not (numpy.all(numpy.isfinite(x)) and numpy.all(numpy.isfinite(y))):
        raise ProjectionError("projection to {!r} gives non-finite "
                              "coordinates".format(crs), parameter='lonlat')
    return x, y


def build_pattern(lonlat, crs=DEFAULT_CRS, margin=0.0,
                  edge_correction='isotropic'):
    """
    Create a point pattern from geographic coordinates

    The window of the pattern is the bounding rectangle of the projected
    points, padded by `margin` on every side.

    Parameters
    ----------
    lonlat : array-like, shape (n, 2)
        (longitude, latitude) pairs, in degrees.
    crs : optional
        Planar CRS to project into. See `project`.
    margin : non-negative scalar, optional
        Padding of the window, in the units of `crs`.
    edge_correction : str, optional
        Default edge correction of the pattern. See `PointPattern`.

    Returns
    -------
    PointPattern
        The projected pattern.

    """
    lonlat = numpy.asarray(lonlat, dtype=float)
    if lonlat.size == 0:
        raise EmptyInputError("no coordinates supplied", parameter='lonlat')
    lonlat = lonlat.reshape((-1, 2))
    if not margin >= 0.0:
        raise ValueError("'margin' must be a non-negative number")

    x, y = project(lonlat[:, 0], lonlat[:, 1], crs=crs)
    points = numpy.column_stack((x, y))
    window = Window.from_points(points, margin=margin)
    logger.info("projected %d points to %s; window %.0f x %.0f",
                len(points), crs, window.width, window.height)
    return PointPattern(points, window, edge_correction=edge_correction)
