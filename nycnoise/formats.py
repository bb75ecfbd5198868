#!/usr/bin/env python

"""File: formats.py
Module to read the NYC 311 service request export and return noise complaint
locations in a standardized format.

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
import pandas

logger = logging.getLogger(__name__)

# Column names in the 311 export
KEY = 'Unique Key'
CREATED = 'Created Date'
COMPLAINT_TYPE = 'Complaint Type'
LONGITUDE = 'Longitude'
LATITUDE = 'Latitude'


def read_complaints(path, year=2023, complaint_prefix='Noise',
                    lon_col=LONGITUDE, lat_col=LATITUDE, date_col=CREATED,
                    type_col=COMPLAINT_TYPE, key_col=KEY):
    """
    Read a CSV export of NYC 311 service requests and select the located
    complaints of a kind filed in a given year

    Example: 311_Service_Requests_from_2010_to_Present.csv

    :path: file path or object with the CSV data
    :year: keep complaints created in this calendar year. If None, all years
           are kept.
    :complaint_prefix: keep complaints whose type starts with this string,
                       such as 'Noise' for 'Noise - Residential' and 'Noise -
                       Street/Sidewalk'. If None, all types are kept.
    :lon_col, lat_col, date_col, type_col, key_col: column names, defaulting to
                                                   those in the export
    :returns: DataFrame with one row per selected complaint, in file order,
              with a parsed date column. Rows with missing coordinates and
              repeated unique keys are dropped.

    """
    usecols = [key_col, date_col, type_col, lon_col, lat_col]
    frame = pandas.read_csv(path, usecols=usecols, low_memory=False)
    nrows = len(frame)

    frame[date_col] = pandas.to_datetime(frame[date_col], errors='coerce',
                                         format='mixed')
    keep = frame[lon_col].notna() & frame[lat_col].notna()
    if year is not None:
        keep &= frame[date_col].dt.year == year
    if complaint_prefix is not None:
        keep &= frame[type_col].astype(str).str.startswith(complaint_prefix)

    frame = frame[keep].drop_duplicates(subset=key_col)
    frame = frame.reset_index(drop=True)
    logger.info("read %d of %d service requests from %s", len(frame), nrows,
                path)
    return frame


def complaint_lonlat(frame, lon_col=LONGITUDE, lat_col=LATITUDE):
    """
    Extract the complaint locations from a DataFrame

    :frame: DataFrame as returned by `read_complaints`
    :lon_col, lat_col: column names of the coordinates
    :returns: array of shape (n, 2) with (longitude, latitude) pairs

    """
    return numpy.column_stack((frame[lon_col].to_numpy(dtype=float),
                               frame[lat_col].to_numpy(dtype=float)))
