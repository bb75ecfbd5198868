#!/usr/bin/env python

"""File: errors.py
Module defining the exceptions raised when the input to a point pattern
analysis is invalid

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


class PatternAnalysisError(ValueError):
    """
    Base class for invalid input to any stage of the analysis

    Parameters
    ----------
    message : str
        Human readable description of the problem.
    parameter : str, optional
        Name of the offending parameter.

    """

    def __init__(self, message, parameter=None):
        super().__init__(message)
        self.parameter = parameter


class EmptyInputError(PatternAnalysisError):
    """No points were supplied"""


class ProjectionError(PatternAnalysisError):
    """A coordinate could not be reprojected"""


class InvalidBandwidthError(PatternAnalysisError):
    """A kernel bandwidth was not a positive number"""


class DegenerateWindowError(PatternAnalysisError):
    """A window has zero area"""


class InvalidRepetitionCountError(PatternAnalysisError):
    """The number of simulations was not a positive integer"""


class InvalidIntensityError(PatternAnalysisError):
    """An intensity was non-positive, or a surface held negative values"""


class InsufficientPointsError(PatternAnalysisError):
    """Fewer than two points, so no interpoint distances exist"""


class InconsistentWindowError(PatternAnalysisError):
    """Patterns that must share a window do not"""


class InvalidRankError(PatternAnalysisError):
    """An envelope rank incompatible with the number of simulations"""
