"""
Spatial point pattern tests for clustering of NYC noise complaints

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

from .config import AnalysisConfig, configure_logging
from .envelopes import (Envelope, ClusteringResult, CLUSTERED, DISPERSED,
                        CSR)
from .errors import (PatternAnalysisError, EmptyInputError, ProjectionError,
                     InvalidBandwidthError, DegenerateWindowError,
                     InvalidRepetitionCountError, InvalidIntensityError,
                     InsufficientPointsError, InconsistentWindowError,
                     InvalidRankError)
from .kde import IntensitySurface, estimate_intensity, select_bandwidth
from .pointpatterns import Window, PointPattern, PointPatternCollection
from .transform import project, build_pattern
from .pipeline import AnalysisResult, analyze

logging.getLogger(__name__).addHandler(logging.NullHandler())
