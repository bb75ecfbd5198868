#!/usr/bin/env python

"""File: utils.py
Module defining classes and functions that may come in handy throughout the
package

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

import numpy
from joblib import Parallel, delayed


class AlmostImmutable(object):
    """
    A base class for "almost immutable" objects: instance attributes that have
    already been assigned cannot (easily) be reassigned or deleted, but
    creating new attributes is allowed.

    """

    def __setattr__(self, name, value):
        """
        Override the __setattr__() method to avoid member reassigment

        """
        if hasattr(self, name):
            raise TypeError("{} instances do not support attribute "
                            "reassignment".format(self.__class__.__name__))
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        """
        Override the __detattr__() method to avoid member deletion

        """
        raise TypeError("{} instances do not support attribute deletion"
                        .format(self.__class__.__name__))


def readonly(arr, dtype=float):
    """
    Return a read-only array copy of the input

    :arr: array-like
    :dtype: data type of the returned array
    :returns: new ndarray with the write flag cleared

    """
    out = numpy.array(arr, dtype=dtype)
    out.setflags(write=False)
    return out


def sensibly_divide(num, denom):
    """
    Sensibly divide two numbers or arrays of numbers (or any combination
    thereof)

    Sensibly in this case means that a non-zero, non-nan numerator divided by
    zero gives inf, while if both the numerator and denominator are zero, or if
    the numerator is nan, the result of the division is nan. No warnings are
    emitted.

    The use of nans means that the output is always a float array, regardless
    of the input types.

    :num: numerator
    :denom: denominator
    :returns: num / denom, sensibly

    """
    num_bc, denom_bc = numpy.broadcast_arrays(num, denom)
    num_bc = numpy.array(num_bc, dtype=float)
    denom_bc = numpy.array(denom_bc, dtype=float)

    denom_zero = (denom_bc == 0.0)
    if numpy.any(denom_zero):
        num_zero_or_nan = numpy.logical_or(num_bc == 0.0, numpy.isnan(num_bc))
        problems = numpy.logical_and(denom_zero, num_zero_or_nan)
        if numpy.any(problems):
            denom_bc[problems] = numpy.nan

    with numpy.errstate(divide='ignore', invalid='ignore'):
        return num_bc / denom_bc


def spawn_generators(seed, n):
    """
    Create independent random generators, one for each of a number of tasks

    Parameters
    ----------
    seed : None, int, SeedSequence or Generator
        Source of randomness. An int (or a sequence of ints) gives the same
        generators on every call. None draws fresh entropy from the operating
        system, so the generators differ between calls. A `SeedSequence` or
        `Generator` instance is advanced by the call, such that repeated calls
        with the same instance give different generators.
    n : integer
        Number of generators to create.

    Returns
    -------
    list
        List of `n` statistically independent `numpy.random.Generator`
        instances.

    """
    if isinstance(seed, numpy.random.Generator):
        return seed.spawn(n)
    if not isinstance(seed, numpy.random.SeedSequence):
        seed = numpy.random.SeedSequence(seed)
    return [numpy.random.default_rng(s) for s in seed.spawn(n)]


def parallel_map(function, argseq, n_jobs=1):
    """
    Apply a function to each argument tuple in a sequence, possibly in
    parallel

    The results are returned in the order of `argseq`, regardless of the order
    in which the tasks complete.

    Parameters
    ----------
    function : callable
        Function to apply. Must be picklable if `n_jobs != 1`.
    argseq : iterable
        Iterable of argument tuples.
    n_jobs : integer, optional
        Number of joblib workers. 1 (default) runs everything in the calling
        process, -1 uses all processors.

    Returns
    -------
    list
        List of return values.

    """
    if n_jobs == 1:
        return [function(*args) for args in argseq]
    return Parallel(n_jobs=n_jobs)(delayed(function)(*args) for args in argseq)


def longest_run(mask):
    """
    Find the longest run of consecutive True values in a boolean array

    :mask: one-dimensional boolean array-like
    :returns: tuple (length, start) of the longest run. If there are no True
              values, (0, None) is returned. Ties are resolved in favour of the
              first run.

    """
    mask = numpy.asarray(mask, dtype=bool)
    padded = numpy.hstack(([False], mask, [False])).astype(numpy.int8)
    changes = numpy.diff(padded)
    starts, = numpy.nonzero(changes == 1)
    stops, = numpy.nonzero(changes == -1)
    if starts.size == 0:
        return 0, None
    lengths = stops - starts
    i = numpy.argmax(lengths)
    return int(lengths[i]), int(starts[i])
