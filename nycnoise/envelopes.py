#!/usr/bin/env python

"""File: envelopes.py
Module defining simulation envelopes of summary functions, and the verdict and
Monte Carlo p-value of clustering tests based on them

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

import numbers

import numpy
import pandas
from matplotlib import pyplot

from .errors import InvalidRankError
from .utils import AlmostImmutable, readonly, longest_run

_PI = numpy.pi

CLUSTERED = 'clustered'
DISPERSED = 'dispersed'
CSR = 'csr'
VERDICTS = (CLUSTERED, DISPERSED, CSR)


def check_rank(rank, nsims):
    """
    Check that an envelope rank can be formed from a number of simulations

    The rank-k envelope takes the k-th smallest and k-th largest values, which
    must be distinct order statistics: 1 <= k and 2k <= nsims + 1.

    """
    if (isinstance(rank, bool) or not isinstance(rank, numbers.Integral) or
            rank < 1):
        raise InvalidRankError("'rank' must be a positive integer, got {!r}"
                               .format(rank), parameter='rank')
    if 2 * rank > nsims + 1:
        raise InvalidRankError("a rank {} envelope needs at least {} "
                               "simulations, got {}"
                               .format(rank, 2 * rank - 1, nsims),
                               parameter='rank')


class Envelope(AlmostImmutable):
    """
    Represent a pointwise rank envelope of simulated curves

    Parameters
    ----------
    r : array-like
        Distances the curves are evaluated at.
    lower, upper : array-like
        Lower and upper envelope bounds at each distance.
    mean : array-like
        Mean of the simulated curves at each distance.
    rank : integer
        Rank of the bounds among the simulated curves.
    nsims : integer
        Number of simulated curves.
    statistic : str {'K', 'L'}, optional
        Name of the enveloped summary function.

    """

    def __init__(self, r, lower, upper, mean, rank, nsims, statistic='K'):
        self.r = readonly(r)
        self.lower = readonly(lower)
        self.upper = readonly(upper)
        self.mean = readonly(mean)
        shape = self.r.shape
        if not (self.lower.shape == self.upper.shape == self.mean.shape ==
                shape):
            raise ValueError("envelope curves must have the shape of 'r'")
        check_rank(rank, nsims)
        self.rank = rank
        self.nsims = nsims
        self.statistic = statistic

    @classmethod
    def from_curves(cls, r, curves, rank=1, statistic='K'):
        """
        Compute the rank envelope of a set of curves

        Parameters
        ----------
        r : array-like
            Distances the curves are evaluated at.
        curves : array-like, shape (nsims, len(r))
            One simulated curve per row.
        rank : integer, optional
            The lower (upper) bound at each distance is the `rank`-th smallest
            (largest) curve value. Must satisfy ``1 <= rank`` and
            ``2 * rank <= nsims + 1``.
        statistic : str, optional
            Name of the enveloped summary function.

        Returns
        -------
        Envelope
            The envelope.

        """
        r = numpy.asarray(r, dtype=float)
        curves = numpy.asarray(curves, dtype=float).reshape((-1, r.size))
        nsims = curves.shape[0]
        check_rank(rank, nsims)

        ordered = numpy.sort(curves, axis=0)
        return cls(r, ordered[rank - 1], ordered[nsims - rank],
                   numpy.mean(curves, axis=0), rank, nsims,
                   statistic=statistic)

    @property
    def alpha(self):
        """
        Pointwise significance level of the envelope, 2 * rank / (nsims + 1)

        """
        return 2.0 * self.rank / (self.nsims + 1)

    def to_frame(self):
        """
        Return the envelope as a DataFrame with columns 'r', 'lower', 'upper'
        and 'mean'

        """
        return pandas.DataFrame({'r': self.r, 'lower': self.lower,
                                 'upper': self.upper, 'mean': self.mean})

    def plot(self, axes=None, alpha=0.25, mean=False, mean_kw=None,
             **kwargs):
        """
        Plot the envelope

        Parameters
        ----------
        axes : Axes, optional
            Axes instance to add the envelope to. If None (default), the
            current Axes instance is used if any, or a new one created.
        alpha : scalar between 0.0 and 1.0, optional
            The alpha transparency value for the patch representing the
            envelope.
        mean : bool, optional
            If True, overlay the mean of the simulated curves as a dashed line.
        mean_kw : dict, optional
            Keyword arguments to pass to `axes.plot` when plotting the mean.
        **kwargs : dict, optional
            Additional keyword arguments are passed to `axes.fill_between`.
            Note in particular the keywords 'edgecolor', 'facecolor' and
            'label'.

        Returns
        -------
        list
            Handles to the PolyCollection instance for the envelope, and the
            Line2D instance for the mean (optional).

        """
        if axes is None:
            axes = pyplot.gca()

        h = [axes.fill_between(self.r, self.lower, self.upper, alpha=alpha,
                               **kwargs)]
        if mean:
            if mean_kw is None:
                mean_kw = {}
            h += axes.plot(self.r, self.mean, linestyle='dashed', **mean_kw)
        return h


def exceedance_runs(r, observed, envelope, rmin=0.0):
    """
    Find the longest runs of consecutive distances where an observed curve lies
    strictly outside an envelope

    :r: distances
    :observed: observed curve values at `r`
    :envelope: Envelope instance evaluated at `r`
    :rmin: distances up to and including `rmin` are ignored
    :returns: tuple ((above_length, above_start), (below_length, below_start))
              of the longest run above the upper and below the lower bound,
              with starts as indices into `r`

    """
    r = numpy.asarray(r, dtype=float)
    observed = numpy.asarray(observed, dtype=float)
    considered = r > rmin
    above = considered & (observed > envelope.upper)
    below = considered & (observed < envelope.lower)
    return longest_run(above), longest_run(below)


def clustering_verdict(r, observed, envelope, rmin=0.0, min_run=3):
    """
    Classify an observed curve relative to a simulation envelope

    The verdict is 'clustered' if the curve stays strictly above the envelope
    for at least `min_run` consecutive distances beyond `rmin`, and
    'dispersed' likewise below it. If both happen, the longer run decides, and
    a tie gives 'csr'. Otherwise, the verdict is 'csr'.

    :r: distances
    :observed: observed curve values at `r`
    :envelope: Envelope instance evaluated at `r`
    :rmin: distances up to and including `rmin` are ignored
    :min_run: minimal number of consecutive exceedances
    :returns: one of 'clustered', 'dispersed' and 'csr'

    """
    if (isinstance(min_run, bool) or
            not isinstance(min_run, numbers.Integral) or min_run < 1):
        raise ValueError("'min_run' must be a positive integer, got {!r}"
                         .format(min_run))
    (nabove, __), (nbelow, __) = exceedance_runs(r, observed, envelope,
                                                 rmin=rmin)
    if nabove < min_run:
        nabove = 0
    if nbelow < min_run:
        nbelow = 0

    if nabove > nbelow:
        return CLUSTERED
    if nbelow > nabove:
        return DISPERSED
    return CSR


def _lvalues(values, statistic):
    if statistic == 'K':
        return numpy.sqrt(numpy.clip(values, 0.0, None) / _PI)
    elif statistic == 'L':
        return values
    raise ValueError("unknown statistic: {}".format(statistic))


def monte_carlo_pvalue(r, observed, curves, statistic='K', rmin=0.0,
                       reference_r=None):
    """
    Compute the Monte Carlo p-value of an observed curve against simulated
    curves

    The p-value is the upper-tail rank of the observed test statistic among
    the observed and all simulated statistics, divided by nsims + 1.

    Parameters
    ----------
    r : array-like
        Distances the curves are evaluated at.
    observed : array-like
        Observed curve values at `r`.
    curves : array-like, shape (nsims, len(r))
        Simulated curves, one per row.
    statistic : str {'K', 'L'}, optional
        Summary function the curves represent.
    rmin : scalar, optional
        Distances up to and including `rmin` are excluded from the global
        deviation statistic.
    reference_r : scalar, optional
        If given, the test statistic is the curve value at the sampled
        distance closest to `reference_r`. If None, it is the global deviation
        ``max_r |L(r) - mean simulated L(r)|`` over distances beyond `rmin`.

    Returns
    -------
    float
        The p-value, in [1 / (nsims + 1), 1].

    """
    r = numpy.asarray(r, dtype=float)
    observed = numpy.asarray(observed, dtype=float)
    curves = numpy.asarray(curves, dtype=float).reshape((-1, r.size))
    nsims = curves.shape[0]

    if reference_r is not None:
        index = numpy.argmin(numpy.abs(r - reference_r))
        teststat = observed[index]
        tsdist = curves[:, index]
    else:
        considered = r > rmin
        if not numpy.any(considered):
            raise ValueError("no distances beyond 'rmin' = {}".format(rmin))
        lobs = _lvalues(observed[considered], statistic)
        lsims = _lvalues(curves[:, considered], statistic)
        lmean = numpy.mean(lsims, axis=0)
        teststat = numpy.max(numpy.abs(lobs - lmean))
        tsdist = numpy.max(numpy.abs(lsims - lmean), axis=1)

    return (1.0 + numpy.count_nonzero(tsdist >= teststat)) / (nsims + 1.0)


class ClusteringResult(AlmostImmutable):
    """
    Represent the outcome of an envelope test of a point pattern

    Parameters
    ----------
    r : array-like
        Distances the curves are evaluated at.
    observed : array-like
        Summary function of the tested pattern at `r`.
    envelope : Envelope
        Envelope of the simulated summary functions.
    verdict : str {'clustered', 'dispersed', 'csr'}
        Classification of the observed curve.
    pvalue : float
        Monte Carlo p-value.
    rmin, min_run, reference_r
        Settings that produced the verdict and the p-value.

    """

    def __init__(self, r, observed, envelope, verdict, pvalue, rmin=0.0,
                 min_run=3, reference_r=None):
        if verdict not in VERDICTS:
            raise ValueError("unknown verdict: {}".format(verdict))
        self.r = readonly(r)
        self.observed = readonly(observed)
        self.envelope = envelope
        self.verdict = verdict
        self.pvalue = float(pvalue)
        self.rmin = rmin
        self.min_run = min_run
        self.reference_r = reference_r

    @classmethod
    def from_curves(cls, r, observed, curves, rank=1, statistic='K',
                    rmin=0.0, min_run=3, reference_r=None):
        """
        Test an observed curve against simulated curves

        Parameters
        ----------
        r : array-like
            Distances the curves are evaluated at.
        observed : array-like
            Observed curve values at `r`.
        curves : array-like, shape (nsims, len(r))
            Simulated curves, one per row.
        rank : integer, optional
            Envelope rank. See `Envelope.from_curves`.
        statistic : str {'K', 'L'}, optional
            Summary function the curves represent.
        rmin : scalar, optional
            Distances up to and including `rmin` are ignored by the verdict and
            the global deviation statistic.
        min_run : integer, optional
            Minimal number of consecutive exceedances for a verdict other than
            'csr'. See `clustering_verdict`.
        reference_r : scalar, optional
            Distance to compute the p-value at. See `monte_carlo_pvalue`.

        Returns
        -------
        ClusteringResult
            The outcome of the test.

        """
        envelope = Envelope.from_curves(r, curves, rank=rank,
                                        statistic=statistic)
        verdict = clustering_verdict(r, observed, envelope, rmin=rmin,
                                     min_run=min_run)
        pvalue = monte_carlo_pvalue(r, observed, curves, statistic=statistic,
                                    rmin=rmin, reference_r=reference_r)
        return cls(r, observed, envelope, verdict, pvalue, rmin=rmin,
                   min_run=min_run, reference_r=reference_r)

    @property
    def statistic(self):
        return self.envelope.statistic

    @property
    def nsims(self):
        return self.envelope.nsims

    @property
    def rank(self):
        return self.envelope.rank

    @property
    def alpha(self):
        return self.envelope.alpha

    @property
    def onset(self):
        """
        The distance where the exceedance run that decided the verdict begins,
        or None if the verdict is 'csr'

        """
        above, below = exceedance_runs(self.r, self.observed, self.envelope,
                                       rmin=self.rmin)
        if self.verdict == CLUSTERED:
            __, start = above
        elif self.verdict == DISPERSED:
            __, start = below
        else:
            return None
        if start is None:
            return None
        return float(self.r[start])

    def to_frame(self):
        """
        Return the observed curve and the envelope as a DataFrame with columns
        'r', 'observed', 'lower', 'upper' and 'mean'

        """
        frame = self.envelope.to_frame()
        frame.insert(1, 'observed', self.observed)
        return frame

    def plot(self, axes=None, linewidth=2.0, csr=False, csr_kw=None,
             envelope_kw=None, **kwargs):
        """
        Plot the observed curve on top of the simulation envelope

        Parameters
        ----------
        axes : Axes, optional
            Axes instance to add the plot to. If None (default), the current
            Axes instance is used if any, or a new one created.
        linewidth : scalar, optional
            The width of the line showing the observed curve.
        csr : bool, optional
            If True, overlay the theoretical curve under complete spatial
            randomness: :math:`K(r) = \\pi r^2`, or :math:`L(r) = r`.
        csr_kw : dict, optional
            Keyword arguments to pass to `axes.plot` when plotting the CSR
            curve.
        envelope_kw : dict, optional
            Keyword arguments to pass to `Envelope.plot`.
        **kwargs : dict, optional
            Additional keyword arguments to pass to `axes.plot` for the
            observed curve. Note in particular the keywords 'linestyle',
            'color' and 'label'.

        Returns
        -------
        list
            List of handles to the artists added to the plot, in the following
            order: envelope, mean, observed curve, CSR curve (optional).

        """
        if axes is None:
            axes = pyplot.gca()

        if envelope_kw is None:
            envelope_kw = {}
        envelope_kw = dict({'mean': True}, **envelope_kw)
        h = self.envelope.plot(axes=axes, **envelope_kw)
        h += axes.plot(self.r, self.observed, linewidth=linewidth, **kwargs)

        if csr:
            if csr_kw is None:
                csr_kw = {}
            r = self.r
            ccsr = _PI * r * r if self.statistic == 'K' else r
            h += axes.plot(r, ccsr, linestyle='dotted', **csr_kw)

        axes.set(xlabel='r', ylabel='{}(r)'.format(self.statistic))
        return h
