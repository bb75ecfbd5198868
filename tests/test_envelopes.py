import numpy
import pytest

from nycnoise import Envelope, ClusteringResult, InvalidRankError
from nycnoise.envelopes import (check_rank, clustering_verdict,
                                monte_carlo_pvalue, CLUSTERED, DISPERSED,
                                CSR)

R = numpy.arange(10.0)


def unit_envelope():
    return Envelope(R, numpy.zeros(10), numpy.ones(10), 0.5 * numpy.ones(10),
                    rank=1, nsims=19)


def curve(above=(), below=()):
    values = 0.5 * numpy.ones(10)
    values[list(above)] = 2.0
    values[list(below)] = -1.0
    return values


@pytest.mark.parametrize('rank,nsims', [(1, 1), (1, 19), (5, 9), (50, 99)])
def test_valid_rank(rank, nsims):
    check_rank(rank, nsims)


@pytest.mark.parametrize('rank,nsims', [(0, 19), (-1, 19), (6, 9), (2, 2),
                                        (1.0, 19), (True, 19)])
def test_invalid_rank(rank, nsims):
    with pytest.raises(InvalidRankError) as excinfo:
        check_rank(rank, nsims)
    assert excinfo.value.parameter == 'rank'


def test_from_curves():
    curves = numpy.array([[3.0, 0.0], [1.0, 4.0], [2.0, 2.0], [0.0, 1.0],
                          [4.0, 3.0]])
    envelope = Envelope.from_curves([1.0, 2.0], curves, rank=2)
    assert list(envelope.lower) == [1.0, 1.0]
    assert list(envelope.upper) == [3.0, 3.0]
    assert list(envelope.mean) == [2.0, 2.0]
    assert envelope.nsims == 5
    assert envelope.alpha == pytest.approx(2.0 * 2 / 6)


def test_from_curves_rank_one_is_extremes():
    rng = numpy.random.default_rng(0)
    curves = rng.normal(size=(99, 5))
    envelope = Envelope.from_curves(numpy.arange(5.0), curves)
    numpy.testing.assert_array_equal(envelope.lower, curves.min(axis=0))
    numpy.testing.assert_array_equal(envelope.upper, curves.max(axis=0))
    assert envelope.alpha == pytest.approx(0.02)


def test_shape_mismatch():
    with pytest.raises(ValueError):
        Envelope(R, numpy.zeros(9), numpy.ones(10), numpy.ones(10), 1, 19)


def test_to_frame():
    frame = unit_envelope().to_frame()
    assert list(frame.columns) == ['r', 'lower', 'upper', 'mean']
    assert len(frame) == 10


def test_plot():
    h = unit_envelope().plot(mean=True)
    assert len(h) == 2


@pytest.mark.parametrize('observed,verdict', [
    (curve(), CSR),
    (curve(above=[4, 5, 6]), CLUSTERED),
    (curve(above=[4, 5]), CSR),
    (curve(above=[2, 4, 6, 8]), CSR),
    (curve(below=[3, 4, 5, 6]), DISPERSED),
    (curve(above=[1, 2, 3], below=[5, 6, 7, 8]), DISPERSED),
    (curve(above=[1, 2, 3, 4, 5], below=[7, 8, 9]), CLUSTERED),
    (curve(above=[1, 2, 3], below=[6, 7, 8]), CSR),
])
def test_verdict(observed, verdict):
    assert clustering_verdict(R, observed, unit_envelope()) == verdict


def test_verdict_touching_bound_is_not_exceedance():
    observed = numpy.ones(10)
    assert clustering_verdict(R, observed, unit_envelope(), min_run=1) == CSR


def test_verdict_rmin():
    observed = curve(above=[0, 1, 2, 3])
    envelope = unit_envelope()
    assert clustering_verdict(R, observed, envelope, rmin=0.0) == CLUSTERED
    assert clustering_verdict(R, observed, envelope, rmin=1.0) == CSR


def test_verdict_min_run():
    observed = curve(above=[4])
    envelope = unit_envelope()
    assert clustering_verdict(R, observed, envelope, min_run=1) == CLUSTERED
    with pytest.raises(ValueError):
        clustering_verdict(R, observed, envelope, min_run=0)


def test_pvalue_at_reference():
    r = numpy.array([0.0, 1.0, 2.0])
    curves = numpy.column_stack((numpy.zeros(99), numpy.arange(99.0),
                                 numpy.zeros(99)))
    assert monte_carlo_pvalue(r, [0.0, 1000.0, 0.0], curves,
                              reference_r=1.2) == pytest.approx(0.01)
    assert monte_carlo_pvalue(r, [0.0, -1.0, 0.0], curves,
                              reference_r=1.0) == pytest.approx(1.0)
    # Ties count against the observed value
    assert monte_carlo_pvalue(r, [0.0, 89.0, 0.0], curves,
                              reference_r=1.0) == pytest.approx(0.11)


def test_pvalue_global():
    rng = numpy.random.default_rng(1)
    r = numpy.linspace(0.0, 10.0, 11)
    curves = numpy.pi * r * r * rng.uniform(0.9, 1.1, size=(19, 11))
    mean = curves.mean(axis=0)
    assert monte_carlo_pvalue(r, 4.0 * mean, curves) == pytest.approx(0.05)
    assert monte_carlo_pvalue(r, mean, curves) == pytest.approx(1.0)
    lobserved = numpy.sqrt(4.0 * mean / numpy.pi)
    lcurves = numpy.sqrt(curves / numpy.pi)
    assert monte_carlo_pvalue(r, lobserved, lcurves,
                              statistic='L') == pytest.approx(0.05)


def test_pvalue_rmin_too_large():
    with pytest.raises(ValueError):
        monte_carlo_pvalue(R, numpy.zeros(10), numpy.zeros((5, 10)),
                           rmin=100.0)


class TestClusteringResult:
    def _result(self, observed):
        rng = numpy.random.default_rng(2)
        curves = rng.uniform(0.0, 1.0, size=(19, 10))
        return ClusteringResult.from_curves(R, observed, curves)

    def test_clustered(self):
        result = self._result(numpy.full(10, 5.0))
        assert result.verdict == CLUSTERED
        assert result.pvalue == pytest.approx(0.05)
        assert result.nsims == 19
        assert result.rank == 1
        assert result.statistic == 'K'

    def test_csr(self):
        result = self._result(curve())
        assert result.verdict == CSR

    def test_immutable(self):
        result = self._result(curve())
        with pytest.raises(TypeError):
            result.verdict = CLUSTERED
        with pytest.raises(ValueError):
            result.observed[0] = 1.0

    @pytest.mark.parametrize('observed,verdict,onset', [
        (curve(above=[4, 5, 6]), CLUSTERED, 4.0),
        (curve(below=[3, 4, 5, 6]), DISPERSED, 3.0),
        (curve(above=[1, 2, 3, 4, 5], below=[7, 8, 9]), CLUSTERED, 1.0),
        (curve(above=[4, 5]), CSR, None),
    ])
    def test_onset(self, observed, verdict, onset):
        result = ClusteringResult(R, observed, unit_envelope(), verdict, 0.5)
        assert result.onset == onset

    def test_unknown_verdict(self):
        with pytest.raises(ValueError):
            ClusteringResult(R, curve(), unit_envelope(), 'inconclusive', 0.5)

    def test_to_frame(self):
        frame = self._result(curve()).to_frame()
        assert list(frame.columns) == ['r', 'observed', 'lower', 'upper',
                                       'mean']

    def test_plot(self):
        h = self._result(curve()).plot(csr=True)
        assert len(h) == 4
