import logging

import numpy
import pytest

from nycnoise import (AnalysisConfig, PointPattern, Window, analyze,
                      InsufficientPointsError, InvalidBandwidthError,
                      EmptyInputError)
from nycnoise.envelopes import VERDICTS

from conftest import uniform_points

FAST = AnalysisConfig(nsims=19, resolution=32, seed=0)
SCENARIO = FAST.replace(nsims=99, rmax=2000.0, bandwidth=500.0)


def test_uniform_consistent_with_csr(window):
    verdicts = []
    for seed in range(30):
        rng = numpy.random.default_rng(1000 + seed)
        pattern = PointPattern(uniform_points(rng), window)
        config = SCENARIO.replace(seed=seed)
        verdicts.append(analyze(pattern, config).verdict)
    assert verdicts.count('csr') >= 0.9 * len(verdicts)


def test_clustered(clustered_pattern):
    analysis = analyze(clustered_pattern, SCENARIO)
    assert analysis.verdict == 'clustered'
    assert analysis.pvalue <= 0.05
    assert analysis.result.envelope.nsims == 99
    assert analysis.result.r[-1] == 2000.0
    # Exceedance sets in within a few cluster radii
    assert analysis.result.onset <= 300.0


def test_stages(uniform_pattern):
    analysis = analyze(uniform_pattern, FAST)
    assert analysis.pattern is uniform_pattern
    assert analysis.surface.window == uniform_pattern.window
    assert analysis.surface.shape == (32, 32)
    assert len(analysis.simulations) == 19
    assert all(pp.window == uniform_pattern.window
               for pp in analysis.simulations)
    assert len(analysis.result.r) == FAST.nrvals
    assert analysis.result.r[-1] == pytest.approx(
        uniform_pattern.window.inscribed_radius)
    assert analysis.config is FAST


def test_reproducible(clustered_pattern):
    first = analyze(clustered_pattern, FAST)
    second = analyze(clustered_pattern, FAST)
    assert first.verdict == second.verdict
    assert first.pvalue == second.pvalue
    numpy.testing.assert_array_equal(first.result.envelope.upper,
                                     second.result.envelope.upper)


def test_inhomogeneous_null(clustered_pattern):
    config = FAST.replace(null_model='inhomogeneous', bandwidth=200.0,
                          rmax=1000.0, reference_r=200.0)
    analysis = analyze(clustered_pattern, config)
    assert analysis.verdict in VERDICTS
    assert 0.0 < analysis.pvalue <= 1.0
    # Simulated points follow the estimated intensity
    assert analysis.simulations.npoints == pytest.approx(
        19 * analysis.surface.total_mass(), rel=0.2)


def test_lonlat_input():
    rng = numpy.random.default_rng(5)
    lonlat = numpy.column_stack((rng.uniform(-74.0, -73.9, 100),
                                 rng.uniform(40.7, 40.8, 100)))
    analysis = analyze(lonlat, FAST.replace(statistic='L', resolution=128))
    window = analysis.pattern.window
    assert len(analysis.pattern) == 100
    assert window.area > 0.0
    assert analysis.verdict in VERDICTS
    assert analysis.surface.total_mass() == pytest.approx(100.0, rel=0.05)


def test_single_point():
    pattern = PointPattern([(5.0, 5.0)], Window(0.0, 10.0, 0.0, 10.0))
    with pytest.raises(InsufficientPointsError):
        analyze(pattern, FAST)
    with pytest.raises(InsufficientPointsError):
        analyze([(-73.95, 40.75)], FAST)


def test_no_points():
    with pytest.raises(EmptyInputError):
        analyze(numpy.empty((0, 2)), FAST)


def test_zero_bandwidth(uniform_pattern):
    with pytest.raises(InvalidBandwidthError):
        analyze(uniform_pattern, FAST.replace(bandwidth=0.0))


def test_logs_stages(uniform_pattern, caplog):
    with caplog.at_level(logging.INFO, logger='nycnoise'):
        analyze(uniform_pattern, FAST)
    messages = [record.getMessage() for record in caplog.records]
    assert any('estimated intensity' in m for m in messages)
    assert any('simulated 19' in m for m in messages)
    assert any(m.startswith('verdict') for m in messages)
