import numpy
import pytest

from nycnoise.utils import (AlmostImmutable, sensibly_divide, spawn_generators,
                            parallel_map, longest_run)


class Counter(AlmostImmutable):
    def __init__(self):
        self.calls = []


def test_almost_immutable():
    counter = Counter()
    with pytest.raises(TypeError):
        counter.calls = []
    with pytest.raises(TypeError):
        del counter.calls


def test_sensibly_divide():
    out = sensibly_divide([1.0, 0.0, numpy.nan, 4.0], [0.0, 0.0, 0.0, 2.0])
    assert out[0] == numpy.inf
    assert numpy.isnan(out[1])
    assert numpy.isnan(out[2])
    assert out[3] == 2.0


def test_spawn_generators():
    first = [g.uniform() for g in spawn_generators(5, 3)]
    second = [g.uniform() for g in spawn_generators(5, 3)]
    assert first == second
    assert len(set(first)) == 3
    seq = numpy.random.SeedSequence(5)
    assert [g.uniform() for g in spawn_generators(seq, 3)] == first


def test_parallel_map():
    args = [(2, 3), (3, 2), (5, 0)]
    assert parallel_map(pow, args) == [8, 9, 1]
    assert parallel_map(pow, args, n_jobs=2) == [8, 9, 1]


@pytest.mark.parametrize('mask,expected', [
    ([], (0, None)),
    ([False, False], (0, None)),
    ([True, False, True, True], (2, 2)),
    ([True, True, False, True, True], (2, 0)),
    ([False, True, True, True], (3, 1)),
])
def test_longest_run(mask, expected):
    assert longest_run(mask) == expected
