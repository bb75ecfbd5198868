import numpy
import pytest

from nycnoise import project, build_pattern, EmptyInputError, ProjectionError

EMPIRE_STATE = (-73.9857, 40.7484)


def test_project_state_plane():
    x, y = project([EMPIRE_STATE[0]], [EMPIRE_STATE[1]])
    # NY Long Island state plane, US survey feet
    assert 9.5e5 < x[0] < 1.05e6
    assert 1.5e5 < y[0] < 2.6e5


def test_project_preserves_distance():
    x, y = project([-73.95, -73.95], [40.75, 40.76])
    # One hundredth of a degree of latitude is about 1112 m
    assert numpy.hypot(x[1] - x[0], y[1] - y[0]) == pytest.approx(
        1112.0 / 0.3048006, rel=0.01)


def test_project_identity():
    x, y = project([-73.95, -74.0], [40.75, 40.7], crs='EPSG:4326')
    assert x == pytest.approx([-73.95, -74.0])
    assert y == pytest.approx([40.75, 40.7])


@pytest.mark.parametrize('lon,lat', [
    (-73.95, 95.0),
    (-190.0, 40.75),
    (numpy.nan, 40.75),
    (-73.95, numpy.inf),
])
def test_project_out_of_domain(lon, lat):
    with pytest.raises(ProjectionError):
        project([lon], [lat])


def test_project_unknown_crs():
    with pytest.raises(ProjectionError) as excinfo:
        project([-73.95], [40.75], crs='EPSG:999999')
    assert excinfo.value.parameter == 'crs'


def test_project_length_mismatch():
    with pytest.raises(ValueError):
        project([-73.95, -73.96], [40.75])


def test_build_pattern():
    lonlat = [(-73.95, 40.75), (-73.96, 40.76), (-73.94, 40.70)]
    pattern = build_pattern(lonlat)
    x, y = project(*numpy.transpose(lonlat))
    numpy.testing.assert_allclose(pattern.points[:, 0], x)
    assert pattern.window.bounds == (x.min(), x.max(), y.min(), y.max())
    assert pattern.edge_correction == 'isotropic'


def test_build_pattern_margin():
    lonlat = [(-73.95, 40.75), (-73.96, 40.76)]
    bare = build_pattern(lonlat).window
    padded = build_pattern(lonlat, margin=100.0).window
    assert padded.width == pytest.approx(bare.width + 200.0)
    assert padded.height == pytest.approx(bare.height + 200.0)


def test_build_pattern_negative_margin():
    with pytest.raises(ValueError):
        build_pattern([(-73.95, 40.75)], margin=-1.0)


def test_build_pattern_empty():
    with pytest.raises(EmptyInputError):
        build_pattern([])
    with pytest.raises(EmptyInputError):
        build_pattern(numpy.empty((0, 2)))


def test_build_pattern_bad_coordinates():
    with pytest.raises(ProjectionError):
        build_pattern([(-73.95, 40.75), (200.0, 40.75)])
