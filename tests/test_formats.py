import pytest

from nycnoise.formats import read_complaints, complaint_lonlat

CSV = """\
Unique Key,Created Date,Agency,Complaint Type,Latitude,Longitude
1,01/15/2023 10:00:00 PM,NYPD,Noise - Residential,40.75,-73.95
2,12/31/2022 11:59:00 PM,NYPD,Noise - Street/Sidewalk,40.76,-73.96
3,03/01/2023 08:00:00 AM,NYPD,Illegal Parking,40.70,-73.90
4,04/01/2023 08:00:00 AM,NYPD,Noise - Commercial,,
5,05/01/2023 08:00:00 AM,NYPD,Noise - Vehicle,40.70,-73.91
5,05/01/2023 08:00:00 AM,NYPD,Noise - Vehicle,40.70,-73.91
"""


@pytest.fixture
def csvfile(tmp_path):
    path = tmp_path / '311_Service_Requests.csv'
    path.write_text(CSV)
    return path


def test_read_complaints(csvfile):
    frame = read_complaints(csvfile)
    assert frame['Unique Key'].tolist() == [1, 5]
    assert 'Agency' not in frame.columns
    assert frame['Created Date'].dt.year.tolist() == [2023, 2023]


def test_read_all_years(csvfile):
    frame = read_complaints(csvfile, year=None)
    assert frame['Unique Key'].tolist() == [1, 2, 5]


def test_read_all_types(csvfile):
    frame = read_complaints(csvfile, complaint_prefix=None)
    assert frame['Unique Key'].tolist() == [1, 3, 5]


def test_complaint_lonlat(csvfile):
    lonlat = complaint_lonlat(read_complaints(csvfile))
    assert lonlat.shape == (2, 2)
    assert lonlat.tolist() == [[-73.95, 40.75], [-73.91, 40.70]]
