import pytest

from app.core.exceptions import ValidationError
from app.models.report import ReportLocation
from app.utils.geo import derive_geo_point, haversine_distance, validate_coordinates


def test_geo_point_is_longitude_first():
    point = derive_geo_point(ReportLocation(latitude=14.5995, longitude=120.9842))
    assert point.type == "Point"
    assert point.coordinates == [120.9842, 14.5995]


@pytest.mark.parametrize(
    "location",
    [
        None,
        ReportLocation(),
        ReportLocation(latitude=14.5995),
        ReportLocation(longitude=120.9842),
        ReportLocation(address={"city": "Manila"}),
    ],
)
def test_no_geo_point_without_both_coordinates(location):
    assert derive_geo_point(location) is None


def test_geo_point_at_zero_coordinates():
    point = derive_geo_point(ReportLocation(latitude=0.0, longitude=0.0))
    assert point is not None
    assert point.coordinates == [0.0, 0.0]


def test_haversine_distance_known_values():
    assert haversine_distance(14.5995, 120.9842, 14.5995, 120.9842) == 0
    # One degree of latitude is about 111.2 km
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111195, rel=1e-3)


@pytest.mark.parametrize("longitude,latitude", [(0, 91), (0, -90.5), (181, 0), (-180.1, 10)])
def test_validate_coordinates_rejects_out_of_range(longitude, latitude):
    with pytest.raises(ValidationError):
        validate_coordinates(longitude, latitude)
