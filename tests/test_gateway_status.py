from datetime import datetime, timezone

import pytest

from ttnmapper.gateway_status import (
    GatewayRecord,
    GatewayStatus,
    apply_status,
    coordinates_valid,
    invalid_coordinates_reason,
)
from ttnmapper.geo import Location

NETWORK = "NS_TTS_V3://ttn@000013"
MESSAGE_TIME = 1622876477587001491
NOW = datetime(2022, 1, 1, tzinfo=timezone.utc)


def _status(**overrides):
    values = dict(
        network_id=NETWORK,
        gateway_id="test-gateway",
        time=MESSAGE_TIME,
        latitude=51.242965026571284,
        longitude=9.428522586822512,
        altitude=180,
        gateway_eui="0011223344556677",
        location_source="SOURCE_REGISTRY",
    )
    values.update(overrides)
    return GatewayStatus(**values)


def _record(**overrides):
    values = dict(network_id=NETWORK, gateway_id="test-gateway")
    values.update(overrides)
    return GatewayRecord(**values)


def test_shenzhen_factory_not_valid():
    assert not coordinates_valid(22.700000762939453, 114.23999786376953)
    assert invalid_coordinates_reason(22.700000762939453, 114.23999786376953) == (
        "Shenzhen factory coordinates"
    )


@pytest.mark.parametrize(
    "lat, lon, reason",
    [
        (0.5, -0.5, "Null island"),
        (95.0, 0.5, "Latitude out of bounds"),
        (45.0, 181.0, "Longitude out of bounds"),
        (52.0, 6.0, "Single channel gateway default coordinates"),
        (10.0, 20.0, "Lorier LR2 default coordinates"),
        (50.008724, 36.215805, "Ukrainian hack coordinates"),
        (51.2, 9.4, None),
    ],
)
def test_invalid_coordinates_reason(lat, lon, reason):
    assert invalid_coordinates_reason(lat, lon) == reason
    assert coordinates_valid(lat, lon) is (reason is None)


def test_new_gateway_from_packet_moves_and_updates():
    outcome = apply_status(_record(), _status(), NOW)
    assert not outcome.stale
    assert outcome.updated
    assert outcome.move is not None
    assert outcome.move.time == MESSAGE_TIME
    assert outcome.move.latitude_old == 0.0
    assert outcome.move.latitude_new == 51.242965026571284
    assert outcome.move.altitude_new == 180
    record = outcome.record
    assert record.latitude == 51.242965026571284
    assert record.longitude == 9.428522586822512
    assert record.altitude == 180
    assert record.gateway_eui == "0011223344556677"
    assert record.location_source == "SOURCE_REGISTRY"
    assert record.name is None
    assert record.location_accuracy is None
    assert outcome.last_heard == datetime(2021, 6, 5, 7, 1, 17, 587001, tzinfo=timezone.utc)


def test_original_record_untouched():
    record = _record()
    apply_status(record, _status(), NOW)
    assert record.latitude == 0.0
    assert record.gateway_eui is None


def test_stale_status_ignored():
    later = datetime(2021, 6, 6, tzinfo=timezone.utc)
    record = _record(last_heard=later, latitude=1.5, longitude=2.5)
    outcome = apply_status(record, _status(), NOW)
    assert outcome.stale
    assert outcome.record is record
    assert outcome.move is None


def test_future_time_clamped_to_now():
    now = datetime(2021, 1, 1, tzinfo=timezone.utc)
    outcome = apply_status(_record(), _status(), now)
    assert outcome.last_heard == now
    assert outcome.record.last_heard == now


def test_small_move_not_reported_but_location_updated():
    record = _record(latitude=51.0, longitude=9.0, altitude=100)
    outcome = apply_status(record, _status(latitude=51.0005, longitude=9.0, altitude=0), NOW)
    assert outcome.move is None
    assert outcome.record.latitude == 51.0005
    assert outcome.record.altitude == 100


def test_large_move_reported():
    record = _record(latitude=51.0, longitude=9.0)
    outcome = apply_status(record, _status(latitude=51.002, longitude=9.0), NOW)
    assert outcome.move is not None
    assert outcome.move.latitude_old == 51.0
    assert outcome.move.latitude_new == 51.002


def test_invalid_coordinates_keep_previous_location():
    record = _record(latitude=51.0, longitude=9.0, altitude=100)
    outcome = apply_status(record, _status(latitude=52.0, longitude=6.0, altitude=50), NOW)
    assert outcome.invalid_reason == "Single channel gateway default coordinates"
    assert outcome.move is None
    assert (outcome.record.latitude, outcome.record.longitude) == (51.0, 9.0)
    assert outcome.record.altitude == 100


def test_forced_location_overrides_report():
    forced = Location(NETWORK, "test-gateway", latitude=-33.9, longitude=18.4, altitude=10)
    record = _record(latitude=-33.9, longitude=18.4, altitude=20)
    outcome = apply_status(record, _status(), NOW, forced)
    assert outcome.forced
    assert outcome.move is None
    assert (outcome.record.latitude, outcome.record.longitude, outcome.record.altitude) == (
        -33.9,
        18.4,
        10,
    )


def test_forced_to_null_island_moves_to_zero():
    forced = Location(NETWORK, "test-gateway", latitude=0.0, longitude=0.0, altitude=0)
    record = _record(latitude=51.0, longitude=9.0, altitude=100)
    outcome = apply_status(record, _status(), NOW, forced)
    assert outcome.invalid_reason == "Null island"
    assert outcome.move is not None
    assert outcome.move.latitude_new == 0.0
    assert (outcome.record.latitude, outcome.record.longitude, outcome.record.altitude) == (
        0.0,
        0.0,
        0,
    )


def test_attributes_merged_and_optional_fields():
    record = _record(attributes={"description": "old", "brand": "x"}, name="kept")
    status = _status(attributes={"description": "new"}, name="", location_accuracy=5.0)
    outcome = apply_status(record, status, NOW)
    assert outcome.record.attributes == {"description": "new", "brand": "x"}
    assert outcome.record.name == "kept"
    assert outcome.record.location_accuracy == 5.0