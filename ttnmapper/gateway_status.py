"""Applying a reported gateway status to the stored gateway record."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from ttnmapper.geo import MOVE_THRESHOLD_KM, haversine_km

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NEVER = datetime(1, 1, 1, tzinfo=timezone.utc)


class _Coordinates(Protocol):
    latitude: float
    longitude: float
    altitude: int


@dataclass
class GatewayStatus:
    """A gateway as reported by a packet or a network's status listing."""

    network_id: str
    gateway_id: str
    time: int = 0
    """Last heard, in nanoseconds since the Unix epoch."""
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: int = 0
    gateway_eui: str = ""
    name: str = ""
    location_accuracy: float = 0.0
    location_source: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayRecord:
    """The stored state of a gateway."""

    network_id: str
    gateway_id: str
    id: int = 0
    last_heard: datetime = _NEVER
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: int = 0
    gateway_eui: str | None = None
    name: str | None = None
    location_accuracy: float | None = None
    location_source: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayMove:
    """A gateway moved further than the move threshold."""

    network_id: str
    gateway_id: str
    time: int
    """When the move was detected, in nanoseconds since the Unix epoch."""
    latitude_old: float
    longitude_old: float
    altitude_old: int
    latitude_new: float
    longitude_new: float
    altitude_new: int


@dataclass(frozen=True)
class StatusOutcome:
    """The result of applying a status to a record."""

    record: GatewayRecord
    last_heard: datetime
    stale: bool = False
    forced: bool = False
    invalid_reason: str | None = None
    move: GatewayMove | None = None

    @property
    def updated(self) -> bool:
        """True when the record should be saved."""
        return not self.stale


def invalid_coordinates_reason(latitude: float, longitude: float) -> str | None:
    """Return why a coordinate pair is unusable, or None if it is valid."""
    if abs(latitude) < 1 and abs(longitude) < 1:
        return "Null island"
    if abs(latitude) > 90:
        return "Latitude out of bounds"
    if abs(longitude) > 180:
        return "Longitude out of bounds"
    if latitude == 52.0 and longitude == 6.0:
        return "Single channel gateway default coordinates"
    if latitude == 10.0 and longitude == 20.0:
        return "Lorier LR2 default coordinates"
    if latitude == 50.008724 and longitude == 36.215805:
        return "Ukrainian hack coordinates"
    # A factory reusing EUIs and relocating otherwise valid gateways.
    if 22.69 < latitude < 22.71 and 114.23 < longitude < 114.25:
        return "Shenzhen factory coordinates"
    return None


def coordinates_valid(latitude: float, longitude: float) -> bool:
    """Return True if a coordinate pair can be used as a gateway location."""
    return invalid_coordinates_reason(latitude, longitude) is None


def _to_ns(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(microseconds=1) * 1000


def _from_ns(nanos: int) -> datetime:
    return _EPOCH + timedelta(microseconds=nanos // 1000)


def apply_status(
    record: GatewayRecord,
    status: GatewayStatus,
    now: datetime,
    forced_location: _Coordinates | None = None,
) -> StatusOutcome:
    """Work out the new gateway record for a reported status.

    ``forced_location``, when given, overrides the reported coordinates.
    The given record is left untouched; the outcome holds an updated copy.
    """
    last_heard_ns = min(status.time, _to_ns(now))
    last_heard = _from_ns(last_heard_ns)

    if last_heard_ns < _to_ns(record.last_heard):
        return StatusOutcome(record=record, last_heard=last_heard, stale=True)

    latitude, longitude, altitude = status.latitude, status.longitude, status.altitude
    forced = forced_location is not None
    if forced_location is not None:
        latitude = forced_location.latitude
        longitude = forced_location.longitude
        altitude = forced_location.altitude

    reason = invalid_coordinates_reason(latitude, longitude)
    if reason is not None:
        latitude, longitude, altitude = 0.0, 0.0, 0

    move = None
    if forced or (latitude != 0.0 and longitude != 0.0):
        distance = haversine_km(record.latitude, record.longitude, latitude, longitude)
        if distance > MOVE_THRESHOLD_KM:
            move = GatewayMove(
                network_id=status.network_id,
                gateway_id=status.gateway_id,
                time=last_heard_ns,
                latitude_old=record.latitude,
                longitude_old=record.longitude,
                altitude_old=record.altitude,
                latitude_new=latitude,
                longitude_new=longitude,
                altitude_new=altitude,
            )

    changes: dict[str, Any] = {"last_heard": last_heard}
    if forced:
        changes.update(latitude=latitude, longitude=longitude, altitude=altitude)
    else:
        if not (latitude == 0 and longitude == 0):
            changes.update(latitude=latitude, longitude=longitude)
        if altitude != 0:
            changes["altitude"] = altitude

    if status.gateway_eui:
        changes["gateway_eui"] = status.gateway_eui
    if status.name:
        changes["name"] = status.name
    if status.location_accuracy != 0:
        changes["location_accuracy"] = status.location_accuracy
    if status.location_source:
        changes["location_source"] = status.location_source
    changes["attributes"] = {**record.attributes, **status.attributes}

    return StatusOutcome(
        record=dataclasses.replace(record, **changes),
        last_heard=last_heard,
        forced=forced,
        invalid_reason=reason,
        move=move,
    )