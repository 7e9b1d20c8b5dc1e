"""Response bodies of the website API and the conversions that build them."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

REDACTED = "<redacted>"
DEFAULT_PAGE_SIZE = 10000

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

T = TypeVar("T")


def _json_key(name: str) -> Any:
    return {"json": name}


def _format_time(moment: datetime) -> str:
    """Format a timestamp as RFC 3339 with the fraction's trailing zeros removed."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}T"
    text += f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, dict):
        return {key: _json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    return value


class _JsonBody:
    """Serialises a dataclass using the JSON names kept in its field metadata."""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of this response."""
        return {
            f.metadata.get("json", f.name): _json_value(getattr(self, f.name))
            for f in dataclasses.fields(self)  # type: ignore[arg-type]
        }


@dataclass
class ErrorResponse(_JsonBody):
    """A failed request."""

    success: bool = field(default=False, metadata=_json_key("success"))
    message: str = field(default="", metadata=_json_key("message"))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of this error."""
        return super().to_dict()


@dataclass
class GatewayResponse(_JsonBody):
    """A gateway as shown on the website."""

    database_id: int = field(default=0, metadata=_json_key("database_id"))
    network_id: str = field(default="", metadata=_json_key("network_id"))
    gateway_id: str = field(default="", metadata=_json_key("gateway_id"))
    gateway_eui: str = field(default="", metadata=_json_key("gateway_eui"))
    name: str = field(default="", metadata=_json_key("name"))

    last_heard: datetime = field(default=_ZERO_TIME, metadata=_json_key("last_heard"))
    latitude: float = field(default=0.0, metadata=_json_key("latitude"))
    longitude: float = field(default=0.0, metadata=_json_key("longitude"))
    altitude: int = field(default=0, metadata=_json_key("altitude"))

    north: float = field(default=0.0, metadata=_json_key("north"))
    south: float = field(default=0.0, metadata=_json_key("south"))
    west: float = field(default=0.0, metadata=_json_key("west"))
    east: float = field(default=0.0, metadata=_json_key("east"))

    attributes: dict[str, Any] = field(
        default_factory=dict, metadata=_json_key("attributes")
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of this gateway."""
        return super().to_dict()


@dataclass
class DeviceMeasurement(_JsonBody):
    """One reception of a mapped packet by one gateway."""

    id: int = field(default=0, metadata=_json_key("database_id"))
    time: datetime = field(default=_ZERO_TIME, metadata=_json_key("time"))

    app_id: str = field(default="", metadata=_json_key("app_id"))
    dev_id: str = field(default="", metadata=_json_key("dev_id"))
    dev_eui: str = field(default="", metadata=_json_key("dev_eui"))
    device_network_id: str = field(default="", metadata=_json_key("device_network_id"))

    f_port: int = field(default=0, metadata=_json_key("f_port"))
    f_cnt: int = field(default=0, metadata=_json_key("f_cnt"))

    latitude: float = field(default=0.0, metadata=_json_key("latitude"))
    longitude: float = field(default=0.0, metadata=_json_key("longitude"))
    altitude: float = field(default=0.0, metadata=_json_key("altitude"))
    accuracy_meters: float = field(default=0.0, metadata=_json_key("accuracy_meters"))
    satellites: int = field(default=0, metadata=_json_key("satellites"))
    hdop: float = field(default=0.0, metadata=_json_key("hdop"))
    accuracy_source: str = field(default="", metadata=_json_key("location_source"))

    channel_index: int = field(default=0, metadata=_json_key("channel_index"))
    rssi: float = field(default=0.0, metadata=_json_key("rssi"))
    signal_rssi: float | None = field(default=None, metadata=_json_key("signal_rssi"))
    snr: float = field(default=0.0, metadata=_json_key("snr"))

    frequency: int = field(default=0, metadata=_json_key("frequency"))
    modulation: str = field(default="", metadata=_json_key("modulation"))
    bandwidth: int = field(default=0, metadata=_json_key("bandwidth"))
    spreading_factor: int = field(default=0, metadata=_json_key("spreading_factor"))
    bitrate: int = field(default=0, metadata=_json_key("bitrate"))
    coding_rate: str = field(default="", metadata=_json_key("coding_rate"))

    gateway_network_id: str = field(default="", metadata=_json_key("gateway_network_id"))
    gateway_id: str = field(default="", metadata=_json_key("gateway_id"))
    antenna_index: int = field(default=0, metadata=_json_key("antenna_index"))
    gateway_time: datetime = field(default=_ZERO_TIME, metadata=_json_key("gateway_time"))
    fine_timestamp: int = field(default=0, metadata=_json_key("fine_timestamp"))

    user_agent: str = field(default="", metadata=_json_key("user_agent"))

    experiment: str = field(default="", metadata=_json_key("experiment"))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of this measurement."""
        return super().to_dict()


@dataclass
class ExperimentResponse(_JsonBody):
    """An experiment listed by id and name."""

    id: int = field(default=0, metadata=_json_key("id"))
    name: str = field(default="", metadata=_json_key("name"))


@dataclass
class NetworkSubscription:
    """What a network has paid to have shown about its gateways."""

    id: int = 0
    gateway_names: bool = False
    gateway_descriptions: bool = False


def error_response(error: BaseException | str) -> ErrorResponse:
    """Build the response body for a failed request."""
    return ErrorResponse(success=False, message=str(error))


def truncate_to_day(moment: datetime) -> datetime:
    """Return midnight at the start of the moment's day, in the same time zone."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def anonymise_device_measurements(
    measurements: Iterable[DeviceMeasurement],
) -> list[DeviceMeasurement]:
    """Return copies of the measurements with device-identifying data removed."""
    return [
        dataclasses.replace(
            measurement,
            dev_id=REDACTED,
            dev_eui=REDACTED,
            app_id=REDACTED,
            f_port=1,
            f_cnt=1,
            time=truncate_to_day(measurement.time),
            gateway_time=truncate_to_day(measurement.gateway_time),
            fine_timestamp=0,
            user_agent=REDACTED,
        )
        for measurement in measurements
    ]


def apply_subscription(
    gateway: GatewayResponse, subscription: NetworkSubscription | None
) -> GatewayResponse:
    """Hide the gateway details that the owning network has not subscribed to show."""
    subscribed = subscription is not None and subscription.id != 0
    changes: dict[str, Any] = {}

    if not (subscribed and subscription.gateway_names):  # type: ignore[union-attr]
        changes["network_id"] = gateway.network_id.partition(":")[0]
        changes["gateway_id"] = ""
        changes["name"] = ""

    attributes = dict(gateway.attributes)
    if not (subscribed and subscription.gateway_descriptions):  # type: ignore[union-attr]
        if "description" in attributes:
            attributes["description"] = ""
    changes["attributes"] = attributes

    return dataclasses.replace(gateway, **changes)


def _attributes(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def gateway_from_record(record: Any) -> GatewayResponse:
    """Build a gateway response from a stored gateway, with its bounding box if any."""
    return GatewayResponse(
        database_id=getattr(record, "id", 0),
        network_id=record.network_id,
        gateway_id=record.gateway_id,
        gateway_eui=getattr(record, "gateway_eui", None) or "",
        name=getattr(record, "name", None) or "",
        last_heard=getattr(record, "last_heard", _ZERO_TIME),
        latitude=getattr(record, "latitude", 0.0),
        longitude=getattr(record, "longitude", 0.0),
        altitude=getattr(record, "altitude", 0),
        north=getattr(record, "north", 0.0),
        south=getattr(record, "south", 0.0),
        west=getattr(record, "west", 0.0),
        east=getattr(record, "east", 0.0),
        attributes=_attributes(getattr(record, "attributes", None)),
    )


def page_slice(
    items: Sequence[T], page: int | str, page_size: int = DEFAULT_PAGE_SIZE
) -> list[T]:
    """Return one page of items; an unparsable page number means the first page."""
    if isinstance(page, str):
        try:
            page = int(page, 10)
        except ValueError:
            page = 0
    if page < 0:
        raise ValueError(f"page must not be negative, got {page}")
    if page_size <= 0:
        raise ValueError(f"page size must be positive, got {page_size}")
    start = min(page * page_size, len(items))
    end = min(start + page_size, len(items))
    return list(items[start:end])