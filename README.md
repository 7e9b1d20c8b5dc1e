# ttnmapper

The rules behind a LoRaWAN coverage map, as a plain Python library with no
third-party dependencies. It decides when a gateway has moved, which
gateway coordinates can be trusted, how a gateway's location history is
cleaned up, how token claims are checked, and how gateway and measurement
records are shaped for a website API.

## What is in it

| Module | Purpose |
| --- | --- |
| `ttnmapper.geo` | Haversine distance, cleaning up gateway location histories, slippy-map tile bounds |
| `ttnmapper.gateway_status` | Coordinate validation and applying a status update to a gateway record |
| `ttnmapper.legacy_packets` | Interpreting the provider field of packets from the old database |
| `ttnmapper.auth` | Checking JWT claims, finding signing certificates, reading the user id |
| `ttnmapper.responses` | Website API response objects, anonymisation, network subscriptions and paging |

## Gateway coordinates

Placeholder and bogus locations are rejected with a reason:

```python
from ttnmapper.gateway_status import coordinates_valid, invalid_coordinates_reason

coordinates_valid(51.24, 9.43)              # True
invalid_coordinates_reason(0.5, 0.5)        # "Null island"
invalid_coordinates_reason(22.70, 114.24)   # "Shenzhen factory coordinates"
```

`apply_status(record, status, now, forced_location=None)` folds a
`GatewayStatus` into a stored `GatewayRecord` and returns a `StatusOutcome`.
The given record is left untouched; the outcome holds an updated copy.

- A last-heard time in the future is clamped to `now`.
- A status older than the record's `last_heard` is marked `stale` and
  changes nothing (`outcome.updated` is then false).
- A `forced_location` (anything with `latitude`, `longitude` and
  `altitude`) replaces the reported coordinates.
- Invalid coordinates are treated as 0,0 and the reason is kept in
  `invalid_reason`; a valid stored location is not overwritten by them.
- A move of more than 100 m is reported as a `GatewayMove` in `move`.
- EUI, name, location accuracy and source are copied when set, and
  attributes are merged over the stored ones.

## Locations and tiles

```python
from ttnmapper.geo import haversine_km, tile_bounds

haversine_km(52.0, 6.0, 52.0, 6.0)  # 0.0
tile_bounds(16, 10, 5)              # TileBounds(north=..., south=..., west=..., east=...)
```

`filter_locations(locations)` takes a sequence of `Location` entries and
drops those that did not move more than 100 m from the last kept one,
including gateways that flip back and forth between two spots. An empty
sequence raises `ValueError`.

## Legacy packets

```python
from ttnmapper.legacy_packets import resolve_provider

resolve_provider("gps", "")        # accuracy_source="gps", user_id=""
resolve_provider("jpmeijers", "")  # accuracy_source="", user_id="jpmeijers"
resolve_provider(None, "someone")  # accuracy_source="", user_id="someone"
```

`is_accuracy_provider(name)` tells whether a provider value names a
location source rather than a user.

## Token claims

```python
from ttnmapper.auth import check_claims, user_id_from_claims

check_claims(claims)                          # raises AuthError on a wrong audience or issuer
user_id_from_claims({"sub": "auth0|1211"})    # 1211
```

`pem_certificate(jwks, kid)` picks the certificate for a key id out of an
already decoded JSON Web Key Set and returns it in PEM form, raising
`AuthError` when no key matches.

## Website API responses

```python
from ttnmapper.responses import anonymise_device_measurements, page_slice

public = anonymise_device_measurements(measurements)
first_page = page_slice(gateways, 0, 10000)
```

Anonymised measurements have their device and application identifiers and
user agent redacted, port and counter set to 1, the fine timestamp cleared
and timestamps truncated to the day. `apply_subscription(gateway,
subscription)` hides gateway names and descriptions for networks whose
`NetworkSubscription` does not allow showing them. `gateway_from_record`
builds a `GatewayResponse` from any gateway record, and `error_response`
wraps an error message. `ErrorResponse`, `GatewayResponse` and
`DeviceMeasurement` turn into JSON-ready dictionaries with `to_dict()`.

## What it does not do

This is a library of rules only. It has no commands to run, no HTTP
server, no message-queue consumer or publisher and no database storage:
gateway records, measurements and key sets are passed in by the caller,
and results are handed back for the caller to store, publish or send. It
does not download key sets or verify token signatures; it only checks
claims and looks up certificates.

## Running the tests

Install the `test` extra and run pytest from the project directory.