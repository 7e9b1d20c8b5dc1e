"""Interpretation of the provider field in packets from the legacy store."""

from __future__ import annotations

from typing import NamedTuple

# Provider values that name where a location fix came from, not who sent it.
ACCURACY_PROVIDERS = frozenset(
    {
        "gps",
        "NULL",
        "network",
        "iOS",
        "ios",
        "iPhone",
        "android-log-file",
        "fake",
        "fused",
        "preparsed_json",
        "HDOP",
        "Cayenne LPP",
        "sats",
        "loraone_v3",
        "payload_fields",
        "accuracy",
        "gps_hdop",
        "satellites",
        "numsat",
        "titi",
        "custom",
        "custom payload / titi",
        "registry",
    }
)


class ProviderResolution(NamedTuple):
    """Where a legacy packet's location came from and who submitted it."""

    accuracy_source: str
    user_id: str


def is_accuracy_provider(name: str) -> bool:
    """Return True if a provider value names a location source."""
    return name in ACCURACY_PROVIDERS


def resolve_provider(provider: str | None, user_id: str) -> ProviderResolution:
    """Split a legacy provider/user pair into accuracy source and user id.

    The provider column held, over time, the accuracy source, then the
    submitting user, and again the accuracy source once a separate user
    column existed. ``None`` stands for a provider that was never set.
    """
    if provider is None:
        return ProviderResolution(accuracy_source="", user_id=user_id)
    if user_id == "":
        if is_accuracy_provider(provider):
            return ProviderResolution(accuracy_source=provider, user_id=user_id)
        return ProviderResolution(accuracy_source="", user_id=provider)
    return ProviderResolution(accuracy_source=provider, user_id=user_id)