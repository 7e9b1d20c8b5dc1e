"""Processing rules for LoRaWAN coverage mapping: geography, gateway statuses, legacy packets, token claims and API responses."""

__version__ = "0.1.0"