"""Utility functions for hue-lib.

This module contains small helpers used across the application:
- device_type: Identifier sent to the bridge when registering
- one_time_uuid: Random 32 character hex token
- is_valid_bridge_id: Check a bridge id is usable as a config file name
- percent_to_unit_interval: Parse "NN%" strings into 0.0-1.0 floats
"""

import uuid
from pathlib import Path

DEVICE_TYPE = 'hue-lib'


def device_type() -> str:
    """Return the device type string this application registers as."""
    return DEVICE_TYPE


def one_time_uuid() -> str:
    """Return a random 32 character hex string."""
    return uuid.uuid4().hex


def is_valid_bridge_id(bridge_id) -> bool:
    """Return True if bridge_id is a non-empty string safe to use as a file name."""
    return (
        isinstance(bridge_id, str)
        and bool(bridge_id)
        and not bridge_id.startswith('.')
        and Path(bridge_id).name == bridge_id
    )


def percent_to_unit_interval(value) -> float | None:
    """Convert a percentage string such as "40%" into a unit interval float.

    Leading and trailing whitespace is ignored. The numeric part must be a
    non-empty run of digits immediately followed by a single '%'.

    Args:
        value: Anything with a string representation (e.g. "75%", 75)

    Returns:
        Float in the range 0.0 upwards (100% -> 1.0), or None if malformed
    """
    if value is None:
        return None

    text = str(value).strip()
    if len(text) < 2 or not text.endswith('%'):
        return None

    digits = text[:-1]
    if not digits.isascii() or not digits.isdigit():
        return None

    return int(digits) / 100.0
