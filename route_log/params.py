"""
Pipeline parameters.

Defaults reproduce the behaviour of the recorded-run tooling: a CAN gap
longer than 0.5s is flagged, and alerts are repeated every 100ms so the
player always finds a recent alert state.

A JSON params file may override any subset of the defaults, e.g.::

    {"gaps": {"missing_threshold_ns": 250000000}}

Nested dictionaries are merged recursively, so partial files only
replace the keys they name.
"""

import copy
import json
from typing import Optional

MISSING_THRESHOLD_NS = 500_000_000
ALERT_INTERVAL_NS = 100_000_000
DIRECTION_MARKERS = ("Tx", "Rx")

_DEFAULT_PARAMS = {
    'can_log': {
        'direction_markers': list(DIRECTION_MARKERS),  # SavvyCAN Rx/Tx column
    },
    'gaps': {
        'missing_threshold_ns': MISSING_THRESHOLD_NS,
    },
    'alerts': {
        'interval_ns': ALERT_INTERVAL_NS,
    },
}


def default_params() -> dict:
    """Return a fresh copy of the default parameters."""
    return copy.deepcopy(_DEFAULT_PARAMS)


def recursive_update(base: dict, update: dict) -> dict:
    """
    Recursively update base dictionary with values from update dictionary.

    Nested dictionaries are merged rather than replaced. Lists and
    primitives in ``update`` replace the value in ``base``.

    Example:
        base = {"gaps": {"missing_threshold_ns": 500000000}}
        update = {"gaps": {"missing_threshold_ns": 1}}
        result = {"gaps": {"missing_threshold_ns": 1}}

    Args:
        base: Base dictionary (typically defaults)
        update: Update dictionary (typically user-provided overrides)

    Returns:
        Updated base dictionary (modified in-place, also returned)
    """
    for key, value in update.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            recursive_update(base[key], value)
        else:
            base[key] = value
    return base


def validate_params(params: dict) -> None:
    """
    Validate merged parameters.

    Raises:
        ValueError: If any value has the wrong type or is out of range
    """
    threshold = params['gaps']['missing_threshold_ns']
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0:
        raise ValueError(f"gaps.missing_threshold_ns must be a positive integer, got {threshold!r}")

    interval = params['alerts']['interval_ns']
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise ValueError(
            f"alerts.interval_ns must be a positive integer, got {interval!r}. "
            "A zero interval would never advance the alert cursor."
        )

    markers = params['can_log']['direction_markers']
    if not isinstance(markers, list) or not all(isinstance(m, str) for m in markers):
        raise ValueError("can_log.direction_markers must be a list of strings")


def load_params(params_file: Optional[str] = None) -> dict:
    """
    Load pipeline parameters.

    Args:
        params_file: Optional path to a JSON params file. If None, the
                     defaults are returned.

    Returns:
        Validated parameter dictionary

    Raises:
        FileNotFoundError: If params_file specified but doesn't exist
        json.JSONDecodeError: If params_file contains invalid JSON
        ValueError: If parameters fail validation
    """
    params = default_params()
    if params_file:
        with open(params_file, 'r', encoding='utf-8') as f:
            user_params = json.load(f)
        if not isinstance(user_params, dict):
            raise ValueError(f"Params file {params_file} must contain a JSON object")
        recursive_update(params, user_params)

    validate_params(params)
    return params
