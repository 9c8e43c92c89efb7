"""
Numeric lookups over the sensor tree.

All lookups are pure functions: they take the tree root and a label and
return the first matching value in depth-first pre-order, or None.
"""

import math
from typing import Optional

from .sensor_tree import SensorNode

# Conversion factors to the canonical scale (MB/s for throughput)
UNIT_SCALE = {
    "%": 1.0,
    "kb/s": 1.0 / 1024.0,
    "mb/s": 1.0,
    "gb/s": 1024.0,
}

TEMPERATURE_MIN = -50.0
TEMPERATURE_MAX = 150.0

DEFAULT_INTERFACE = "Wi-Fi"


def normalize_unit(magnitude: float, unit: Optional[str]) -> float:
    """Scale a magnitude to the canonical unit (unknown units pass through)"""
    if not unit:
        return magnitude
    return magnitude * UNIT_SCALE.get(unit.lower(), 1.0)


def _parse_magnitude(token: str) -> Optional[float]:
    if "_" in token:
        return None
    try:
        number = float(token)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_value(raw: Optional[str]) -> Optional[float]:
    """
    Parse a sensor value string into a normalized number.

    Accepts either a bare number ("42") or "<number> <unit>" ("512 KB/s").
    Tokens after the unit are ignored.

    Args:
        raw: Raw value string from the tree

    Returns:
        Normalized magnitude, or None if the value is missing or unparsable
    """
    if raw is None:
        return None

    tokens = raw.split()
    if not tokens:
        return None

    magnitude = _parse_magnitude(tokens[0])
    if magnitude is None:
        return None

    unit = tokens[1] if len(tokens) > 1 else None
    return normalize_unit(magnitude, unit)


def _label_matches(node: SensorNode, label: str) -> bool:
    return node.text is not None and node.text.strip().lower() == label


def find_numeric(root: SensorNode, label: str) -> Optional[float]:
    """
    Find the first parsable value whose node label matches.

    Matching is case-insensitive on trimmed labels. A matching node with a
    missing or unparsable value does not stop the search; its children and
    the rest of the tree are still visited.

    Args:
        root: Tree root
        label: Sensor label to look for

    Returns:
        Unit-normalized value, or None if not found
    """
    wanted = label.strip().lower()
    for node in root.iter_nodes():
        if not _label_matches(node, wanted):
            continue
        value = parse_value(node.value)
        if value is not None:
            return value
    return None


def find_temperature(root: SensorNode, label: str) -> Optional[float]:
    """Like find_numeric, but reject values outside the plausible range"""
    value = find_numeric(root, label)
    if value is None:
        return None
    if TEMPERATURE_MIN < value < TEMPERATURE_MAX:
        return value
    return None


def find_interface_value(
    root: SensorNode, label: str, interface: str = DEFAULT_INTERFACE
) -> Optional[float]:
    """
    Resolve a label scoped to a named network interface subtree.

    Children are scanned in order. Other children are searched recursively
    for the interface node before moving on to their next sibling. The first
    node (depth-first) whose trimmed label equals the interface name
    (case-sensitive) narrows the search to its subtree and ends the lookup,
    found or not; later interface nodes with the same label are ignored.

    Args:
        root: Tree root (its own label is not considered)
        label: Leaf label within the interface (e.g., "Upload Speed")
        interface: Interface node label

    Returns:
        Unit-normalized value, or None if not found
    """
    interface_node = _find_interface(root, interface)
    if interface_node is None:
        return None
    return find_numeric(interface_node, label)


def _find_interface(node: SensorNode, interface: str) -> Optional[SensorNode]:
    for child in node.children:
        if child.text is not None and child.text.strip() == interface:
            return child
        found = _find_interface(child, interface)
        if found is not None:
            return found
    return None
