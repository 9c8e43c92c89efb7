"""
Immutable view of the labeled sensor tree served by LibreHardwareMonitor.

The feed is a nested JSON document where every node looks like:

    {"Text": "CPU Total", "Value": "23.5 %", "Children": [...]}

A fresh tree is built for every poll and discarded after extraction.
"""

from dataclasses import dataclass
from typing import Any, Optional


class MalformedTreeError(ValueError):
    """Raised when a decoded JSON body does not have the sensor tree shape"""


@dataclass(frozen=True)
class SensorNode:
    """
    A single node of the sensor tree.

    Attributes:
        text: Display label (e.g., "CPU Total"), None when absent
        value: Raw value string (e.g., "23.5 %"), None when absent
        children: Child nodes in document order (traversal order matters)
    """

    text: Optional[str] = None
    value: Optional[str] = None
    children: tuple["SensorNode", ...] = ()

    @classmethod
    def from_json(cls, data: Any) -> "SensorNode":
        """
        Build a tree from a decoded JSON object.

        Args:
            data: Decoded JSON (dict with optional Text/Value/Children keys)

        Returns:
            Root SensorNode

        Raises:
            MalformedTreeError: If any node is not shaped like a sensor node
        """
        if not isinstance(data, dict):
            raise MalformedTreeError(f"Expected object node, got {type(data).__name__}")

        text = data.get("Text")
        value = data.get("Value")
        for key, field_value in (("Text", text), ("Value", value)):
            if field_value is not None and not isinstance(field_value, str):
                raise MalformedTreeError(
                    f"Field {key!r} must be a string, got {type(field_value).__name__}"
                )

        raw_children = data.get("Children")
        if raw_children is None:
            raw_children = []
        if not isinstance(raw_children, list):
            raise MalformedTreeError("Field 'Children' must be a list")

        return cls(
            text=text,
            value=value,
            children=tuple(cls.from_json(child) for child in raw_children),
        )

    def iter_nodes(self):
        """Yield this node and all descendants in depth-first pre-order"""
        yield self
        for child in self.children:
            yield from child.iter_nodes()
