"""
Normalization of values read from the graph store
"""
from typing import Any

from neo4j.graph import Node, Relationship

# Largest integer a JSON client can represent exactly
MAX_SAFE_INTEGER = 2**53 - 1


def normalize_value(value: Any) -> Any:
    """
    Convert graph values into plain Python structures.

    Integers outside the safe range become strings, nodes become property
    dicts carrying their labels, relationships become descriptors.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return value
        return str(value)
    if isinstance(value, Node):
        properties = {k: normalize_value(v) for k, v in value.items()}
        properties["labels"] = sorted(value.labels)
        return properties
    if isinstance(value, Relationship):
        return {
            "type": value.type,
            "startNode": value.start_node.get("id") if value.start_node else None,
            "endNode": value.end_node.get("id") if value.end_node else None,
            **{k: normalize_value(v) for k, v in value.items()},
        }
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    if isinstance(value, dict):
        return {k: normalize_value(v) for k, v in value.items()}
    return value


def normalize_record(record: Any) -> dict:
    """Normalize a driver record (or a plain mapping) into a dict"""
    if hasattr(record, "items") and not isinstance(record, dict):
        record = dict(record.items())
    return {key: normalize_value(value) for key, value in record.items()}
