"""Conversion of Neo4j driver results into plain, JSON-friendly data."""

from collections.abc import Mapping
from typing import Any

from neo4j.graph import Node, Path, Relationship
from neo4j.spatial import Point
from neo4j.time import Date, DateTime, Duration, Time

# Largest integer a JSON consumer can hold without losing precision
MAX_SAFE_INTEGER = 2**53 - 1

WGS84_2D_SRID = 4326
WGS84_3D_SRID = 4979

TEMPORAL_TYPES = (Date, DateTime, Time, Duration)


def normalize_records(records: Any) -> Any:
    """
    Extract and convert records returned by the Neo4j driver.

    Each record becomes a dict keyed by its field names, with every value
    passed through :func:`normalize_value`. ``None`` yields an empty list and
    anything that is not a list or tuple is returned as-is.
    """
    if records is None:
        return []

    if not isinstance(records, (list, tuple)):
        return records

    return [
        {key: normalize_value(record[key]) for key in record.keys()}
        for record in records
    ]


def normalize_value(value: Any) -> Any:
    """Recursively convert a driver value into plain Python data."""
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return value
        return str(value)

    # date, datetime, local time, local datetime, time, duration
    if isinstance(value, TEMPORAL_TYPES):
        return value.iso_format()

    if isinstance(value, Point):
        return _normalize_point(value)

    if isinstance(value, Path):
        return _normalize_path(value)

    if isinstance(value, (Node, Relationship)):
        value = dict(value.items())

    if isinstance(value, (list, tuple)):
        return [normalize_value(v) for v in value]

    if isinstance(value, Mapping):
        return {key: normalize_value(v) for key, v in value.items()}

    return value


def _normalize_point(point: Point) -> dict[str, Any]:
    # Coordinates are read positionally: (x, y) or (x, y, z)
    if point.srid == WGS84_2D_SRID:
        return {"longitude": point[1], "latitude": point[0]}

    if point.srid == WGS84_3D_SRID:
        return {"longitude": point[1], "latitude": point[0], "height": point[2]}

    coordinates = {"x": point[0], "y": point[1]}
    if len(point) > 2:
        coordinates["z"] = point[2]
    return normalize_value(coordinates)


def _normalize_path(path: Path) -> dict[str, Any]:
    # Segments follow traversal order, whatever each relationship's direction
    nodes = path.nodes
    return {
        "start": normalize_value(path.start_node),
        "end": normalize_value(path.end_node),
        "segments": [
            {
                "start": normalize_value(start),
                "relationship": normalize_value(relationship),
                "end": normalize_value(end),
            }
            for start, relationship, end in zip(nodes, path.relationships, nodes[1:])
        ],
    }


def collapse_null_collections(
    data: list[Any], array_key: str, check_key: str
) -> list[Any]:
    """
    Look for collected arrays holding a single all-null entry and empty them.

    A query that combines ``OPTIONAL MATCH (f)`` with
    ``collect({name: f.name}) AS friends`` returns ``[{name: null}]`` rather
    than ``[]`` when nothing matched. Calling
    ``collapse_null_collections(data, "friends", "name")`` reduces such
    arrays to ``[]``, also inside nested arrays of each record.

    Args:
        data: Normalized records, modified in place.
        array_key: Key of the array to check.
        check_key: Key of the first array element to check against ``None``.

    Returns:
        The same ``data`` list.
    """
    for record in data:
        if not isinstance(record, Mapping):
            continue

        collected = record.get(array_key)
        if isinstance(collected, list) and collected:
            first = collected[0]
            if isinstance(first, Mapping) and check_key in first and first[check_key] is None:
                record[array_key] = []

        for value in record.values():
            if isinstance(value, list):
                collapse_null_collections(value, array_key, check_key)

    return data
