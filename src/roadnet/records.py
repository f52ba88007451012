"""Conversion between network objects and persisted tagged records.

A persistence layer hands over a Link as a mapping of field names to
values, with nested lists for repeated fields::

    {
        "name": "feed0",
        "fromNode": "1",
        "toNode": "0",
        "distance": "100.0",
        "intermediatePoint": [{"x": 50, "y": 2}],
        "crossSection": [
            {
                "longitudinalPosition": 0,
                "crossSectionElement": [
                    {"typology": "road", "width": 3.4, "neighborIndex": 0,
                     "roadMarkerAlong": [{"type": "|", "lateralPosition": 0.2}]},
                ],
            },
        ],
    }

Scalar values may be strings, as they come out of a text format.
Every problem is reported as a :class:`ParseError` that names the
offending record.
"""

from typing import Any, Dict, List, Mapping, Optional

from .cross_section import CrossSection, CrossSectionElement
from .errors import ConfigurationError, ParseError
from .link import Link
from .markers import RoadMarkerAlong
from .node import Node
from .vertex import Vertex


def _describe(record: Mapping[str, Any], kind: str) -> str:
    if isinstance(record, Mapping) and record.get("name") is not None:
        return f"{kind} record {record['name']}"
    return f"{kind} record"


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _number(record: Mapping[str, Any], key: str, location: str, default: Optional[float] = None) -> float:
    if key not in record or record[key] is None:
        if default is None:
            raise ParseError(f"Missing field {key}", location)
        return default
    try:
        return float(record[key])
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Malformed {key} {record[key]!r}", location) from exc


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _resolve_node(network, record: Mapping[str, Any], key: str, location: str) -> Node:
    if key not in record or record[key] is None:
        raise ParseError(f"{key} not defined", location)
    value = record[key]
    try:
        node_id = int(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Malformed {key} {value!r}", location) from exc
    node = network.lookup_node(node_id)
    if node is None:
        raise ParseError(f"Could not find {key} {value}", location)
    return node


def vertex_from_record(record: Mapping[str, Any], location: Optional[str] = None) -> Vertex:
    location = location or _describe(record, "intermediatePoint")
    if not isinstance(record, Mapping):
        raise ParseError(f"intermediatePoint is not a record: {record!r}", location)
    return Vertex(
        _number(record, "x", location),
        _number(record, "y", location),
        _number(record, "z", location, default=0.0),
    )


def marker_from_record(record: Mapping[str, Any], location: str) -> RoadMarkerAlong:
    if not isinstance(record, Mapping) or record.get("type") is None:
        raise ParseError(f"roadMarkerAlong without type: {record!r}", location)
    return RoadMarkerAlong(str(record["type"]), _number(record, "lateralPosition", location))


def element_from_record(record: Mapping[str, Any], location: str) -> CrossSectionElement:
    if not isinstance(record, Mapping):
        raise ParseError(f"crossSectionElement is not a record: {record!r}", location)
    typology = record.get("typology", record.get("name"))
    neighbor_index = None
    if record.get("neighborIndex") is not None:
        try:
            neighbor_index = int(record["neighborIndex"])
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Malformed neighborIndex {record['neighborIndex']!r}", location) from exc
    markers = [marker_from_record(m, location) for m in _as_list(record.get("roadMarkerAlong"))]
    return CrossSectionElement(
        None if typology is None else str(typology),
        _number(record, "width", location),
        markers,
        neighbor_index,
    )


def cross_section_from_record(record: Mapping[str, Any], location: Optional[str] = None) -> CrossSection:
    location = location or "crossSection record"
    if not isinstance(record, Mapping):
        raise ParseError(f"crossSection is not a record: {record!r}", location)
    elements = [element_from_record(e, location) for e in _as_list(record.get("crossSectionElement"))]
    return CrossSection(_number(record, "longitudinalPosition", location, default=0.0), elements)


def link_from_record(network, record: Mapping[str, Any], location: Optional[str] = None) -> Link:
    """Create (but do not register) a Link from a persisted record.

    Parameters
    ----------
    network : Network
        Network used to resolve the end Nodes and check the name.
    record : mapping
        The persisted Link record.
    location : str, optional
        Where the record came from, e.g. a file name and line number.

    Raises
    ------
    ParseError
        If the name is missing or taken, an end Node is missing or
        unknown, or a field is malformed.
    """
    location = location or _describe(record, "link")
    name = record.get("name")
    if name is None:
        raise ParseError("Link record has no name", location)
    name = str(name)
    if network.lookup_link(name) is not None:
        raise ParseError(f"Duplicate link name {name}", location)
    from_node = _resolve_node(network, record, "fromNode", location)
    to_node = _resolve_node(network, record, "toNode", location)
    vertices = [vertex_from_record(v, location) for v in _as_list(record.get("intermediatePoint"))]
    cross_sections = [cross_section_from_record(cs, location) for cs in _as_list(record.get("crossSection"))]
    try:
        return Link(
            network,
            name,
            from_node,
            to_node,
            length=_number(record, "distance", location, default=float("nan")),
            priority=_boolean(record.get("priority", False)),
            cross_sections=cross_sections,
            intermediate_vertices=vertices,
            max_speed=network.settings.default_max_speed,
        )
    except ConfigurationError as exc:
        raise ParseError(str(exc), location) from exc


def link_to_record(link: Link) -> Dict[str, Any]:
    """Inverse of :func:`link_from_record`."""
    return {
        "name": link.name,
        "fromNode": link.from_node.node_id,
        "toNode": link.to_node.node_id,
        "distance": link.length,
        "priority": link.priority,
        "intermediatePoint": [v.to_record() for v in link.intermediate_vertices],
        "crossSection": [cs.to_record() for cs in link.cross_sections],
    }
