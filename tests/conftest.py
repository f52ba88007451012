"""Shared fixtures for the road network tests."""

import pytest

from src.roadnet.cross_section import CrossSection, CrossSectionElement
from src.roadnet.markers import RoadMarkerAlong
from src.roadnet.network import Network
from src.roadnet.settings import RebuildSettings
from src.roadnet.typology import (
    CrossSectionElementTypology,
    MarkerTemplateRegistry,
    RoadMarkerAlongTemplate,
    TypologyRegistry,
)

LANE_WIDTH = 3.0
GRASS_WIDTH = 1.0
STRIPE_ROOM = 0.2
STRIPE_WIDTH = 0.1


@pytest.fixture
def typologies():
    return TypologyRegistry((
        CrossSectionElementTypology("road", True),
        CrossSectionElementTypology("grass", False),
    ))


@pytest.fixture
def marker_templates():
    return MarkerTemplateRegistry((
        RoadMarkerAlongTemplate("|", STRIPE_WIDTH),
        RoadMarkerAlongTemplate(":", STRIPE_WIDTH),
    ))


@pytest.fixture
def network(typologies, marker_templates):
    return Network(typologies, marker_templates)


@pytest.fixture
def isolating_network(typologies, marker_templates):
    return Network(typologies, marker_templates, RebuildSettings(error_policy="isolate"))


def _road_markers(lane_count):
    markers = [RoadMarkerAlong("|", STRIPE_ROOM / 2 + STRIPE_WIDTH)]
    for i in range(1, lane_count):
        markers.append(RoadMarkerAlong(":", i * (LANE_WIDTH + STRIPE_ROOM) + STRIPE_ROOM / 2 + STRIPE_WIDTH))
    markers.append(RoadMarkerAlong("|", lane_count * (LANE_WIDTH + STRIPE_ROOM) + STRIPE_ROOM / 2 + STRIPE_WIDTH))
    return markers


@pytest.fixture
def make_cross_section():
    """Factory for a grass / road / grass profile with ``lane_count`` lanes."""

    def _make(lane_count=1, position=0.0, road="road", neighbor_index=None, left_grass=GRASS_WIDTH):
        return CrossSection(position, [
            CrossSectionElement("grass", left_grass),
            CrossSectionElement(road, lane_count * (LANE_WIDTH + STRIPE_ROOM) + 2 * STRIPE_ROOM,
                                _road_markers(lane_count), neighbor_index),
            CrossSectionElement("grass", GRASS_WIDTH),
        ])

    return _make


@pytest.fixture
def make_link(make_cross_section):
    """Factory that adds a Link with a single profile to a Network."""

    def _make(network, name, from_node, to_node, lane_count=1, **kwargs):
        return network.add_link(
            name, from_node.node_id, to_node.node_id,
            cross_sections=[make_cross_section(lane_count)], **kwargs)

    return _make
