"""Unit tests for CrossSection and CrossSectionElement."""

import numpy as np
import pytest

from src.roadnet.cross_section import NO_NEIGHBOR, CrossSection, CrossSectionElement, pair_lanes
from src.roadnet.errors import ConfigurationError
from src.roadnet.lanes import Lane
from src.roadnet.markers import RoadMarkerAlong


def _bind(cross_section, typologies):
    for cse in cross_section.elements:
        cse.bind_typology(typologies)
    return cross_section


def _lanes(count):
    return [Lane(np.zeros((2, 3)), 1.0, -1.0, index=i) for i in range(count)]


def _indices(pairs):
    return [(up.index, down.index) for up, down in pairs]


class TestCrossSectionLayout:
    """Test suite for lateral layout of a CrossSection."""

    def test_width_is_sum_of_elements(self, make_cross_section):
        cs = make_cross_section(1)
        assert cs.width == pytest.approx(5.6)

    def test_element_left_offsets(self, make_cross_section):
        """The profile is centred on the design line, positive to the left."""
        cs = make_cross_section(1)
        grass_left, road, grass_right = cs.elements
        assert grass_left.left_offset() == pytest.approx(2.8)
        assert road.left_offset() == pytest.approx(1.8)
        assert grass_right.left_offset() == pytest.approx(-1.8)

    def test_foreign_element_offset_rejected(self, make_cross_section):
        cs = make_cross_section(1)
        with pytest.raises(ConfigurationError):
            cs.element_left_offset(CrossSectionElement("grass", 1.0))

    def test_describe_names_link_and_indices(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b)
        assert link.cross_sections[0].elements[1].describe() == "ab/cs0/cse1"

    def test_to_record(self):
        cs = CrossSection(12.5, [
            CrossSectionElement("road", 3.6, [RoadMarkerAlong("|", 0.2)], neighbor_index=0),
        ])
        assert cs.to_record() == {
            "longitudinalPosition": 12.5,
            "crossSectionElement": [{
                "typology": "road",
                "width": 3.6,
                "roadMarkerAlong": [{"type": "|", "lateralPosition": 0.2}],
                "neighborIndex": 0,
            }],
        }


class TestCrossSectionOrdering:
    """Test suite for CrossSections along a Link."""

    def test_cross_sections_sorted_by_position(self, network, make_cross_section):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        late = make_cross_section(1, position=60.0)
        early = make_cross_section(1, position=0.0)
        link = network.add_link("ab", a.node_id, b.node_id, cross_sections=[late, early])
        assert link.cross_sections == [early, late]
        assert late.link is link

    def test_add_cross_section_after_equal_position(self, network, make_link, make_cross_section):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b)
        first = link.cross_sections[0]
        same = make_cross_section(2, position=0.0)
        middle = make_cross_section(2, position=30.0)
        link.add_cross_section(middle)
        link.add_cross_section(same)
        assert link.cross_sections == [first, same, middle]

    def test_longitudinal_range(self, network, make_link, make_cross_section):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b)
        link.add_cross_section(make_cross_section(2, position=40.0))
        assert link.cross_sections[0].longitudinal_range(100.0) == (0.0, 40.0)
        assert link.cross_sections[1].longitudinal_range(100.0) == (40.0, 100.0)


class TestNeighborIndex:
    """Test suite for CrossSection.link_to_cross_section."""

    def test_derived_index_matches_drivable_element(self, typologies, make_cross_section):
        here = _bind(make_cross_section(1), typologies)
        there = _bind(CrossSection(50.0, [
            CrossSectionElement("grass", 1.0),
            CrossSectionElement("grass", 2.0),
            CrossSectionElement("road", 3.6),
            CrossSectionElement("grass", 1.0),
        ]), typologies)
        here.link_to_cross_section(there)
        assert here.next_cross_section is there
        assert there.previous_cross_section is here
        assert [cse.resolved_neighbor_index for cse in here.elements] == [NO_NEIGHBOR, 2, NO_NEIGHBOR]

    def test_derived_index_counts_from_the_right(self, typologies):
        here = _bind(CrossSection(0.0, [
            CrossSectionElement("road", 3.6),
            CrossSectionElement("grass", 1.0),
            CrossSectionElement("road", 3.6),
        ]), typologies)
        there = _bind(CrossSection(50.0, [
            CrossSectionElement("grass", 1.0),
            CrossSectionElement("road", 3.6),
        ]), typologies)
        here.link_to_cross_section(there)
        assert [cse.resolved_neighbor_index for cse in here.elements] == [NO_NEIGHBOR, NO_NEIGHBOR, 1]

    def test_explicit_index_wins(self, typologies, make_cross_section):
        here = _bind(make_cross_section(1, neighbor_index=NO_NEIGHBOR), typologies)
        there = _bind(make_cross_section(1, position=50.0), typologies)
        here.link_to_cross_section(there)
        assert here.elements[1].resolved_neighbor_index == NO_NEIGHBOR
        assert here.elements[1].neighbor_index == NO_NEIGHBOR

    def test_unbound_typology_rejected(self, make_cross_section):
        cs = make_cross_section(1)
        with pytest.raises(ConfigurationError):
            cs.drivable_elements()


class TestPairLanes:
    """Test suite for pair_lanes."""

    def test_equal_counts_identity(self):
        up, down = _lanes(2), _lanes(2)
        pairs = pair_lanes(up, down)
        assert _indices(pairs) == [(0, 0), (1, 1)]
        assert pairs[0] == (up[0], down[0])

    def test_lane_drop_merges_into_leftmost(self):
        assert _indices(pair_lanes(_lanes(3), _lanes(2))) == [(0, 0), (1, 0), (2, 1)]

    def test_lane_gain_branches_from_leftmost(self):
        assert _indices(pair_lanes(_lanes(1), _lanes(3))) == [(0, 0), (0, 1), (0, 2)]

    def test_no_lanes_no_pairs(self):
        assert pair_lanes([], _lanes(2)) == []
        assert pair_lanes(_lanes(2), []) == []
