"""Unit tests for design line trimming and Link length."""

import numpy as np
import pytest

from src.roadnet.vertex import Vertex


def _xy(vertices):
    return [(round(v.x, 6), round(v.y, 6)) for v in vertices]


class TestDesignLine:
    """Test suite for Link.design_line."""

    def test_no_circles_gives_raw_vertices(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b, intermediate_vertices=[Vertex(50.0, 5.0)])
        assert _xy(link.design_line()) == [(0.0, 0.0), (50.0, 5.0), (100.0, 0.0)]

    def test_trimmed_at_to_node(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b)
        assert _xy(link.design_line()) == [(0.0, 0.0), (90.0, 0.0), (100.0, 0.0)]

    def test_trimmed_at_both_nodes(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0, radius=10.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b)
        line = link.design_line()
        assert _xy(line) == [(0.0, 0.0), (10.0, 0.0), (90.0, 0.0), (100.0, 0.0)]
        # Ends stay at the Node positions
        assert line[0] == a.vertex
        assert line[-1] == b.vertex

    def test_vertices_inside_circle_are_deleted(self, network, make_link):
        """A vertex between the trimming point and the Node is dropped."""
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b,
                         intermediate_vertices=[Vertex(104.0, 1.0), Vertex(130.0, 0.0)])
        assert _xy(link.design_line()) == [(0.0, 0.0), (130.0, 0.0), (110.0, 0.0), (100.0, 0.0)]

    def test_trimming_point_snaps_to_neighbour(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b, intermediate_vertices=[Vertex(89.99995, 0.0)])
        line = link.design_line()
        assert len(line) == 3
        assert line[1].x == pytest.approx(90.0)
        assert line[1].y == pytest.approx(0.0)

    def test_segment_too_short_is_not_trimmed(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b, intermediate_vertices=[Vertex(95.0, 0.0)])
        vertices, trimmed_start, trimmed_end = link.assemble_design_line()
        assert _xy(vertices) == [(0.0, 0.0), (95.0, 0.0), (100.0, 0.0)]
        assert not trimmed_start
        assert not trimmed_end

    def test_design_line_is_repeatable(self, network, make_link):
        """Computing the design line leaves the Link's own vertices alone."""
        a = network.add_node("a", 0, 0.0, 0.0, radius=10.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b, intermediate_vertices=[Vertex(50.0, 0.0)])
        first = link.design_line()
        second = link.design_line()
        assert first == second
        assert link.intermediate_vertices == [Vertex(50.0, 0.0)]

    def test_design_line_array(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 10.0, 0.0, 2.0)
        link = make_link(network, "ab", a, b)
        np.testing.assert_allclose(link.design_line_array(), [[0.0, 0.0, 0.0], [10.0, 0.0, 2.0]])


class TestRoadwayLine:
    """Test suite for Link.roadway_line."""

    def test_roadway_drops_node_centers(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0, radius=10.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b)
        np.testing.assert_allclose(link.roadway_line()[:, :2], [[10.0, 0.0], [90.0, 0.0]])

    def test_roadway_station(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0, radius=10.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b)
        roadway, station = link.roadway()
        assert station == pytest.approx(10.0)
        np.testing.assert_allclose(roadway[:, :2], [[10.0, 0.0], [100.0, 0.0]])

    def test_roadway_without_circles_is_design_line(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b)
        np.testing.assert_allclose(link.roadway_line(), link.design_line_array())


class TestLinkLength:
    """Test suite for Link.length."""

    def test_length_uses_untrimmed_vertices(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0, radius=10.0)
        b = network.add_node("b", 1, 100.0, 0.0, radius=10.0)
        link = make_link(network, "ab", a, b)
        assert link.length == pytest.approx(100.0)

    def test_length_follows_intermediate_vertices(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        link = make_link(network, "ab", a, b, intermediate_vertices=[Vertex(50.0, 50.0)])
        assert link.length == pytest.approx(100.0 * np.sqrt(2.0))

    def test_moving_an_end_node_resets_length(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 100.0, 0.0)
        c = network.add_node("c", 2, 0.0, 30.0)
        link = make_link(network, "ab", a, b)
        assert link.length == pytest.approx(100.0)
        link.to_node = c
        assert link.length == pytest.approx(30.0)
        link.from_node = b
        assert link.length == pytest.approx(np.hypot(100.0, 30.0))

    def test_given_length_is_replaced_on_rebuild(self, network, make_link):
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 60.0, 80.0)
        link = make_link(network, "ab", a, b, length=12.0)
        assert link.length == 12.0
        network.rebuild()
        assert link.length == pytest.approx(100.0)
