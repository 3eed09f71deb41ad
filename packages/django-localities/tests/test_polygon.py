"""Tests for GeoPolygon value object."""
import json
import struct
from xml.etree import ElementTree

import pytest

from django_localities.exceptions import DecodeError, FormatError
from django_localities.geo import GeoPoint
from django_localities.polygon import GeoPolygon
from django_localities.rectangle import SURFACE_FACTOR, GeoRectangle


UNIT_SQUARE = GeoPolygon([GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0)])

# L-shaped polygon: lat 0-2 x lon 0-1 plus lat 0-1 x lon 1-2
L_SHAPE = GeoPolygon.from_coordinates(0, 0, 2, 0, 2, 1, 1, 1, 1, 2, 0, 2)

OSM_FEATURE = {
    'type': 'Feature',
    'geometry': {
        'type': 'Polygon',
        'coordinates': [[
            [-0.5103751, 51.4680873],
            [0.3340155, 51.4680873],
            [0.3340155, 51.6918741],
            [-0.5103751, 51.6918741],
            [-0.5103751, 51.4680873],
        ]],
    },
}


class TestGeoPolygonCreation:
    """Tests for GeoPolygon construction."""

    def test_create_from_points(self):
        """Vertices keep their order."""
        assert UNIT_SQUARE.vertices == (GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0))
        assert len(UNIT_SQUARE) == 4
        assert UNIT_SQUARE[2] == GeoPoint(1, 1)

    def test_create_from_pairs(self):
        """(lat, lon) pairs are converted to GeoPoint."""
        assert GeoPolygon([(0, 0), (0, 1), (1, 1), (1, 0)]) == UNIT_SQUARE

    def test_create_from_flat_coordinates(self):
        """Flat lat/lon pairs build vertices; an odd value is dropped."""
        assert GeoPolygon.from_coordinates(0, 0, 0, 1, 1, 1, 1, 0) == UNIT_SQUARE
        assert GeoPolygon.from_coordinates(0, 0, 0, 1, 1, 1, 1, 0, 5) == UNIT_SQUARE

    def test_copy(self):
        """A polygon built from another is an equal copy."""
        copy = GeoPolygon(UNIT_SQUARE)

        assert copy == UNIT_SQUARE
        assert list(copy) == list(UNIT_SQUARE)

    def test_empty_polygon(self):
        """GeoPolygon() has no vertices."""
        assert len(GeoPolygon()) == 0

    def test_with_vertex_returns_new_polygon(self):
        """Replacing a vertex leaves the original untouched."""
        changed = UNIT_SQUARE.with_vertex(2, GeoPoint(2, 2))

        assert changed[2] == GeoPoint(2, 2)
        assert UNIT_SQUARE[2] == GeoPoint(1, 1)


class TestGeoPolygonCalculations:
    """Tests for bounding box and surface."""

    def test_bounding_box(self):
        """The bounding box spans the vertex extremes."""
        assert L_SHAPE.bounding_box == GeoRectangle(west=0, north=2, east=2, south=0)

    def test_vertices_lie_in_bounding_box(self):
        """Every vertex is inside the polygon's own bounding box."""
        for polygon in (UNIT_SQUARE, L_SHAPE, GeoPolygon.from_json(OSM_FEATURE)):
            box = polygon.bounding_box
            assert all(box.contains(vertex) for vertex in polygon)

    def test_empty_bounding_box_is_invalid(self):
        """An empty polygon has an invalid bounding box."""
        assert not GeoPolygon().bounding_box.is_valid()

    def test_unit_square_surface_matches_rectangle(self):
        """Shoelace area of the unit square equals the rectangle estimate."""
        assert UNIT_SQUARE.surface == pytest.approx(UNIT_SQUARE.bounding_box.surface)
        assert UNIT_SQUARE.surface == pytest.approx(SURFACE_FACTOR)

    def test_surface_ignores_winding(self):
        """Reversed vertex order gives the same magnitude."""
        reversed_l = GeoPolygon(reversed(L_SHAPE.vertices))

        assert L_SHAPE.surface == pytest.approx(3 * SURFACE_FACTOR)
        assert reversed_l.surface == pytest.approx(L_SHAPE.surface)

    @pytest.mark.parametrize('polygon', [GeoPolygon(), GeoPolygon([GeoPoint(1, 1)])])
    def test_degenerate_polygon(self, polygon):
        """0 or 1 vertices enclose nothing."""
        assert polygon.surface == 0
        assert not polygon.contains(GeoPoint(1, 1))
        assert not polygon.contains(GeoPoint(0, 0))


class TestGeoPolygonContainment:
    """Tests for point, rectangle and polygon containment."""

    def test_contains_point(self):
        """The centre of the unit square is inside, (2, 2) is not."""
        assert UNIT_SQUARE.contains(GeoPoint(0.5, 0.5))
        assert not UNIT_SQUARE.contains(GeoPoint(2, 2))

    def test_contains_pair(self):
        """A (lat, lon) tuple is accepted as probe."""
        assert UNIT_SQUARE.contains((0.5, 0.5))

    def test_contains_non_convex(self):
        """The notch of the L is outside."""
        assert L_SHAPE.contains(GeoPoint(0.5, 1.5))
        assert L_SHAPE.contains(GeoPoint(1.5, 0.5))
        assert not L_SHAPE.contains(GeoPoint(1.5, 1.5))

    def test_contains_does_not_modify_polygon(self):
        """Containment works on a translated copy."""
        before = UNIT_SQUARE.vertices
        UNIT_SQUARE.contains(GeoPoint(0.5, 0.5))

        assert UNIT_SQUARE.vertices == before

    def test_contains_rectangle(self):
        """A rectangle is contained when all four corners are."""
        assert UNIT_SQUARE.contains(GeoRectangle(west=0.2, north=0.8, east=0.8, south=0.2))
        assert not UNIT_SQUARE.contains(GeoRectangle(west=0.5, north=1.5, east=1.5, south=0.5))

    def test_contains_polygon_when_all_vertices_inside(self):
        """A polygon inside another is contained (not inverted)."""
        inner = GeoPolygon.from_coordinates(0.2, 0.2, 0.2, 0.8, 0.8, 0.8, 0.8, 0.2)

        assert UNIT_SQUARE.contains(inner)

    def test_does_not_contain_disjoint_or_overlapping_polygon(self):
        """Any vertex outside means not contained."""
        disjoint = GeoPolygon.from_coordinates(5, 5, 5, 6, 6, 6)
        overlapping = GeoPolygon.from_coordinates(0.5, 0.5, 0.5, 1.5, 1.5, 1.5)

        assert not UNIT_SQUARE.contains(disjoint)
        assert not UNIT_SQUARE.contains(overlapping)

    def test_does_not_contain_empty_polygon(self):
        """An empty probe polygon is not contained."""
        assert not UNIT_SQUARE.contains(GeoPolygon())

    def test_contains_rejects_unsupported_types(self):
        """Unsupported probes raise TypeError."""
        with pytest.raises(TypeError):
            UNIT_SQUARE.contains([0.5, 0.5])


class TestGeoPolygonText:
    """Tests for the semicolon text encoding."""

    def test_str(self):
        """Vertices are joined by semicolons without a trailing one."""
        assert str(UNIT_SQUARE) == '0,0;0,1;1,1;1,0'

    def test_parse(self):
        """parse() reads the semicolon form."""
        assert GeoPolygon.parse('0,0;0,1;1,1;1,0') == UNIT_SQUARE

    def test_parse_round_trip(self):
        """parse(str(p)) restores the polygon."""
        polygon = GeoPolygon.from_json(OSM_FEATURE)

        assert GeoPolygon.parse(str(polygon)) == polygon

    def test_parse_empty_text(self):
        """Blank text is the empty polygon."""
        assert GeoPolygon.parse(str(GeoPolygon())) == GeoPolygon()

    def test_parse_propagates_point_error(self):
        """A malformed vertex raises FormatError."""
        with pytest.raises(FormatError):
            GeoPolygon.parse('0,0;bad;1,1')

    def test_try_parse(self):
        """try_parse reports success instead of raising."""
        assert GeoPolygon.try_parse('0,0;0,1;1,1;1,0') == (True, UNIT_SQUARE)
        assert GeoPolygon.try_parse('0,0;1') == (False, GeoPolygon())


class TestGeoPolygonBinary:
    """Tests for the binary storage encoding."""

    def test_binary_round_trip(self):
        """Parsed polygon survives encode/decode with vertex order."""
        polygon = GeoPolygon.parse('0,0;0,1;1,1;1,0')

        decoded = GeoPolygon.from_bytes(polygon.to_bytes())

        assert decoded == polygon
        assert list(decoded) == [GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0)]

    def test_binary_layout(self):
        """Little-endian int32 count then float64 lat/lon pairs."""
        data = GeoPolygon([GeoPoint(51.5, -0.1)]).to_bytes()

        assert len(data) == 4 + 16
        assert data[:4] == b'\x01\x00\x00\x00'
        assert struct.unpack('<dd', data[4:]) == (51.5, -0.1)

    def test_empty_polygon_encoding(self):
        """The empty polygon is a zero count."""
        assert GeoPolygon().to_bytes() == b'\x00\x00\x00\x00'
        assert GeoPolygon.from_bytes(b'\x00\x00\x00\x00') == GeoPolygon()

    def test_from_bytes_accepts_memoryview(self):
        """Database drivers may return memoryview."""
        assert GeoPolygon.from_bytes(memoryview(UNIT_SQUARE.to_bytes())) == UNIT_SQUARE

    @pytest.mark.parametrize('data', [
        b'',
        b'\x01\x00',
        UNIT_SQUARE.to_bytes()[:-1],
        UNIT_SQUARE.to_bytes() + b'\x00',
        struct.pack('<i', -1),
    ])
    def test_from_bytes_rejects_bad_buffers(self, data):
        """Truncated, padded or negative-count buffers raise DecodeError."""
        with pytest.raises(DecodeError):
            GeoPolygon.from_bytes(data)


class TestGeoPolygonJson:
    """Tests for GeoJSON ingestion and export."""

    def test_from_json_longitude_first(self):
        """OSM pairs are (lon, lat); the closing vertex is dropped."""
        polygon = GeoPolygon.from_json(json.dumps(OSM_FEATURE))

        assert len(polygon) == 4
        assert polygon[0] == GeoPoint(51.4680873, -0.5103751)
        assert polygon.contains(GeoPoint(51.5, -0.1))

    def test_from_json_latitude_first(self):
        """latitude_first reads pairs as (lat, lon)."""
        polygon = GeoPolygon.from_json(OSM_FEATURE, latitude_first=True)

        assert polygon[0] == GeoPoint(-0.5103751, 51.4680873)

    @pytest.mark.parametrize('source', [
        'not json',
        '{}',
        '{"geometry": {}}',
        '{"geometry": {"coordinates": []}}',
        '{"geometry": {"coordinates": [[[1]]]}}',
        '{"geometry": {"coordinates": [[["a", "b"]]]}}',
    ])
    def test_from_json_rejects_malformed_payloads(self, source):
        """Missing fields or bad pairs raise DecodeError."""
        with pytest.raises(DecodeError):
            GeoPolygon.from_json(source)

    def test_geojson_round_trip(self):
        """to_geojson writes a closed ring that from_json reads back."""
        exported = UNIT_SQUARE.to_geojson()
        ring = exported['geometry']['coordinates'][0]

        assert ring[0] == ring[-1]
        assert len(ring) == 5
        assert GeoPolygon.from_json(exported) == UNIT_SQUARE

    def test_load_from_file(self, tmp_path):
        """load() reads a JSON file."""
        path = tmp_path / 'london.json'
        path.write_text(json.dumps(OSM_FEATURE), encoding='utf-8')

        assert GeoPolygon.load(path) == GeoPolygon.from_json(OSM_FEATURE)


class TestGeoPolygonXml:
    """Tests for XML serialization."""

    def test_element_round_trip(self):
        """to_element/from_element preserve vertices and order."""
        element = ElementTree.fromstring(ElementTree.tostring(L_SHAPE.to_element()))

        assert element.tag == 'GeoPolygon'
        assert len(element.findall('Vertex')) == 6
        assert GeoPolygon.from_element(element) == L_SHAPE
