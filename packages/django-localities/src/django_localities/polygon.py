"""GeoPolygon value object: an ordered ring of GeoPoint vertices."""
from dataclasses import dataclass
import json
import logging
from pathlib import Path
import struct
from typing import Iterable, Iterator, Mapping, Tuple, Union
from xml.etree import ElementTree

from .exceptions import DecodeError, FormatError
from .geo import GeoPoint
from .rectangle import SURFACE_FACTOR, GeoRectangle


logger = logging.getLogger(__name__)

# Binary layout: int32 vertex count, then (float64 lat, float64 lon) per vertex
COUNT_FORMAT = struct.Struct('<i')
VERTEX_FORMAT = struct.Struct('<dd')

VERTEX_SEPARATOR = ';'


def _as_point(value) -> GeoPoint:
    if isinstance(value, GeoPoint):
        return value
    latitude, longitude = value
    return GeoPoint(latitude, longitude)


@dataclass(frozen=True)
class GeoPolygon:
    """Immutable geographic polygon.

    The vertices form an open ring: the edge from the last vertex back to
    the first is implicit. Vertex order matters for containment and is
    left to the caller; self-intersections and winding are not checked.
    Polygons with fewer than three vertices are legal and enclose nothing.

    Usage:
        square = GeoPolygon([GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0)])
        square.contains(GeoPoint(0.5, 0.5))  # True
        GeoPolygon.from_bytes(square.to_bytes()) == square  # True
    """

    vertices: Tuple[GeoPoint, ...] = ()

    def __post_init__(self) -> None:
        """Normalize vertices to a tuple of GeoPoint.

        Accepts any iterable of GeoPoint or (latitude, longitude) pairs,
        including another GeoPolygon.
        """
        object.__setattr__(self, 'vertices', tuple(_as_point(v) for v in self.vertices))

    @classmethod
    def from_coordinates(cls, *coordinates: float) -> 'GeoPolygon':
        """Create a polygon from flat pairs lat_1, lon_1, lat_2, lon_2, ...

        An odd trailing value is ignored.
        """
        pairs = len(coordinates) // 2
        return cls(
            GeoPoint(coordinates[2 * i], coordinates[2 * i + 1])
            for i in range(pairs)
        )

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self.vertices)

    def __getitem__(self, index: int) -> GeoPoint:
        return self.vertices[index]

    def with_vertex(self, index: int, point: GeoPoint) -> 'GeoPolygon':
        """Return a copy of the polygon with one vertex replaced."""
        vertices = list(self.vertices)
        vertices[index] = _as_point(point)
        return GeoPolygon(vertices)

    # -------------------------------------------------------------------------
    # Calculations
    # -------------------------------------------------------------------------

    @property
    def bounding_box(self) -> GeoRectangle:
        """Smallest rectangle enclosing every vertex.

        Invalid for an empty polygon.
        """
        return GeoRectangle.from_points(self.vertices)

    @property
    def surface(self) -> float:
        """Approximate surface in km2.

        Shoelace formula over the closed ring (O'Rourke, Computational
        Geometry in C, 1.9), scaled from square degrees by
        SURFACE_FACTOR. Like GeoRectangle.surface this is a small-extent
        approximation and must stay on the same scale.
        """
        count = len(self.vertices)
        if count < 3:
            return 0.0

        total = 0.0
        for i, vertex in enumerate(self.vertices):
            following = self.vertices[(i + 1) % count]
            total += vertex.longitude * following.latitude - vertex.latitude * following.longitude

        return 0.5 * abs(total) * SURFACE_FACTOR

    def contains(self, target) -> bool:
        """Check containment of a point, rectangle or polygon.

        A point is tested by crossing number. A rectangle is contained
        when its four corners are, and a polygon when it has vertices and
        all of them are. For non-convex polygons both of the latter can
        report True although an edge of the probe leaves this polygon.

        Raises:
            TypeError: For an unsupported probe type.
        """
        if isinstance(target, GeoPoint):
            return self._contains_point(target)
        if isinstance(target, GeoRectangle):
            return all(self._contains_point(corner) for corner in target.corners)
        if isinstance(target, GeoPolygon):
            return bool(target.vertices) and all(
                self._contains_point(vertex) for vertex in target.vertices
            )
        if isinstance(target, tuple) and len(target) == 2:
            return self._contains_point(GeoPoint(target[0], target[1]))
        raise TypeError(f"Cannot check containment of {type(target).__name__}")

    def _contains_point(self, point: GeoPoint) -> bool:
        """Crossing-number point-in-polygon test (O'Rourke, 7.4).

        Works on translated copies of the vertices with the probe point at
        the origin, counting edges that cross the ray along latitude zero
        towards positive longitude.
        """
        count = len(self.vertices)
        if count < 2:
            return False

        shifted = [vertex.shift(point) for vertex in self.vertices]
        crossings = 0

        for i in range(count):
            current = shifted[i]
            previous = shifted[i - 1]

            if (current.latitude > 0) != (previous.latitude > 0):
                x = (
                    (current.longitude * previous.latitude - previous.longitude * current.latitude)
                    / (previous.latitude - current.latitude)
                )
                if x > 0:
                    crossings += 1

        return crossings % 2 == 1

    # -------------------------------------------------------------------------
    # Text representations
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return numeric vertices joined by semicolons."""
        return VERTEX_SEPARATOR.join(vertex.format() for vertex in self.vertices)

    @classmethod
    def parse(cls, text: str) -> 'GeoPolygon':
        """Parse semicolon-separated points.

        Blank text is the empty polygon.

        Raises:
            FormatError: For the first vertex that is not a valid point.
        """
        if not isinstance(text, str):
            raise FormatError(f"Expected text, got {type(text).__name__}")
        if not text.strip():
            return cls()
        return cls(GeoPoint.parse(part) for part in text.split(VERTEX_SEPARATOR))

    @classmethod
    def try_parse(cls, text: str) -> Tuple[bool, 'GeoPolygon']:
        """Parse without raising.

        Returns:
            (True, polygon) on success, (False, GeoPolygon()) otherwise.
        """
        try:
            return True, cls.parse(text)
        except FormatError:
            return False, cls()

    # -------------------------------------------------------------------------
    # Binary storage
    # -------------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Encode for database storage: little-endian count then vertices."""
        parts = [COUNT_FORMAT.pack(len(self.vertices))]
        parts.extend(
            VERTEX_FORMAT.pack(vertex.latitude, vertex.longitude)
            for vertex in self.vertices
        )
        return b''.join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'GeoPolygon':
        """Decode bytes written by to_bytes().

        Raises:
            DecodeError: If the buffer is truncated, has trailing bytes or
                declares a negative vertex count.
        """
        data = bytes(data)
        if len(data) < COUNT_FORMAT.size:
            raise DecodeError(f"Polygon buffer too short: {len(data)} bytes")

        (count,) = COUNT_FORMAT.unpack_from(data)
        if count < 0:
            raise DecodeError(f"Negative vertex count: {count}")

        expected = COUNT_FORMAT.size + count * VERTEX_FORMAT.size
        if len(data) != expected:
            raise DecodeError(
                f"Polygon buffer holds {len(data)} bytes, expected {expected} for {count} vertices"
            )

        return cls(
            GeoPoint(latitude, longitude)
            for latitude, longitude in VERTEX_FORMAT.iter_unpack(data[COUNT_FORMAT.size:])
        )

    # -------------------------------------------------------------------------
    # JSON
    # -------------------------------------------------------------------------

    @classmethod
    def from_json(cls, source: Union[str, bytes, Mapping], latitude_first: bool = False) -> 'GeoPolygon':
        """Create a polygon from a GeoJSON-like feature.

        The first ring of ``geometry.coordinates`` is read, as returned by
        an OpenStreetMap polygon query:

            {"geometry": {"type": "Polygon",
                          "coordinates": [[[-0.5103751, 51.4680873], ...]]}}

        A closing vertex repeating the first one is dropped.

        Args:
            source: JSON text or an already decoded mapping.
            latitude_first: True if pairs are (lat, lon). OpenStreetMap
                sends (lon, lat).

        Raises:
            DecodeError: If the payload is not JSON or lacks the ring.
        """
        try:
            document = json.loads(source) if isinstance(source, (str, bytes, bytearray)) else source
            ring = document['geometry']['coordinates'][0]
            vertices = []
            for pair in ring:
                first, second = float(pair[0]), float(pair[1])
                if latitude_first:
                    vertices.append(GeoPoint(first, second))
                else:
                    vertices.append(GeoPoint(second, first))
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise DecodeError(f"Invalid polygon JSON: {e}") from e

        if len(vertices) > 1 and vertices[0] == vertices[-1]:
            vertices.pop()

        return cls(vertices)

    @classmethod
    def load(cls, path: Union[str, Path], latitude_first: bool = False) -> 'GeoPolygon':
        """Read a polygon from a JSON file, as from_json()."""
        path = Path(path)
        polygon = cls.from_json(path.read_text(encoding='utf-8'), latitude_first)
        logger.debug("Loaded polygon with %d vertices from %s", len(polygon), path)
        return polygon

    def to_geojson(self, latitude_first: bool = False) -> dict:
        """Return a GeoJSON feature with the vertices as a closed ring."""
        ring = [
            [vertex.latitude, vertex.longitude] if latitude_first
            else [vertex.longitude, vertex.latitude]
            for vertex in self.vertices
        ]
        if ring:
            ring.append(list(ring[0]))

        return {
            'type': 'Feature',
            'geometry': {'type': 'Polygon', 'coordinates': [ring]},
            'properties': {},
        }

    # -------------------------------------------------------------------------
    # XML
    # -------------------------------------------------------------------------

    def to_element(self, tag: str = 'GeoPolygon') -> ElementTree.Element:
        """Return an XML element with one Vertex child per vertex."""
        element = ElementTree.Element(tag)
        for vertex in self.vertices:
            element.append(vertex.to_element('Vertex'))
        return element

    @classmethod
    def from_element(cls, element: ElementTree.Element) -> 'GeoPolygon':
        """Create a GeoPolygon from an element written by to_element()."""
        return cls(GeoPoint.from_element(child) for child in element.findall('Vertex'))
