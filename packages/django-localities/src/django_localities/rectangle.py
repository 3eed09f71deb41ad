"""GeoRectangle value object for latitude/longitude bounding boxes."""
from dataclasses import dataclass
import math
from typing import Iterable, Optional, Tuple
from xml.etree import ElementTree

from .conf import GeoSettings, get_geo_settings
from .exceptions import DecodeError, FormatError, InvalidGeometry
from .geo import EARTH_RADIUS_KM, GeoPoint, format_number


# Earth's surface (5.112e8 km2) divided by 129600 (360 x 360 degrees).
# Converts square degrees to km2; only accurate for small extents.
SURFACE_FACTOR = 3944.4444

# Kilometers per degree along a great circle
KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180


@dataclass(frozen=True)
class GeoRectangle:
    """Immutable axis-aligned bounding box in degrees.

    A rectangle is valid when all bounds lie in their geographic ranges,
    east >= west and north >= south. Invalid rectangles are legal values
    but every containment query against them returns False. The default
    is the zero-sized rectangle at (0, 0).
    """

    west: float = 0.0
    north: float = 0.0
    east: float = 0.0
    south: float = 0.0

    def __post_init__(self) -> None:
        """Convert bounds to float."""
        for name in ('west', 'north', 'east', 'south'):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_points(cls, points: Iterable[GeoPoint]) -> 'GeoRectangle':
        """Return the smallest rectangle enclosing the points.

        An empty iterable yields an invalid rectangle.
        """
        min_lat = min_lon = math.inf
        max_lat = max_lon = -math.inf

        for point in points:
            if point.latitude < min_lat:
                min_lat = point.latitude
            if point.latitude > max_lat:
                max_lat = point.latitude
            if point.longitude < min_lon:
                min_lon = point.longitude
            if point.longitude > max_lon:
                max_lon = point.longitude

        return cls(west=min_lon, north=max_lat, east=max_lon, south=min_lat)

    @classmethod
    def around(cls, center: GeoPoint, radius_km: float) -> 'GeoRectangle':
        """Return a rectangle enclosing a circle around a point.

        Used as a cheap prefilter before exact Haversine checks. The box
        is clamped to valid ranges and widened to the full longitude range
        when the circle reaches a pole or the antimeridian.
        """
        lat_delta = radius_km / KM_PER_DEGREE
        south = max(-90.0, center.latitude - lat_delta)
        north = min(90.0, center.latitude + lat_delta)

        widest = max(abs(south), abs(north))
        cos_lat = math.cos(math.radians(widest))
        if widest >= 90.0 or cos_lat <= 0:
            return cls(west=-180.0, north=north, east=180.0, south=south)

        lng_delta = radius_km / (KM_PER_DEGREE * cos_lat)
        west = center.longitude - lng_delta
        east = center.longitude + lng_delta
        if west < -180.0 or east > 180.0:
            west, east = -180.0, 180.0

        return cls(west=west, north=north, east=east, south=south)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def is_valid(self) -> bool:
        """Check coordinate ranges and bound ordering."""
        return (
            -180 <= self.west <= 180
            and -180 <= self.east <= 180
            and -90 <= self.north <= 90
            and -90 <= self.south <= 90
            and self.east >= self.west
            and self.north >= self.south
        )

    def validate(self) -> None:
        """Raise InvalidGeometry naming the first violated condition."""
        if not -180 <= self.west <= 180:
            raise InvalidGeometry(f"West bound {self.west} is outside [-180, 180]")
        if not -180 <= self.east <= 180:
            raise InvalidGeometry(f"East bound {self.east} is outside [-180, 180]")
        if not -90 <= self.north <= 90:
            raise InvalidGeometry(f"North bound {self.north} is outside [-90, 90]")
        if not -90 <= self.south <= 90:
            raise InvalidGeometry(f"South bound {self.south} is outside [-90, 90]")
        if self.east < self.west:
            raise InvalidGeometry(f"East bound {self.east} is west of west bound {self.west}")
        if self.north < self.south:
            raise InvalidGeometry(f"North bound {self.north} is south of south bound {self.south}")

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def north_west(self) -> GeoPoint:
        return GeoPoint(self.north, self.west)

    @property
    def north_east(self) -> GeoPoint:
        return GeoPoint(self.north, self.east)

    @property
    def south_west(self) -> GeoPoint:
        return GeoPoint(self.south, self.west)

    @property
    def south_east(self) -> GeoPoint:
        return GeoPoint(self.south, self.east)

    @property
    def corners(self) -> Tuple[GeoPoint, GeoPoint, GeoPoint, GeoPoint]:
        """Corners in the order NW, NE, SE, SW."""
        return (self.north_west, self.north_east, self.south_east, self.south_west)

    @property
    def longitude_span(self) -> float:
        """Longitude span in degrees."""
        return self.east - self.west

    @property
    def latitude_span(self) -> float:
        """Latitude span in degrees."""
        return self.north - self.south

    @property
    def width(self) -> float:
        """Longitudinal width in km, measured as along the equator."""
        return self.longitude_span * KM_PER_DEGREE

    @property
    def height(self) -> float:
        """Latitudinal height in km."""
        return self.latitude_span * KM_PER_DEGREE

    @property
    def centroid(self) -> GeoPoint:
        return GeoPoint(0.5 * (self.south + self.north), 0.5 * (self.west + self.east))

    @property
    def surface(self) -> float:
        """Approximate surface in km2.

        Square degrees times SURFACE_FACTOR. This ignores the convergence
        of meridians and is only meaningful for small rectangles; it is
        kept because stored area comparisons rely on this exact scale.
        """
        return abs(self.east - self.west) * abs(self.north - self.south) * SURFACE_FACTOR

    # -------------------------------------------------------------------------
    # Containment
    # -------------------------------------------------------------------------

    def contains(self, target, longitude: Optional[float] = None,
                 geo_settings: Optional[GeoSettings] = None) -> bool:
        """Check containment of a point or rectangle.

        Accepts contains(latitude, longitude), contains(GeoPoint),
        contains((latitude, longitude)) or contains(GeoRectangle). Bounds
        are widened by the configured coordinate precision. A rectangle is
        contained when all four of its corners are.

        Returns:
            False for any probe if this rectangle is invalid.

        Raises:
            TypeError: For an unsupported probe type.
        """
        if longitude is not None:
            return self._contains_coordinates(float(target), float(longitude), geo_settings)
        if isinstance(target, GeoPoint):
            return self._contains_coordinates(target.latitude, target.longitude, geo_settings)
        if isinstance(target, GeoRectangle):
            return all(self.contains(corner, geo_settings=geo_settings) for corner in target.corners)
        if isinstance(target, tuple) and len(target) == 2:
            return self._contains_coordinates(float(target[0]), float(target[1]), geo_settings)
        raise TypeError(f"Cannot check containment of {type(target).__name__}")

    def _contains_coordinates(self, latitude: float, longitude: float,
                              geo_settings: Optional[GeoSettings]) -> bool:
        if not self.is_valid():
            return False

        precision = (geo_settings or get_geo_settings()).coordinate_precision

        return (
            self.west - precision <= longitude <= self.east + precision
            and self.south - precision <= latitude <= self.north + precision
        )

    # -------------------------------------------------------------------------
    # Text representations
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return "west,north,east,south" with four decimals."""
        return f"{self.west:.4f},{self.north:.4f},{self.east:.4f},{self.south:.4f}"

    @classmethod
    def parse(cls, text: str) -> 'GeoRectangle':
        """Parse "west,north,east,south".

        Raises:
            FormatError: Unless the text holds exactly four numbers.
        """
        if not isinstance(text, str):
            raise FormatError(f"Expected text, got {type(text).__name__}")

        cells = text.split(',')
        if len(cells) != 4:
            raise FormatError(f"Expected four comma-separated bounds: {text!r}")

        try:
            west, north, east, south = (float(cell) for cell in cells)
        except ValueError:
            raise FormatError(f"Bounds must be numbers: {text!r}")

        return cls(west=west, north=north, east=east, south=south)

    @classmethod
    def try_parse(cls, text: str) -> Tuple[bool, 'GeoRectangle']:
        """Parse without raising.

        Returns:
            (True, rectangle) on success, (False, GeoRectangle()) otherwise.
        """
        try:
            return True, cls.parse(text)
        except FormatError:
            return False, cls()

    # -------------------------------------------------------------------------
    # XML
    # -------------------------------------------------------------------------

    def to_element(self, tag: str = 'GeoRectangle') -> ElementTree.Element:
        """Return an XML element with West/North/East/South attributes."""
        return ElementTree.Element(
            tag,
            West=format_number(self.west),
            North=format_number(self.north),
            East=format_number(self.east),
            South=format_number(self.south),
        )

    @classmethod
    def from_element(cls, element: ElementTree.Element) -> 'GeoRectangle':
        """Create a GeoRectangle from an element written by to_element().

        Raises:
            DecodeError: If an attribute is missing or not a number.
        """
        try:
            return cls(
                west=float(element.attrib['West']),
                north=float(element.attrib['North']),
                east=float(element.attrib['East']),
                south=float(element.attrib['South']),
            )
        except (KeyError, ValueError) as e:
            raise DecodeError(f"Invalid {element.tag} element: {e}") from e
