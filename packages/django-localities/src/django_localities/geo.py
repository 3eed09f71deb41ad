"""GeoPoint value object for geographic coordinates."""
from dataclasses import dataclass
import math
import re
from typing import Optional, Tuple
from xml.etree import ElementTree

from .conf import GeoSettings, get_geo_settings
from .exceptions import DecodeError, FormatError


# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Below this the bearing denominator is treated as zero
EPSILON = 1e-10

# Degree-minute-second angle, as in 51°30'12.5"N
DMS_PATTERN = re.compile(
    r"(?P<sign>[+-])?(?P<degree>[0-9]{1,3})°\s*"
    r"(?:(?P<minute>[0-9]{1,2})'\s*)?"
    r"(?:(?P<second>[.0-9]*)\"\s*)?"
    r"(?P<compass>[NSEW])?"
)

# Unsigned number followed by a compass point, as in 51.5 N
COMPASS_PATTERN = re.compile(r"(?P<value>[.0-9]+)\s*(?P<compass>[NSEW])")

NUMERIC_STYLES = {'numeric', 'num', 'n'}
DEGREE_STYLES = {'degrees', 'dms', 'deg', 'd'}
GEOGRAPHIC_STYLES = {'geographic', 'geo', 'g'}

ROUND_BRACKETS = {'round', 'r'}
SQUARE_BRACKETS = {'square', 's'}

# Compass points per axis: (positive, negative)
LATITUDE_COMPASS = ('N', 'S')
LONGITUDE_COMPASS = ('E', 'W')


def format_number(value: float) -> str:
    """Shortest round-trip text of a float, without a trailing '.0'."""
    text = repr(float(value))
    if text.endswith('.0'):
        text = text[:-2]
    return text


def to_dms(angle: float, decimals: int) -> Tuple[int, int, float]:
    """Decompose an angle into unsigned degree, minute and second.

    The sign of the angle is dropped; callers fold it back in either as a
    sign on the degree or as a compass point. Seconds are rounded to
    ``decimals`` places, carrying into the minute when they round to 60.

    Args:
        angle: The angle in degrees.
        decimals: Decimal places kept on the seconds value.

    Returns:
        Tuple of (degree, minute, second).
    """
    alpha = abs(angle) % 360
    degree = int(alpha)
    alpha -= degree
    minute = int(60 * alpha)
    alpha = 60 * alpha - minute
    second = round(60 * alpha, decimals)

    if second >= 60:
        second -= 60
        minute += 1
    if minute >= 60:
        minute -= 60
        degree += 1

    return degree, minute, second


def from_dms(degree: int, minute: int = 0, second: float = 0.0, negative: bool = False) -> float:
    """Convert a degree-minute-second angle into degrees."""
    value = abs(degree) + minute / 60 + second / 3600
    return -value if negative else value


def _format_seconds(second: float, decimals: int) -> str:
    text = f"{second:.{decimals}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def _format_angle(angle: float, compass: Optional[Tuple[str, str]], decimals: int) -> str:
    """Render an angle in DMS form, signed or with a compass point."""
    degree, minute, second = to_dms(angle, decimals)
    body = f"{degree}°{minute}'{_format_seconds(second, decimals)}\""

    if compass is not None:
        positive, negative = compass
        return body + (positive if angle >= 0 else negative)
    if angle < 0:
        return '-' + body
    return body


def _parse_component(text: str, compass: Tuple[str, str]) -> float:
    """Parse one coordinate: plain number, number with compass point, or DMS."""
    text = text.strip()
    if not text:
        raise FormatError("Empty coordinate")

    if '°' in text:
        match = DMS_PATTERN.fullmatch(text)
        if match is None:
            raise FormatError(f"Malformed degree-minute-second angle: {text!r}")
        letter = match.group('compass')
        if letter is not None and letter not in compass:
            raise FormatError(f"Compass point {letter!r} does not belong to this axis: {text!r}")
        try:
            second = float(match.group('second')) if match.group('second') else 0.0
        except ValueError:
            raise FormatError(f"Malformed seconds in angle: {text!r}")
        negative = match.group('sign') == '-' or letter == compass[1]
        return from_dms(
            int(match.group('degree')),
            int(match.group('minute') or 0),
            second,
            negative,
        )

    if text[-1] in 'NSEW':
        match = COMPASS_PATTERN.fullmatch(text)
        if match is None:
            raise FormatError(f"Malformed coordinate: {text!r}")
        letter = match.group('compass')
        if letter not in compass:
            raise FormatError(f"Compass point {letter!r} does not belong to this axis: {text!r}")
        value = _parse_number(match.group('value'))
        return -value if letter == compass[1] else value

    return _parse_number(text)


def _parse_number(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise FormatError(f"Not a number: {text!r}")
    if not math.isfinite(value):
        raise FormatError(f"Not a finite number: {text!r}")
    return value


@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate point.

    Represents a latitude/longitude coordinate pair in degrees with
    parsing, formatting, Haversine distance and bearing calculation.
    The default point is (0, 0).
    """

    latitude: float = 0.0
    longitude: float = 0.0

    def __post_init__(self) -> None:
        """Convert coordinates to float."""
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, 'latitude', float(self.latitude))
        object.__setattr__(self, 'longitude', float(self.longitude))

    # -------------------------------------------------------------------------
    # Text representations
    # -------------------------------------------------------------------------

    def format(
        self,
        style: str = 'numeric',
        brackets: str = 'none',
        geo_settings: Optional[GeoSettings] = None,
    ) -> str:
        """Return the point as text.

        Args:
            style: Case-insensitive output style.
                "numeric" / "num" / "n": 51.5,-0.1
                "degrees" / "dms" / "deg" / "d": 51°30'0",-0°6'0"
                "geographic" / "geo" / "g": 51°30'0"N,0°6'0"W
                Anything else falls back to numeric.
            brackets: Case-insensitive wrapping.
                "round" / "r": (51.5,-0.1)
                "square" / "s": [51.5,-0.1]
                "none" / anything else: no brackets.
            geo_settings: Overrides the configured DMS decimals.

        Returns:
            The formatted point.
        """
        decimals = (geo_settings or get_geo_settings()).decimals
        style = style.lower()

        if style in DEGREE_STYLES:
            latitude = _format_angle(self.latitude, None, decimals)
            longitude = _format_angle(self.longitude, None, decimals)
        elif style in GEOGRAPHIC_STYLES:
            latitude = _format_angle(self.latitude, LATITUDE_COMPASS, decimals)
            longitude = _format_angle(self.longitude, LONGITUDE_COMPASS, decimals)
        else:
            latitude = format_number(self.latitude)
            longitude = format_number(self.longitude)

        result = f"{latitude},{longitude}"

        brackets = brackets.lower()
        if brackets in ROUND_BRACKETS:
            return f"({result})"
        if brackets in SQUARE_BRACKETS:
            return f"[{result}]"
        return result

    @classmethod
    def parse(cls, text: str) -> 'GeoPoint':
        """Parse text into a GeoPoint.

        Accepts every form produced by format(): one optional layer of
        round or square brackets, then two comma-separated components.
        Each component is a signed number, an unsigned number with a
        compass point (N/S for latitude, E/W for longitude), or a DMS
        angle.

        Raises:
            FormatError: If the text is not a supported representation.
        """
        if not isinstance(text, str):
            raise FormatError(f"Expected text, got {type(text).__name__}")

        source = text.strip()
        if len(source) >= 2 and (source[0], source[-1]) in (('(', ')'), ('[', ']')):
            source = source[1:-1].strip()

        components = source.split(',')
        if len(components) != 2:
            raise FormatError(f"The string does not represent geographic coordinates: {text!r}")

        return cls(
            latitude=_parse_component(components[0], LATITUDE_COMPASS),
            longitude=_parse_component(components[1], LONGITUDE_COMPASS),
        )

    @classmethod
    def try_parse(cls, text: str) -> Tuple[bool, 'GeoPoint']:
        """Parse without raising.

        Returns:
            (True, point) on success, (False, GeoPoint()) otherwise.
        """
        try:
            return True, cls.parse(text)
        except FormatError:
            return False, cls()

    def __str__(self) -> str:
        """Return the numeric representation."""
        return self.format()

    def __repr__(self) -> str:
        """Return debuggable representation."""
        return f"GeoPoint(latitude={self.latitude!r}, longitude={self.longitude!r})"

    # -------------------------------------------------------------------------
    # Calculations
    # -------------------------------------------------------------------------

    def swapped(self) -> 'GeoPoint':
        """Return the point with latitude and longitude exchanged.

        Some sources give pairs as (lon, lat); this corrects them.
        """
        return GeoPoint(latitude=self.longitude, longitude=self.latitude)

    def shift(self, origin: 'GeoPoint') -> 'GeoPoint':
        """Return this point translated so that ``origin`` becomes (0, 0)."""
        return GeoPoint(
            latitude=self.latitude - origin.latitude,
            longitude=self.longitude - origin.longitude,
        )

    @staticmethod
    def direction(point1: 'GeoPoint', point2: 'GeoPoint') -> float:
        """Bearing from point1 to point2 in degrees, clockwise from north.

        Returns 0 when the bearing is undefined (the denominator of the
        spherical formula vanishes).

        Returns:
            Bearing in the range [0, 360).
        """
        lat1 = math.radians(point1.latitude)
        lon1 = math.radians(point1.longitude)
        lat2 = math.radians(point2.latitude)
        lon2 = math.radians(point2.longitude)

        denominator = (
            math.cos(lat1) * math.tan(lat2)
            - math.sin(lat1) * math.cos(lon1 - lon2)
        )
        if abs(denominator) < EPSILON:
            return 0.0

        x = math.sin(lon2 - lon1) / denominator
        bearing = math.degrees(math.atan(x))
        if denominator < 0:
            bearing += 180.0

        return bearing % 360.0

    @staticmethod
    def distance(point1: 'GeoPoint', point2: 'GeoPoint') -> float:
        """Great-circle distance between two points in kilometers.

        Uses the Haversine formula on a sphere of radius EARTH_RADIUS_KM.
        """
        lat1 = math.radians(point1.latitude)
        lat2 = math.radians(point2.latitude)
        dlat = lat2 - lat1
        dlon = math.radians(point2.longitude - point1.longitude)

        a = math.sin(dlat / 2) ** 2 + math.sin(dlon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)

        return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))

    def direction_to(self, other: 'GeoPoint') -> float:
        """Bearing from this point to another, in degrees."""
        return GeoPoint.direction(self, other)

    def distance_to(self, other: 'GeoPoint') -> float:
        """Haversine distance from this point to another, in kilometers."""
        return GeoPoint.distance(self, other)

    # -------------------------------------------------------------------------
    # XML
    # -------------------------------------------------------------------------

    def to_element(self, tag: str = 'GeoPoint') -> ElementTree.Element:
        """Return an XML element with Latitude and Longitude attributes."""
        return ElementTree.Element(
            tag,
            Latitude=format_number(self.latitude),
            Longitude=format_number(self.longitude),
        )

    @classmethod
    def from_element(cls, element: ElementTree.Element) -> 'GeoPoint':
        """Create a GeoPoint from an element written by to_element().

        Raises:
            DecodeError: If an attribute is missing or not a number.
        """
        try:
            return cls(
                latitude=float(element.attrib['Latitude']),
                longitude=float(element.attrib['Longitude']),
            )
        except (KeyError, ValueError) as e:
            raise DecodeError(f"Invalid {element.tag} element: {e}") from e
