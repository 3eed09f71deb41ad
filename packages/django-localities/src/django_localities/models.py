"""Models for django-localities package."""
import logging
from typing import Optional

from django.db import models

from .exceptions import DecodeError, FormatError
from .geo import GeoPoint
from .polygon import GeoPolygon
from .querysets import LocalityQuerySet
from .rectangle import GeoRectangle


logger = logging.getLogger(__name__)


class Locality(models.Model):
    """A named geographic place gathered from external gazetteers.

    Coordinates are stored as plain floats, the optional bounding box as
    rectangle text ("west,north,east,south") and the optional outline as
    the binary polygon encoding.
    """

    FEATURE_CLASSES = [
        ('A', 'Country, state, region'),
        ('H', 'Stream, lake'),
        ('L', 'Park, area'),
        ('P', 'City, village'),
        ('R', 'Road, railroad'),
        ('S', 'Spot, building, farm'),
        ('T', 'Mountain, hill, rock'),
        ('U', 'Undersea'),
        ('V', 'Forest, heath'),
        ('X', 'Unknown'),
    ]

    PLACE_CATEGORIES = [
        ('continent', 'Continent'),
        ('country', 'Country'),
        ('region', 'Region'),
        ('province', 'Province'),
        ('state', 'State'),
        ('county', 'County'),
        ('district', 'District'),
        ('archipelago', 'Archipelago'),
        ('island', 'Island'),
        ('city', 'City'),
        ('town', 'Town'),
        ('village', 'Village'),
        ('municipality', 'Municipality'),
        ('populated_place', 'Populated Place'),
        ('administrative', 'Administrative Entity'),
        ('political', 'Political Entity'),
        ('other', 'Other'),
        ('unknown', 'Unknown'),
    ]

    # Gazetteer identifiers
    geonames_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    osm_node_id = models.BigIntegerField(null=True, blank=True)
    osm_relation_id = models.BigIntegerField(null=True, blank=True)
    wikidata_id = models.CharField(max_length=32, blank=True, default='')

    # Basic info
    name = models.CharField(max_length=128)
    description = models.TextField(blank=True, default='')

    # Coordinates in degrees
    latitude = models.FloatField(default=0.0)
    longitude = models.FloatField(default=0.0)

    # Attributes
    elevation = models.FloatField(default=0.0)
    population = models.PositiveBigIntegerField(default=0)
    country_code = models.CharField(max_length=4, blank=True, default='')
    time_zone = models.FloatField(default=0.0)
    feature_class = models.CharField(max_length=1, choices=FEATURE_CLASSES, default='X')
    feature_code = models.CharField(max_length=8, blank=True, default='')
    osm_place_category = models.CharField(
        max_length=32, choices=PLACE_CATEGORIES, default='unknown'
    )

    # Geometry in boundary formats
    bounding_box = models.CharField(max_length=128, blank=True, default='')
    polygon = models.BinaryField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LocalityQuerySet.as_manager()

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'localities'

    def __str__(self) -> str:
        return self.name

    def is_valid(self) -> bool:
        """A locality is valid when it has a name."""
        return bool(self.name and self.name.strip())

    def as_geopoint(self) -> GeoPoint:
        """Return coordinates as a GeoPoint value object."""
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)

    def get_bounding_box(self) -> Optional[GeoRectangle]:
        """Return the stored bounding box, or None if absent or corrupt."""
        if not self.bounding_box:
            return None
        try:
            return GeoRectangle.parse(self.bounding_box)
        except FormatError:
            logger.warning(
                "Locality %s has an unreadable bounding box: %r", self.pk, self.bounding_box
            )
            return None

    def set_bounding_box(self, rectangle: Optional[GeoRectangle]) -> None:
        """Store a bounding box (None clears it). Does not save."""
        self.bounding_box = str(rectangle) if rectangle is not None else ''

    def get_polygon(self) -> Optional[GeoPolygon]:
        """Return the stored polygon, or None if absent or corrupt."""
        if self.polygon is None:
            return None
        try:
            return GeoPolygon.from_bytes(self.polygon)
        except DecodeError:
            logger.warning("Locality %s has an unreadable polygon", self.pk, exc_info=True)
            return None

    def set_polygon(self, polygon: Optional[GeoPolygon]) -> None:
        """Store a polygon (None clears it). Does not save."""
        self.polygon = polygon.to_bytes() if polygon is not None else None

    def contains(self, point: GeoPoint) -> bool:
        """Check if a point lies within this locality's outline.

        Uses the stored polygon when there is one, otherwise the bounding
        box. A locality with neither contains nothing.
        """
        polygon = self.get_polygon()
        if polygon is not None:
            return polygon.contains(point)

        box = self.get_bounding_box()
        if box is not None:
            return box.contains(point)

        return False
