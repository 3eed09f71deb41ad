"""QuerySet classes for django-localities models."""
import logging
from typing import Optional

from django.db import models

from .conf import GeoSettings, get_geo_settings
from .geo import GeoPoint
from .rectangle import GeoRectangle


logger = logging.getLogger(__name__)


class LocalityQuerySet(models.QuerySet):
    """QuerySet for Locality model with geographic queries."""

    def within_rectangle(
        self,
        rectangle: GeoRectangle,
        min_population: int = 0,
        geo_settings: Optional[GeoSettings] = None,
    ) -> 'LocalityQuerySet':
        """Find localities whose coordinates lie within a rectangle.

        Bounds are widened by the configured coordinate precision, as in
        GeoRectangle.contains().

        Args:
            rectangle: The bounding box to search.
            min_population: Minimum population to include.
            geo_settings: Overrides the configured precision.

        Returns:
            QuerySet of matching localities; empty for an invalid rectangle.
        """
        if not rectangle.is_valid():
            logger.debug("Invalid rectangle %s, returning no localities", rectangle)
            return self.none()

        precision = (geo_settings or get_geo_settings()).coordinate_precision

        return self.filter(
            latitude__gte=rectangle.south - precision,
            latitude__lte=rectangle.north + precision,
            longitude__gte=rectangle.west - precision,
            longitude__lte=rectangle.east + precision,
            population__gte=min_population,
        )

    def within_radius(self, lat: float, lng: float, km: float) -> 'LocalityQuerySet':
        """Find localities within a given radius of a point.

        Filters by an enclosing rectangle in the database first, then by
        exact Haversine distance.

        Args:
            lat: Latitude of the center point.
            lng: Longitude of the center point.
            km: Radius in kilometers.

        Returns:
            QuerySet of localities within the specified radius.
        """
        center = GeoPoint(latitude=lat, longitude=lng)
        box = GeoRectangle.around(center, km)

        qs = self.filter(
            latitude__gte=box.south,
            latitude__lte=box.north,
            longitude__gte=box.west,
            longitude__lte=box.east,
        )

        results = [
            locality.pk for locality in qs
            if center.distance_to(locality.as_geopoint()) <= km
        ]
        logger.debug("%d localities within %s km of %s", len(results), km, center)

        return self.filter(pk__in=results)

    def nearest(self, lat: float, lng: float, limit: int = 10) -> 'LocalityQuerySet':
        """Find the N nearest localities to a point.

        Args:
            lat: Latitude of the center point.
            lng: Longitude of the center point.
            limit: Maximum number of results to return.

        Returns:
            QuerySet of nearest localities, ordered by distance.
        """
        center = GeoPoint(latitude=lat, longitude=lng)

        localities_with_distance = [
            (locality.pk, center.distance_to(locality.as_geopoint()))
            for locality in self.all()
        ]
        localities_with_distance.sort(key=lambda x: x[1])
        top_pks = [pk for pk, _ in localities_with_distance[:limit]]

        if not top_pks:
            return self.none()

        # Preserve order using CASE WHEN
        preserved = models.Case(
            *[models.When(pk=pk, then=pos) for pos, pk in enumerate(top_pks)]
        )
        return self.filter(pk__in=top_pks).order_by(preserved)

    def containing(self, lat: float, lng: float) -> 'LocalityQuerySet':
        """Find localities whose polygon or bounding box contains a point.

        Args:
            lat: Latitude of the point.
            lng: Longitude of the point.

        Returns:
            QuerySet of localities containing the point.
        """
        point = GeoPoint(latitude=lat, longitude=lng)

        candidates = self.exclude(bounding_box='', polygon__isnull=True)
        containing_pks = [
            locality.pk for locality in candidates if locality.contains(point)
        ]

        return self.filter(pk__in=containing_pks)

    def with_polygon(self) -> 'LocalityQuerySet':
        """Filter to localities that have a stored polygon."""
        return self.filter(polygon__isnull=False)
