"""Django Localities configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    LOCALITIES_COORDINATE_PRECISION = 1e-4
    LOCALITIES_DECIMALS = 2
"""
from dataclasses import dataclass
from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


# =============================================================================
# DEFAULTS
# =============================================================================

# Corresponds to approximately 100m latitude / longitude at the equator
DEFAULT_COORDINATE_PRECISION = 1e-3

# Decimals of the seconds value in degree-minute-second output
DEFAULT_DECIMALS = 4


@dataclass(frozen=True)
class GeoSettings:
    """Immutable geometry settings.

    Built once from Django settings by get_geo_settings() and shared by
    every caller. Pass an instance explicitly to override the defaults
    for a single call.

    Attributes:
        coordinate_precision: Boundary tolerance, in degrees, for
            rectangle containment.
        decimals: Rounding of seconds when formatting angles in DMS form.
    """

    coordinate_precision: float = DEFAULT_COORDINATE_PRECISION
    decimals: int = DEFAULT_DECIMALS

    def __post_init__(self) -> None:
        """Validate the configured values."""
        try:
            precision = float(self.coordinate_precision)
        except (TypeError, ValueError):
            raise ImproperlyConfigured(
                f"Coordinate precision must be a number, got {self.coordinate_precision!r}"
            )
        if precision < 0:
            raise ImproperlyConfigured(
                f"Coordinate precision must not be negative, got {precision}"
            )
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ImproperlyConfigured(
                f"Decimals must be an integer, got {self.decimals!r}"
            )
        if self.decimals < 0:
            raise ImproperlyConfigured(
                f"Decimals must not be negative, got {self.decimals}"
            )
        object.__setattr__(self, 'coordinate_precision', precision)


def get_setting(name: str, default=None):
    """Get a setting with LOCALITIES_ prefix.

    Returns the default when Django settings are not configured, so the
    geometry kernel can be used outside a Django project.
    """
    if not settings.configured:
        return default
    return getattr(settings, f"LOCALITIES_{name}", default)


@lru_cache(maxsize=1)
def get_geo_settings() -> GeoSettings:
    """Return the process-wide GeoSettings, built on first use."""
    return GeoSettings(
        coordinate_precision=get_setting('COORDINATE_PRECISION', DEFAULT_COORDINATE_PRECISION),
        decimals=get_setting('DECIMALS', DEFAULT_DECIMALS),
    )


def clear_settings_cache():
    """Clear the cached settings. Useful for testing."""
    get_geo_settings.cache_clear()


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# LOCALITIES_COORDINATE_PRECISION = 1e-3  # Optional - containment tolerance, degrees
# LOCALITIES_DECIMALS = 4  # Optional - DMS seconds rounding
