"""Django Localities - Geospatial primitives and locality records for Django."""

__version__ = '0.1.0'

_KERNEL = {
    'GeoPoint': 'geo',
    'GeoRectangle': 'rectangle',
    'GeoPolygon': 'polygon',
    'GeoSettings': 'conf',
    'get_geo_settings': 'conf',
    'GeometryError': 'exceptions',
    'FormatError': 'exceptions',
    'InvalidGeometry': 'exceptions',
    'DecodeError': 'exceptions',
}


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in _KERNEL:
        from importlib import import_module
        return getattr(import_module(f'.{_KERNEL[name]}', __name__), name)
    if name == 'Locality':
        from .models import Locality
        return Locality
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [*_KERNEL, 'Locality']
