"""Exceptions for django-localities."""


class GeometryError(ValueError):
    """Base exception for geometry errors."""
    pass


class FormatError(GeometryError):
    """Raised when text does not represent a point, rectangle or polygon."""
    pass


class InvalidGeometry(GeometryError):
    """Raised when a rectangle violates its coordinate range or ordering."""
    pass


class DecodeError(GeometryError):
    """Raised when a binary, JSON or XML payload cannot be decoded."""
    pass
