"""Shared model utilities."""
from geomkit.utils.base_model import GeometryModel, ReadOnlyModelError

__all__ = ['GeometryModel', 'ReadOnlyModelError']
