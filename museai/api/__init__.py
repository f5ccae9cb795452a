"""API integration layer."""

from .client import MuseClient

__all__ = ["MuseClient"]
