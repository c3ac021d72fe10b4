"""Gallery content domain package (photos, albums, events, challenges)."""

from .models import Album, AlbumPhoto, Challenge, Event, Photo

__all__ = ["Photo", "Album", "AlbumPhoto", "Event", "Challenge"]
