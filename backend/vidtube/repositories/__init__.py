"""Repository package exposing persistence-layer access for domain models."""

from __future__ import annotations

from vidtube.repositories.base import BaseRepository
from vidtube.repositories.user import UserRepository

__all__ = ["BaseRepository", "UserRepository"]
