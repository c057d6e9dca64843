"""Base abstract model and entity metadata shared by all modules.

Provides:
- ``EntityMetadata``: immutable ``(id, created_at, updated_at)`` value.
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at columns,
  exposed as an ``EntityMetadata`` through ``.metadata``.

Design decisions:
- Identity and timestamps are a value composed into each entity rather
  than behaviour inherited from a base entity; ``BaseModel`` only
  contributes the columns.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

import uuid6
from django.db import models


@dataclass(frozen=True)
class EntityMetadata:
    """Identity and bookkeeping timestamps of a persisted entity."""

    id: UUID
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


def generate_id() -> UUID:
    """Globally unique, time-ordered identifier (UUIDv7)."""
    return uuid6.uuid7()


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=generate_id,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def metadata(self) -> EntityMetadata:
        return EntityMetadata(
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)
