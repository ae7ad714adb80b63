"""Tagged entity identifiers.

Clients may submit structural subtrees that contain entities created locally
and not yet committed. Those carry a :class:`PendingId`; everything the engine
stores carries a :class:`PersistedId` value. The wire-level ``temp`` prefix is
interpreted exactly once, in :func:`parse_entity_id`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from uuid import uuid4


PENDING_ID_PREFIX = "temp"


@dataclass(frozen=True)
class PendingId:
    client_token: str


@dataclass(frozen=True)
class PersistedId:
    value: str


EntityId = Union[PendingId, PersistedId]


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:16]}"


def parse_entity_id(raw: Optional[object]) -> EntityId:
    """Classify a raw wire identifier. Missing ids are pending."""
    if raw is None:
        return PendingId(client_token="")
    text = str(raw).strip()
    if not text or text.startswith(PENDING_ID_PREFIX):
        return PendingId(client_token=text)
    return PersistedId(value=text)


def resolve_entity_id(entity_id: EntityId, prefix: str) -> str:
    """Return the stored id, allocating a new one for pending entities."""
    if isinstance(entity_id, PersistedId):
        return entity_id.value
    return generate_id(prefix)
