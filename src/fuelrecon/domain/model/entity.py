"""Identity shared by stations, price records, reports, votes and cycles."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Ids are assigned on construction, before any store has seen the object.

    Equality stays identity based; the SQLAlchemy identity map guarantees one
    instance per row within a session.
    """

    id: UUID = field(default_factory=new_id)
