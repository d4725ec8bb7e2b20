"""Record models returned by the records API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """A user profile as stored by the server.

    Instances are frozen: a profile is only ever replaced wholesale by the
    data of a later successful load or save.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    email: str
    address: str
    avatar: str | None = None


def record_values(record: Any) -> dict[str, Any]:
    """Return a plain mapping of a record's fields.

    Accepts pydantic models and mappings; anything else yields an empty dict.
    """
    if isinstance(record, BaseModel):
        return record.model_dump()
    if isinstance(record, Mapping):
        return dict(record)
    return {}
