"""Base model for stored travel diary records.

Every record model inherits from :class:`DiaryBaseModel` which provides:

* ``alias_generator=to_camel`` so the camelCase keys of the stored JSON
  map automatically to snake_case attributes.
* ``populate_by_name`` so callers may construct models with either name.
* Frozen instances; the store hands out fresh models and never shares
  mutable state with callers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DiaryBaseModel(BaseModel):
    """Base for persisted diary records."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_storage(self) -> dict[str, Any]:
        """JSON-ready dict using stored (camelCase) keys, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
