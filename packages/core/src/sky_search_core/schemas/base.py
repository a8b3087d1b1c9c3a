"""Base model for payloads exchanged with the flight-data provider."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Immutable model with snake_case attributes and camelCase wire names.

    The provider speaks camelCase JSON; attributes stay Pythonic and
    ``model_dump(by_alias=True)`` restores the provider spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
