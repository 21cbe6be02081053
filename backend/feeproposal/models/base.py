"""Shared base model and parameter bag types."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

# Open-ended, string-keyed parameters carried by structures, levels, spaces,
# disciplines and calculation results. Never a closed schema.
ParameterValue = bool | int | float | str
ParameterBag = dict[str, ParameterValue]


def _blank_to_none(value: Any) -> Any:
    # The API stores unset timestamps as "".
    if value == "":
        return None
    return value


OptionalTimestamp = Annotated[datetime | None, BeforeValidator(_blank_to_none)]


def _none_to_blank(value: Any) -> Any:
    # Writers that omit a user id send null.
    if value is None:
        return ""
    return value


OptionalText = Annotated[str, BeforeValidator(_none_to_blank)]


class ProposalBaseModel(BaseModel):
    """Base for every model of the proposal document.

    Fields whose JSON name is camelCase (``structureId``, ``floorArea``) are
    declared with an alias; ``populate_by_name`` lets Python callers use the
    snake_case attribute name instead. Dump with ``by_alias=True`` for the
    wire format.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the API's field names."""
        return self.model_dump(mode="json", by_alias=True)
