"""Physical building decomposition: Structure -> Level -> Space.

Containment is one-directional; no node holds a reference to its parent.
The hierarchy is read-only here, it is authored by the structure editor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from feeproposal.models.base import ParameterBag, ProposalBaseModel

if TYPE_CHECKING:
    from collections.abc import Iterator


class Space(ProposalBaseModel):
    """A single space (room or area) on a level."""

    id: str
    name: str = ""
    floor_area: float = Field(default=0.0, alias="floorArea")
    type: str = ""
    parameters: ParameterBag = Field(default_factory=dict)


class Level(ProposalBaseModel):
    """A floor of a structure."""

    id: str
    name: str = ""
    floor_area: float = Field(default=0.0, alias="floorArea")
    spaces: list[Space] = Field(default_factory=list)
    parameters: ParameterBag = Field(default_factory=dict)


class Structure(ProposalBaseModel):
    """A building (or duplicated building) in the proposal scope."""

    id: str
    name: str = ""
    type: str = ""
    levels: list[Level] = Field(default_factory=list)
    total_floor_area: float = Field(default=0.0, alias="totalFloorArea")
    construction_type: str = Field(default="", alias="constructionType")
    building_type: str = Field(default="", alias="buildingType")
    parameters: ParameterBag = Field(default_factory=dict)

    def iter_spaces(self) -> Iterator[tuple[Level, Space]]:
        """Yield every (level, space) pair of the structure, in order."""
        for level in self.levels:
            for space in level.spaces:
                yield level, space

    @property
    def space_floor_area(self) -> float:
        """Sum of the floor areas of all spaces in the structure."""
        return sum(space.floor_area for _, space in self.iter_spaces())
