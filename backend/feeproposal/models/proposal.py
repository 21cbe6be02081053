"""The proposal document: the root model and everything nested in it."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, Field

from feeproposal.models.base import (
    OptionalText,
    OptionalTimestamp,
    ParameterBag,
    ProposalBaseModel,
)
from feeproposal.models.calculation import (
    CalculationHistoryEntry,
    CalculationResult,
    Calculations,
)
from feeproposal.models.enums import Phase
from feeproposal.models.structure import Structure

if TYPE_CHECKING:
    from feeproposal.models.status import ProposalStatus

# Path segment / id used for a proposal that has not been saved yet.
NEW_PROPOSAL_ID = "new"


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------


class ContactDraft(ProposalBaseModel):
    """Contact fields as entered, before an id is assigned."""

    name: str
    email: str = ""
    phone: str | None = None
    role: str | None = None
    company: str | None = None
    is_primary: bool = False
    details: ParameterBag = Field(default_factory=dict)


class Contact(ContactDraft):
    """A person reachable in the context of the proposal."""

    id: str

    @property
    def searchable_text(self) -> str:
        """Lower-cased name/email/phone/role/company, space separated."""
        fields = (self.name, self.email, self.phone, self.role, self.company)
        return " ".join(f for f in fields if f).lower()


# ---------------------------------------------------------------------------
# Disciplines and services
# ---------------------------------------------------------------------------


class Discipline(ProposalBaseModel):
    """An engineering trade. Deactivated, never removed."""

    id: str
    name: str
    type: Phase = Phase.DESIGN
    is_active: bool = True
    parameters: ParameterBag = Field(default_factory=dict)
    calculations: list[CalculationResult] = Field(default_factory=list)
    last_updated: OptionalTimestamp = None
    updated_by: OptionalText = ""


class Service(ProposalBaseModel):
    """A selectable engineering service of a discipline."""

    id: str
    discipline_id: str
    name: str
    type: Phase = Phase.DESIGN
    is_active: bool = True
    parameters: ParameterBag = Field(default_factory=dict)
    calculations: list[CalculationResult] = Field(default_factory=list)


class AdditionalService(ProposalBaseModel):
    """An optional service offered on top of the standard scope."""

    id: str
    name: str
    description: str = ""
    phase: Phase = Phase.DESIGN
    default_min_value: float = 0.0
    is_active: bool = True
    discipline: str | None = None


class FeeScaleRow(ProposalBaseModel):
    """Design fee scale row: prime rate and discipline fractions by cost."""

    id: int
    construction_cost: float
    prime_consultant_rate: float
    fraction_of_prime_rate_mechanical: float = 0.0
    fraction_of_prime_rate_plumbing: float = 0.0
    fraction_of_prime_rate_electrical: float = 0.0
    fraction_of_prime_rate_structural: float = 0.0


class DuplicateRate(ProposalBaseModel):
    id: int
    rate: float


class ClientInfo(ProposalBaseModel):
    id: str = ""
    name: str = ""
    contact: str = ""
    details: ParameterBag = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Costs
# ---------------------------------------------------------------------------


class StructureCost(ProposalBaseModel):
    structure_id: str = Field(alias="structureId")
    calculations: list[CalculationResult] = Field(default_factory=list)
    total: float = 0.0


class LevelCost(ProposalBaseModel):
    level_id: str = Field(alias="levelId")
    calculations: list[CalculationResult] = Field(default_factory=list)
    total: float = 0.0


class SpaceCost(ProposalBaseModel):
    space_id: str = Field(alias="spaceId")
    calculations: list[CalculationResult] = Field(default_factory=list)
    total: float = 0.0


class HourlyRateCost(ProposalBaseModel):
    role: str
    rate: float
    hours: float
    total: float
    parameters: ParameterBag = Field(default_factory=dict)


class MaterialCost(ProposalBaseModel):
    item: str
    quantity: float
    unit_cost: float
    total: float
    parameters: ParameterBag = Field(default_factory=dict)


class PhaseCosts(ProposalBaseModel):
    """Cost breakdown of one phase."""

    structures: list[StructureCost] = Field(default_factory=list)
    levels: list[LevelCost] = Field(default_factory=list)
    spaces: list[SpaceCost] = Field(default_factory=list)
    hourly_rates: list[HourlyRateCost] = Field(default_factory=list)
    materials: list[MaterialCost] = Field(default_factory=list)
    total: float = 0.0


class Costs(ProposalBaseModel):
    design: PhaseCosts = Field(default_factory=PhaseCosts)
    construction: PhaseCosts = Field(default_factory=PhaseCosts)
    total: float = 0.0


# ---------------------------------------------------------------------------
# Document root
# ---------------------------------------------------------------------------


class ProjectData(ProposalBaseModel):
    """Everything the fee calculation UI reads and writes.

    Keys this model does not know about are kept as-is so a load/save round
    trip never drops data written by other features.
    """

    model_config = ConfigDict(extra="allow")

    structures: list[Structure] = Field(default_factory=list)
    calculations: Calculations = Field(default_factory=Calculations)
    disciplines: list[Discipline] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
    tracked_services: list[dict[str, Any]] = Field(default_factory=list)
    additional_services: list[AdditionalService] = Field(default_factory=list)
    fee_scale: list[FeeScaleRow] = Field(default_factory=list)
    duplicate_rates: list[DuplicateRate] = Field(default_factory=list)
    rescheck_items: list[dict[str, Any]] = Field(default_factory=list)
    nested_items: list[dict[str, Any]] = Field(default_factory=list)
    phase: Phase = Phase.DESIGN
    client: ClientInfo = Field(default_factory=ClientInfo)
    costs: Costs = Field(default_factory=Costs)
    calculation_history: list[CalculationHistoryEntry] = Field(
        default_factory=list
    )


class Proposal(ProposalBaseModel):
    """A versioned fee/scope document attached to a project.

    ``version`` is maintained by the server: every accepted save bumps it,
    and a save carrying an older value is rejected as a conflict.
    """

    id: str = ""
    project_id: str = ""
    proposal_number: int = 0
    revision_number: int = 0
    is_temporary_revision: bool = False
    status_id: str = ""
    contacts: list[Contact] = Field(default_factory=list)
    created_by: OptionalText = ""
    updated_by: OptionalText = ""
    created_at: OptionalTimestamp = None
    updated_at: OptionalTimestamp = None
    description: str | None = None
    project_data: ProjectData = Field(default_factory=ProjectData)
    version: int = 0

    @classmethod
    def new(cls, project_id: str, now: datetime | None = None) -> Proposal:
        """Synthesize the default document of an unsaved proposal.

        The server assigns the real id and proposal number on first save.
        """
        now = now or datetime.now(UTC)
        return cls(
            id=NEW_PROPOSAL_ID,
            project_id=project_id,
            revision_number=1,
            is_temporary_revision=True,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_new(self) -> bool:
        return self.id == NEW_PROPOSAL_ID

    @property
    def calculations(self) -> Calculations:
        """Shortcut for ``project_data.calculations``."""
        return self.project_data.calculations

    def to_summary_dict(
        self, status: ProposalStatus | None = None,
    ) -> dict[str, Any]:
        """Produce a flat summary dict for list views.

        Returns a dict with formatted strings for direct display. When the
        proposal's ``status`` is given, a badge label is included too.
        """
        from feeproposal.formatting import (
            format_currency,
            format_proposal_label,
            format_status_badge,
        )

        primary = next((c for c in self.contacts if c.is_primary), None)
        calcs = self.calculations
        history = self.project_data.calculation_history

        return {
            "id": self.id,
            "project_id": self.project_id,
            "label": format_proposal_label(self),
            "status_id": self.status_id,
            "status_badge": (
                format_status_badge(status.name, self) if status else None
            ),
            "description": self.description or "",
            "primary_contact": primary.name if primary else None,
            "num_contacts": len(self.contacts),
            "design_total_formatted": format_currency(calcs.design.total),
            "construction_total_formatted": format_currency(
                calcs.construction.total,
            ),
            "total_formatted": format_currency(calcs.total),
            "num_calculation_batches": len(history),
            "last_calculated_at": (
                history[-1].timestamp.isoformat() if history else None
            ),
        }
