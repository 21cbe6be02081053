"""Domain models for the fee proposal document."""

from feeproposal.models.calculation import (
    CalculationHistoryEntry,
    CalculationResult,
    Calculations,
    FeeBatch,
    FeeResult,
    FixedFeeBatch,
    FormulaBatch,
    ManualBatch,
    PhaseCalculations,
    parse_fee_batch,
)
from feeproposal.models.enums import (
    CalculationScope,
    CalculationSource,
    Phase,
    ProposalAction,
    ProposalStatusCode,
)
from feeproposal.models.proposal import (
    NEW_PROPOSAL_ID,
    AdditionalService,
    ClientInfo,
    Contact,
    ContactDraft,
    Costs,
    Discipline,
    DuplicateRate,
    FeeScaleRow,
    PhaseCosts,
    ProjectData,
    Proposal,
    Service,
)
from feeproposal.models.status import ProposalStatus
from feeproposal.models.structure import Level, Space, Structure

__all__ = [
    "NEW_PROPOSAL_ID",
    "AdditionalService",
    "CalculationHistoryEntry",
    "CalculationResult",
    "CalculationScope",
    "CalculationSource",
    "Calculations",
    "ClientInfo",
    "Contact",
    "ContactDraft",
    "Costs",
    "Discipline",
    "DuplicateRate",
    "FeeBatch",
    "FeeResult",
    "FeeScaleRow",
    "FixedFeeBatch",
    "FormulaBatch",
    "Level",
    "ManualBatch",
    "Phase",
    "PhaseCalculations",
    "PhaseCosts",
    "ProjectData",
    "Proposal",
    "ProposalAction",
    "ProposalStatus",
    "ProposalStatusCode",
    "Service",
    "Space",
    "Structure",
    "parse_fee_batch",
]
