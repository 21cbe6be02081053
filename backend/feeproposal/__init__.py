"""Fee proposal document model, merge rules and persistence.

Usage::

    from feeproposal import FixedFeeBatch, ProposalEditor, create_client

    editor = ProposalEditor(create_client(), proposal_id, project_id)
    editor.load()
    editor.handle_fee_calculation(batch)
    editor.save()
"""

from feeproposal.client import ProposalClient
from feeproposal.config import ClientSettings, ServerSettings
from feeproposal.contacts import (
    add_contact,
    primary_contact,
    remove_contact,
    search_contacts,
    set_primary_contact,
    update_contact,
)
from feeproposal.editor import EditorState, ProposalEditor
from feeproposal.exceptions import (
    FeeProposalError,
    InvalidTransitionError,
    ProposalApiError,
    ProposalConflictError,
    ProposalNotFoundError,
    ProposalValidationError,
)
from feeproposal.factory import create_client, create_default_repository
from feeproposal.merge import (
    calculation_totals,
    handle_fee_calculation,
    merge_fixed_fee_batch,
    merge_formula_batch,
    merge_manual_batch,
    reconcile_totals,
    update_data,
    update_discipline_calculations,
    update_discipline_status,
)
from feeproposal.models import (
    CalculationHistoryEntry,
    CalculationResult,
    CalculationSource,
    Contact,
    ContactDraft,
    Discipline,
    FeeResult,
    FixedFeeBatch,
    FormulaBatch,
    ManualBatch,
    Phase,
    Proposal,
    ProposalAction,
    ProposalStatus,
    ProposalStatusCode,
    parse_fee_batch,
)

__all__ = [
    "CalculationHistoryEntry",
    "CalculationResult",
    "CalculationSource",
    "ClientSettings",
    "Contact",
    "ContactDraft",
    "Discipline",
    "EditorState",
    "FeeProposalError",
    "FeeResult",
    "FixedFeeBatch",
    "FormulaBatch",
    "InvalidTransitionError",
    "ManualBatch",
    "Phase",
    "Proposal",
    "ProposalAction",
    "ProposalApiError",
    "ProposalClient",
    "ProposalConflictError",
    "ProposalEditor",
    "ProposalNotFoundError",
    "ProposalStatus",
    "ProposalStatusCode",
    "ProposalValidationError",
    "ServerSettings",
    "add_contact",
    "calculation_totals",
    "create_client",
    "create_default_repository",
    "handle_fee_calculation",
    "merge_fixed_fee_batch",
    "merge_formula_batch",
    "merge_manual_batch",
    "parse_fee_batch",
    "primary_contact",
    "reconcile_totals",
    "remove_contact",
    "search_contacts",
    "set_primary_contact",
    "update_contact",
    "update_data",
    "update_discipline_calculations",
    "update_discipline_status",
]
