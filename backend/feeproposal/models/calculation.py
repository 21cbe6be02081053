"""Fee calculation models: results, incoming batches, per-phase collections.

A CalculationResult is immutable once stamped. Corrections are made by
merging a new batch, never by editing a stored result; every merged batch
is also kept verbatim in the proposal's calculation history.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, TypeAdapter

from feeproposal.models.base import ParameterBag, ProposalBaseModel
from feeproposal.models.enums import CalculationScope, CalculationSource, Phase

logger = logging.getLogger(__name__)

# Parameter key formula producers always set on their results.
FORMULA_MARKER_KEY = "hours"


class CalculationResult(ProposalBaseModel):
    """A single stamped fee value, optionally attached to a building node."""

    model_config = ConfigDict(frozen=True)

    structure_id: str | None = Field(default=None, alias="structureId")
    level_id: str | None = Field(default=None, alias="levelId")
    space_id: str | None = Field(default=None, alias="spaceId")
    type: Phase
    category: str
    value: float
    parameters: ParameterBag = Field(default_factory=dict)
    timestamp: datetime
    source: CalculationSource

    @property
    def scope(self) -> CalculationScope | None:
        """The deepest node the result refers to, or None if unattached."""
        if self.space_id:
            return CalculationScope.SPACE
        if self.level_id:
            return CalculationScope.LEVEL
        if self.structure_id:
            return CalculationScope.STRUCTURE
        return None


# ---------------------------------------------------------------------------
# Incoming batches
# ---------------------------------------------------------------------------


class FeeResult(ProposalBaseModel):
    """An unstamped result as produced by a fee calculator."""

    structure_id: str | None = Field(default=None, alias="structureId")
    level_id: str | None = Field(default=None, alias="levelId")
    space_id: str | None = Field(default=None, alias="spaceId")
    category: str
    value: float
    parameters: ParameterBag = Field(default_factory=dict)


class _FeeBatchBase(ProposalBaseModel):
    type: Phase
    results: list[FeeResult]
    parameters: ParameterBag = Field(default_factory=dict)


class FixedFeeBatch(_FeeBatchBase):
    """Results looked up from the fixed fee tables."""

    kind: Literal["fixed"] = "fixed"


class FormulaBatch(_FeeBatchBase):
    """Results computed from hours x rate x multiplier ("flexfees")."""

    kind: Literal["formula"] = "formula"


class ManualBatch(_FeeBatchBase):
    """Results entered by hand."""

    kind: Literal["manual"] = "manual"


FeeBatch = Annotated[
    FixedFeeBatch | FormulaBatch | ManualBatch,
    Field(discriminator="kind"),
]

_FEE_BATCH_ADAPTER: TypeAdapter[FeeBatch] = TypeAdapter(FeeBatch)


def _first_result_parameters(results: Any) -> Mapping[str, Any]:
    """Parameters of the first result, or {} when there is nothing to inspect."""
    if not isinstance(results, Sequence) or isinstance(results, str) or not results:
        return {}
    first = results[0]
    if isinstance(first, FeeResult):
        return first.parameters
    if isinstance(first, Mapping):
        params = first.get("parameters")
        if isinstance(params, Mapping):
            return params
    return {}


def parse_fee_batch(payload: Mapping[str, Any]) -> FeeBatch:
    """Validate a raw batch payload into its tagged variant.

    Producers should send ``kind``. Payloads without it are classified the
    way untagged producers have always been: a formula batch when the first
    result's parameters contain ``hours``, a fixed fee batch otherwise.

    Raises:
        pydantic.ValidationError: If the payload does not describe a batch.
    """
    payload = dict(payload)
    if "kind" not in payload:
        first_params = _first_result_parameters(payload.get("results"))
        kind = "formula" if FORMULA_MARKER_KEY in first_params else "fixed"
        logger.debug("Untagged fee batch classified as %s", kind)
        payload["kind"] = kind
    return _FEE_BATCH_ADAPTER.validate_python(payload)


# ---------------------------------------------------------------------------
# Stored collections
# ---------------------------------------------------------------------------


class PhaseCalculations(ProposalBaseModel):
    """Calculation results of one phase, bucketed by scope."""

    structures: list[CalculationResult] = Field(default_factory=list)
    levels: list[CalculationResult] = Field(default_factory=list)
    spaces: list[CalculationResult] = Field(default_factory=list)
    total: float = 0.0
    parameters: ParameterBag = Field(default_factory=dict)

    def bucket(self, scope: CalculationScope) -> list[CalculationResult]:
        """Return the stored list for the given scope."""
        return {
            CalculationScope.STRUCTURE: self.structures,
            CalculationScope.LEVEL: self.levels,
            CalculationScope.SPACE: self.spaces,
        }[scope]

    @property
    def itemized_total(self) -> float:
        """Sum of every stored result value in this phase."""
        return sum(
            r.value for r in (*self.structures, *self.levels, *self.spaces)
        )


class Calculations(ProposalBaseModel):
    """Design and construction calculations plus the authored grand total."""

    design: PhaseCalculations = Field(default_factory=PhaseCalculations)
    construction: PhaseCalculations = Field(default_factory=PhaseCalculations)
    total: float = 0.0

    def for_phase(self, phase: Phase) -> PhaseCalculations:
        return self.design if phase == Phase.DESIGN else self.construction


class CalculationHistoryEntry(ProposalBaseModel):
    """One merged batch, stored verbatim."""

    timestamp: datetime
    type: CalculationSource
    structure_id: str | None = Field(default=None, alias="structureId")
    level_id: str | None = Field(default=None, alias="levelId")
    space_id: str | None = Field(default=None, alias="spaceId")
    calculations: list[CalculationResult] = Field(default_factory=list)
    parameters: ParameterBag = Field(default_factory=dict)
