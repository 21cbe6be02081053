"""Pure update functions for the proposal document.

Every function takes a Proposal and returns a new Proposal; the input is
never mutated. Merging a fee batch works in four steps:

1. **Stamp**: each result gets the batch phase, the merge time and its
   source tag (``fixedfees``, ``formula`` or ``manual``). Formula results
   also get ``calculation_type = "flexfees"`` in their parameters.
2. **Partition**: results are bucketed by their most specific scope:
   structure-only, level, or space. A result with no scope id lands in no
   bucket; it is still recorded in the history entry.
3. **Append**: each bucket is appended to the matching list under
   ``calculations[phase]``. Nothing already stored is replaced,
   deduplicated or removed.
4. **Record**: one history entry holding the whole stamped batch and the
   batch parameters is appended to ``calculation_history``.

Authored totals (``calculations.*.total``) are never touched by a merge;
``reconcile_totals`` recomputes them on request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from feeproposal.models.calculation import (
    CalculationHistoryEntry,
    CalculationResult,
    FixedFeeBatch,
    FormulaBatch,
    ManualBatch,
    parse_fee_batch,
)
from feeproposal.models.enums import CalculationScope, CalculationSource, Phase
from feeproposal.models.proposal import Proposal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feeproposal.models.base import ParameterBag
    from feeproposal.models.calculation import FeeBatch
    from feeproposal.models.proposal import Discipline

logger = logging.getLogger(__name__)

# Added to the parameters of formula results and formula history entries.
FLEXFEES_PARAMETERS: dict[str, str] = {"calculation_type": "flexfees"}


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def stamp_results(
    batch: FixedFeeBatch | FormulaBatch | ManualBatch,
    source: CalculationSource,
    now: datetime,
    extra_parameters: ParameterBag | None = None,
) -> list[CalculationResult]:
    """Turn a batch's raw results into immutable CalculationResults.

    Empty scope ids are treated as absent.
    """
    extra = extra_parameters or {}
    return [
        CalculationResult(
            structure_id=result.structure_id or None,
            level_id=result.level_id or None,
            space_id=result.space_id or None,
            type=batch.type,
            category=result.category,
            value=result.value,
            parameters={**result.parameters, **extra},
            timestamp=now,
            source=source,
        )
        for result in batch.results
    ]


def _merge_batch(
    document: Proposal,
    batch: FixedFeeBatch | FormulaBatch | ManualBatch,
    source: CalculationSource,
    now: datetime,
    extra_parameters: ParameterBag | None = None,
) -> Proposal:
    stamped = stamp_results(batch, source, now, extra_parameters)

    buckets: dict[CalculationScope, list[CalculationResult]] = {
        scope: [] for scope in CalculationScope
    }
    unattached = 0
    for result in stamped:
        scope = result.scope
        if scope is None:
            unattached += 1
            continue
        buckets[scope].append(result)
    if unattached:
        logger.debug(
            "%d %s result(s) without structure/level/space id kept in history only",
            unattached,
            source,
        )

    calculations = document.project_data.calculations
    current = calculations.for_phase(batch.type)
    updated_phase = current.model_copy(
        update={
            "structures": [
                *current.structures, *buckets[CalculationScope.STRUCTURE],
            ],
            "levels": [*current.levels, *buckets[CalculationScope.LEVEL]],
            "spaces": [*current.spaces, *buckets[CalculationScope.SPACE]],
        }
    )

    entry = CalculationHistoryEntry(
        timestamp=now,
        type=source,
        calculations=stamped,
        parameters={**batch.parameters, **(extra_parameters or {})},
    )

    project_data = document.project_data.model_copy(
        update={
            "calculations": calculations.model_copy(
                update={batch.type.value: updated_phase}
            ),
            "calculation_history": [
                *document.project_data.calculation_history,
                entry,
            ],
        }
    )
    logger.debug(
        "Merged %d %s result(s) into %s calculations of proposal %s",
        len(stamped),
        source,
        batch.type,
        document.id,
    )
    return document.model_copy(update={"project_data": project_data})


# ---------------------------------------------------------------------------
# Fee batches
# ---------------------------------------------------------------------------


def merge_fixed_fee_batch(
    document: Proposal,
    batch: FixedFeeBatch,
    *,
    now: datetime | None = None,
) -> Proposal:
    """Append a fixed fee table batch (source ``fixedfees``)."""
    return _merge_batch(document, batch, CalculationSource.FIXED_FEES, _now(now))


def merge_formula_batch(
    document: Proposal,
    batch: FormulaBatch,
    *,
    now: datetime | None = None,
) -> Proposal:
    """Append a formula ("flexfees") batch (source ``formula``).

    Result parameters and the history entry parameters are both extended
    with ``calculation_type = "flexfees"``.
    """
    return _merge_batch(
        document,
        batch,
        CalculationSource.FORMULA,
        _now(now),
        FLEXFEES_PARAMETERS,
    )


def merge_manual_batch(
    document: Proposal,
    batch: ManualBatch,
    *,
    now: datetime | None = None,
) -> Proposal:
    """Append hand-entered values (source ``manual``)."""
    return _merge_batch(document, batch, CalculationSource.MANUAL, _now(now))


def handle_fee_calculation(
    document: Proposal,
    batch: FeeBatch | Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> Proposal:
    """Merge a batch of any kind, dispatching on its ``kind`` tag.

    Raw mappings are validated with :func:`parse_fee_batch` first.

    Raises:
        pydantic.ValidationError: If a raw mapping is not a valid batch.
    """
    if isinstance(batch, Mapping):
        batch = parse_fee_batch(batch)
    if isinstance(batch, FormulaBatch):
        return merge_formula_batch(document, batch, now=now)
    if isinstance(batch, ManualBatch):
        return merge_manual_batch(document, batch, now=now)
    return merge_fixed_fee_batch(document, batch, now=now)


# ---------------------------------------------------------------------------
# Disciplines
# ---------------------------------------------------------------------------


def _replace_discipline(
    document: Proposal,
    discipline_id: str,
    update: dict[str, Any],
) -> Proposal:
    disciplines = document.project_data.disciplines
    if not any(d.id == discipline_id for d in disciplines):
        logger.debug("Discipline %s not found; nothing updated", discipline_id)
        return document

    def _apply(discipline: Discipline) -> Discipline:
        if discipline.id != discipline_id:
            return discipline
        changes = {
            key: value(discipline) if callable(value) else value
            for key, value in update.items()
        }
        return discipline.model_copy(update=changes)

    project_data = document.project_data.model_copy(
        update={"disciplines": [_apply(d) for d in disciplines]}
    )
    return document.model_copy(update={"project_data": project_data})


def update_discipline_status(
    document: Proposal,
    discipline_id: str,
    is_active: bool,
    *,
    updated_by: str,
    now: datetime | None = None,
) -> Proposal:
    """Activate or deactivate a discipline. Unknown ids are a no-op."""
    return _replace_discipline(
        document,
        discipline_id,
        {
            "is_active": is_active,
            "last_updated": _now(now),
            "updated_by": updated_by,
        },
    )


def update_discipline_calculations(
    document: Proposal,
    discipline_id: str,
    calculations: Iterable[CalculationResult],
    *,
    updated_by: str,
    now: datetime | None = None,
) -> Proposal:
    """Append calculation results to a discipline. Unknown ids are a no-op."""
    new_results = list(calculations)
    return _replace_discipline(
        document,
        discipline_id,
        {
            "calculations": lambda d: [*d.calculations, *new_results],
            "last_updated": _now(now),
            "updated_by": updated_by,
        },
    )


# ---------------------------------------------------------------------------
# Whole-document updates
# ---------------------------------------------------------------------------


def update_data(document: Proposal, patch: Mapping[str, Any]) -> Proposal:
    """Shallow-merge a partial document.

    Top-level keys replace the current values; keys under ``project_data``
    are merged one level deep. The merged document is re-validated.

    Raises:
        pydantic.ValidationError: If the patch holds values of the wrong shape.
    """
    current = document.model_dump(by_alias=True)
    changes = dict(patch)
    project_patch = changes.pop("project_data", None) or {}
    if not isinstance(project_patch, Mapping):
        project_patch = project_patch.model_dump(by_alias=True, exclude_unset=True)

    merged = {
        **current,
        **changes,
        "project_data": {**current["project_data"], **project_patch},
    }
    logger.debug(
        "Updating proposal %s fields: %s",
        document.id,
        sorted([*changes, *(f"project_data.{k}" for k in project_patch)]),
    )
    return Proposal.model_validate(merged)


def calculation_totals(document: Proposal) -> dict[str, float]:
    """Sum the itemized calculation results of each phase.

    Returns a dict with ``design``, ``construction`` and ``total`` keys. The
    document's authored totals are left alone; compare against them to spot
    drift.
    """
    calcs = document.project_data.calculations
    design = calcs.design.itemized_total
    construction = calcs.construction.itemized_total
    return {
        Phase.DESIGN.value: design,
        Phase.CONSTRUCTION.value: construction,
        "total": design + construction,
    }


def reconcile_totals(document: Proposal) -> Proposal:
    """Return a copy whose calculation totals equal the itemized sums."""
    totals = calculation_totals(document)
    calcs = document.project_data.calculations
    reconciled = calcs.model_copy(
        update={
            "design": calcs.design.model_copy(
                update={"total": totals[Phase.DESIGN.value]}
            ),
            "construction": calcs.construction.model_copy(
                update={"total": totals[Phase.CONSTRUCTION.value]}
            ),
            "total": totals["total"],
        }
    )
    project_data = document.project_data.model_copy(
        update={"calculations": reconciled}
    )
    return document.model_copy(update={"project_data": project_data})
