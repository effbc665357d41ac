"""
TransactionEngine -- applies stock actions to a drug collection.

Responsibility:
    Orchestrates every ledger mutation: validates the action, computes new
    StockLevels through ``stock_arithmetic``, synthesizes exactly one
    TransactionLog and returns a new DrugCollection in which only the
    targeted drug differs.

Architecture position:
    Kernel > Domain -- functional core. Time and ids come from injected
    collaborators (Clock, id factory); the only side effect is logging.

Invariants enforced:
    TOTAL_BALANCE   -- every produced StockLevels has total == available + ood
    NON_NEGATIVE    -- quantities are checked before any arithmetic runs
    APPEND_ONLY_LOG -- each applied action appends exactly one log entry

Failure modes:
    - InvalidQuantityError: quantity fails its precondition; the collection
      is left untouched.
    - DrugNotFoundError: ``drug_id`` is not in the collection.
    - InvalidDrugError: empty name/location or unknown presentation.

Usage:
    engine = TransactionEngine(SystemClock())
    result = engine.apply(collection, drug_id, CheckOut(quantity=2, location="E4"))
    collection = result.collection
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable
from uuid import uuid4

from stock_kernel.domain import stock_arithmetic
from stock_kernel.domain.actions import (
    AdminEdit,
    CheckIn,
    CheckOut,
    EditDetails,
    MarkOOD,
    NewDrug,
    StockAction,
)
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.collection import DrugCollection
from stock_kernel.domain.entities import Drug, TransactionLog
from stock_kernel.domain.values import (
    PHARMACY_LOCATION,
    Presentation,
    StockLevels,
    TransactionType,
)
from stock_kernel.exceptions import InvalidDrugError, InvalidQuantityError, LedgerError
from stock_kernel.logging_config import LogContext, get_logger

logger = get_logger("domain.transaction_engine")

DETAILS_UPDATED_NOTE = "Drug details updated"


def _new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class EngineResult:
    """Outcome of one applied action."""

    collection: DrugCollection
    drug: Drug
    log: TransactionLog | None


def _require_name(field: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidDrugError(field, value, "must be a non-empty string")
    return value.strip()


def _clean_text(value: object) -> str:
    return str(value or "").strip()


def _require_presentation(value: object) -> Presentation:
    try:
        return Presentation(value)
    except ValueError:
        raise InvalidDrugError("presentation", value, "unknown dosage form") from None


def _require_count(action: str, field: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQuantityError(action, value, f"{field} must be a non-negative whole number")
    return value


class TransactionEngine:
    """
    Applies CheckIn, CheckOut, MarkOOD, EditDetails and AdminEdit actions.

    Contract:
        ``apply`` touches only the drug named by ``drug_id``; every other
        Drug object in the returned collection is the same object as in the
        input collection.

    Non-goals:
        - Does NOT persist anything (PersistenceGateway's job).
        - Does NOT coordinate concurrent writers.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._clock = clock or SystemClock()
        self._new_id = id_factory or _new_id
        self._handlers: dict[type, Callable[[Drug, object, str], tuple[Drug, TransactionLog]]] = {
            CheckIn: self._check_in,
            CheckOut: self._check_out,
            MarkOOD: self._mark_ood,
            EditDetails: self._edit_details,
            AdminEdit: self._admin_edit,
        }

    # ------------------------------------------------------------------
    # Single-drug actions
    # ------------------------------------------------------------------

    def apply(
        self,
        collection: DrugCollection,
        drug_id: str,
        action: StockAction,
    ) -> EngineResult:
        """
        Apply ``action`` to the drug ``drug_id``.

        Raises:
            DrugNotFoundError: unknown drug.
            InvalidQuantityError: quantity precondition failed.
            InvalidDrugError: malformed descriptive fields.
            TypeError: ``action`` is not a recognised action type.
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unsupported stock action: {type(action).__name__}")

        action_name = type(action).__name__
        with LogContext.bind(drug_id=drug_id, action=action_name):
            drug = collection.require(drug_id)
            try:
                updated, log = handler(drug, action, self._clock.timestamp())
            except LedgerError as exc:
                logger.warning(
                    "action_rejected",
                    extra={"error_code": exc.code, "reason": str(exc)},
                )
                raise

            logger.info(
                "action_applied",
                extra={
                    "log_type": log.type.value,
                    "quantity": log.quantity,
                    "available": updated.stock_levels.available,
                    "ood": updated.stock_levels.ood,
                    "total": updated.stock_levels.total,
                },
            )
        return EngineResult(collection=collection.replace(updated), drug=updated, log=log)

    def _log(self, log_type: TransactionType, quantity: int, timestamp: str, **fields) -> TransactionLog:
        return TransactionLog(
            id=self._new_id(),
            type=log_type,
            quantity=quantity,
            timestamp=timestamp,
            **fields,
        )

    def _check_in(self, drug: Drug, action: CheckIn, now: str) -> tuple[Drug, TransactionLog]:
        levels = drug.stock_levels
        quantity = stock_arithmetic.check_quantity(levels, TransactionType.CHECK_IN, action.quantity)
        log = self._log(TransactionType.CHECK_IN, quantity, now, expiry=action.expiry or None)
        updated = drug.with_log(
            log,
            updated_at=now,
            stock_levels=stock_arithmetic.check_in(levels, quantity),
        )
        return updated, log

    def _check_out(self, drug: Drug, action: CheckOut, now: str) -> tuple[Drug, TransactionLog]:
        location = _require_name("location", action.location)
        # Sending stock to Pharmacy is a return of out-of-date stock
        log_type = (
            TransactionType.PHARMACY_RETURN
            if location == PHARMACY_LOCATION
            else TransactionType.CHECK_OUT
        )
        levels = drug.stock_levels
        quantity = stock_arithmetic.check_quantity(levels, log_type, action.quantity)
        transform = stock_arithmetic.TRANSFORMS[log_type]
        log = self._log(log_type, quantity, now, location=location)
        updated = drug.with_log(log, updated_at=now, stock_levels=transform(levels, quantity))
        return updated, log

    def _mark_ood(self, drug: Drug, action: MarkOOD, now: str) -> tuple[Drug, TransactionLog]:
        levels = drug.stock_levels
        quantity = stock_arithmetic.check_quantity(levels, TransactionType.OOD, action.quantity)
        log = self._log(TransactionType.OOD, quantity, now)
        updated = drug.with_log(
            log,
            updated_at=now,
            stock_levels=stock_arithmetic.mark_ood(levels, quantity),
        )
        return updated, log

    def _edit_details(self, drug: Drug, action: EditDetails, now: str) -> tuple[Drug, TransactionLog]:
        name = _require_name("name", action.name)
        presentation = _require_presentation(action.presentation)
        minimum = _require_count("EditDetails", "minimum_stock", action.minimum_stock)
        log = self._log(TransactionType.EDIT, 0, now, notes=DETAILS_UPDATED_NOTE)
        updated = drug.with_log(
            log,
            updated_at=now,
            name=name,
            strength=_clean_text(action.strength),
            presentation=presentation,
            stock_levels=StockLevels.of(
                drug.stock_levels.available,
                drug.stock_levels.ood,
                minimum,
            ),
        )
        return updated, log

    def _admin_edit(self, drug: Drug, action: AdminEdit, now: str) -> tuple[Drug, TransactionLog]:
        name = _require_name("name", action.name)
        presentation = _require_presentation(action.presentation)
        strength = _clean_text(action.strength)
        available = _require_count("AdminEdit", "available", action.available)
        ood = _require_count("AdminEdit", "ood", action.ood)
        minimum = _require_count("AdminEdit", "minimum_stock", action.minimum_stock)

        before = drug.stock_levels
        candidates = (
            ("Available", before.available, available),
            ("OOD", before.ood, ood),
            ("Name", drug.name, name),
            ("Strength", drug.strength, strength),
            ("Presentation", drug.presentation.value, presentation.value),
            ("Min stock", before.minimum_stock, minimum),
        )
        changes = [f"{label}: {old} → {new}" for label, old, new in candidates if old != new]
        notes = f"Admin edit: {', '.join(changes) or 'No changes'}"

        log = self._log(
            TransactionType.EDIT,
            0,
            now,
            notes=notes,
            previous_value=before.available,
            new_value=available,
        )
        updated = drug.with_log(
            log,
            updated_at=now,
            name=name,
            strength=strength,
            presentation=presentation,
            stock_levels=StockLevels.of(available, ood, minimum),
        )
        return updated, log

    # ------------------------------------------------------------------
    # Collection-level actions
    # ------------------------------------------------------------------

    def add_drug(self, collection: DrugCollection, new_drug: NewDrug) -> EngineResult:
        """Add a drug with zeroed stock and an empty log."""
        name = _require_name("name", new_drug.name)
        presentation = _require_presentation(new_drug.presentation)
        minimum = _require_count("NewDrug", "minimum_stock", new_drug.minimum_stock)
        now = self._clock.timestamp()
        drug = Drug(
            id=self._new_id(),
            name=name,
            strength=_clean_text(new_drug.strength),
            presentation=presentation,
            stock_levels=StockLevels.empty(minimum),
            created_at=now,
            updated_at=now,
        )
        logger.info("drug_added", extra={"new_drug_id": drug.id, "drug_name": drug.name})
        return EngineResult(collection=collection.add(drug), drug=drug, log=None)

    def delete_drug(self, collection: DrugCollection, drug_id: str) -> DrugCollection:
        updated = collection.remove(drug_id)
        logger.info("drug_deleted", extra={"drug_id": drug_id})
        return updated

    def clear_all_logs(self, collection: DrugCollection) -> DrugCollection:
        """Empty every drug's log. Stock levels are kept."""
        now = self._clock.timestamp()
        cleared = sum(len(drug.logs) for drug in collection)
        updated = collection.map(lambda drug: replace(drug, logs=(), updated_at=now))
        logger.warning("logs_cleared", extra={"drug_count": len(collection), "log_count": cleared})
        return updated
