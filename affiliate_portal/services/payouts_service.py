# -*- coding: utf-8 -*-
# affiliate_portal/services/payouts_service.py
# =============================================================================
# Purpose:
#   Payouts of a brand to its affiliates: creation, status transitions,
#   keyset listing.
#
# Invariants:
#   • The status graph lives in AttributionLinkModel.transition_payout().
#   • The database write is a compare-and-swap on the status the decision was
#     made against; a concurrent writer that got there first turns this call
#     into TransitionConflictError (never last-writer-wins).
#
# Transactions:
#   • Functions flush/execute and never commit.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.codes_core import default_generator
from affiliate_portal.core.errors_core import NotFoundError, TransitionConflictError, ValidationError
from affiliate_portal.core.logging_core import get_logger, set_request_context
from affiliate_portal.core.utils_core import Clock, SystemClock
from affiliate_portal.crud.brands_crud import BrandsCRUD
from affiliate_portal.crud.payouts_crud import PayoutsCRUD
from affiliate_portal.models import Payout
from affiliate_portal.services.attribution_model import AttributionLinkModel, PayoutStatus
from affiliate_portal.services.codes_service import assign_code, placeholder_code

logger = get_logger(__name__)


@dataclass
class PayoutPage:
    items: List[Payout]
    next_before_id: Optional[int]


async def create_payout(
    db: AsyncSession,
    *,
    brand_id: int,
    affiliate_id: int,
    amount: Any,
    notes: Optional[str] = None,
    clock: Optional[Clock] = None,
) -> Payout:
    model = AttributionLinkModel(clock=clock or SystemClock(), codes=default_generator())
    brands = BrandsCRUD(db)

    brand = await brands.get_brand(brand_id)
    if brand is None:
        raise NotFoundError("Brand not found.", details={"brand_id": brand_id})
    affiliate = await brands.get_affiliate(affiliate_id)
    if affiliate is None:
        raise NotFoundError("Affiliate not found.", details={"affiliate_id": affiliate_id})
    set_request_context(brand_id=brand.id)

    checked = model.check_payout(brand, affiliate, amount)
    if isinstance(checked, ValidationError):
        raise checked

    now = model.clock.now()
    payout = await PayoutsCRUD(db).add(
        code=placeholder_code(),
        brand_id=brand.id,
        affiliate_id=affiliate.id,
        amount=checked,
        status=PayoutStatus.PENDING.value,
        notes=notes,
        created_at=now,
        updated_at=now,
    )
    record = model.create_payout(brand, affiliate, checked, identity=payout.id, notes=notes, created_at=now).unwrap()
    await assign_code(db, payout, now, codes=model.codes)
    if payout.code != record.code:
        logger.info("Payout code resalted", extra={"first_candidate": record.code, "payout_code": payout.code})

    logger.info("Payout created", extra={"payout_code": payout.code, "amount": str(checked)})
    return payout


async def transition_payout(
    db: AsyncSession,
    *,
    payout_id: int,
    next_status: str,
    context: Optional[Mapping[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> Payout:
    """
    Moves payout `payout_id` to `next_status`.

    Raises NotFoundError, ValidationError, InvalidTransitionError,
    MissingRequiredFieldError or TransitionConflictError.
    """
    model = AttributionLinkModel(clock=clock or SystemClock())
    crud = PayoutsCRUD(db)

    payout = await crud.get(payout_id)
    if payout is None:
        raise NotFoundError("Payout not found.", details={"payout_id": payout_id})
    set_request_context(brand_id=payout.brand_id)

    expected = payout.status
    record = model.transition_payout(payout, next_status, context).unwrap()

    won = await crud.compare_and_set_status(
        payout.id,
        expected=expected,
        status=record.status,
        updated_at=record.updated_at,  # type: ignore[arg-type]
        transaction_id=record.transaction_id,
        decline_reason=record.decline_reason,
        notes=record.notes,
    )
    if not won:
        logger.warning("Payout transition lost the race", extra={"payout_id": payout.id, "expected": expected})
        raise TransitionConflictError(payout.id, expected)

    await db.refresh(payout)
    logger.info(
        "Payout transitioned",
        extra={"payout_id": payout.id, "from": expected, "to": record.status},
    )
    return payout


async def list_payouts(
    db: AsyncSession,
    *,
    brand_id: int,
    status: Optional[str] = None,
    affiliate_id: Optional[int] = None,
    limit: int = 50,
    before_id: Optional[int] = None,
) -> PayoutPage:
    """Newest first; next_before_id feeds the following page (None at the end)."""
    if status is not None:
        try:
            status = PayoutStatus(status).value
        except ValueError:
            raise ValidationError("Unknown payout status.", field="status") from None

    rows = await PayoutsCRUD(db).list_by_brand_cursor(
        brand_id,
        limit=limit + 1,
        before_id=before_id,
        status=status,
        affiliate_id=affiliate_id,
    )
    items = rows[:limit]
    next_before_id = items[-1].id if len(rows) > limit and items else None
    return PayoutPage(items=items, next_before_id=next_before_id)


__all__ = ["PayoutPage", "create_payout", "transition_payout", "list_payouts"]
