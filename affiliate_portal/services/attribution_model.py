# -*- coding: utf-8 -*-
# affiliate_portal/services/attribution_model.py
# =============================================================================
# Purpose:
#   Storage-agnostic attribution graph:
#     brand ─┬─ affiliate / referrer / campaign
#            └─ link → click → conversion;  brand + affiliate → payout
#   and the operations a persistence-backed service builds on:
#     create_link, record_click, record_conversion, transition_payout,
#     create_payout.
#
# Invariants:
#   • A link belongs to one brand; every referenced affiliate, referrer and
#     campaign belongs to the same brand.
#   • Link kind decides the party: affiliate links carry an affiliate and no
#     referrer, referral links carry a referrer and no affiliate.
#   • A click converts at most once.
#   • Payout status graph:
#         pending → processing → paid
#            └──────────┴──────→ declined
#     paid needs a transaction_id, declined needs a decline_reason.
#
# Failure semantics:
#   • Rule violations come back inside Outcome.error (never raised), so the
#     caller can render them per field.
#   • Code generation failures are raised (CodeGenerationError).
#
# Out of scope:
#   • No I/O and no shared mutable state; the clock and the code generator
#     are injected.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Generic,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from affiliate_portal.core.codes_core import CodeGenerator
from affiliate_portal.core.errors_core import (
    AFPError,
    DuplicateConversionError,
    InvalidTransitionError,
    MissingRequiredFieldError,
    ValidationError,
)
from affiliate_portal.core.utils_core import (
    MONEY_MAX,
    ZERO_MONEY,
    Clock,
    SystemClock,
    blank,
    quantize_money,
)

T = TypeVar("T")
R = TypeVar("R", bound="_Record")


# -----------------------------------------------------------------------------
# Vocabularies
# -----------------------------------------------------------------------------
class LinkKind(str, Enum):
    AFFILIATE = "affiliate"
    REFERRAL = "referral"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    DECLINED = "declined"


class CommissionRateKind(str, Enum):
    FIXED = "fixed"
    PERCENT = "percent"


class ConversionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


PAYOUT_TRANSITIONS: Dict[PayoutStatus, FrozenSet[PayoutStatus]] = {
    PayoutStatus.PENDING: frozenset({PayoutStatus.PROCESSING, PayoutStatus.DECLINED}),
    PayoutStatus.PROCESSING: frozenset({PayoutStatus.PAID, PayoutStatus.DECLINED}),
    PayoutStatus.PAID: frozenset(),
    PayoutStatus.DECLINED: frozenset(),
}

TERMINAL_PAYOUT_STATUSES: FrozenSet[PayoutStatus] = frozenset(
    status for status, targets in PAYOUT_TRANSITIONS.items() if not targets
)


def allowed_transitions(status: Union[str, PayoutStatus]) -> FrozenSet[PayoutStatus]:
    """Statuses reachable in one step; unknown statuses reach nothing."""
    try:
        return PAYOUT_TRANSITIONS[PayoutStatus(status)]
    except ValueError:
        return frozenset()


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------
class _Record:
    """Copy-constructor shared by the record dataclasses."""

    # record field -> attribute name on the source object
    _aliases: ClassVar[Dict[str, str]] = {}

    @classmethod
    def of(cls: type[R], obj: Any) -> R:
        """Builds the record from any object exposing the same attributes (ORM rows included)."""
        values: Dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            source = cls._aliases.get(f.name, f.name)
            if hasattr(obj, source):
                values[f.name] = getattr(obj, source)
        return cls(**values)


@dataclass
class BrandRecord(_Record):
    id: Optional[int]
    code: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    tracking_domain: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass
class AffiliateRecord(_Record):
    id: Optional[int]
    brand_id: Optional[int]
    code: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class ReferrerRecord(_Record):
    id: Optional[int]
    brand_id: Optional[int]
    code: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    external_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass
class CampaignRecord(_Record):
    id: Optional[int]
    brand_id: Optional[int]
    code: Optional[str] = None
    title: Optional[str] = None
    is_active: bool = True
    settings: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass
class CommissionRateRecord(_Record):
    id: Optional[int]
    campaign_id: Optional[int]
    kind: str
    value: Decimal
    code: Optional[str] = None
    title: Optional[str] = None


@dataclass
class LinkRecord(_Record):
    id: Optional[int]
    brand_id: int
    kind: str
    code: Optional[str] = None
    affiliate_id: Optional[int] = None
    referrer_id: Optional[int] = None
    campaign_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class ClickRecord(_Record):
    id: Optional[int]
    link_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    sub_ids: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass
class ConversionRecord(_Record):
    _aliases: ClassVar[Dict[str, str]] = {"metadata": "meta"}

    id: Optional[int]
    click_id: int
    brand_id: int
    sale_amount: Optional[Decimal] = None
    commission_amount: Decimal = ZERO_MONEY
    status: str = ConversionStatus.PENDING.value
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass
class PayoutRecord(_Record):
    id: Optional[int]
    brand_id: int
    affiliate_id: int
    amount: Decimal
    status: str = PayoutStatus.PENDING.value
    code: Optional[str] = None
    notes: Optional[str] = None
    transaction_id: Optional[str] = None
    decline_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -----------------------------------------------------------------------------
# Outcome
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or a domain error."""

    value: Optional[T] = None
    error: Optional[AFPError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """The value, or raises the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AFPError) -> "Outcome[T]":
        return cls(error=error)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _context_value(context: Mapping[str, Any], name: str) -> Optional[str]:
    """Reads snake_case or camelCase keys ("transaction_id" / "transactionId")."""
    head, *rest = name.split("_")
    camel = head + "".join(part.title() for part in rest)
    for key in (name, camel):
        value = context.get(key)
        if not blank(value):
            return str(value)
    return None


def _money(value: Any, field_name: str, *, positive: bool = False) -> Union[Decimal, ValidationError]:
    try:
        amount = quantize_money(value)
    except ValueError:
        return ValidationError(f"'{field_name}' must be a number.", field=field_name)
    if positive and amount <= 0:
        return ValidationError(f"'{field_name}' must be greater than zero.", field=field_name)
    if amount < 0:
        return ValidationError(f"'{field_name}' must not be negative.", field=field_name)
    if amount > MONEY_MAX:
        return ValidationError(f"'{field_name}' must not exceed {MONEY_MAX}.", field=field_name)
    return amount


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------
class AttributionLinkModel:
    """
    Validation and record construction for the attribution graph.

        model = AttributionLinkModel(clock=FrozenClock(t0))
        outcome = model.create_link(brand, "affiliate", affiliate, identity=42)
        if not outcome.ok:
            render(outcome.error.to_payload())
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        codes: Optional[CodeGenerator] = None,
    ) -> None:
        self.clock: Clock = clock or SystemClock()
        self.codes = codes or CodeGenerator()

    # ------------------------------------------------------------------ links
    def check_link(
        self,
        brand: Any,
        kind: Union[str, LinkKind],
        affiliate: Any = None,
        referrer: Any = None,
        campaign: Any = None,
    ) -> Optional[ValidationError]:
        """First rule the link breaks, or None."""
        if brand is None:
            return ValidationError("A link needs a brand.", field="brand_id")
        try:
            link_kind = LinkKind(kind)
        except ValueError:
            return ValidationError(
                "Link kind must be 'affiliate' or 'referral'.",
                field="kind",
                details={"kind": str(kind)},
            )

        if affiliate is not None and referrer is not None:
            return ValidationError(
                "A link references an affiliate or a referrer, not both.",
                field="referrer_id",
            )
        if link_kind is LinkKind.AFFILIATE:
            if referrer is not None:
                return ValidationError("Affiliate links cannot reference a referrer.", field="referrer_id")
            if affiliate is None:
                return ValidationError("Affiliate links need an affiliate.", field="affiliate_id")
        else:
            if affiliate is not None:
                return ValidationError("Referral links cannot reference an affiliate.", field="affiliate_id")
            if referrer is None:
                return ValidationError("Referral links need a referrer.", field="referrer_id")

        for field_name, ref in (
            ("affiliate_id", affiliate),
            ("referrer_id", referrer),
            ("campaign_id", campaign),
        ):
            if ref is not None and ref.brand_id != brand.id:
                return ValidationError(
                    "Referenced entity belongs to another brand.",
                    field=field_name,
                    details={"brand_id": brand.id, "owner_brand_id": ref.brand_id},
                )

        if referrer is not None and not getattr(referrer, "is_active", True):
            return ValidationError("Referrer is inactive.", field="referrer_id")
        if campaign is not None and not getattr(campaign, "is_active", True):
            return ValidationError("Campaign is inactive.", field="campaign_id")
        return None

    def create_link(
        self,
        brand: Any,
        kind: Union[str, LinkKind],
        affiliate: Any = None,
        referrer: Any = None,
        campaign: Any = None,
        *,
        identity: int,
        created_at: Optional[datetime] = None,
    ) -> Outcome[LinkRecord]:
        """Validated, coded, unpersisted link."""
        error = self.check_link(brand, kind, affiliate, referrer, campaign)
        if error is not None:
            return Outcome.failure(error)

        created_at = created_at or self.clock.now()
        return Outcome.success(
            LinkRecord(
                id=identity,
                brand_id=brand.id,
                kind=LinkKind(kind).value,
                code=self.codes.generate(identity, created_at),
                affiliate_id=affiliate.id if affiliate is not None else None,
                referrer_id=referrer.id if referrer is not None else None,
                campaign_id=campaign.id if campaign is not None else None,
                created_at=created_at,
            )
        )

    # ----------------------------------------------------------------- clicks
    def record_click(
        self,
        link: Any,
        ip: Optional[str],
        user_agent: Optional[str],
        sub_ids: Optional[Mapping[str, Any]] = None,
    ) -> Outcome[ClickRecord]:
        if link is None or getattr(link, "id", None) is None:
            return Outcome.failure(ValidationError("A click needs a stored link.", field="link_id"))
        return Outcome.success(
            ClickRecord(
                id=None,
                link_id=link.id,
                ip_address=ip,
                user_agent=user_agent,
                sub_ids=dict(sub_ids or {}),
                created_at=self.clock.now(),
            )
        )

    # ------------------------------------------------------------ conversions
    def record_conversion(
        self,
        click: Any,
        brand: Any,
        *,
        existing: Any = None,
        link: Any = None,
        sale_amount: Any = None,
        commission_amount: Any = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Outcome[ConversionRecord]:
        """
        Conversion for `click` under `brand`.

        `existing` is the conversion already stored for the click, if any;
        `link` (optional) is the click's link, checked against the brand.
        """
        if click is None or getattr(click, "id", None) is None:
            return Outcome.failure(ValidationError("A conversion needs a stored click.", field="click_id"))
        if brand is None:
            return Outcome.failure(ValidationError("A conversion needs a brand.", field="brand_id"))
        if existing is not None:
            return Outcome.failure(
                DuplicateConversionError(click.id, conversion_id=getattr(existing, "id", None))
            )
        if link is not None:
            if link.id != click.link_id:
                return Outcome.failure(ValidationError("Link does not match the click.", field="link_id"))
            if link.brand_id != brand.id:
                return Outcome.failure(
                    ValidationError("Click belongs to another brand.", field="brand_id")
                )

        sale: Optional[Decimal] = None
        if sale_amount is not None:
            checked = _money(sale_amount, "sale_amount")
            if isinstance(checked, ValidationError):
                return Outcome.failure(checked)
            sale = checked

        commission = ZERO_MONEY
        if commission_amount is not None:
            checked = _money(commission_amount, "commission_amount")
            if isinstance(checked, ValidationError):
                return Outcome.failure(checked)
            commission = checked

        return Outcome.success(
            ConversionRecord(
                id=None,
                click_id=click.id,
                brand_id=brand.id,
                sale_amount=sale,
                commission_amount=commission,
                status=ConversionStatus.PENDING.value,
                metadata=dict(metadata or {}),
                created_at=self.clock.now(),
            )
        )

    # ---------------------------------------------------------------- payouts
    def check_payout(self, brand: Any, affiliate: Any, amount: Any) -> Union[Decimal, ValidationError]:
        """The quantized amount, or the first rule the payout breaks."""
        if brand is None:
            return ValidationError("A payout needs a brand.", field="brand_id")
        if affiliate is None:
            return ValidationError("A payout needs an affiliate.", field="affiliate_id")
        if affiliate.brand_id != brand.id:
            return ValidationError("Affiliate belongs to another brand.", field="affiliate_id")
        return _money(amount, "amount", positive=True)

    def create_payout(
        self,
        brand: Any,
        affiliate: Any,
        amount: Any,
        *,
        identity: int,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Outcome[PayoutRecord]:
        checked = self.check_payout(brand, affiliate, amount)
        if isinstance(checked, ValidationError):
            return Outcome.failure(checked)

        created_at = created_at or self.clock.now()
        return Outcome.success(
            PayoutRecord(
                id=identity,
                brand_id=brand.id,
                affiliate_id=affiliate.id,
                amount=checked,
                status=PayoutStatus.PENDING.value,
                code=self.codes.generate(identity, created_at),
                notes=notes,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    def transition_payout(
        self,
        payout: Any,
        next_status: Union[str, PayoutStatus],
        context: Optional[Mapping[str, Any]] = None,
    ) -> Outcome[PayoutRecord]:
        """
        Moves a payout one step along the status graph.

        context keys: transaction_id (paid), decline_reason (declined), notes.
        """
        try:
            target = PayoutStatus(next_status)
        except ValueError:
            return Outcome.failure(
                ValidationError("Unknown payout status.", field="status", details={"status": str(next_status)})
            )
        current = str(getattr(payout.status, "value", payout.status))
        if target not in allowed_transitions(current):
            return Outcome.failure(InvalidTransitionError(current, target.value))

        ctx = context or {}
        record = PayoutRecord.of(payout)
        changes: Dict[str, Any] = {"status": target.value, "updated_at": self.clock.now()}

        if target is PayoutStatus.PAID:
            transaction_id = _context_value(ctx, "transaction_id")
            if blank(transaction_id):
                return Outcome.failure(MissingRequiredFieldError("transaction_id"))
            changes["transaction_id"] = transaction_id.strip()  # type: ignore[union-attr]
        elif target is PayoutStatus.DECLINED:
            decline_reason = _context_value(ctx, "decline_reason")
            if blank(decline_reason):
                return Outcome.failure(MissingRequiredFieldError("decline_reason"))
            changes["decline_reason"] = decline_reason.strip()  # type: ignore[union-attr]

        notes = _context_value(ctx, "notes")
        if not blank(notes):
            changes["notes"] = notes

        return Outcome.success(replace(record, **changes))


__all__ = [
    "LinkKind",
    "PayoutStatus",
    "CommissionRateKind",
    "ConversionStatus",
    "PAYOUT_TRANSITIONS",
    "TERMINAL_PAYOUT_STATUSES",
    "allowed_transitions",
    "BrandRecord",
    "AffiliateRecord",
    "ReferrerRecord",
    "CampaignRecord",
    "CommissionRateRecord",
    "LinkRecord",
    "ClickRecord",
    "ConversionRecord",
    "PayoutRecord",
    "Outcome",
    "AttributionLinkModel",
]
