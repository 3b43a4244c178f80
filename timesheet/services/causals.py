from __future__ import annotations

import enum
from dataclasses import dataclass

from timesheet.models import Causal


class VoucherRule(str, enum.Enum):
    NEVER = "NEVER"
    # flat time class or long alternated day
    FULL_DAY = "FULL_DAY"
    # end of shift past the flat threshold (full days) or start+565 (short days)
    SHIFT_THRESHOLD = "SHIFT_THRESHOLD"


class PresenceWeight(str, enum.Enum):
    NONE = "NONE"
    FULL = "FULL"
    # one day minus the permit share of the target
    MINUS_PERMIT = "MINUS_PERMIT"


@dataclass(frozen=True, slots=True)
class CausalRule:
    causal: Causal
    label: str
    clocked: bool
    synthetic: bool
    presence: PresenceWeight
    voucher: VoucherRule
    # attendance grid code on working days; weekends and holidays stay blank
    report_code: str
    annual_cap: int | None = None
    quota_label: str | None = None
    monthly_cap: int | None = None


CAUSAL_RULES: dict[Causal, CausalRule] = {
    Causal.UFFICIO: CausalRule(
        causal=Causal.UFFICIO,
        label="Ufficio",
        clocked=True,
        synthetic=False,
        presence=PresenceWeight.FULL,
        voucher=VoucherRule.SHIFT_THRESHOLD,
        report_code="P",
    ),
    Causal.SMART: CausalRule(
        causal=Causal.SMART,
        label="Smart",
        clocked=True,
        synthetic=False,
        presence=PresenceWeight.FULL,
        voucher=VoucherRule.FULL_DAY,
        report_code="SW",
    ),
    Causal.FERIE: CausalRule(
        causal=Causal.FERIE,
        label="Ferie",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.FULL,
        voucher=VoucherRule.NEVER,
        report_code="AG",
    ),
    Causal.MALATTIA: CausalRule(
        causal=Causal.MALATTIA,
        label="Malattia",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
    ),
    Causal.L104: CausalRule(
        causal=Causal.L104,
        label="Legge 104",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
        monthly_cap=3,
    ),
    Causal.ART25: CausalRule(
        causal=Causal.ART25,
        label="Art.25",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
        annual_cap=3,
        quota_label="Art. 25",
    ),
    Causal.ART26: CausalRule(
        causal=Causal.ART26,
        label="Art.26",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
        annual_cap=3,
        quota_label="Art. 26",
    ),
    Causal.FS: CausalRule(
        causal=Causal.FS,
        label="Fest. Soppr.",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.FULL,
        voucher=VoucherRule.NEVER,
        report_code="AG",
        annual_cap=4,
        quota_label="Festività Soppresse",
    ),
    Causal.PSTU: CausalRule(
        causal=Causal.PSTU,
        label="PSTU",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.MINUS_PERMIT,
        voucher=VoucherRule.FULL_DAY,
        report_code="AG",
    ),
    Causal.PESA: CausalRule(
        causal=Causal.PESA,
        label="PESA",
        clocked=False,
        synthetic=False,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
        annual_cap=8,
        quota_label="PESA",
    ),
    Causal.WEEKEND: CausalRule(
        causal=Causal.WEEKEND,
        label="Weekend",
        clocked=False,
        synthetic=True,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
    ),
    Causal.FESTA: CausalRule(
        causal=Causal.FESTA,
        label="Festa",
        clocked=False,
        synthetic=True,
        presence=PresenceWeight.NONE,
        voucher=VoucherRule.NEVER,
        report_code="AG",
    ),
}

_uncovered = sorted(member.value for member in Causal if member not in CAUSAL_RULES)
if _uncovered:
    raise RuntimeError(f"Causal rules missing for: {', '.join(_uncovered)}")


def causal_rule(causal: Causal | str) -> CausalRule:
    return CAUSAL_RULES[Causal(causal)]


def annually_capped_causals() -> list[CausalRule]:
    return [rule for rule in CAUSAL_RULES.values() if rule.annual_cap is not None]
