# sales/services/fees.py

"""
PLATFORM FEE CALCULATOR

fee_rp     = clamp(total * fee_percentage, min_fee_rp, max_fee_rp)
fee_tokens = fee_rp / token_value_rp

One function for the fee preview, settlement and cancellation paths.
Pure: the schedule is passed in, never read from inside.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from store.services.token_ledger import to_tokens

DEFAULT_FEE_PERCENTAGE = Decimal("0.005")
DEFAULT_MIN_FEE_RP = Decimal("500")
DEFAULT_MAX_FEE_RP = Decimal("2500")
DEFAULT_TOKEN_VALUE_RP = Decimal("1000")


def _decimal(value, default: Decimal) -> Decimal:
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


@dataclass(frozen=True)
class FeeScheduleConfig:
    fee_percentage: Decimal = DEFAULT_FEE_PERCENTAGE
    min_fee_rp: Decimal = DEFAULT_MIN_FEE_RP
    max_fee_rp: Decimal = DEFAULT_MAX_FEE_RP
    token_value_rp: Decimal = DEFAULT_TOKEN_VALUE_RP
    new_pujasera_bonus_tokens: Decimal = Decimal("0")
    new_tenant_bonus_tokens: Decimal = Decimal("0")

    def __post_init__(self):
        if self.token_value_rp <= 0:
            raise ValueError("token_value_rp must be greater than zero")

    @classmethod
    def defaults(cls) -> "FeeScheduleConfig":
        return cls()

    @classmethod
    def from_mapping(cls, data: dict) -> "FeeScheduleConfig":
        data = data or {}
        return cls(
            fee_percentage=_decimal(data.get("feePercentage"), DEFAULT_FEE_PERCENTAGE),
            min_fee_rp=_decimal(data.get("minFeeRp"), DEFAULT_MIN_FEE_RP),
            max_fee_rp=_decimal(data.get("maxFeeRp"), DEFAULT_MAX_FEE_RP),
            token_value_rp=_decimal(data.get("tokenValueRp"), DEFAULT_TOKEN_VALUE_RP),
            new_pujasera_bonus_tokens=_decimal(data.get("newPujaseraBonusTokens"), Decimal("0")),
            new_tenant_bonus_tokens=_decimal(data.get("newTenantBonusTokens"), Decimal("0")),
        )

    @classmethod
    def from_model(cls, schedule=None) -> "FeeScheduleConfig":
        """Snapshot the stored schedule (created with defaults on first read)."""
        if schedule is None:
            from store.models import FeeSchedule

            schedule = FeeSchedule.load()
        return cls(
            fee_percentage=_decimal(schedule.fee_percentage, DEFAULT_FEE_PERCENTAGE),
            min_fee_rp=_decimal(schedule.min_fee_rp, DEFAULT_MIN_FEE_RP),
            max_fee_rp=_decimal(schedule.max_fee_rp, DEFAULT_MAX_FEE_RP),
            token_value_rp=_decimal(schedule.token_value_rp, DEFAULT_TOKEN_VALUE_RP),
            new_pujasera_bonus_tokens=_decimal(schedule.new_pujasera_bonus_tokens, Decimal("0")),
            new_tenant_bonus_tokens=_decimal(schedule.new_tenant_bonus_tokens, Decimal("0")),
        )


def compute_fee_rp(total_amount, schedule: FeeScheduleConfig) -> Decimal:
    total = _decimal(total_amount, Decimal("0"))
    fee_from_percentage = total * schedule.fee_percentage
    fee_capped_at_min = max(fee_from_percentage, schedule.min_fee_rp)
    return min(fee_capped_at_min, schedule.max_fee_rp)


def compute_fee(total_amount, schedule: FeeScheduleConfig | None = None) -> Decimal:
    """Platform fee in tokens for an order total (rupiah)."""
    schedule = schedule or FeeScheduleConfig.defaults()
    return to_tokens(compute_fee_rp(total_amount, schedule) / schedule.token_value_rp)


def format_rupiah(value) -> str:
    """Whole rupiah with id-ID grouping: 1500000 -> "Rp 1.500.000"."""
    amount = _decimal(value, Decimal("0")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return "Rp " + f"{amount:,f}".replace(",", ".")
