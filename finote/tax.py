# finote/tax.py
"""Progressive income tax estimates.

Brackets are applied to the taxable base (gross income minus an optional
personal allowance). The inverse direction has no closed form once an
allowance is involved, so it is approximated by fixed-point iteration on
the forward calculation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from finote.core.models import BracketBreakdown, Currency, TaxBracket, TaxCalculationResult
from finote.utils import parse_amount

logger = logging.getLogger(__name__)

INVERSE_TOLERANCE = 1.0
INVERSE_MAX_ITERATIONS = 10


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Raise ValueError unless the table is ordered, contiguous and open-ended."""
    if not brackets:
        raise ValueError("A tax schedule needs at least one bracket.")
    for index, bracket in enumerate(brackets):
        if bracket.rate < 0:
            raise ValueError(f"Negative rate in bracket {index}: {bracket}")
        is_last = index == len(brackets) - 1
        if bracket.upper is None:
            if not is_last:
                raise ValueError(f"Only the last bracket may be unbounded: {bracket}")
        elif bracket.upper <= bracket.lower:
            raise ValueError(f"Bracket bounds are not ascending: {bracket}")
        if index and bracket.lower != brackets[index - 1].upper:
            raise ValueError(
                f"Bracket {index} starts at {bracket.lower}, "
                f"expected {brackets[index - 1].upper}"
            )
    if brackets[-1].upper is not None:
        raise ValueError("The last bracket must have no upper bound.")


@dataclass
class TaxSchedule:
    currency: str
    brackets: List[TaxBracket]
    allowance: float = 0.0
    name: str = ""

    def __post_init__(self) -> None:
        validate_brackets(self.brackets)
        if self.allowance < 0:
            raise ValueError(f"Allowance must not be negative: {self.allowance}")

    @classmethod
    def from_dict(cls, currency: str, data: Mapping) -> "TaxSchedule":
        """Build a schedule from configuration data.

        Expected shape::

            allowance: 60000
            brackets:
              - {lower: 0, upper: 150000, rate: 0}
              - {lower: 150000, upper: null, rate: 5}
        """
        try:
            rows = data.get("brackets") or []
            brackets = [
                TaxBracket(
                    lower=float(row["lower"]),
                    upper=None if row.get("upper") is None else float(row["upper"]),
                    rate=float(row["rate"]),
                    label=row.get("label", ""),
                )
                for row in rows
            ]
            allowance = float(data.get("allowance", 0) or 0)
            name = data.get("name", currency)
        except (AttributeError, KeyError, TypeError) as e:
            raise ValueError(f"Malformed tax schedule for {currency}: {e!r}")
        return cls(currency=currency, brackets=brackets, allowance=allowance, name=name)


THB_SCHEDULE = TaxSchedule(
    currency=Currency.THB.value,
    name="Thailand personal income tax",
    allowance=60000.0,
    brackets=[
        TaxBracket(0, 150000, 0, "0% - Up to 150,000 THB"),
        TaxBracket(150000, 300000, 5, "5% - 150,001 to 300,000 THB"),
        TaxBracket(300000, 500000, 10, "10% - 300,001 to 500,000 THB"),
        TaxBracket(500000, 750000, 15, "15% - 500,001 to 750,000 THB"),
        TaxBracket(750000, 1000000, 20, "20% - 750,001 to 1,000,000 THB"),
        TaxBracket(1000000, 2000000, 25, "25% - 1,000,001 to 2,000,000 THB"),
        TaxBracket(2000000, 5000000, 30, "30% - 2,000,001 to 5,000,000 THB"),
        TaxBracket(5000000, None, 35, "35% - Over 5,000,000 THB"),
    ],
)

USD_SCHEDULE = TaxSchedule(
    currency=Currency.USD.value,
    name="US federal income tax (single)",
    brackets=[
        TaxBracket(0, 11600, 10, "10% - Up to $11,600"),
        TaxBracket(11600, 47150, 12, "12% - $11,601 to $47,150"),
        TaxBracket(47150, 100525, 22, "22% - $47,151 to $100,525"),
        TaxBracket(100525, 191950, 24, "24% - $100,526 to $191,950"),
        TaxBracket(191950, 243725, 32, "32% - $191,951 to $243,725"),
        TaxBracket(243725, 609350, 35, "35% - $243,726 to $609,350"),
        TaxBracket(609350, None, 37, "37% - Over $609,350"),
    ],
)

SCHEDULES: Dict[str, TaxSchedule] = {
    THB_SCHEDULE.currency: THB_SCHEDULE,
    USD_SCHEDULE.currency: USD_SCHEDULE,
}


def get_schedule(currency: str, overrides: Optional[Mapping] = None) -> TaxSchedule:
    """Return the schedule for a currency, preferring configured overrides."""
    code = str(currency).upper()
    if overrides is not None and not isinstance(overrides, Mapping):
        raise ValueError("tax_schedules must be a mapping of currency to schedule.")
    configured = {str(key).upper(): value for key, value in (overrides or {}).items()}
    if code in configured:
        return TaxSchedule.from_dict(code, configured[code])
    if code not in SCHEDULES:
        raise KeyError(f"No tax schedule for currency '{currency}'.")
    return SCHEDULES[code]


def _forward(gross: float, brackets: Sequence[TaxBracket], allowance: float) -> TaxCalculationResult:
    remaining = max(0.0, gross - allowance)
    total_tax = 0.0
    breakdown = []
    for bracket in brackets:
        if remaining <= 0:
            break
        if bracket.upper is None:
            taxable = remaining
        else:
            taxable = min(remaining, bracket.upper - bracket.lower)
        if taxable <= 0:
            continue
        tax = taxable * bracket.rate / 100
        total_tax += tax
        breakdown.append(BracketBreakdown(bracket=bracket, taxable_amount=taxable, tax_amount=tax))
        remaining -= taxable

    effective_rate = total_tax / gross * 100 if gross > 0 else 0.0
    return TaxCalculationResult(
        gross_income=gross,
        net_income=gross - total_tax,
        total_tax=total_tax,
        effective_rate=effective_rate,
        allowance=allowance,
        brackets=breakdown,
    )


def calculate_tax_forward(
    gross_income, brackets: Sequence[TaxBracket], allowance: float = 0.0
) -> Optional[TaxCalculationResult]:
    """Tax owed on a gross income, or None when the income is not usable."""
    gross = parse_amount(gross_income)
    if gross is None or gross <= 0:
        return None
    return _forward(gross, brackets, allowance or 0.0)


def calculate_tax_inverse(
    target_net_income, brackets: Sequence[TaxBracket], allowance: float = 0.0
) -> Optional[TaxCalculationResult]:
    """
    Estimate the gross income that leaves ``target_net_income`` after tax.

    Iterates at most INVERSE_MAX_ITERATIONS times and returns the last
    estimate whether or not it came within INVERSE_TOLERANCE of the target.
    """
    target = parse_amount(target_net_income)
    if target is None or target <= 0:
        return None
    allowance = allowance or 0.0

    estimate = target
    iterations = 0
    converged = False
    while iterations < INVERSE_MAX_ITERATIONS:
        computed_net = _forward(estimate, brackets, allowance).net_income
        if abs(computed_net - target) < INVERSE_TOLERANCE:
            converged = True
            break
        estimate += target - computed_net
        iterations += 1

    logger.debug(
        "Inverse tax estimate %.2f after %d iteration(s), converged=%s",
        estimate, iterations, converged,
    )
    return _forward(estimate, brackets, allowance)


def calculate_tax(income, schedule: TaxSchedule, pre_tax: bool = True) -> Optional[TaxCalculationResult]:
    if pre_tax:
        return calculate_tax_forward(income, schedule.brackets, schedule.allowance)
    return calculate_tax_inverse(income, schedule.brackets, schedule.allowance)
