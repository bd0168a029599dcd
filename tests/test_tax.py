import math

import pytest

from finote.core.models import TaxBracket
from finote.tax import (
    THB_SCHEDULE,
    USD_SCHEDULE,
    TaxSchedule,
    calculate_tax,
    calculate_tax_forward,
    calculate_tax_inverse,
    get_schedule,
    validate_brackets,
)


def test_thb_example_with_personal_allowance():
    result = calculate_tax_forward(400000, THB_SCHEDULE.brackets, THB_SCHEDULE.allowance)

    assert result.taxable_income == 340000
    assert [b.taxable_amount for b in result.brackets] == [150000, 150000, 40000]
    assert [b.tax_amount for b in result.brackets] == [0, 7500, 4000]
    assert result.total_tax == 11500
    assert result.net_income == 388500
    assert result.effective_rate == pytest.approx(2.875)


def test_usd_schedule_taxes_full_gross():
    result = calculate_tax_forward(50000, USD_SCHEDULE.brackets, USD_SCHEDULE.allowance)

    assert [b.bracket.rate for b in result.brackets] == [10, 12, 22]
    assert result.total_tax == pytest.approx(1160 + 4266 + 627)
    assert result.net_income == pytest.approx(50000 - 6053)


@pytest.mark.parametrize("schedule", [THB_SCHEDULE, USD_SCHEDULE])
@pytest.mark.parametrize("gross", [1, 59999, 60001, 150000, 612345.67, 2500000, 7300000])
def test_breakdown_covers_taxable_income(schedule, gross):
    result = calculate_tax_forward(gross, schedule.brackets, schedule.allowance)

    assert sum(b.taxable_amount for b in result.brackets) == pytest.approx(
        max(0, gross - schedule.allowance)
    )
    assert all(b.tax_amount >= 0 for b in result.brackets)
    assert result.total_tax >= 0
    assert result.net_income <= result.gross_income


def test_allowance_larger_than_income_means_no_tax():
    result = calculate_tax_forward(50000, THB_SCHEDULE.brackets, THB_SCHEDULE.allowance)

    assert result.total_tax == 0
    assert result.brackets == []
    assert result.net_income == 50000
    assert result.effective_rate == 0


@pytest.mark.parametrize("income", [0, -5, "abc", None, float("nan"), math.inf])
def test_unusable_income_gives_no_result(income):
    assert calculate_tax_forward(income, USD_SCHEDULE.brackets) is None
    assert calculate_tax_inverse(income, USD_SCHEDULE.brackets) is None


def test_numeric_strings_are_accepted():
    result = calculate_tax_forward("400000", THB_SCHEDULE.brackets, 60000)
    assert result.total_tax == 11500


@pytest.mark.parametrize(
    "schedule, gross",
    [
        (THB_SCHEDULE, 400000),
        (THB_SCHEDULE, 800000),
        (USD_SCHEDULE, 50000),
        (USD_SCHEDULE, 120000),
    ],
)
def test_inverse_recovers_gross(schedule, gross):
    net = calculate_tax_forward(gross, schedule.brackets, schedule.allowance).net_income
    result = calculate_tax_inverse(net, schedule.brackets, schedule.allowance)

    assert result.gross_income == pytest.approx(gross, abs=2)
    assert result.net_income == pytest.approx(net, abs=1)


def test_inverse_returns_last_estimate_when_not_converged():
    brackets = [TaxBracket(0, None, 90)]
    result = calculate_tax_inverse(100, brackets)

    # x -> 0.9 x + 100 from x = 100, ten steps
    assert result.gross_income == pytest.approx(1000 - 900 * 0.9 ** 10)
    assert abs(result.net_income - 100) > 1


def test_calculate_tax_dispatches_on_direction():
    forward = calculate_tax(400000, THB_SCHEDULE)
    inverse = calculate_tax(forward.net_income, THB_SCHEDULE, pre_tax=False)

    assert forward.gross_income == 400000
    assert inverse.gross_income == pytest.approx(400000, abs=2)


@pytest.mark.parametrize(
    "brackets, message",
    [
        ([], "at least one"),
        ([TaxBracket(0, 100, 10), TaxBracket(150, None, 20)], "starts at"),
        ([TaxBracket(0, None, 10), TaxBracket(100, None, 20)], "Only the last"),
        ([TaxBracket(0, 100, 10), TaxBracket(100, 200, 20)], "no upper bound"),
        ([TaxBracket(100, 50, 10), TaxBracket(50, None, 20)], "ascending"),
        ([TaxBracket(0, None, -1)], "Negative"),
    ],
)
def test_invalid_bracket_tables(brackets, message):
    with pytest.raises(ValueError, match=message):
        validate_brackets(brackets)


def test_schedule_validates_on_construction():
    with pytest.raises(ValueError):
        TaxSchedule(currency="XXX", brackets=[TaxBracket(0, 100, 10)])


def test_get_schedule_prefers_configured_tables():
    assert get_schedule("thb") is THB_SCHEDULE

    overrides = {
        "EUR": {
            "allowance": 1000,
            "brackets": [
                {"lower": 0, "upper": 10000, "rate": 0},
                {"lower": 10000, "upper": None, "rate": 20},
            ],
        }
    }
    eur = get_schedule("EUR", overrides)
    assert eur.allowance == 1000
    result = calculate_tax(21000, eur)
    assert result.total_tax == pytest.approx(2000)

    with pytest.raises(KeyError):
        get_schedule("JPY")


def test_configured_keys_are_case_insensitive():
    overrides = {"eur": {"brackets": [{"lower": 0, "upper": None, "rate": 10}]}}
    assert get_schedule("EUR", overrides).brackets[0].rate == 10
    assert get_schedule("eur", overrides).currency == "EUR"


@pytest.mark.parametrize(
    "overrides",
    [
        {"EUR": ["not", "a", "mapping"]},
        {"EUR": {"brackets": [{"upper": None, "rate": 10}]}},
        {"EUR": {"brackets": [{"lower": 0, "upper": None, "rate": None}]}},
        ["EUR"],
    ],
)
def test_malformed_configured_schedules_raise_value_error(overrides):
    with pytest.raises(ValueError):
        get_schedule("EUR", overrides)
