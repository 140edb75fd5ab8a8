"""
Tests for the repayment capacity (RPC) calculator.

1. Reference calculation from the interview example
2. Negative SDC never produces a negative installment
3. Defaults for missing inputs
4. Capacity score bands
5. Trends against a previous assessment
"""
import pytest

from microcredit.models.assessment import RPCResult
from microcredit.services.assessment.rpc_calculator import (
    calculate_capacity_score,
    calculate_rpc,
    calculate_trends,
    format_rupiah,
)


REFERENCE_INPUTS = {
    "daily_revenue": 500_000,
    "active_days": 25,
    "cogs_percentage": 60,
    "household_expenses": 2_000_000,
    "existing_obligations": 500_000,
}


def rpc_with_sdc(sdc: float) -> RPCResult:
    return RPCResult(
        monthly_income=0,
        cogs=0,
        gross_profit=0,
        monthly_expenses=0,
        household_expenses=0,
        existing_obligations=0,
        sustainable_disposable_cash=sdc,
        max_installment=0,
    )


class TestCalculateRPC:

    def test_reference_calculation(self):
        """500rb/day, 25 days, 60% COGS, 2jt household, 500rb obligations."""
        rpc = calculate_rpc(REFERENCE_INPUTS)

        assert rpc.monthly_income == 12_500_000
        assert rpc.cogs == 7_500_000
        assert rpc.gross_profit == 5_000_000
        assert rpc.monthly_expenses == 10_000_000
        assert rpc.sustainable_disposable_cash == 2_500_000
        assert rpc.max_installment == 750_000

    def test_negative_sdc_gives_zero_installment(self):
        rpc = calculate_rpc({
            "daily_revenue": 100_000,
            "active_days": 20,
            "cogs_percentage": 70,
            "household_expenses": 3_000_000,
            "existing_obligations": 1_000_000,
        })

        assert rpc.sustainable_disposable_cash < 0
        assert rpc.max_installment == 0

    def test_defaults_for_missing_fields(self):
        rpc = calculate_rpc({"daily_revenue": 200_000})

        # 25 days, 50% COGS, 1.5jt household, no obligations
        assert rpc.monthly_income == 5_000_000
        assert rpc.cogs == 2_500_000
        assert rpc.household_expenses == 1_500_000
        assert rpc.existing_obligations == 0
        assert rpc.sustainable_disposable_cash == 1_000_000
        assert rpc.max_installment == 300_000

    def test_zero_cogs_is_not_replaced_by_default(self):
        rpc = calculate_rpc({**REFERENCE_INPUTS, "cogs_percentage": 0})

        assert rpc.cogs == 0

    def test_to_dict_has_all_figures(self):
        data = calculate_rpc(REFERENCE_INPUTS).to_dict()

        assert set(data) == {
            "monthly_income", "cogs", "gross_profit", "monthly_expenses",
            "household_expenses", "existing_obligations",
            "sustainable_disposable_cash", "max_installment",
        }


class TestCapacityScore:

    @pytest.mark.parametrize("sdc,expected", [
        (0, 0),
        (-500_000, 0),
        (250_000, 15),
        (500_000, 30),
        (750_000, 40),
        (1_000_000, 50),
        (1_500_000, 60),
        (2_000_000, 70),
        (2_500_000, 74),   # 73.75 rounds up
        (4_000_000, 85),
        (6_000_000, 91),
        (10_000_000, 100),
    ])
    def test_bands(self, sdc, expected):
        assert calculate_capacity_score(rpc_with_sdc(sdc)) == expected

    def test_none_scores_zero(self):
        assert calculate_capacity_score(None) == 0

    def test_score_never_exceeds_100(self):
        assert calculate_capacity_score(rpc_with_sdc(1_000_000_000)) == 100


class TestTrends:

    def test_no_previous(self):
        current = calculate_rpc(REFERENCE_INPUTS)

        assert calculate_trends(current, None) == {"income_change_pct": 0, "expense_change_pct": 0}

    def test_change_against_previous(self):
        previous = calculate_rpc({**REFERENCE_INPUTS, "daily_revenue": 400_000})
        current = calculate_rpc(REFERENCE_INPUTS)

        trends = calculate_trends(current, previous)
        assert trends["income_change_pct"] == 25
        # 10.0jt vs 8.5jt
        assert trends["expense_change_pct"] == 18


class TestFormatRupiah:

    def test_dot_separators(self):
        assert format_rupiah(12_500_000) == "Rp 12.500.000"
        assert format_rupiah(750_000.0) == "Rp 750.000"
        assert format_rupiah(0) == "Rp 0"
