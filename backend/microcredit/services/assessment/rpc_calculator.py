"""
Repayment Capacity (RPC) Calculator

Pure functions turning the five capacity interview answers into monthly
income / expense figures, the Sustainable Disposable Cash (SDC), the
maximum affordable installment and a 0-100 capacity score.

    monthly_income   = daily_revenue * active_days
    cogs             = monthly_income * cogs_percentage / 100
    gross_profit     = monthly_income - cogs
    monthly_expenses = cogs + household_expenses + existing_obligations
    SDC              = gross_profit - household_expenses - existing_obligations
    max_installment  = max(0, round(SDC * 0.30))
"""
from typing import Any, Dict, Mapping, Optional

from ...models.assessment import RPCResult
from .numeric import round_half_up


# Share of SDC that may go to a new installment
BUFFER_PERCENTAGE = 0.30

# Defaults for fields the user has not supplied
DEFAULTS: Dict[str, float] = {
    "cogs_percentage": 50,
    "household_expenses": 1_500_000,
    "existing_obligations": 0,
    "active_days": 25,
}


def calculate_rpc(data: Mapping[str, Any]) -> RPCResult:
    """Compute repayment capacity from collected interview data."""
    daily_revenue = _value(data, "daily_revenue", 0)
    active_days = _value(data, "active_days", DEFAULTS["active_days"])
    cogs_percentage = _value(data, "cogs_percentage", DEFAULTS["cogs_percentage"])
    household_expenses = _value(data, "household_expenses", DEFAULTS["household_expenses"])
    existing_obligations = _value(data, "existing_obligations", DEFAULTS["existing_obligations"])

    monthly_income = daily_revenue * active_days
    cogs = monthly_income * cogs_percentage / 100
    gross_profit = monthly_income - cogs
    monthly_expenses = cogs + household_expenses + existing_obligations
    sdc = gross_profit - household_expenses - existing_obligations
    max_installment = max(0, round_half_up(sdc * BUFFER_PERCENTAGE))

    return RPCResult(
        monthly_income=monthly_income,
        cogs=cogs,
        gross_profit=gross_profit,
        monthly_expenses=monthly_expenses,
        household_expenses=household_expenses,
        existing_obligations=existing_obligations,
        sustainable_disposable_cash=sdc,
        max_installment=max_installment,
    )


def calculate_capacity_score(rpc: Optional[RPCResult]) -> int:
    """
    Map SDC to a 0-100 capacity score.

    Bands, with m = SDC in millions:
        m < 0.5      ->  0-30
        0.5 <= m < 1 -> 30-50
        1 <= m < 2   -> 50-70
        2 <= m < 4   -> 70-85
        m >= 4       -> 85-100
    """
    if rpc is None or rpc.sustainable_disposable_cash <= 0:
        return 0

    m = rpc.sustainable_disposable_cash / 1_000_000

    if m < 0.5:
        return round_half_up(m * 60)
    if m < 1:
        return round_half_up(30 + (m - 0.5) * 40)
    if m < 2:
        return round_half_up(50 + (m - 1) * 20)
    if m < 4:
        return round_half_up(70 + (m - 2) * 7.5)
    return min(100, round_half_up(85 + (m - 4) * 3))


def calculate_trends(current: RPCResult, previous: Optional[RPCResult]) -> Dict[str, int]:
    """Percentage change in income and expenses against an earlier assessment."""
    if previous is None:
        return {"income_change_pct": 0, "expense_change_pct": 0}

    income_change = 0
    if previous.monthly_income > 0:
        income_change = round_half_up(
            (current.monthly_income - previous.monthly_income) / previous.monthly_income * 100
        )

    expense_change = 0
    if previous.monthly_expenses > 0:
        expense_change = round_half_up(
            (current.monthly_expenses - previous.monthly_expenses) / previous.monthly_expenses * 100
        )

    return {"income_change_pct": income_change, "expense_change_pct": expense_change}


def format_rupiah(amount: float) -> str:
    """Format an amount the Indonesian way: Rp 12.500.000"""
    return "Rp " + f"{round_half_up(amount):,}".replace(",", ".")


def _value(data: Mapping[str, Any], name: str, default: float) -> float:
    value = data.get(name)
    return default if value is None else value
