import math
from dataclasses import replace

import numpy_financial as npf

from errors import ComputationError


def calc_irr(cash_flows: list[float]) -> float | None:
    """Calculate IRR from a list of cash flows (Year 0 negative, then annual)."""
    try:
        result = npf.irr(cash_flows)
        if result is None or result != result:  # NaN check
            return None
        return float(result)
    except Exception:
        return None


def equity_cash_flows(equity: float, annual_cf: float, exit_proceeds: float,
                      hold_years: float) -> list[float]:
    """Year 0 equity outlay, flat annual cash flow, sale proceeds in the final year.

    A fractional hold is rounded up to whole years.
    """
    years = max(1, math.ceil(hold_years))
    return [-equity] + [annual_cf] * (years - 1) + [annual_cf + exit_proceeds]


def sensitivity_table_exit_cap(
    inputs,
    increments: list[float] | None = None,
) -> list[dict]:
    """Sensitivity on exit cap rate (percentage points): rows with IRR and equity multiple."""
    if increments is None:
        increments = [-1.00, -0.50, -0.25, 0.0, 0.25, 0.50, 1.00]

    from models.financial_model import compute_returns, DEFAULT_EXIT_CAP

    base_cap = inputs.exit_cap if inputs.exit_cap is not None else DEFAULT_EXIT_CAP
    results = []
    for delta in increments:
        cap = base_cap + delta
        if cap <= 0:
            continue
        try:
            projection = compute_returns(replace(inputs, exit_cap=cap))
        except ComputationError:
            results.append({"exit_cap_rate": round(cap, 2), "exit_value": None,
                            "irr": None, "equity_multiple": None})
            continue
        results.append({
            "exit_cap_rate": round(cap, 2),
            "exit_value": round(projection.exit_value),
            "irr": round(projection.irr, 2),
            "equity_multiple": round(projection.equity_multiple, 2),
        })
    return results
