"""Simplified leveraged-return projection: derives everything from DealInputs."""

import math
from dataclasses import dataclass, asdict

from errors import ComputationError
from models.assumptions import MAX_HOLD_YEARS, DealInputs
from models.metrics import calc_irr, equity_cash_flows

# Simplifications applied to every deal, not read from the offering memorandum
GOING_IN_CAP_RATE = 0.05
NOI_GROWTH_RATE = 0.03

# Used when a field is blank and the caller skipped with_defaults()
DEFAULT_HOLD_YEARS = 5.0
DEFAULT_EXIT_CAP = 5.0


@dataclass(frozen=True)
class ReturnProjection:
    """Result of one compute_returns() call. Values are unrounded."""
    equity: float = 0.0
    debt: float = 0.0
    current_noi: float = 0.0
    future_noi: float = 0.0
    exit_value: float = 0.0
    annual_cash_flow: float = 0.0
    exit_proceeds: float = 0.0
    equity_multiple: float = 0.0
    irr: float = 0.0                     # %
    cash_flow_irr: float | None = None   # %, from the explicit annual cash flows

    def to_dict(self) -> dict:
        return asdict(self)

    def to_display(self) -> dict:
        """Rounded for presentation: IRR/EM to one decimal, dollars to whole units."""
        return {
            "equity": round(self.equity),
            "debt": round(self.debt),
            "current_noi": round(self.current_noi),
            "exit_value": round(self.exit_value),
            "annual_cash_flow": round(self.annual_cash_flow),
            "exit_proceeds": round(self.exit_proceeds),
            "irr": round(self.irr, 1),
            "em": round(self.equity_multiple, 1),
            "cash_flow_irr": round(self.cash_flow_irr, 1) if self.cash_flow_irr is not None else None,
        }


def compute_returns(inputs: DealInputs) -> ReturnProjection:
    """Project equity returns for a levered acquisition held to a cap-rate exit.

    NOI is sized at a 5% going-in cap rate and grown 3% a year; the exit is
    priced off the exit cap. Debt is interest-only at ``interest_rate``.
    Raises ComputationError for a non-positive exit cap, a hold outside
    (0, MAX_HOLD_YEARS], a result too large to represent, or when the total
    return multiple is negative (no real fractional root).
    """
    price = inputs.asking_price or 0.0
    if price == 0:
        return ReturnProjection()
    if price < 0:
        raise ComputationError("Asking price cannot be negative")

    hold = inputs.target_hold if inputs.target_hold is not None else DEFAULT_HOLD_YEARS
    leverage = inputs.leverage or 0.0
    rate = inputs.interest_rate or 0.0
    exit_cap = inputs.exit_cap if inputs.exit_cap is not None else DEFAULT_EXIT_CAP

    if exit_cap <= 0:
        raise ComputationError("Exit cap rate must be greater than zero")
    if hold <= 0:
        raise ComputationError("Hold period must be greater than zero")
    if hold > MAX_HOLD_YEARS:
        raise ComputationError(f"Hold period cannot exceed {MAX_HOLD_YEARS} years")

    try:
        equity = price * (1 - leverage / 100)
        debt = price * (leverage / 100)
        current_noi = price * GOING_IN_CAP_RATE
        future_noi = current_noi * (1 + NOI_GROWTH_RATE) ** hold
        exit_value = future_noi / (exit_cap / 100)

        annual_cash_flow = current_noi - debt * rate / 100
        total_cash_flows = annual_cash_flow * hold
        exit_proceeds = exit_value - debt
    except OverflowError:
        raise ComputationError("Projected values are too large to compute")

    if not all(math.isfinite(v) for v in (exit_value, annual_cash_flow,
                                          total_cash_flows, exit_proceeds)):
        raise ComputationError(
            "Projected values are too large to compute. Check price, exit cap and interest rate."
        )

    if equity <= 0:
        # Fully financed: no equity to measure a multiple against
        return ReturnProjection(
            equity=equity, debt=debt, current_noi=current_noi, future_noi=future_noi,
            exit_value=exit_value, annual_cash_flow=annual_cash_flow,
            exit_proceeds=exit_proceeds,
        )

    total_return_multiple = (total_cash_flows + exit_proceeds) / equity
    if not math.isfinite(total_return_multiple):
        raise ComputationError("Equity multiple is too large to compute")
    if total_return_multiple < 0:
        raise ComputationError(
            f"Total return multiple is negative ({total_return_multiple:.2f}x); "
            "IRR is undefined. Check leverage, interest rate and exit cap."
        )

    try:
        irr = (total_return_multiple ** (1 / hold) - 1) * 100
    except OverflowError:
        raise ComputationError("IRR is too large to compute")

    cash_flows = equity_cash_flows(equity, annual_cash_flow, exit_proceeds, hold)
    cf_irr = calc_irr(cash_flows)

    return ReturnProjection(
        equity=equity,
        debt=debt,
        current_noi=current_noi,
        future_noi=future_noi,
        exit_value=exit_value,
        annual_cash_flow=annual_cash_flow,
        exit_proceeds=exit_proceeds,
        equity_multiple=total_return_multiple,
        irr=irr,
        cash_flow_irr=cf_irr * 100 if cf_irr is not None else None,
    )
