import math
from dataclasses import dataclass, asdict, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Literal, Optional

from tradejournal.journal.errors import TradeValidationError

Outcome = Literal["Win", "Loss"]

DEFAULT_FEE = -0.65
DEFAULT_STRATEGY = "Unknown"

@dataclass(frozen=True)
class TradeRecord:
    date: date
    ticker: str
    strategy: str = DEFAULT_STRATEGY
    option_type: Optional[str] = None
    strike: Optional[float] = None
    expiration: Optional[date] = None
    quantity: int = 1
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    premium: float = 0.0
    fees: float = DEFAULT_FEE
    net_pl: float = 0.0
    outcome: Outcome = "Win"

    # greeks
    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None

    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    id: Optional[int] = None

    def with_id(self, trade_id: int) -> "TradeRecord":
        return replace(self, id=trade_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def compute_net_pl(
    entry_price: Optional[float],
    exit_price: Optional[float],
    quantity: int,
    premium: float,
    fees: float,
) -> float:
    """
    Realized P&L after fees.

    With both prices:  (exit - entry) * quantity + premium + fees
    Otherwise:         premium + fees

    Fees are signed: a brokerage cost is negative.
    """
    if entry_price is not None and exit_price is not None:
        return (exit_price - entry_price) * quantity + premium + fees
    return premium + fees

def outcome_for(net_pl: float) -> Outcome:
    # break-even counts as a win
    return "Win" if net_pl >= 0 else "Loss"

def is_win(trade: TradeRecord) -> bool:
    return trade.net_pl >= 0

def make_trade(
    *,
    date: date,
    ticker: str,
    strategy: Optional[str] = None,
    option_type: Optional[str] = None,
    strike: Optional[float] = None,
    expiration: Optional[date] = None,
    quantity: Optional[int] = None,
    entry_price: Optional[float] = None,
    exit_price: Optional[float] = None,
    premium: Optional[float] = None,
    fees: Optional[float] = None,
    net_pl: Optional[float] = None,
    outcome: Optional[str] = None,
    delta: Optional[float] = None,
    gamma: Optional[float] = None,
    theta: Optional[float] = None,
    vega: Optional[float] = None,
    notes: Optional[str] = None,
    created_at: Optional[datetime] = None,
    updated_at: Optional[datetime] = None,
    id: Optional[int] = None,
    default_fee: float = DEFAULT_FEE,
) -> TradeRecord:
    """
    Single validation point for trade input. Applies defaults, upper-cases the
    ticker and derives net P&L and outcome when they are not supplied.
    """
    if date is None:
        raise TradeValidationError("date is required")
    ticker = (ticker or "").strip().upper()
    if not ticker:
        raise TradeValidationError("ticker is required")

    try:
        qty = 1 if quantity is None else int(quantity)
    except (TypeError, ValueError, OverflowError):
        raise TradeValidationError(f"quantity: not a whole number '{quantity}'")
    if qty <= 0:
        raise TradeValidationError("quantity must be > 0")

    strike = _number("strike", strike)
    if strike is not None and strike < 0:
        raise TradeValidationError("strike must be >= 0")
    entry_price = _number("entry_price", entry_price)
    exit_price = _number("exit_price", exit_price)
    delta = _number("delta", delta)
    gamma = _number("gamma", gamma)
    theta = _number("theta", theta)
    vega = _number("vega", vega)

    prem = 0.0 if premium is None else _number("premium", premium)
    fee = default_fee if fees is None else _number("fees", fees)

    if net_pl is None:
        net_pl = compute_net_pl(entry_price, exit_price, qty, prem, fee)
    net_pl = _number("net_pl", net_pl)

    resolved = _parse_outcome(outcome) if outcome else None
    now = utc_now()

    return TradeRecord(
        id=id,
        date=date,
        ticker=ticker,
        strategy=(strategy or "").strip() or DEFAULT_STRATEGY,
        option_type=(option_type or "").strip() or None,
        strike=strike,
        expiration=expiration,
        quantity=qty,
        entry_price=entry_price,
        exit_price=exit_price,
        premium=prem,
        fees=fee,
        net_pl=net_pl,
        outcome=resolved or outcome_for(net_pl),
        delta=delta,
        gamma=gamma,
        theta=theta,
        vega=vega,
        notes=notes or "",
        created_at=created_at or now,
        updated_at=updated_at or created_at or now,
    )

def _number(name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        val = float(value)
    except (TypeError, ValueError):
        raise TradeValidationError(f"{name}: not a number '{value}'")
    # nan/inf would poison every aggregate and the running balance
    if not math.isfinite(val):
        raise TradeValidationError(f"{name} must be a finite number")
    return val

def _parse_outcome(raw: str) -> Optional[Outcome]:
    s = raw.strip().lower()
    if s in ("win", "w", "won", "profit"):
        return "Win"
    if s in ("loss", "l", "lost", "lose"):
        return "Loss"
    return None
