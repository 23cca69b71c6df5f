import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from tradejournal.journal.errors import BackupFormatError
from tradejournal.journal.portfolio import BalancePoint
from tradejournal.journal.state import JournalState, PortfolioSnapshot
from tradejournal.journal.trades import TradeRecord, make_trade, utc_now

FORMAT_VERSION = 1

@dataclass
class Backup:
    trades: Tuple[TradeRecord, ...]
    portfolio: PortfolioSnapshot
    history: Tuple[BalancePoint, ...] = ()
    notes: List[Dict[str, Any]] = field(default_factory=list)
    action_items: List[Dict[str, Any]] = field(default_factory=list)
    exported_at: str = ""

def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value

def trade_to_json(trade: TradeRecord) -> Dict[str, Any]:
    return {k: _jsonable(v) for k, v in trade.to_dict().items()}

def build_backup(
    state: JournalState,
    notes: Sequence[Mapping[str, Any]] = (),
    action_items: Sequence[Mapping[str, Any]] = (),
) -> Dict[str, Any]:
    p = state.portfolio
    return {
        "format_version": FORMAT_VERSION,
        "exported_at": utc_now().isoformat(),
        "portfolio": {
            "starting_capital": p.starting_capital,
            "current_balance": p.current_balance,
            "adjustments": p.adjustments,
            "last_updated": _jsonable(p.last_updated),
        },
        "history": [
            {"at": h.at.isoformat(), "balance": h.balance, "reason": h.reason}
            for h in state.history
        ],
        "trades": [trade_to_json(t) for t in state.trades],
        "notes": [dict(n) for n in notes],
        "action_items": [dict(a) for a in action_items],
    }

def _date(raw: Any, name: str, required: bool = False):
    if raw in (None, ""):
        if required:
            raise BackupFormatError(f"{name} is required")
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        raise BackupFormatError(f"{name}: invalid date '{raw}'")

def _datetime(raw: Any):
    if raw in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        raise BackupFormatError(f"invalid timestamp '{raw}'")

def _text(raw: Any):
    return None if raw is None else str(raw)

def _finite(raw: Any) -> float:
    val = float(raw)
    if not math.isfinite(val):
        raise ValueError(f"not a finite number: {raw!r}")
    return val

def _note_items(raw: Any, name: str) -> List[Dict[str, Any]]:
    """Notes arrive as plain strings or `{body, done, created_at, updated_at}` objects."""
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise BackupFormatError(f"{name} must be a list")
    items: List[Dict[str, Any]] = []
    for item in raw:
        if isinstance(item, str):
            item = {"body": item}
        if not isinstance(item, Mapping):
            raise BackupFormatError(f"{name}: expected a string or object, got {item!r}")
        body = item.get("body")
        if not isinstance(body, str):
            raise BackupFormatError(f"{name}: body must be a string")
        if not body.strip():
            continue
        items.append({
            "body": body.strip(),
            "done": bool(item.get("done")),
            "created_at": str(item.get("created_at") or ""),
            "updated_at": str(item.get("updated_at") or ""),
        })
    return items

def trade_from_json(d: Mapping[str, Any]) -> TradeRecord:
    try:
        return make_trade(
            id=d.get("id"),
            date=_date(d.get("date"), "date", required=True),
            ticker=_text(d.get("ticker")) or "",
            strategy=_text(d.get("strategy")),
            option_type=_text(d.get("option_type")),
            strike=d.get("strike"),
            expiration=_date(d.get("expiration"), "expiration"),
            quantity=d.get("quantity"),
            entry_price=d.get("entry_price"),
            exit_price=d.get("exit_price"),
            premium=d.get("premium"),
            fees=d.get("fees"),
            net_pl=d.get("net_pl"),
            outcome=_text(d.get("outcome")),
            delta=d.get("delta"),
            gamma=d.get("gamma"),
            theta=d.get("theta"),
            vega=d.get("vega"),
            notes=_text(d.get("notes")),
            created_at=_datetime(d.get("created_at")),
            updated_at=_datetime(d.get("updated_at")),
        )
    except BackupFormatError:
        raise
    except (TypeError, ValueError) as e:
        raise BackupFormatError(f"invalid trade in backup: {e}")

def parse_backup(document: Mapping[str, Any]) -> Backup:
    if not isinstance(document, Mapping):
        raise BackupFormatError("backup must be a JSON object")
    version = document.get("format_version")
    if version != FORMAT_VERSION:
        raise BackupFormatError(f"unsupported backup format_version: {version!r}")

    raw_p = document.get("portfolio") or {}
    try:
        portfolio = PortfolioSnapshot(
            starting_capital=_finite(raw_p.get("starting_capital", 0.0)),
            current_balance=_finite(raw_p.get("current_balance", 0.0)),
            adjustments=_finite(raw_p.get("adjustments", 0.0)),
            last_updated=_datetime(raw_p.get("last_updated")),
        )
        history = tuple(
            BalancePoint(at=_datetime(h["at"]), balance=_finite(h["balance"]), reason=str(h.get("reason", "")))
            for h in document.get("history") or []
        )
    except BackupFormatError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise BackupFormatError(f"invalid portfolio section: {e}")

    raw_trades = document.get("trades") or []
    if not isinstance(raw_trades, list) or not all(isinstance(t, Mapping) for t in raw_trades):
        raise BackupFormatError("trades must be a list of objects")
    trades = tuple(trade_from_json(t) for t in raw_trades)
    return Backup(
        trades=trades,
        portfolio=portfolio,
        history=history,
        notes=_note_items(document.get("notes"), "notes"),
        action_items=_note_items(document.get("action_items"), "action_items"),
        exported_at=str(document.get("exported_at") or ""),
    )
