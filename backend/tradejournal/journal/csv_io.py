import csv
import io
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from tradejournal.core.logging import get_logger
from tradejournal.journal.errors import CsvImportError, TradeValidationError
from tradejournal.journal.trades import DEFAULT_FEE, TradeRecord, make_trade

logger = get_logger(__name__)

EXPORT_COLUMNS: List[str] = [
    "date",
    "ticker",
    "strategy",
    "option_type",
    "strike",
    "expiration",
    "quantity",
    "entry_price",
    "exit_price",
    "premium",
    "fees",
    "net_pl",
    "outcome",
    "delta",
    "gamma",
    "theta",
    "vega",
    "notes",
    "created_at",
    "updated_at",
]

HEADER_ALIASES: Dict[str, str] = {
    "symbol": "ticker",
    "underlying": "ticker",
    "net_p&l": "net_pl",
    "net_p_l": "net_pl",
    "net_pnl": "net_pl",
    "p&l": "net_pl",
    "p_l": "net_pl",
    "pnl": "net_pl",
    "qty": "quantity",
    "contracts": "quantity",
    "fee": "fees",
    "commission": "fees",
    "commissions": "fees",
    "type": "option_type",
    "expiry": "expiration",
    "exp": "expiration",
    "expiration_date": "expiration",
    "entry": "entry_price",
    "exit": "exit_price",
    "trade_date": "date",
    "note": "notes",
}

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d")
_WS_RE = re.compile(r"[\s\-/]+")

_FLOAT_FIELDS = ("strike", "entry_price", "exit_price", "premium", "fees", "net_pl", "delta", "gamma", "theta", "vega")

@dataclass
class RowError:
    line: int
    reason: str

@dataclass
class ImportResult:
    trades: List[TradeRecord] = field(default_factory=list)
    skipped: int = 0
    errors: List[RowError] = field(default_factory=list)

    def skip(self, line: int, reason: str) -> None:
        self.skipped += 1
        self.errors.append(RowError(line=line, reason=reason))
        logger.warning(f"CSV row {line} skipped: {reason}")

# ----------------------------- parsing helpers -----------------------------

def normalize_header(name: str) -> str:
    s = (name or "").replace('"', "").strip().lower()
    s = _WS_RE.sub("_", s).strip("_")
    return HEADER_ALIASES.get(s, s)

def tokenize(text: str) -> List[List[str]]:
    """
    RFC 4180 rows; quoted cells keep embedded commas, quotes and newlines.
    Cells come back as written; each field parser trims what it reads.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    return [row for row in csv.reader(io.StringIO(text))]

def _has_content(cells: List[str]) -> bool:
    return any(c.strip() for c in cells)

def parse_date(raw: Optional[str]) -> Optional[date]:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    head = s.split()[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(head, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date '{s}'")

def parse_number(raw: Optional[str]) -> Optional[float]:
    """
    Broker-style number: tolerates $, thousands separators, unicode minus and
    accounting parentheses. Empty cells are None; garbage raises ValueError.
    """
    s = (raw or "").strip()
    if not s:
        return None
    negative = s.startswith("(") and s.endswith(")")
    s = s.strip("()").replace("\u2212", "-").replace("$", "").replace(",", "").strip()
    if not s:
        return None
    val = float(s)
    if not math.isfinite(val):
        raise ValueError(f"not a finite number '{raw}'")
    return -val if negative else val

def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None

def _row_to_trade(row: Dict[str, str], default_fee: float, now: Optional[datetime] = None) -> TradeRecord:
    trade_date = parse_date(row.get("date"))
    if trade_date is None:
        raise TradeValidationError("missing date")
    if not (row.get("ticker") or "").strip():
        raise TradeValidationError("missing ticker")

    nums: Dict[str, Any] = {k: parse_number(row.get(k)) for k in _FLOAT_FIELDS}
    qty = parse_number(row.get("quantity"))

    return make_trade(
        date=trade_date,
        ticker=row["ticker"],
        strategy=row.get("strategy"),
        option_type=row.get("option_type"),
        expiration=parse_date(row.get("expiration")),
        quantity=int(qty) if qty is not None else None,
        outcome=row.get("outcome"),
        notes=row.get("notes"),
        created_at=_parse_timestamp(row.get("created_at")) or now,
        updated_at=_parse_timestamp(row.get("updated_at")),
        default_fee=default_fee,
        **nums,
    )

def parse_trades_csv(text: str, default_fee: float = DEFAULT_FEE, now: Optional[datetime] = None) -> ImportResult:
    rows = tokenize(text)
    # header is the first non-blank row
    while rows and not _has_content(rows[0]):
        rows.pop(0)
    if not rows:
        raise CsvImportError("CSV file must have a header and data rows")

    header = [normalize_header(h) for h in rows[0]]
    if "date" not in header or "ticker" not in header:
        logger.warning(f"CSV header lacks date/ticker columns: {header}")

    result = ImportResult()
    data_rows = 0
    for line_no, cells in enumerate(rows[1:], start=2):
        if not _has_content(cells):
            continue
        data_rows += 1
        if len(cells) < len(header):
            cells = cells + [""] * (len(header) - len(cells))
        row = {name: cells[i] for i, name in enumerate(header) if name}

        try:
            result.trades.append(_row_to_trade(row, default_fee, now))
        except ValueError as e:
            result.skip(line_no, str(e))

    if data_rows == 0:
        raise CsvImportError("CSV file must have a header and data rows")

    logger.info(f"CSV parsed: {len(result.trades)} trades, {result.skipped} skipped")
    return result

# ----------------------------- export -----------------------------

def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)

def export_trades_csv(trades: Iterable[TradeRecord]) -> str:
    out = io.StringIO()
    w = csv.writer(out)
    w.writerow(EXPORT_COLUMNS)
    for t in trades:
        d = t.to_dict()
        w.writerow([_cell(d[c]) for c in EXPORT_COLUMNS])
    return out.getvalue()
