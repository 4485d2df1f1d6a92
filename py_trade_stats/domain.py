from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
from decimal import Decimal

ZERO = Decimal("0")

# --- Enums ---
class TradeSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: str) -> "TradeSide":
        """ Accepts 'buy' / 'SELL' / TradeSide. Raises ValueError otherwise. """
        if isinstance(value, TradeSide):
            return value
        return cls(str(value).strip().upper())

class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

# --- Domain Data Classes (Input) ---
@dataclass(frozen=True)
class TradeRecord:
    id: str
    date: str  # ISO YYYY-MM-DD
    symbol: str
    side: TradeSide
    price: Decimal
    quantity: Decimal
    tags: Tuple[str, ...] = ()
    symbol_name: Optional[str] = None
    memo: str = ""

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity

# --- Replay State ---
@dataclass
class PositionState:
    position_qty: Decimal = ZERO  # Signed, negative when oversold
    cost_basis: Decimal = ZERO

    @property
    def avg_cost(self) -> Decimal:
        if self.position_qty == 0:
            return ZERO
        return self.cost_basis / self.position_qty

@dataclass(frozen=True)
class LedgerEvent:
    """ Result of replaying one trade against its symbol's position. """
    trade: TradeRecord
    realized: Optional[Decimal]  # None for BUY
    avg_cost_before: Decimal
    position_qty: Decimal  # State AFTER the trade
    cost_basis: Decimal

    @property
    def is_sell(self) -> bool:
        return self.realized is not None

# --- Domain Data Classes (Output) ---

@dataclass
class SymbolSummary:
    symbol: str
    symbol_name: Optional[str] = None
    total_buy_qty: Decimal = ZERO
    total_buy_amount: Decimal = ZERO
    total_sell_qty: Decimal = ZERO
    total_sell_amount: Decimal = ZERO
    position_qty: Decimal = ZERO
    avg_cost: Decimal = ZERO
    cost_basis: Decimal = ZERO
    realized_pnl: Decimal = ZERO
    win_count: int = 0
    loss_count: int = 0
    even_count: int = 0
    trade_count: int = 0  # SELL events only
    win_rate: float = 0.0

@dataclass
class TagPerf:
    tag: str
    trade_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    even_count: int = 0
    realized_pnl: Decimal = ZERO
    avg_pnl_per_trade: Decimal = ZERO
    win_rate: float = 0.0

@dataclass(frozen=True)
class PnLPoint:
    key: str    # YYYY-MM-DD or YYYY-MM
    label: str  # Display label
    value: Decimal

@dataclass
class OverallStats:
    total_buy_amount: Decimal = ZERO
    total_sell_amount: Decimal = ZERO
    total_realized_pnl: Decimal = ZERO
    total_open_cost_basis: Decimal = ZERO
    total_open_market_value: Decimal = ZERO
    eval_pnl: Decimal = ZERO  # Unrealized
    total_pnl: Decimal = ZERO
    holding_return_rate: float = 0.0

@dataclass
class InsightData:
    best_day: str = ""
    best_tag: str = ""
    long_win_rate: float = 0.0
    short_win_rate: float = 0.0  # Reserved, short accounting unsupported
    max_win: Decimal = ZERO
    max_loss: Decimal = ZERO

@dataclass
class WeekdayStats:
    day_index: int  # 0 = Sunday
    label: str
    trade_count: int = 0
    win_count: int = 0
    total_pnl: Decimal = ZERO
    win_rate: float = 0.0

@dataclass(frozen=True)
class EquityPoint:
    key: str
    pnl: Decimal             # Realized PnL of this bucket
    cumulative_pnl: Decimal
    peak: Decimal
    drawdown: Decimal        # cumulative - peak, always <= 0
    drawdown_percent: float

@dataclass(frozen=True)
class EquityCurveSummary:
    current_pnl: Decimal = ZERO
    peak: Decimal = ZERO
    max_drawdown: Decimal = ZERO
    max_drawdown_percent: float = 0.0

@dataclass(frozen=True)
class PositionRisk:
    symbol: str
    symbol_name: Optional[str]
    position_value: Decimal
    position_percent: float
    risk_level: RiskLevel

@dataclass(frozen=True)
class DailyLossAlert:
    type: str  # "percent" or "amount"
    value: float
    limit: float
    message: str

@dataclass
class StatsReport:
    """ All views produced from one trade set. Recomputed on every call. """
    symbol_summaries: List[SymbolSummary] = field(default_factory=list)
    tag_stats: List[TagPerf] = field(default_factory=list)
    daily_points: List[PnLPoint] = field(default_factory=list)
    monthly_points: List[PnLPoint] = field(default_factory=list)
    overall: OverallStats = field(default_factory=OverallStats)
    insights: InsightData = field(default_factory=InsightData)
    weekday_stats: List[WeekdayStats] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)
    monthly_equity_curve: List[EquityPoint] = field(default_factory=list)
