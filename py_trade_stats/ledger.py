from typing import Dict, Iterable, Iterator, List
from decimal import Decimal, ROUND_FLOOR
from .domain import TradeRecord, TradeSide, PositionState, LedgerEvent, ZERO

HALF = Decimal("0.5")


def sort_trades(trades: Iterable[TradeRecord]) -> List[TradeRecord]:
    """ Chronological order; same-day trades ordered by id (lexicographic). """
    return sorted(trades, key=lambda t: (t.date, t.id))


def round_half_up(value: Decimal) -> Decimal:
    """ Nearest integer, halves go towards +infinity (2.5 -> 3, -2.5 -> -2). """
    return (value + HALF).to_integral_value(rounding=ROUND_FLOOR)


def classify(realized: Decimal) -> str:
    if realized > 0:
        return "win"
    if realized < 0:
        return "loss"
    return "even"


class LedgerEngine:
    """
    Average-cost position replay.
    Positions are tracked per symbol; every SELL yields a realized PnL
    rounded at the point of the sale.
    """

    def __init__(self):
        # Symbol -> running position
        self.positions: Dict[str, PositionState] = {}

    def position(self, symbol: str) -> PositionState:
        if symbol not in self.positions:
            self.positions[symbol] = PositionState()
        return self.positions[symbol]

    def process_trade(self, trade: TradeRecord) -> LedgerEvent:
        pos = self.position(trade.symbol)
        prev_qty = pos.position_qty
        prev_cost_basis = pos.cost_basis
        avg_cost = pos.avg_cost
        realized = None

        if trade.side is TradeSide.BUY:
            pos.position_qty = prev_qty + trade.quantity
            pos.cost_basis = prev_cost_basis + trade.amount

        elif trade.side is TradeSide.SELL:
            # Overselling is allowed: quantity goes negative, avg cost 0 on empty book
            sell_qty = trade.quantity
            realized = round_half_up((trade.price - avg_cost) * sell_qty)

            pos.position_qty = prev_qty - sell_qty
            pos.cost_basis = round_half_up(prev_cost_basis - avg_cost * sell_qty)

        else:
            raise ValueError(f"Unsupported trade side: {trade.side}")

        if pos.position_qty == 0:
            pos.cost_basis = ZERO

        return LedgerEvent(
            trade=trade,
            realized=realized,
            avg_cost_before=avg_cost,
            position_qty=pos.position_qty,
            cost_basis=pos.cost_basis,
        )


def replay(trades: Iterable[TradeRecord]) -> Iterator[LedgerEvent]:
    """ Sorts the trades and replays them through a fresh engine. """
    engine = LedgerEngine()
    for trade in sort_trades(trades):
        yield engine.process_trade(trade)
