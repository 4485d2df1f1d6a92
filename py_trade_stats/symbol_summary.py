from typing import Dict, Iterable, List, Tuple
from .domain import TradeRecord, TradeSide, SymbolSummary, ZERO
from .ledger import replay, classify


def _win_rate(wins: int, total: int) -> float:
    return (wins / total) * 100 if total > 0 else 0.0


def build_symbol_summaries(trades: Iterable[TradeRecord]) -> List[SymbolSummary]:
    """
    One summary per symbol, replayed with the average-cost ledger.
    Sorted by symbol.
    """
    summaries: Dict[str, SymbolSummary] = {}

    for event in replay(trades):
        t = event.trade
        s = summaries.get(t.symbol)
        if s is None:
            s = SymbolSummary(symbol=t.symbol, symbol_name=t.symbol_name or None)
            summaries[t.symbol] = s
        elif t.symbol_name and not s.symbol_name:
            # First non-empty name wins
            s.symbol_name = t.symbol_name

        if t.side is TradeSide.BUY:
            s.total_buy_qty += t.quantity
            s.total_buy_amount += t.amount
        else:
            s.total_sell_qty += t.quantity
            s.total_sell_amount += t.amount
            s.realized_pnl += event.realized
            s.trade_count += 1

            outcome = classify(event.realized)
            if outcome == "win":
                s.win_count += 1
            elif outcome == "loss":
                s.loss_count += 1
            else:
                s.even_count += 1

        s.position_qty = event.position_qty
        s.cost_basis = event.cost_basis

    result = []
    for s in summaries.values():
        if s.position_qty > 0:
            s.avg_cost = s.cost_basis / s.position_qty
        else:
            s.avg_cost = ZERO
            s.cost_basis = ZERO
        s.win_rate = _win_rate(s.win_count, s.trade_count)
        result.append(s)

    result.sort(key=lambda s: s.symbol)
    return result


def top_symbols(summaries: List[SymbolSummary], limit: int = 5) -> Tuple[List[SymbolSummary], List[SymbolSummary]]:
    """ Best and worst symbols by realized PnL (profits only / losses only). """
    profits = sorted(summaries, key=lambda s: s.realized_pnl, reverse=True)[:limit]
    losses = sorted(summaries, key=lambda s: s.realized_pnl)[:limit]
    return (
        [s for s in profits if s.realized_pnl > 0],
        [s for s in losses if s.realized_pnl < 0],
    )
