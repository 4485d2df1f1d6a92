from typing import Dict, Iterable, List, Mapping, Optional
from decimal import Decimal
from .domain import (
    TradeRecord, SymbolSummary, TagPerf, OverallStats, InsightData, WeekdayStats, ZERO
)
from .ledger import replay
from .formatters import WeekdayLabeler, korean_weekday_label, weekday_index

NO_VALUE = "-"
# Unparseable dates sort after Saturday
_UNKNOWN_DAY_ORDER = 7


def build_overall_stats(summaries: Iterable[SymbolSummary],
                        current_prices: Optional[Mapping[str, Decimal]] = None) -> OverallStats:
    """
    Realized totals over all symbols plus unrealized PnL for open long
    positions whose current price is known. Symbols without a price are
    left out of the unrealized figures entirely.
    """
    prices = current_prices or {}
    stats = OverallStats()

    for s in summaries:
        stats.total_buy_amount += s.total_buy_amount
        stats.total_sell_amount += s.total_sell_amount
        stats.total_realized_pnl += s.realized_pnl

        price = prices.get(s.symbol)
        if s.position_qty > 0 and price is not None:
            stats.total_open_cost_basis += s.position_qty * s.avg_cost
            stats.total_open_market_value += s.position_qty * price

    stats.eval_pnl = stats.total_open_market_value - stats.total_open_cost_basis
    stats.total_pnl = stats.total_realized_pnl + stats.eval_pnl
    if stats.total_open_cost_basis > 0:
        stats.holding_return_rate = float(stats.eval_pnl / stats.total_open_cost_basis * 100)
    return stats


def _pick_best_day(day_perf: Dict[str, Decimal], day_order: Dict[str, int]) -> str:
    """ Highest PnL weekday; ties go to the earliest day in Sunday..Saturday order. """
    best_day = NO_VALUE
    best_pnl = None
    for label in sorted(day_perf, key=lambda lbl: day_order[lbl]):
        pnl = day_perf[label]
        if best_pnl is None or pnl > best_pnl:
            best_pnl = pnl
            best_day = label
    return best_day


def _pick_best_tag(tag_stats: Iterable[TagPerf]) -> str:
    ranked = sorted(tag_stats, key=lambda tp: tp.realized_pnl, reverse=True)
    if ranked and ranked[0].realized_pnl > 0:
        return ranked[0].tag
    return NO_VALUE


def build_insights(trades: List[TradeRecord],
                   tag_stats: Iterable[TagPerf],
                   weekday_label: WeekdayLabeler = korean_weekday_label) -> InsightData:
    """
    Independent replay over every sell: weekday PnL, extremes and long win rate.
    Every sell counts as closing a long position.
    """
    if not trades:
        return InsightData()

    day_perf: Dict[str, Decimal] = {}
    day_order: Dict[str, int] = {}
    long_wins = 0
    long_total = 0
    max_win = ZERO
    max_loss = ZERO

    for event in replay(trades):
        if not event.is_sell:
            continue
        realized = event.realized

        if realized > max_win:
            max_win = realized
        if realized < max_loss:
            max_loss = realized

        # Sells without a weekday label still count towards the other insights
        label = weekday_label(event.trade.date)
        if label:
            day_perf[label] = day_perf.get(label, ZERO) + realized
            if label not in day_order:
                idx = weekday_index(event.trade.date)
                day_order[label] = _UNKNOWN_DAY_ORDER if idx is None else idx

        long_total += 1
        if realized > 0:
            long_wins += 1

    return InsightData(
        best_day=_pick_best_day(day_perf, day_order),
        best_tag=_pick_best_tag(tag_stats),
        long_win_rate=(long_wins / long_total) * 100 if long_total > 0 else 0.0,
        short_win_rate=0.0,
        max_win=max_win,
        max_loss=max_loss
    )


def build_weekday_stats(trades: Iterable[TradeRecord],
                        weekday_label: WeekdayLabeler = korean_weekday_label) -> List[WeekdayStats]:
    """ Sell statistics per weekday, Sunday first. Days without sells are omitted. """
    by_day: Dict[int, WeekdayStats] = {}

    for event in replay(trades):
        if not event.is_sell:
            continue
        idx = weekday_index(event.trade.date)
        if idx is None:
            continue

        ws = by_day.get(idx)
        if ws is None:
            ws = WeekdayStats(day_index=idx, label=weekday_label(event.trade.date))
            by_day[idx] = ws

        ws.trade_count += 1
        ws.total_pnl += event.realized
        if event.realized > 0:
            ws.win_count += 1

    result = [by_day[idx] for idx in sorted(by_day)]
    for ws in result:
        ws.win_rate = (ws.win_count / ws.trade_count) * 100
    return result
