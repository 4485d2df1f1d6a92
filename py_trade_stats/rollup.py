from typing import Dict, Iterable, List
from decimal import Decimal
from .domain import TradeRecord, PnLPoint, EquityPoint, EquityCurveSummary, ZERO
from .ledger import replay
from .formatters import MonthLabeler, korean_month_label

OTHER_BUCKET = "Other"


def build_daily_points(trades: Iterable[TradeRecord]) -> List[PnLPoint]:
    """ Realized PnL per trade date, ascending. """
    day_map: Dict[str, Decimal] = {}

    for event in replay(trades):
        if event.is_sell:
            day = event.trade.date
            day_map[day] = day_map.get(day, ZERO) + event.realized

    return [PnLPoint(key=day, label=day, value=value) for day, value in sorted(day_map.items())]


def build_monthly_points(daily_points: Iterable[PnLPoint],
                         month_label: MonthLabeler = korean_month_label) -> List[PnLPoint]:
    """ Re-buckets daily points by year-month. Short keys land in 'Other'. """
    month_map: Dict[str, Decimal] = {}

    for pt in daily_points:
        month_key = pt.key[:7] if pt.key and len(pt.key) >= 7 else OTHER_BUCKET
        month_map[month_key] = month_map.get(month_key, ZERO) + pt.value

    return [
        PnLPoint(key=key, label=month_label(key), value=value)
        for key, value in sorted(month_map.items())
    ]


def build_equity_curve(points: Iterable[PnLPoint]) -> List[EquityPoint]:
    """
    Cumulative realized PnL with high water mark and drawdown.
    The peak starts at 0 so an early loss is already a drawdown.
    """
    curve = []
    cumulative = ZERO
    peak = ZERO

    for pt in points:
        cumulative += pt.value
        if cumulative > peak:
            peak = cumulative

        drawdown = cumulative - peak
        drawdown_pct = float(drawdown / peak * 100) if peak > 0 else 0.0

        curve.append(EquityPoint(
            key=pt.key,
            pnl=pt.value,
            cumulative_pnl=cumulative,
            peak=peak,
            drawdown=drawdown,
            drawdown_percent=drawdown_pct
        ))
    return curve


def summarize_equity_curve(curve: List[EquityPoint]) -> EquityCurveSummary:
    if not curve:
        return EquityCurveSummary()

    max_drawdown = ZERO
    max_drawdown_pct = 0.0
    peak = ZERO
    for pt in curve:
        if pt.cumulative_pnl > peak:
            peak = pt.cumulative_pnl
        if pt.drawdown < max_drawdown:
            max_drawdown = pt.drawdown
            max_drawdown_pct = pt.drawdown_percent

    return EquityCurveSummary(
        current_pnl=curve[-1].cumulative_pnl,
        peak=peak,
        max_drawdown=max_drawdown,
        max_drawdown_percent=max_drawdown_pct
    )
