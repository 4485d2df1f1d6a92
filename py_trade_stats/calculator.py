from decimal import Decimal
from typing import Iterable, Mapping, Optional
from .domain import TradeRecord, StatsReport
from .formatters import WeekdayLabeler, MonthLabeler, korean_weekday_label, korean_month_label
from .symbol_summary import build_symbol_summaries
from .tag_performance import build_tag_performance
from .rollup import build_daily_points, build_monthly_points, build_equity_curve
from .insights import build_overall_stats, build_insights, build_weekday_stats


class TradeStatsCalculator:
    """
    Builds every statistics view from one trade set.
    Holds only the label functions; each call recomputes from scratch.
    """

    def __init__(self, weekday_label: WeekdayLabeler = korean_weekday_label,
                 month_label: MonthLabeler = korean_month_label):
        self.weekday_label = weekday_label
        self.month_label = month_label

    def calculate(self, trades: Iterable[TradeRecord],
                  current_prices: Optional[Mapping[str, Decimal]] = None) -> StatsReport:
        trades = list(trades)
        if not trades:
            return StatsReport()

        summaries = build_symbol_summaries(trades)
        tag_stats = build_tag_performance(trades)
        daily = build_daily_points(trades)
        monthly = build_monthly_points(daily, self.month_label)

        return StatsReport(
            symbol_summaries=summaries,
            tag_stats=tag_stats,
            daily_points=daily,
            monthly_points=monthly,
            overall=build_overall_stats(summaries, current_prices),
            insights=build_insights(trades, tag_stats, self.weekday_label),
            weekday_stats=build_weekday_stats(trades, self.weekday_label),
            equity_curve=build_equity_curve(daily),
            monthly_equity_curve=build_equity_curve(monthly)
        )
