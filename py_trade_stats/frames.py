import pandas as pd
from dataclasses import asdict
from typing import List

from .domain import SymbolSummary, TagPerf, PnLPoint, EquityPoint, WeekdayStats

SYMBOL_COLUMNS = [
    'symbol', 'symbol_name', 'position_qty', 'avg_cost', 'cost_basis', 'realized_pnl',
    'trade_count', 'win_count', 'loss_count', 'even_count', 'win_rate',
    'total_buy_qty', 'total_buy_amount', 'total_sell_qty', 'total_sell_amount',
]
NUMERIC_SYMBOL_COLUMNS = [
    'position_qty', 'avg_cost', 'cost_basis', 'realized_pnl',
    'total_buy_qty', 'total_buy_amount', 'total_sell_qty', 'total_sell_amount',
]


def _frame(records: List[object], columns: List[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


def summaries_to_frame(summaries: List[SymbolSummary]) -> pd.DataFrame:
    """ Symbol table for display; Decimals converted to float. """
    df = _frame(summaries, SYMBOL_COLUMNS)
    for col in NUMERIC_SYMBOL_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce').fillna(0.0)
    return df


def tags_to_frame(tag_stats: List[TagPerf]) -> pd.DataFrame:
    columns = ['tag', 'trade_count', 'win_count', 'loss_count', 'even_count',
               'realized_pnl', 'avg_pnl_per_trade', 'win_rate']
    df = _frame(tag_stats, columns)
    for col in ['realized_pnl', 'avg_pnl_per_trade']:
        df[col] = pd.to_numeric(df[col], errors='coerce').fillna(0.0)
    return df


def points_to_frame(points: List[PnLPoint]) -> pd.DataFrame:
    df = _frame(points, ['key', 'label', 'value'])
    df['value'] = pd.to_numeric(df['value'], errors='coerce').fillna(0.0)
    return df


def equity_to_frame(curve: List[EquityPoint]) -> pd.DataFrame:
    columns = ['key', 'pnl', 'cumulative_pnl', 'peak', 'drawdown', 'drawdown_percent']
    df = _frame(curve, columns)
    for col in columns[1:]:
        df[col] = pd.to_numeric(df[col], errors='coerce').fillna(0.0)
    return df


def weekday_to_frame(weekday_stats: List[WeekdayStats]) -> pd.DataFrame:
    columns = ['day_index', 'label', 'trade_count', 'win_count', 'total_pnl', 'win_rate']
    df = _frame(weekday_stats, columns)
    df['total_pnl'] = pd.to_numeric(df['total_pnl'], errors='coerce').fillna(0.0)
    return df
