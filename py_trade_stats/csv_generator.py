import csv
import io
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from .domain import SymbolSummary, PnLPoint, TagPerf

class CsvOutputGenerator:
    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter
        self.symbol_fields = [
            'symbol_name', 'symbol', 'position_qty', 'avg_cost', 'current_price',
            'realized_pnl', 'unrealized_pnl', 'return_rate', 'win_rate',
            'trade_count', 'win_count', 'loss_count', 'even_count',
            'total_buy_amount', 'total_sell_amount',
        ]
        self.point_fields = ['key', 'label', 'value']
        self.tag_fields = [
            'tag', 'trade_count', 'win_count', 'loss_count', 'even_count',
            'realized_pnl', 'avg_pnl_per_trade', 'win_rate',
        ]

    def _fmt(self, d: Optional[Decimal]) -> str:
        if d is None: return "0.00"
        return f"{d:.2f}"

    def _write(self, fieldnames: List[str], rows: List[Dict[str, str]]) -> str:
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fieldnames, delimiter=self.delimiter)
        writer.writeheader()
        writer.writerows(rows)
        return output.getvalue()

    def generate_symbol_summaries(self, summaries: List[SymbolSummary],
                                  current_prices: Optional[Mapping[str, Decimal]] = None) -> str:
        """
        Unrealized PnL and return rate are only filled for open positions
        with a known price; other rows leave those columns empty.
        """
        prices = current_prices or {}
        rows = []
        for s in summaries:
            price = prices.get(s.symbol)
            has_price = price is not None
            unrealized = ""
            return_rate = ""
            if has_price:
                unrealized_val = (price - s.avg_cost) * s.position_qty if s.position_qty > 0 else Decimal("0")
                rate_val = (price - s.avg_cost) / s.avg_cost * 100 if s.position_qty > 0 and s.avg_cost > 0 else Decimal("0")
                unrealized = self._fmt(unrealized_val)
                return_rate = f"{rate_val:.2f}%"

            rows.append({
                'symbol_name': s.symbol_name or s.symbol,
                'symbol': s.symbol,
                'position_qty': str(s.position_qty),
                'avg_cost': self._fmt(s.avg_cost),
                'current_price': self._fmt(price) if has_price else "",
                'realized_pnl': self._fmt(s.realized_pnl),
                'unrealized_pnl': unrealized,
                'return_rate': return_rate,
                'win_rate': f"{s.win_rate:.0f}%",
                'trade_count': s.trade_count,
                'win_count': s.win_count,
                'loss_count': s.loss_count,
                'even_count': s.even_count,
                'total_buy_amount': self._fmt(s.total_buy_amount),
                'total_sell_amount': self._fmt(s.total_sell_amount),
            })
        return self._write(self.symbol_fields, rows)

    def generate_points(self, points: List[PnLPoint]) -> str:
        rows = [{'key': p.key, 'label': p.label, 'value': self._fmt(p.value)} for p in points]
        return self._write(self.point_fields, rows)

    def generate_tag_stats(self, tag_stats: List[TagPerf]) -> str:
        rows = []
        for tp in tag_stats:
            rows.append({
                'tag': tp.tag,
                'trade_count': tp.trade_count,
                'win_count': tp.win_count,
                'loss_count': tp.loss_count,
                'even_count': tp.even_count,
                'realized_pnl': self._fmt(tp.realized_pnl),
                'avg_pnl_per_trade': self._fmt(tp.avg_pnl_per_trade),
                'win_rate': f"{tp.win_rate:.1f}%",
            })
        return self._write(self.tag_fields, rows)
