import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List
from .domain import TradeRecord


class TagFilterMode(Enum):
    AND = "AND"
    OR = "OR"


@dataclass
class TradeFilter:
    """
    Journal filter. Empty fields do not filter.
    Dates are inclusive ISO strings.
    """
    symbol_query: str = ""
    tag_query: str = ""
    tag_mode: TagFilterMode = TagFilterMode.OR
    selected_symbol: str = ""
    date_from: str = ""
    date_to: str = ""

    def keywords(self) -> List[str]:
        return [kw.strip().lower() for kw in re.split(r"[,\s]+", self.tag_query) if kw.strip()]

    def _match_tags(self, trade: TradeRecord, keywords: List[str]) -> bool:
        tags = [tag.lower() for tag in trade.tags]
        if not tags:
            return False
        hits = (any(kw in tag for tag in tags) for kw in keywords)
        if self.tag_mode is TagFilterMode.AND:
            return all(hits)
        return any(hits)

    def apply(self, trades: Iterable[TradeRecord]) -> List[TradeRecord]:
        result = list(trades)

        if self.symbol_query:
            lower = self.symbol_query.lower()
            result = [t for t in result if lower in t.symbol.lower()]

        keywords = self.keywords()
        if keywords:
            result = [t for t in result if self._match_tags(t, keywords)]

        # Drill-down
        if self.selected_symbol:
            result = [t for t in result if t.symbol == self.selected_symbol]

        if self.date_from:
            result = [t for t in result if t.date >= self.date_from]
        if self.date_to:
            result = [t for t in result if t.date <= self.date_to]

        return result


def collect_tags(trades: Iterable[TradeRecord]) -> List[str]:
    """ Distinct tags over all trades, sorted. """
    return sorted({tag for t in trades for tag in t.tags})
