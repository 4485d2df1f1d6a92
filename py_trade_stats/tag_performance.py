from typing import Dict, Iterable, List
from .domain import TradeRecord, TagPerf
from .ledger import replay, classify


def build_tag_performance(trades: Iterable[TradeRecord]) -> List[TagPerf]:
    """
    Realized PnL attributed per tag.
    Positions are still tracked per symbol; a SELL carrying several tags
    contributes its full realized PnL to each of them.
    Busiest tags first.
    """
    tag_map: Dict[str, TagPerf] = {}

    for event in replay(trades):
        if not event.is_sell:
            continue

        outcome = classify(event.realized)
        # Tags behave as a set
        for tag in dict.fromkeys(event.trade.tags):
            tp = tag_map.get(tag)
            if tp is None:
                tp = TagPerf(tag=tag)
                tag_map[tag] = tp

            tp.trade_count += 1
            tp.realized_pnl += event.realized

            if outcome == "win":
                tp.win_count += 1
            elif outcome == "loss":
                tp.loss_count += 1
            else:
                tp.even_count += 1

    result = []
    for tp in tag_map.values():
        if tp.trade_count > 0:
            tp.avg_pnl_per_trade = tp.realized_pnl / tp.trade_count
            tp.win_rate = (tp.win_count / tp.trade_count) * 100
        result.append(tp)

    # Stable sort keeps first-seen order among equal counts
    result.sort(key=lambda tp: tp.trade_count, reverse=True)
    return result
