import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple
from .domain import TradeRecord, TradeSide
from .formatters import parse_tag_string
from .types import BackupFormatError


def _to_decimal(value: Any) -> Decimal:
    # str() first so floats keep their printed value
    d = Decimal(str(value))
    if not d.is_finite():
        raise InvalidOperation(f"Non-finite number: {value!r}")
    return d


def _parse_tags(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return parse_tag_string(raw)
    if isinstance(raw, list):
        return tuple(str(t).strip() for t in raw if str(t).strip())
    return ()


class BackupLoader:
    """
    Reads journal backups: {"version": 1, "trades": [...], "currentPrices": {...}}.
    Trades that cannot be converted to numbers are skipped and logged.
    """

    def parse_trade(self, row: Dict[str, Any]) -> Optional[TradeRecord]:
        try:
            return TradeRecord(
                id=str(row["id"]),
                date=str(row["date"]),
                symbol=str(row["symbol"]),
                side=TradeSide.parse(row["side"]),
                price=_to_decimal(row["price"]),
                quantity=_to_decimal(row["quantity"]),
                tags=_parse_tags(row.get("tags")),
                symbol_name=row.get("symbol_name") or None,
                memo=row.get("memo") or ""
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logging.warning(f"Skipping trade {row.get('id', '?') if isinstance(row, dict) else '?'}: {e}")
            return None

    def parse_prices(self, raw: Any) -> Dict[str, Decimal]:
        prices = {}
        if not isinstance(raw, dict):
            return prices
        for symbol, value in raw.items():
            if value is None or value == "":
                continue
            try:
                prices[str(symbol)] = _to_decimal(value)
            except InvalidOperation:
                logging.warning(f"Skipping price for {symbol}: {value!r}")
        return prices

    def parse_document(self, data: Any) -> Tuple[List[TradeRecord], Dict[str, Decimal]]:
        if not isinstance(data, dict) or not isinstance(data.get("trades"), list):
            raise BackupFormatError("Invalid format: 'trades' list missing")

        trades = []
        for row in data["trades"]:
            if not isinstance(row, dict):
                logging.warning(f"Skipping non-object trade entry: {row!r}")
                continue
            trade = self.parse_trade(row)
            if trade is not None:
                trades.append(trade)

        skipped = len(data["trades"]) - len(trades)
        if skipped:
            logging.warning(f"{skipped} trade(s) skipped while loading backup.")

        return trades, self.parse_prices(data.get("currentPrices"))

    def load(self, filepath: str) -> Tuple[List[TradeRecord], Dict[str, Decimal]]:
        try:
            with open(filepath, 'r', encoding='utf-8-sig') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Backup {filepath} is not valid JSON: {e}") from e

        trades, prices = self.parse_document(data)
        logging.info(f"Loaded {len(trades)} trades and {len(prices)} prices from {filepath}")
        return trades, prices

    def load_prices(self, filepath: str) -> Dict[str, Decimal]:
        """ Plain {"SYMBOL": price} file. """
        try:
            with open(filepath, 'r', encoding='utf-8-sig') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Price file {filepath} is not valid JSON: {e}") from e
        return self.parse_prices(data)
