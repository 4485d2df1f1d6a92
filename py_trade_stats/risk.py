from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional
from .domain import SymbolSummary, PositionRisk, DailyLossAlert, RiskLevel


@dataclass
class RiskSettings:
    max_position_percent: float = 20.0
    max_daily_loss_percent: float = 3.0
    max_daily_loss_amount: float = 0.0  # 0 disables the amount limit
    alert_enabled: bool = True


def _risk_level(position_percent: float, settings: RiskSettings) -> RiskLevel:
    limit = settings.max_position_percent
    if position_percent >= limit * 1.5:
        return RiskLevel.CRITICAL
    if position_percent >= limit:
        return RiskLevel.HIGH
    if position_percent >= limit * 0.7:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_position_risks(summaries: Iterable[SymbolSummary],
                         current_prices: Optional[Mapping[str, Decimal]],
                         account_balance: Decimal,
                         settings: RiskSettings) -> List[PositionRisk]:
    """
    Concentration of every open long position relative to the account balance.
    Positions without a current price are valued at their average cost.
    """
    if account_balance <= 0:
        return []
    prices = current_prices or {}

    risks = []
    for s in summaries:
        if s.position_qty <= 0:
            continue
        price = prices.get(s.symbol) or s.avg_cost
        value = s.position_qty * price
        percent = float(value / account_balance * 100)
        risks.append(PositionRisk(
            symbol=s.symbol,
            symbol_name=s.symbol_name,
            position_value=value,
            position_percent=percent,
            risk_level=_risk_level(percent, settings)
        ))

    risks.sort(key=lambda r: r.position_percent, reverse=True)
    return risks


def high_risk_positions(risks: Iterable[PositionRisk]) -> List[PositionRisk]:
    return [r for r in risks if r.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)]


def check_daily_loss(daily_pnl: Decimal, account_balance: Decimal,
                     settings: RiskSettings) -> Optional[DailyLossAlert]:
    """ Alert when today's realized loss breaches the percent or amount limit. """
    if not settings.alert_enabled or account_balance <= 0 or daily_pnl >= 0:
        return None

    loss_amount = float(abs(daily_pnl))
    loss_percent = float(abs(daily_pnl) / account_balance * 100)

    if settings.max_daily_loss_percent > 0 and loss_percent >= settings.max_daily_loss_percent:
        return DailyLossAlert(
            type="percent",
            value=loss_percent,
            limit=settings.max_daily_loss_percent,
            message=f"Daily loss {loss_percent:.1f}% exceeds limit of {settings.max_daily_loss_percent}%"
        )
    if settings.max_daily_loss_amount > 0 and loss_amount >= settings.max_daily_loss_amount:
        return DailyLossAlert(
            type="amount",
            value=loss_amount,
            limit=settings.max_daily_loss_amount,
            message="Daily loss amount exceeds limit"
        )
    return None
