from dataclasses import dataclass, field
from decimal import Decimal
from .risk import RiskSettings

@dataclass
class AppConfig:
    locale: str = "ko"  # Label language for weekdays / months
    output_dir: str = "./data/stats"
    account_balance: Decimal = Decimal("0")
    risk: RiskSettings = field(default_factory=RiskSettings)

class TradeStatsError(Exception):
    pass

class BackupFormatError(TradeStatsError):
    pass
