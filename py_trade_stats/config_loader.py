import json
import os
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict
from .formatters import LABELERS
from .risk import RiskSettings
from .types import AppConfig

def _load_risk(data: Dict[str, Any]) -> RiskSettings:
    defaults = RiskSettings()
    try:
        return RiskSettings(
            max_position_percent=float(data.get("max_position_percent", defaults.max_position_percent)),
            max_daily_loss_percent=float(data.get("max_daily_loss_percent", defaults.max_daily_loss_percent)),
            max_daily_loss_amount=float(data.get("max_daily_loss_amount", defaults.max_daily_loss_amount)),
            alert_enabled=bool(data.get("alert_enabled", defaults.alert_enabled))
        )
    except (TypeError, ValueError) as e:
        logging.warning(f"Invalid risk settings, using defaults: {e}")
        return defaults

def load_config(config_path: str = "trade_stats.json") -> AppConfig:
    """
    Loads label locale, output directory and risk settings.
    Missing or unreadable files fall back to defaults.
    """
    config = AppConfig()

    if not os.path.exists(config_path):
        logging.info(f"Config file {config_path} not found. Using defaults.")
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to load config file {config_path}: {e}")
        return config

    if not isinstance(data, dict):
        logging.warning(f"Config file {config_path} is not a JSON object. Using defaults.")
        return config

    locale = data.get("locale", config.locale)
    if locale in LABELERS:
        config.locale = locale
    else:
        logging.warning(f"Unknown locale '{locale}'. Falling back to '{config.locale}'.")

    if "output_dir" in data:
        config.output_dir = str(data["output_dir"])

    if "account_balance" in data:
        try:
            balance = Decimal(str(data["account_balance"]))
        except InvalidOperation:
            balance = None
        if balance is not None and balance.is_finite():
            config.account_balance = balance
        else:
            logging.warning(f"Invalid account_balance {data['account_balance']!r}. Using 0.")

    if isinstance(data.get("risk"), dict):
        config.risk = _load_risk(data["risk"])

    return config
