#!/usr/bin/env python3
"""
Run Trade Statistics - Journal backup JSON to PnL statistics CSVs

Usage:
    python run_trade_stats.py --input backup.json [--prices prices.json] [--output-dir DIR]
"""
import sys

from py_trade_stats.trade_stats import main

if __name__ == "__main__":
    sys.exit(main())
