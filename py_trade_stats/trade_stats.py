import sys
import os
import argparse
import logging
from .types import TradeStatsError
from .config_loader import load_config
from .formatters import get_labelers, format_amount
from .backup_loader import BackupLoader
from .calculator import TradeStatsCalculator
from .csv_generator import CsvOutputGenerator
from .frames import summaries_to_frame, tags_to_frame, points_to_frame, weekday_to_frame, equity_to_frame
from .risk import build_position_risks, high_risk_positions, check_daily_loss
from .rollup import summarize_equity_curve
from .symbol_summary import top_symbols
from .trade_filter import TradeFilter, TagFilterMode, collect_tags

# Setup Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

def _write(path: str, content: str) -> None:
    # BOM so spreadsheet apps detect UTF-8 (Korean names)
    with open(path, "w", encoding='utf-8-sig', newline='') as f:
        f.write(content)
    logging.info(f"Wrote {path}")

def _print_table(title: str, df) -> None:
    if df.empty:
        return
    print(f"\n{title}")
    print(df.to_string(index=False))

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Trade Journal Statistics")
    parser.add_argument("--input", default="backup.json", help="Journal backup JSON (default: backup.json)")
    parser.add_argument("--prices", help="Optional JSON file {SYMBOL: price}, overrides backup prices")
    parser.add_argument("--output-dir", help="Directory for CSV exports (default from config)")
    parser.add_argument("--config", default="trade_stats.json", help="Config file (default: trade_stats.json)")
    parser.add_argument("--symbol", default="", help="Only trades whose symbol contains this text")
    parser.add_argument("--tag", default="", help="Tag keywords, comma or space separated")
    parser.add_argument("--tag-mode", choices=[m.value for m in TagFilterMode], default=TagFilterMode.OR.value,
                        help="Match any (OR) or all (AND) tag keywords (default: OR)")
    parser.add_argument("--date-from", default="", help="First trade date, YYYY-MM-DD (inclusive)")
    parser.add_argument("--date-to", default="", help="Last trade date, YYYY-MM-DD (inclusive)")
    args = parser.parse_args(argv)

    logging.info("Starting Trade Statistics...")

    # 1. Components
    config = load_config(args.config)
    weekday_label, month_label = get_labelers(config.locale)
    loader = BackupLoader()
    calculator = TradeStatsCalculator(weekday_label, month_label)
    csv_gen = CsvOutputGenerator()
    trade_filter = TradeFilter(
        symbol_query=args.symbol,
        tag_query=args.tag,
        tag_mode=TagFilterMode(args.tag_mode),
        date_from=args.date_from,
        date_to=args.date_to
    )

    # 2. Load Input
    try:
        trades, prices = loader.load(args.input)
        if args.prices:
            prices.update(loader.load_prices(args.prices))
    except (OSError, TradeStatsError) as e:
        logging.error(f"Failed to load input: {e}")
        return 1

    if not trades:
        logging.warning("No trades found.")
    else:
        logging.info(f"Tags in journal: {', '.join(collect_tags(trades)) or '-'}")

    filtered = trade_filter.apply(trades)
    if len(filtered) != len(trades):
        logging.info(f"Filter kept {len(filtered)} of {len(trades)} trades.")

    # 3. Calculate
    report = calculator.calculate(filtered, prices)
    overall = report.overall
    insights = report.insights
    equity = summarize_equity_curve(report.equity_curve)

    logging.info(f"Symbols: {len(report.symbol_summaries)}, Tags: {len(report.tag_stats)}, "
                 f"Trading days: {len(report.daily_points)}")
    logging.info(f"Realized PnL: {format_amount(overall.total_realized_pnl)}, "
                 f"Unrealized PnL: {format_amount(overall.eval_pnl)} ({overall.holding_return_rate:.2f}%), "
                 f"Total PnL: {format_amount(overall.total_pnl)}")
    logging.info(f"Best day: {insights.best_day or '-'}, Best tag: {insights.best_tag or '-'}, "
                 f"Win rate: {insights.long_win_rate:.1f}%, "
                 f"Max win: {format_amount(insights.max_win)}, Max loss: {format_amount(insights.max_loss)}")
    logging.info(f"Peak PnL: {format_amount(equity.peak)}, "
                 f"Max drawdown: {format_amount(equity.max_drawdown)} ({equity.max_drawdown_percent:.1f}%)")

    profits, losses = top_symbols(report.symbol_summaries)
    if profits:
        logging.info("Top profits: " + ", ".join(f"{s.symbol} {format_amount(s.realized_pnl)}" for s in profits))
    if losses:
        logging.info("Top losses: " + ", ".join(f"{s.symbol} {format_amount(s.realized_pnl)}" for s in losses))

    if not report.symbol_summaries:
        logging.info("No symbol summaries to display.")
    else:
        print(summaries_to_frame(report.symbol_summaries).to_string(index=False))
        _print_table("Tags", tags_to_frame(report.tag_stats))
        _print_table("Monthly", points_to_frame(report.monthly_points))
        _print_table("Weekdays", weekday_to_frame(report.weekday_stats))

    # 4. Risk checks
    risks = build_position_risks(report.symbol_summaries, prices, config.account_balance, config.risk)
    for r in high_risk_positions(risks):
        logging.warning(f"Position {r.symbol} is {r.position_percent:.1f}% of account ({r.risk_level.value})")
    if report.daily_points:
        alert = check_daily_loss(report.daily_points[-1].value, config.account_balance, config.risk)
        if alert:
            logging.warning(alert.message)

    # 5. Write Output
    output_dir = args.output_dir or config.output_dir
    os.makedirs(output_dir, exist_ok=True)
    _write(os.path.join(output_dir, "symbol_summary.csv"),
           csv_gen.generate_symbol_summaries(report.symbol_summaries, prices))
    _write(os.path.join(output_dir, "tag_performance.csv"), csv_gen.generate_tag_stats(report.tag_stats))
    _write(os.path.join(output_dir, "daily_pnl.csv"), csv_gen.generate_points(report.daily_points))
    _write(os.path.join(output_dir, "monthly_pnl.csv"), csv_gen.generate_points(report.monthly_points))

    equity_path = os.path.join(output_dir, "equity_curve.csv")
    equity_to_frame(report.equity_curve).to_csv(equity_path, index=False, encoding='utf-8-sig')
    logging.info(f"Wrote {equity_path}")

    logging.info("Done.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
