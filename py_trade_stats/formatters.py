"""
Presentation helpers for labels and numbers.
The engine receives label functions as arguments; these are the defaults.
"""
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Tuple

# Sunday-first, matching the calendar views
KOREAN_WEEKDAYS = ['일', '월', '화', '수', '목', '금', '토']
ENGLISH_WEEKDAYS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
ENGLISH_MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

WeekdayLabeler = Callable[[str], str]
MonthLabeler = Callable[[str], str]


def weekday_index(date_str: str) -> Optional[int]:
    """ 0 = Sunday ... 6 = Saturday. None for empty or unparseable dates. """
    if not date_str:
        return None
    try:
        d = date.fromisoformat(date_str)
    except ValueError:
        return None
    return (d.weekday() + 1) % 7


def korean_weekday_label(date_str: str) -> str:
    idx = weekday_index(date_str)
    if idx is None:
        return ''
    return f"{KOREAN_WEEKDAYS[idx]}요일"


def english_weekday_label(date_str: str) -> str:
    idx = weekday_index(date_str)
    if idx is None:
        return ''
    return ENGLISH_WEEKDAYS[idx]


def _split_month_key(month_key: str) -> Optional[Tuple[str, int]]:
    parts = month_key.split('-')
    if len(parts) >= 2:
        try:
            return parts[0], int(parts[1])
        except ValueError:
            return None
    return None


def korean_month_label(month_key: str) -> str:
    """ '2024-01' -> '2024년 1월'. Unknown keys are returned unchanged. """
    split = _split_month_key(month_key)
    if split is None:
        return month_key
    year, month = split
    return f"{year}년 {month}월"


def english_month_label(month_key: str) -> str:
    split = _split_month_key(month_key)
    if split is None or not 1 <= split[1] <= 12:
        return month_key
    year, month = split
    return f"{ENGLISH_MONTHS[month - 1]} {year}"


LABELERS = {
    "ko": (korean_weekday_label, korean_month_label),
    "en": (english_weekday_label, english_month_label),
}


def get_labelers(locale: str) -> Tuple[WeekdayLabeler, MonthLabeler]:
    return LABELERS.get(locale, LABELERS["ko"])


def format_amount(value: Decimal) -> str:
    """ Two decimals below 1000 (foreign tickers), whole units above. """
    if abs(value) < 1000:
        return f"{value:,.2f}"
    return f"{value:,.0f}"


def parse_tag_string(raw: Optional[str]) -> Tuple[str, ...]:
    """ 'breakout, gap,,swing' -> ('breakout', 'gap', 'swing') """
    if not raw:
        return ()
    return tuple(t.strip() for t in raw.split(',') if t.strip())
