"""
Date Extraction
===============

Finds and normalizes dates mentioned in English evidentiary text.

Supported formats:
- ISO: 2024-03-15 (optionally followed by a time)
- Numeric: 15/03/2024, 15-03-24, 15.03.2024 (day first, optional time)
- Long: 15 March 2024, 15th of March 2024, March 15, 2024
- Month only: March 2024

Invalid calendar dates (31/02/2024) are skipped, never raised.
Two-digit years pivot at 50 (24 -> 2024, 87 -> 1987).
"""

import re
from typing import List, Optional, Tuple
from dataclasses import dataclass
from datetime import datetime


MONTHS = {
    'january': 1, 'jan': 1, 'february': 2, 'feb': 2, 'march': 3, 'mar': 3,
    'april': 4, 'apr': 4, 'may': 5, 'june': 6, 'jun': 6, 'july': 7,
    'jul': 7, 'august': 8, 'aug': 8, 'september': 9, 'sep': 9, 'sept': 9,
    'october': 10, 'oct': 10, 'november': 11, 'nov': 11, 'december': 12,
    'dec': 12,
}

_MONTH = (
    r'(January|February|March|April|May|June|July|August|September|October|'
    r'November|December|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec)'
)
_TIME = r'(?:,?\s*(?:at\s+)?(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?)?'

DAY = "day"
MONTH = "month"


@dataclass(frozen=True)
class DateMention:
    """A date found in text"""
    text: str
    value: datetime
    precision: str  # "day" or "month"
    start: int
    end: int

    @property
    def key(self) -> str:
        """ISO key at the mention's precision (YYYY-MM-DD or YYYY-MM)"""
        if self.precision == MONTH:
            return f"{self.value.year}-{self.value.month:02d}"
        return self.value.strftime("%Y-%m-%d")


class DateExtractor:
    """Regex-based date finder. Patterns are tried most specific first."""

    def __init__(self):
        self.patterns = [
            (re.compile(r'\b(\d{4})-(\d{1,2})-(\d{1,2})' + _TIME + r'(?!\d)'), 'iso'),
            (re.compile(r'\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4}|\d{2})' + _TIME + r'(?!\d)'), 'numeric'),
            (re.compile(
                r'\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:of\s+)?' + _MONTH + r'\.?,?\s+(\d{4})\b',
                re.IGNORECASE), 'day_month'),
            (re.compile(
                r'\b' + _MONTH + r'\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b',
                re.IGNORECASE), 'month_day'),
            (re.compile(r'\b' + _MONTH + r'\.?,?\s+(\d{4})\b', re.IGNORECASE), 'month_year'),
        ]

    def extract(self, text: str) -> List[DateMention]:
        """All date mentions in text, ordered by position"""
        if not text:
            return []

        mentions: List[DateMention] = []
        taken: List[Tuple[int, int]] = []

        for pattern, date_type in self.patterns:
            for match in pattern.finditer(text):
                start, end = match.span()
                if any(start < t_end and end > t_start for t_start, t_end in taken):
                    continue
                normalized = self._normalize(match.groups(), date_type)
                if normalized is None:
                    continue
                value, precision = normalized
                taken.append((start, end))
                mentions.append(DateMention(
                    text=match.group().strip(),
                    value=value,
                    precision=precision,
                    start=start,
                    end=end,
                ))

        mentions.sort(key=lambda m: m.start)
        return mentions

    def _normalize(self, groups: Tuple, date_type: str) -> Optional[Tuple[datetime, str]]:
        """Turn regex groups into (datetime, precision); None for invalid dates"""
        try:
            if date_type == 'iso':
                year, month, day = int(groups[0]), int(groups[1]), int(groups[2])
                time_groups = groups[3:7]
            elif date_type == 'numeric':
                day, month, year = int(groups[0]), int(groups[1]), self._year(groups[2])
                if month > 12 and day <= 12:
                    # Month-first (US) order
                    day, month = month, day
                time_groups = groups[3:7]
            elif date_type == 'day_month':
                day, month, year = int(groups[0]), MONTHS[groups[1].casefold()], int(groups[2])
                time_groups = ()
            elif date_type == 'month_day':
                month, day, year = MONTHS[groups[0].casefold()], int(groups[1]), int(groups[2])
                time_groups = ()
            elif date_type == 'month_year':
                return datetime(int(groups[1]), MONTHS[groups[0].casefold()], 1), MONTH
            else:
                return None

            hour, minute, second = self._time(time_groups)
            return datetime(year, month, day, hour, minute, second), DAY

        except (ValueError, KeyError, IndexError):
            return None

    @staticmethod
    def _year(raw: str) -> int:
        year = int(raw)
        if year < 100:
            year += 2000 if year < 50 else 1900
        return year

    @staticmethod
    def _time(groups: Tuple) -> Tuple[int, int, int]:
        if not groups or groups[0] is None:
            return 0, 0, 0
        hour, minute = int(groups[0]), int(groups[1])
        second = int(groups[2]) if groups[2] else 0
        meridiem = (groups[3] or '').lower()
        if meridiem == 'pm' and hour < 12:
            hour += 12
        elif meridiem == 'am' and hour == 12:
            hour = 0
        return hour, minute, second


# Singleton instance
_extractor = None


def get_date_extractor() -> DateExtractor:
    """Get singleton date extractor instance"""
    global _extractor
    if _extractor is None:
        _extractor = DateExtractor()
    return _extractor


def extract_dates(text: str) -> List[DateMention]:
    """Convenience function: all date mentions in text"""
    return get_date_extractor().extract(text)


def parse_date(text: Optional[str]) -> Optional[datetime]:
    """First date mentioned in text, or None"""
    if not text:
        return None
    mentions = extract_dates(text)
    return mentions[0].value if mentions else None


def compare_keys(key1: str, key2: str) -> Optional[int]:
    """
    Order two ISO date keys.

    Returns -1/0/1, or None when one key is a coarser prefix of the other
    (2024-03 vs 2024-03-15) and the order can't be told.
    """
    if key1 == key2:
        return 0
    if key1.startswith(key2) or key2.startswith(key1):
        return None
    return -1 if key1 < key2 else 1


def keys_conflict(key1: str, key2: str) -> bool:
    """True when two date keys cannot refer to the same day"""
    return compare_keys(key1, key2) not in (0, None)
