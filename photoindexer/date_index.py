import datetime
import logging
import re
from typing import Callable, Dict, List

from photoindexer.exceptions import DuplicateFilenameError, TimestampParseError

logger = logging.getLogger(__name__)

# RFC3339 date-time: a time part and an explicit offset are mandatory.
_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str) -> datetime.datetime:
    """
    Parse an RFC3339 timestamp such as "2021-03-05T10:11:12.123Z".
    Raises ValueError for anything else.
    """
    match = _RFC3339_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    date_part, time_part, fraction, offset = match.groups()
    if fraction:
        # fromisoformat() only takes up to microseconds
        fraction = fraction[:7].ljust(7, "0")
    else:
        fraction = ""
    if offset in ("Z", "z"):
        offset = "+00:00"
    return datetime.datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")


class DateIndex:
    """
    Filenames bucketed by creation date: year -> month -> day -> [filename].

    A filename is stored at most once across all buckets. Within a day the
    filenames keep their arrival order.
    """

    def __init__(self):
        self.index: Dict[int, Dict[int, Dict[int, List[str]]]] = {}
        self.seen = set()

    def __len__(self):
        return len(self.seen)

    def size(self) -> int:
        return len(self.seen)

    def add_image(self, filename: str, creation_time: str):
        if filename in self.seen:
            raise DuplicateFilenameError(filename)
        try:
            t = parse_rfc3339(creation_time)
        except ValueError as e:
            raise TimestampParseError(filename, creation_time) from e

        self.seen.add(filename)
        days = self.index.setdefault(t.year, {}).setdefault(t.month, {})
        days.setdefault(t.day, []).append(filename)
        logger.debug("Adding %s %s", filename, creation_time)

    # Dict order is insertion order, so every visitor sorts its keys first.

    def visit_years(self, f: Callable[[int], None]):
        for y in sorted(self.index):
            f(y)

    def visit_months(self, y: int, f: Callable[[int, int], None]):
        months = self.index.get(y)
        if months is None:
            return
        for m in sorted(months):
            f(y, m)

    def visit_days(self, y: int, m: int, f: Callable[[int, int, int, List[str]], None]):
        days = self.index.get(y, {}).get(m)
        if days is None:
            return
        for d in sorted(days):
            f(y, m, d, days[d])
