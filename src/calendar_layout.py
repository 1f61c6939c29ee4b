"""
Week layout for the contest calendar.

Every event of a displayed week is bucketed into its calendar days, clipped
to each day and given a column, a column width and a vertical position so a
renderer can draw it as an absolutely positioned block.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone

logger = logging.getLogger("CODEWARS")

DAYS_PER_WEEK = 7
MINUTES_PER_DAY = 24 * 60

# Horizontal gap, in percentage points, left between adjacent columns
COLUMN_GUTTER = 2
# Smallest block height, in percent of the day
MIN_HEIGHT = 1

PROBES_PER_EVENT = 20
MIN_PROBE_INTERVAL = timedelta(minutes=1)
MAX_PROBE_INTERVAL = timedelta(minutes=30)
MIDNIGHT_NUDGE = timedelta(minutes=1)
DAY_LENGTH = timedelta(days=1) - timedelta(milliseconds=1)


def parse_instant(value):
    """
    Turn a datetime, date, ISO-8601 string or epoch seconds into a datetime.
    Returns None when the value cannot be understood.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def wall_clock(value, tzinfo=None):
    """
    Express an instant as naive local wall-clock time. Aware values are
    converted to tzinfo first when one is given.
    """
    if value.tzinfo is not None:
        if tzinfo is not None:
            value = value.astimezone(tzinfo)
        value = value.replace(tzinfo=None)
    return value


def start_of_week(value, week_starts_on=0):
    """
    Local midnight of the first day of the week containing value.
    week_starts_on follows datetime.weekday(): 0 is Monday, 6 is Sunday.
    """
    if isinstance(value, datetime):
        value = value.date()
    offset = (value.weekday() - week_starts_on) % DAYS_PER_WEEK
    return datetime.combine(value - timedelta(days=offset), time.min)


def minutes_of_day(value):
    return value.hour * 60 + value.minute


def current_time_position(now):
    """
    Vertical position, in percent of the day, of the current-time indicator
    """
    return minutes_of_day(now) / MINUTES_PER_DAY * 100


def overlaps(a, b):
    return a["start"] < b["end"] and b["start"] < a["end"]


def _id_key(event_id):
    # Numeric ids sort numerically and ahead of anything else
    if isinstance(event_id, (int, float)) and not isinstance(event_id, bool):
        return (0, event_id, "")
    return (1, 0, str(event_id))


class WeekLayoutCalculator:
    def __init__(self, events, week_start):
        if not isinstance(week_start, datetime):
            week_start = datetime.combine(week_start, time.min)
        self.tzinfo = week_start.tzinfo
        week_start = wall_clock(week_start)
        self.week_start = datetime.combine(week_start.date(), time.min)
        self.entries = []
        for index, event in enumerate(events or []):
            entry = self._prepare(event, index)
            if entry is not None:
                self.entries.append(entry)

    def _prepare(self, event, index):
        """
        Normalise one input event, or return None when it cannot be placed.
        The event itself is never modified.
        """
        start = parse_instant(event.get("start"))
        end = parse_instant(event.get("end"))
        if start is None or end is None:
            logger.info(f"Excluded contest {event.get('id')} from the calendar: "
                        "missing or unreadable start/end", extra={"section": "calendar"})
            return None
        start = wall_clock(start, self.tzinfo)
        end = wall_clock(end, self.tzinfo)

        if end < start:
            logger.warning(f"Contest {event.get('id')} ends before it starts, "
                           "clamping its end to its start", extra={"section": "calendar"})
            end = start

        duration = event.get("duration")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            duration = (end - start).total_seconds()

        # An end on local midnight belongs to the previous day only
        if end.hour == 0 and end.minute == 0 and end.second == 0:
            end = max(end - MIDNIGHT_NUDGE, start)

        return {
            "event": event,
            "id": event.get("id", index),
            "start": start,
            "end": end,
            "duration": duration,
        }

    def day_bounds(self, day_index):
        day_start = self.week_start + timedelta(days=day_index)
        return day_start, day_start + DAY_LENGTH

    def _belongs_to_day(self, entry, day_start, day_end):
        start, end = entry["start"], entry["end"]
        # A full-day contest written as 00:00 - 23:59 stays on its own day
        if (start.hour == 0 and start.minute == 0
                and end.hour == 23 and end.minute == 59):
            return start.date() == day_start.date()
        return start <= day_end and end >= day_start

    def _events_for_day(self, day_start, day_end):
        clipped = []
        for entry in self.entries:
            if not self._belongs_to_day(entry, day_start, day_end):
                continue
            clipped.append({
                "entry": entry,
                "start": max(entry["start"], day_start),
                "end": min(entry["end"], day_end),
            })
        return clipped

    def _active_at(self, instant, clipped):
        return sum(1 for item in clipped if item["start"] <= instant < item["end"])

    def _max_simultaneous(self, subject, clipped):
        start, end = subject["start"], subject["end"]

        points = {start, end}
        for other in clipped:
            if other is subject:
                continue
            for edge in (other["start"], other["end"]):
                if start <= edge <= end:
                    points.add(edge)

        # Regular probes catch overlaps whose edges fall outside the subject
        step = min(MAX_PROBE_INTERVAL,
                   max(MIN_PROBE_INTERVAL, (end - start) / PROBES_PER_EVENT))
        probe = start
        while probe < end:
            points.add(probe)
            probe += step

        return max([1] + [self._active_at(point, clipped) for point in points])

    def _assign_columns(self, clipped):
        ordered = sorted(clipped, key=lambda item: (item["start"], _id_key(item["entry"]["id"])))
        placed = []
        for item in ordered:
            column = 0
            while any(other["column"] == column and overlaps(item, other) for other in placed):
                column += 1
            item["column"] = column
            placed.append(item)
        return placed

    def _placement(self, item):
        start_minutes = minutes_of_day(item["start"])
        end_minutes = minutes_of_day(item["end"])
        column_width = 1 / item["max_simultaneous"]
        return {
            "event": item["entry"]["event"],
            "column": item["column"],
            "column_width": column_width,
            "max_simultaneous": item["max_simultaneous"],
            "top_percent": start_minutes / MINUTES_PER_DAY * 100,
            "height_percent": max((end_minutes - start_minutes) / MINUTES_PER_DAY * 100, MIN_HEIGHT),
            "left_percent": item["column"] * column_width * 100,
            "width_percent": column_width * 100 - COLUMN_GUTTER,
            "clipped_start": item["start"],
            "clipped_end": item["end"],
            "duration": item["entry"]["duration"],
        }

    def calculate_day(self, day_index):
        day_start, day_end = self.day_bounds(day_index)
        clipped = self._events_for_day(day_start, day_end)
        for item in clipped:
            item["max_simultaneous"] = self._max_simultaneous(item, clipped)
        return [self._placement(item) for item in self._assign_columns(clipped)]

    def calculate(self):
        return [self.calculate_day(day_index) for day_index in range(DAYS_PER_WEEK)]


def layout_week(events, week_start):
    """
    Lay out a week of events.

    Returns seven lists, one per day starting at week_start, each holding a
    placement dict per event shown on that day. Events that overlap within a
    day never share a column. Each event's column_width is one over the
    largest number of that day's events running at once during it, so two
    events on the same day can have different widths.
    """
    return WeekLayoutCalculator(events, week_start).calculate()
