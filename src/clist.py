"""
Contest feed from clist.by.

Fetches the contests of one displayed week, keeps the hosts the calendar
knows about, shifts UTC times to the display offset and drops marathons.
"""
import logging
from datetime import datetime, timedelta

import pytz
import requests

logger = logging.getLogger("CODEWARS")

REQUEST_TIMEOUT = 15

PLATFORM_COLORS = {
    "codeforces.com": {"bg": "#1976d2", "border": "#1565c0"},
    "atcoder.jp": {"bg": "#ff9800", "border": "#f57c00"},
    "codechef.com": {"bg": "#8bc34a", "border": "#689f38"},
    "leetcode.com": {"bg": "#9c27b0", "border": "#7b1fa2"},
    "topcoder.com": {"bg": "#ffa726", "border": "#ff9800"},
    "hackerrank.com": {"bg": "#2e7d32", "border": "#1b5e20"},
    "hackerearth.com": {"bg": "#3f51b5", "border": "#303f9f"},
    "spoj.com": {"bg": "#607d8b", "border": "#455a64"},
    "default": {"bg": "#424242", "border": "#303030"},
}

PASSTHROUGH_FIELDS = ("href", "n_problems", "n_statistics", "parsed_at", "resource")


class ContestFeedError(Exception):
    pass


def platform_name(host):
    """
    Display name for a contest host: codeforces.com -> Codeforces
    """
    if not host:
        return "Unknown"
    name = host.lower()
    for suffix in (".com", ".org", ".net", ".jp"):
        if name.endswith(suffix):
            name = name[:-len(suffix)]
            break
    if name.startswith("www."):
        name = name[4:]
    name = name.split(".")[0]
    return name[:1].upper() + name[1:]


def platform_colors(host):
    return PLATFORM_COLORS.get(host, PLATFORM_COLORS["default"])


def to_display_time(utc_string, offset_minutes):
    """
    Parse a UTC timestamp from the feed and shift it to the display offset.
    The result is naive local wall-clock time.
    """
    text = utc_string.strip()
    if text.endswith("Z"):
        text = text[:-1]
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.FixedOffset(offset_minutes)).replace(tzinfo=None)


def feed_duration(raw):
    """
    Duration in seconds from a feed record, or None when it is missing or
    not a number.
    """
    duration = raw.get("duration")
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return None
    return duration


def process_contests(objects, allowed_hosts, offset_minutes, max_duration):
    contests = []
    for raw in objects or []:
        if raw.get("host") not in allowed_hosts:
            continue
        duration = feed_duration(raw)
        if raw.get("duration") is not None and duration is None:
            logger.info(f"Contest {raw.get('id')} has unreadable duration {raw.get('duration')!r}",
                        extra={"section": "contests"})
        # Contests without a duration are kept
        if (duration or 0) > max_duration:
            continue
        try:
            start = to_display_time(raw["start"], offset_minutes)
            end = to_display_time(raw["end"], offset_minutes)
        except (KeyError, TypeError, ValueError):
            logger.info(f"Skipped contest {raw.get('id')} with unreadable times",
                        extra={"section": "contests"})
            continue
        contest = {
            "id": raw.get("id"),
            "title": raw.get("event", ""),
            "host": raw.get("host"),
            "start": start,
            "end": end,
            "duration": duration,
        }
        for field in PASSTHROUGH_FIELDS:
            if raw.get(field) is not None:
                contest[field] = raw[field]
        contests.append(contest)
    return contests


def fetch_week_contests(week_start, api_key, api_url, limit, allowed_hosts,
                        offset_minutes, max_duration):
    """
    Contests running during the week beginning at week_start.
    The feed settings come from the app config (CLIST_* and CONTEST_*).

    Raises ContestFeedError when clist.by cannot be reached or answers with
    anything but a JSON contest list.
    """
    start_date = week_start.strftime("%Y-%m-%d")
    end_date = (week_start + timedelta(days=7)).strftime("%Y-%m-%d")
    params = {
        "start__lte": f"{end_date}T23:59:59",
        "end__gte": f"{start_date}T00:00:00",
        "limit": limit,
        "order_by": "start",
    }
    headers = {}
    if api_key:
        headers["Authorization"] = f"ApiKey {api_key}"

    try:
        response = requests.get(api_url, params=params, headers=headers,
                                timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise ContestFeedError(f"Failed to fetch contests: {e}") from e
    if not response.ok:
        raise ContestFeedError(f"Failed to fetch contests: {response.status_code} {response.reason}")
    try:
        data = response.json()
    except ValueError as e:
        raise ContestFeedError("Contest feed returned invalid JSON") from e
    if not isinstance(data, dict):
        raise ContestFeedError("Contest feed returned an unexpected payload")

    contests = process_contests(data.get("objects"), allowed_hosts, offset_minutes, max_duration)
    logger.info(f"Fetched {len(contests)} contests for week of {start_date}",
                extra={"section": "contests"})
    return contests
