from flask import Blueprint, current_app as app
from datetime import datetime, timedelta
import logging
import pytz

import clist
from calendar_layout import current_time_position, layout_week, start_of_week
from helpers import *  # noqa

api = Blueprint("contests", __name__)

logger = logging.getLogger("CODEWARS")


def format_duration(duration, start, end):
    """
    Human readable contest length: "2h 30m" from the feed's duration in
    seconds, or "2.5h" worked out from start and end when it has none.
    """
    if duration:
        duration = int(duration)
        return f"{duration // 3600}h {(duration % 3600) // 60}m"
    hours = abs((end - start).total_seconds()) / 3600
    return f"{hours:.1f}h"


def serialize_placement(placement):
    contest = placement["event"]
    colors = clist.platform_colors(contest.get("host"))
    return {
        "id": contest.get("id"),
        "title": contest.get("title"),
        "host": contest.get("host"),
        "platform": clist.platform_name(contest.get("host")),
        "color": colors["bg"],
        "border_color": colors["border"],
        "href": contest.get("href"),
        "n_problems": contest.get("n_problems"),
        "n_statistics": contest.get("n_statistics"),
        "start": contest["start"].isoformat(),
        "end": contest["end"].isoformat(),
        "duration": format_duration(contest.get("duration"), contest["start"], contest["end"]),
        "column": placement["column"],
        "column_width": placement["column_width"],
        "top": placement["top_percent"],
        "height": placement["height_percent"],
        "left": placement["left_percent"],
        "width": placement["width_percent"],
    }


@api.route("/calendar")
def calendar():
    offset = app.config["DISPLAY_OFFSET_MINUTES"]
    now = datetime.now(pytz.FixedOffset(offset)).replace(tzinfo=None)

    anchor = now
    if request.args.get("date"):
        try:
            anchor = datetime.strptime(request.args["date"], "%Y-%m-%d")
        except ValueError:
            return json_fail("Date must be formatted as YYYY-MM-DD", 400)
    week_start = start_of_week(anchor, app.config["WEEK_STARTS_ON"])

    try:
        events = clist.fetch_week_contests(
            week_start, app.config["CLIST_API_KEY"],
            api_url=app.config["CLIST_API_URL"],
            limit=app.config["CLIST_PAGE_LIMIT"],
            allowed_hosts=app.config["CONTEST_ALLOWED_HOSTS"],
            offset_minutes=offset,
            max_duration=app.config["CONTEST_MAX_DURATION"])
    except clist.ContestFeedError as e:
        logger.error(str(e), extra={"section": "contests"})
        return json_fail("Failed to fetch contests", 502)

    days = []
    for day_index, placements in enumerate(layout_week(events, week_start)):
        day = week_start + timedelta(days=day_index)
        days.append({
            "date": day.strftime("%Y-%m-%d"),
            "weekday": day.strftime("%a"),
            "is_today": day.date() == now.date(),
            "contests": [serialize_placement(placement) for placement in placements],
        })

    week_end = week_start + timedelta(days=6)
    in_week = week_start.date() <= now.date() <= week_end.date()
    return json_success({
        "week_start": week_start.strftime("%Y-%m-%d"),
        "week_end": week_end.strftime("%Y-%m-%d"),
        "now_position": current_time_position(now) if in_week else None,
        "days": days,
    })
