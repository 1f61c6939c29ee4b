"""
Codeforces API client and the shapes the site serves its data in.

https://codeforces.com/apiHelp
"""
import logging
import time
from datetime import datetime

import pytz
import requests

logger = logging.getLogger("CODEWARS")

API_URL = "https://codeforces.com/api"
REQUEST_TIMEOUT = 10
ONLINE_WINDOW_SECONDS = 60


class CodeforcesError(Exception):
    pass


def _call(method, **params):
    try:
        response = requests.get(f"{API_URL}/{method}", params=params, timeout=REQUEST_TIMEOUT)
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise CodeforcesError(f"Codeforces API request {method} failed") from e
    if not isinstance(data, dict):
        raise CodeforcesError(f"Codeforces API request {method} returned an unexpected payload")
    return data


def _timestamp(seconds):
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, pytz.UTC).isoformat()


def fetch_user_info(handle):
    data = _call("user.info", handles=handle)
    if data.get("status") != "OK" or not data.get("result"):
        raise CodeforcesError("Failed to fetch user info from Codeforces")
    return data["result"][0]


def fetch_rating_history(handle):
    data = _call("user.rating", handle=handle)
    return data["result"] if data.get("status") == "OK" else []


def fetch_recent_submissions(handle, count=10):
    data = _call("user.status", handle=handle, **{"from": 1, "count": count})
    return data["result"] if data.get("status") == "OK" else []


def fetch_contest_list(gym=False):
    data = _call("contest.list", gym=str(gym).lower())
    if data.get("status") != "OK":
        raise CodeforcesError(data.get("comment") or "Failed to fetch contests from Codeforces")
    return data["result"]


def fetch_standings(contest_id, start=1, count=50):
    data = _call("contest.standings", contestId=contest_id, showUnofficial="false",
                 **{"from": start, "count": count})
    if data.get("status") != "OK":
        raise CodeforcesError(data.get("comment") or "Failed to fetch standings from Codeforces")
    return data["result"]


def verify_handle(handle):
    """
    Check whether a Codeforces handle exists.
    Returns (exists, error); error is set when Codeforces itself is down.
    """
    try:
        response = requests.get(f"{API_URL}/user.info", params={"handles": handle},
                                timeout=REQUEST_TIMEOUT)
        if response.status_code >= 500:
            return False, "CF API not working"
        data = response.json()
    except (requests.RequestException, ValueError):
        return False, "CF API not working"
    if isinstance(data, dict) and data.get("status") == "OK" and data.get("result"):
        return True, None
    return False, None


def fetch_profile(handle):
    """
    Profile fields stored on the site's user record, or None if unavailable
    """
    try:
        user = fetch_user_info(handle)
    except CodeforcesError as e:
        logger.warning(f"Could not fetch Codeforces profile for {handle}: {e}",
                       extra={"section": "cf"})
        return None
    return {
        "handle": user.get("handle"),
        "firstName": user.get("firstName") or "",
        "lastName": user.get("lastName") or "",
        "avatar": user.get("avatar") or user.get("titlePhoto") or "",
        "rating": user.get("rating") or 0,
        "maxRating": user.get("maxRating") or 0,
        "rank": user.get("rank") or "unrated",
        "maxRank": user.get("maxRank") or "unrated",
        "organization": user.get("organization") or "",
        "city": user.get("city") or "",
        "country": user.get("country") or "",
    }


def is_online(cf_user, now=None):
    last_online = cf_user.get("lastOnlineTimeSeconds")
    if not last_online:
        return False
    now = time.time() if now is None else now
    return now - last_online < ONLINE_WINDOW_SECONDS


def format_profile(cf_user):
    return {
        "handle": cf_user.get("handle"),
        "firstName": cf_user.get("firstName") or "",
        "lastName": cf_user.get("lastName") or "",
        "country": cf_user.get("country") or "",
        "city": cf_user.get("city") or "",
        "organization": cf_user.get("organization") or "",
        "avatar": cf_user.get("avatar") or "",
        "titlePhoto": cf_user.get("titlePhoto") or "",
        "rank": cf_user.get("rank") or "unrated",
        "rating": cf_user.get("rating") or 0,
        "maxRank": cf_user.get("maxRank") or "unrated",
        "maxRating": cf_user.get("maxRating") or 0,
        "lastOnlineTime": _timestamp(cf_user.get("lastOnlineTimeSeconds")),
        "registrationTime": _timestamp(cf_user.get("registrationTimeSeconds")),
        "friendOfCount": cf_user.get("friendOfCount") or 0,
        "contribution": cf_user.get("contribution") or 0,
    }


def format_contests(history):
    return {
        "totalContests": len(history),
        "contestHistory": [{
            "contestId": contest.get("contestId"),
            "contestName": contest.get("contestName"),
            "handle": contest.get("handle"),
            "rank": contest.get("rank"),
            "oldRating": contest.get("oldRating"),
            "newRating": contest.get("newRating"),
            "ratingUpdateTime": _timestamp(contest.get("ratingUpdateTimeSeconds")),
        } for contest in history],
    }


def format_submissions(submissions, limit=5):
    formatted = []
    for submission in submissions[:limit]:
        problem = submission.get("problem", {})
        formatted.append({
            "id": submission.get("id"),
            "contestId": submission.get("contestId"),
            "problemIndex": problem.get("index"),
            "problemName": problem.get("name"),
            "problemRating": problem.get("rating"),
            "verdict": submission.get("verdict"),
            "programmingLanguage": submission.get("programmingLanguage"),
            "creationTime": _timestamp(submission.get("creationTimeSeconds")),
        })
    return formatted


def calculate_stats(cf_user, history, submissions, now=None):
    rating_change = 0
    if history:
        latest = history[-1]
        rating_change = (latest.get("newRating") or 0) - (latest.get("oldRating") or 0)
    return {
        "isOnline": is_online(cf_user, now),
        "totalSubmissions": "10+" if len(submissions) >= 10 else len(submissions),
        "ratingChange": rating_change,
    }


def format_contest_summary(contest):
    return {
        "id": contest.get("id"),
        "name": contest.get("name"),
        "type": contest.get("type"),
        "phase": contest.get("phase"),
        "durationSeconds": contest.get("durationSeconds"),
        "startTime": _timestamp(contest.get("startTimeSeconds")),
    }


def format_standings_row(row):
    party = row.get("party", {})
    members = [member.get("handle") for member in party.get("members", [])]
    return {
        "rank": row.get("rank"),
        "handles": members,
        "teamName": party.get("teamName"),
        "points": row.get("points"),
        "penalty": row.get("penalty"),
        "solved": sum(1 for result in row.get("problemResults", []) if result.get("points")),
    }
