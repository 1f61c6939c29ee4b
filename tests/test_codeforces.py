from unittest.mock import Mock, patch

import pytest
import requests

import codeforces

CF_USER = {
    "handle": "tourist",
    "rating": 3800,
    "maxRating": 4000,
    "rank": "legendary grandmaster",
    "avatar": "https://userpic.codeforces.org/avatar.jpg",
    "lastOnlineTimeSeconds": 1_700_000_000,
    "registrationTimeSeconds": 1_265_987_288,
}


def api_response(payload, status_code=200):
    return Mock(status_code=status_code, json=Mock(return_value=payload))


def test_fetch_user_info_returns_first_result():
    with patch("codeforces.requests.get", return_value=api_response({"status": "OK", "result": [CF_USER]})) as get:
        assert codeforces.fetch_user_info("tourist") == CF_USER
    assert get.call_args.args[0] == "https://codeforces.com/api/user.info"
    assert get.call_args.kwargs["params"] == {"handles": "tourist"}


def test_fetch_user_info_failure():
    with patch("codeforces.requests.get", return_value=api_response({"status": "FAILED", "comment": "not found"})):
        with pytest.raises(codeforces.CodeforcesError, match="Failed to fetch user info"):
            codeforces.fetch_user_info("nobody")


def test_network_failure_becomes_codeforces_error():
    with patch("codeforces.requests.get", side_effect=requests.Timeout("slow")):
        with pytest.raises(codeforces.CodeforcesError):
            codeforces.fetch_rating_history("tourist")


def test_history_and_submissions_default_to_empty():
    with patch("codeforces.requests.get", return_value=api_response({"status": "FAILED"})):
        assert codeforces.fetch_rating_history("tourist") == []
        assert codeforces.fetch_recent_submissions("tourist") == []


def test_fetch_recent_submissions_params():
    with patch("codeforces.requests.get", return_value=api_response({"status": "OK", "result": []})) as get:
        codeforces.fetch_recent_submissions("tourist", count=3)
    assert get.call_args.kwargs["params"] == {"handle": "tourist", "from": 1, "count": 3}


def test_fetch_standings_error_uses_comment():
    with patch("codeforces.requests.get", return_value=api_response({"status": "FAILED", "comment": "contestId: Contest with id 1 not found"})):
        with pytest.raises(codeforces.CodeforcesError, match="not found"):
            codeforces.fetch_standings(1)


@pytest.mark.parametrize("response, expected", [
    (api_response({"status": "OK", "result": [CF_USER]}), (True, None)),
    (api_response({"status": "FAILED", "comment": "handles: User with handle x not found"}, 400), (False, None)),
    (api_response({}, 503), (False, "CF API not working")),
])
def test_verify_handle(response, expected):
    with patch("codeforces.requests.get", return_value=response):
        assert codeforces.verify_handle("tourist") == expected


def test_verify_handle_when_unreachable():
    with patch("codeforces.requests.get", side_effect=requests.ConnectionError()):
        assert codeforces.verify_handle("tourist") == (False, "CF API not working")


def test_fetch_profile_prefers_avatar_and_defaults():
    with patch("codeforces.fetch_user_info", return_value={"handle": "newbie", "titlePhoto": "photo.jpg"}):
        profile = codeforces.fetch_profile("newbie")
    assert profile["avatar"] == "photo.jpg"
    assert profile["rating"] == 0
    assert profile["rank"] == "unrated"


def test_fetch_profile_returns_none_on_failure():
    with patch("codeforces.fetch_user_info", side_effect=codeforces.CodeforcesError("down")):
        assert codeforces.fetch_profile("tourist") is None


def test_format_profile():
    profile = codeforces.format_profile(CF_USER)
    assert profile["handle"] == "tourist"
    assert profile["city"] == ""
    assert profile["friendOfCount"] == 0
    assert profile["lastOnlineTime"].startswith("2023-11-14T22:13:20")
    assert codeforces.format_profile({"handle": "x"})["registrationTime"] is None


def test_format_contests_and_submissions():
    history = [{"contestId": 1, "contestName": "Round 1", "handle": "tourist", "rank": 1,
                "oldRating": 1500, "newRating": 1700, "ratingUpdateTimeSeconds": 0}]
    formatted = codeforces.format_contests(history)
    assert formatted["totalContests"] == 1
    assert formatted["contestHistory"][0]["newRating"] == 1700

    submissions = [{"id": n, "contestId": 1, "verdict": "OK",
                    "problem": {"index": "A", "name": "Problem", "rating": 800},
                    "creationTimeSeconds": 1_700_000_000} for n in range(8)]
    recent = codeforces.format_submissions(submissions)
    assert len(recent) == 5
    assert recent[0]["problemIndex"] == "A"


def test_calculate_stats():
    history = [{"oldRating": 1500, "newRating": 1600}, {"oldRating": 1600, "newRating": 1550}]
    stats = codeforces.calculate_stats(CF_USER, history, [{}] * 10, now=1_700_000_030)
    assert stats == {"isOnline": True, "totalSubmissions": "10+", "ratingChange": -50}

    stats = codeforces.calculate_stats(CF_USER, [], [{}] * 3, now=1_700_000_600)
    assert stats == {"isOnline": False, "totalSubmissions": 3, "ratingChange": 0}


def test_format_standings_row():
    row = {"rank": 2, "points": 3.0, "penalty": 40,
           "party": {"members": [{"handle": "Petr"}], "teamName": None},
           "problemResults": [{"points": 1.0}, {"points": 0.0}, {"points": 1.0}]}
    assert codeforces.format_standings_row(row) == {
        "rank": 2, "handles": ["Petr"], "teamName": None,
        "points": 3.0, "penalty": 40, "solved": 2,
    }
