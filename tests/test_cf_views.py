import pytest

import codeforces
from db import db

CF_USER = {
    "handle": "tourist",
    "rating": 3800,
    "maxRating": 4000,
    "rank": "legendary grandmaster",
    "maxRank": "legendary grandmaster",
    "avatar": "https://userpic.codeforces.org/tourist.jpg",
}
HISTORY = [
    {"contestId": 1, "contestName": "Round 1", "handle": "tourist", "rank": 1,
     "oldRating": 3700, "newRating": 3800, "ratingUpdateTimeSeconds": 1_700_000_000},
]
SUBMISSIONS = [
    {"id": n, "contestId": 1, "verdict": "OK", "programmingLanguage": "C++17",
     "problem": {"index": "A", "name": "Problem", "rating": 800},
     "creationTimeSeconds": 1_700_000_000 + n} for n in range(12)
]


@pytest.fixture
def fake_cf(monkeypatch):
    handles = []

    def user_info(handle):
        handles.append(handle)
        return CF_USER

    monkeypatch.setattr(codeforces, "fetch_user_info", user_info)
    monkeypatch.setattr(codeforces, "fetch_rating_history", lambda handle: HISTORY)
    monkeypatch.setattr(codeforces, "fetch_recent_submissions",
                        lambda handle, count=10: SUBMISSIONS[:count])
    return handles


def test_lookup_failures_are_400(client, make_user, fake_cf):
    make_user("offline", cfusername="tourist")

    response = client.get("/api/cf/basic/nobody")
    assert response.status_code == 400
    assert response.get_json()["message"] == "User not found"

    response = client.get("/api/cf/basic/offline")
    assert response.status_code == 400
    assert response.get_json()["message"] == "User is not logged in"


def test_codeforces_errors_are_400(client, make_user, monkeypatch):
    make_user("online", cfusername="ghost", logged_in=True)

    def missing(handle):
        raise codeforces.CodeforcesError("Failed to fetch user info from Codeforces")
    monkeypatch.setattr(codeforces, "fetch_user_info", missing)

    response = client.get("/api/cf/profile/online")
    assert response.status_code == 400
    assert "Failed to fetch user info" in response.get_json()["message"]


def test_basic(client, make_user, fake_cf):
    make_user("online", cfusername="tourist", logged_in=True)
    data = client.get("/api/cf/basic/online").get_json()["data"]
    assert data["username"] == "online"
    assert data["basic"]["rating"] == 3800
    assert data["basic"]["isOnline"] is False
    assert fake_cf == ["tourist"]


def test_profile_contests_and_submissions(client, make_user, fake_cf):
    make_user("online", cfusername="tourist", logged_in=True)

    profile = client.get("/api/cf/profile/online").get_json()["data"]["profile"]
    assert profile["maxRating"] == 4000
    assert profile["country"] == ""

    contests = client.get("/api/cf/contests/online").get_json()["data"]["contests"]
    assert contests["totalContests"] == 1

    submissions = client.get("/api/cf/submissions/online?count=3").get_json()["data"]["submissions"]
    assert [s["id"] for s in submissions] == [0, 1, 2]


def test_stats(client, make_user, fake_cf):
    make_user("online", cfusername="tourist", logged_in=True)
    stats = client.get("/api/cf/stats/online").get_json()["data"]["stats"]
    assert stats["totalSubmissions"] == "10+"
    assert stats["ratingChange"] == 100


@pytest.mark.parametrize("path", ["/api/cf/full/online", "/api/cf/online"])
def test_full(client, make_user, fake_cf, path):
    make_user("online", cfusername="tourist", logged_in=True)
    cf = client.get(path).get_json()["data"]["cf"]
    assert cf["profile"]["handle"] == "tourist"
    assert cf["contests"]["totalContests"] == 1
    assert len(cf["recentActivity"]["submissions"]) == 5
    assert cf["stats"]["ratingChange"] == 100


def test_update_cf_data(client, make_user, monkeypatch):
    make_user("tourist_fan", cfusername="tourist")
    monkeypatch.setattr(codeforces, "fetch_profile", lambda handle: {
        "avatar": "https://userpic.codeforces.org/tourist.jpg",
        "rating": 3800, "maxRating": 4000, "rank": "legendary grandmaster",
    })

    response = client.put("/api/cf/update-cf-data/tourist_fan")
    assert response.status_code == 200
    assert response.get_json()["cfImageUrl"] == "https://userpic.codeforces.org/tourist.jpg"

    row = db.execute("SELECT * FROM users WHERE username='tourist_fan'")[0]
    assert row["cf_rating"] == 3800
    assert row["cf_max_rating"] == 4000
    assert row["cf_rank"] == "legendary grandmaster"

    assert client.put("/api/cf/update-cf-data/nobody").status_code == 404

    monkeypatch.setattr(codeforces, "fetch_profile", lambda handle: None)
    assert client.put("/api/cf/update-cf-data/tourist_fan").status_code == 400


def test_update_all_cf_data(client, make_user, monkeypatch):
    make_user("admin", role="admin", logged_in=True, cfusername="good_admin")
    make_user("one", cfusername="good_one")
    make_user("two", cfusername="bad_two")
    monkeypatch.setattr(codeforces, "fetch_profile", lambda handle: {
        "avatar": "", "rating": 1500, "maxRating": 1500, "rank": "specialist",
    } if handle.startswith("good") else None)

    assert client.put("/api/cf/update-all-cf-data/one").status_code == 403

    body = client.put("/api/cf/update-all-cf-data/admin").get_json()
    assert body["message"] == "Bulk update completed"
    assert (body["updated"], body["failed"], body["total"]) == (2, 1, 3)
