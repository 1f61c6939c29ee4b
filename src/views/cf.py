from flask import Blueprint
import logging

import codeforces
from helpers import *  # noqa
from db import db

api = Blueprint("cf", __name__)

logger = logging.getLogger("CODEWARS")


def cf_handle_for(username):
    """
    Codeforces handle of a logged in site user.
    Raises ValueError describing why the handle cannot be used.
    """
    user = find_user(username)
    if not user:
        raise ValueError('User not found')
    if not user["logged_in"]:
        raise ValueError('User is not logged in')
    if not user["cfusername"]:
        raise ValueError('Codeforces username not found for this user')
    return user["cfusername"]


def cf_route(f):
    """
    Resolve the user's handle and turn lookup failures into 400 responses
    """
    @wraps(f)
    def decorated_function(username, *args, **kwargs):
        try:
            handle = cf_handle_for(username)
            data = f(handle, *args, **kwargs)
        except (ValueError, codeforces.CodeforcesError) as e:
            return json_fail(str(e), 400)
        return json_success({"username": username, **data})
    return decorated_function


@api.route("/basic/<username>")
@cf_route
def basic(handle):
    cf_user = codeforces.fetch_user_info(handle)
    return {"basic": {
        "handle": cf_user.get("handle"),
        "rating": cf_user.get("rating") or 0,
        "maxRating": cf_user.get("maxRating") or 0,
        "rank": cf_user.get("rank") or "unrated",
        "isOnline": codeforces.is_online(cf_user),
    }}


@api.route("/profile/<username>")
@cf_route
def profile(handle):
    return {"profile": codeforces.format_profile(codeforces.fetch_user_info(handle))}


@api.route("/contests/<username>")
@cf_route
def contests(handle):
    return {"contests": codeforces.format_contests(codeforces.fetch_rating_history(handle))}


@api.route("/submissions/<username>")
@cf_route
def submissions(handle):
    count = request.args.get("count", 10, type=int) or 10
    recent = codeforces.fetch_recent_submissions(handle, count)
    return {"submissions": codeforces.format_submissions(recent, count)}


@api.route("/stats/<username>")
@cf_route
def stats(handle):
    cf_user = codeforces.fetch_user_info(handle)
    history = codeforces.fetch_rating_history(handle)
    recent = codeforces.fetch_recent_submissions(handle, 10)
    return {"stats": codeforces.calculate_stats(cf_user, history, recent)}


@api.route("/full/<username>")
@api.route("/<username>")
@cf_route
def full(handle):
    cf_user = codeforces.fetch_user_info(handle)
    history = codeforces.fetch_rating_history(handle)
    recent = codeforces.fetch_recent_submissions(handle, 10)
    return {"cf": {
        "profile": codeforces.format_profile(cf_user),
        "contests": codeforces.format_contests(history),
        "recentActivity": {
            "submissions": codeforces.format_submissions(recent, 5),
        },
        "stats": codeforces.calculate_stats(cf_user, history, recent),
    }}


def update_cf_data(cfusername):
    """
    Copy the user's current Codeforces profile onto their record
    """
    profile = codeforces.fetch_profile(cfusername)
    if not profile:
        return False
    db.execute(("UPDATE users SET cf_image_url=:avatar, cf_rating=:rating, "
                "cf_max_rating=:max_rating, cf_rank=:rank, updated_at=datetime('now') "
                "WHERE cfusername=:handle"),
               avatar=profile["avatar"], rating=profile["rating"],
               max_rating=profile["maxRating"], rank=profile["rank"], handle=cfusername)
    return True


@api.route("/update-cf-data/<username>", methods=["PUT"])
def update_user_cf_data(username):
    user = find_user(username)
    if not user:
        return json_fail('User not found', 404)

    if not update_cf_data(user["cfusername"]):
        return json_fail('Failed to update Codeforces data', 400)

    logger.info(f"Refreshed Codeforces data of {username}", extra={"section": "cf"})
    return json_response({
        "message": "Codeforces data updated successfully",
        "cfImageUrl": find_user(username)["cf_image_url"],
    }, 200)


@api.route("/update-all-cf-data/<admin_name>", methods=["PUT"])
@admin_required
def update_all_cf_data(admin_name):
    users = db.execute("SELECT cfusername FROM users")
    updated, failed = 0, 0
    for user in users:
        if update_cf_data(user["cfusername"]):
            updated += 1
        else:
            failed += 1

    logger.info((f"Admin {admin_name} refreshed Codeforces data: {updated} updated, "
                 f"{failed} failed"), extra={"section": "cf"})
    return json_response({
        "message": "Bulk update completed",
        "updated": updated,
        "failed": failed,
        "total": len(users),
    }, 200)
