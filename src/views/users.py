from flask import Blueprint, session, current_app as app
import logging

from werkzeug.security import generate_password_hash

import codeforces
from helpers import *  # noqa
from db import db

api = Blueprint("users", __name__)

logger = logging.getLogger("CODEWARS")

LEADERBOARD_ORDER = {
    "rating": "cf_rating DESC, username ASC",
    "max_rating": "cf_max_rating DESC, username ASC",
    "username": "username ASC",
}
UPDATABLE_FIELDS = ("name", "email") + PLATFORM_HANDLES


@api.route("/all/<admin_name>")
@admin_required
def all_users(admin_name):
    users = db.execute("SELECT * FROM users ORDER BY id ASC")
    return json_success([user_public(user) for user in users])


@api.route("/leaderboard")
def leaderboard():
    sort = request.args.get("sort", "rating")
    if sort not in LEADERBOARD_ORDER:
        return json_fail("Sort must be one of " + ", ".join(LEADERBOARD_ORDER), 400)
    page, per_page = page_args(app.config["LEADERBOARD_PAGE_SIZE"], app.config["MAX_PAGE_SIZE"])

    total = db.execute("SELECT COUNT(*) AS cnt FROM users")[0]["cnt"]
    offset = (page - 1) * per_page
    rows = db.execute(f"SELECT * FROM users ORDER BY {LEADERBOARD_ORDER[sort]} LIMIT ? OFFSET ?",
                      per_page, offset)

    users = []
    for i, row in enumerate(rows):
        users.append({
            "rank": offset + i + 1,
            "username": row["username"],
            "name": row["name"],
            "cfusername": row["cfusername"],
            "rating": row["cf_rating"],
            "maxRating": row["cf_max_rating"],
            "cfRank": row["cf_rank"],
            "avatar": row["cf_image_url"],
        })
    return json_success({
        "users": users,
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": math.ceil(total / per_page) if total else 0,
    })


@api.route("/contests")
def contests():
    page, per_page = page_args(app.config["LEADERBOARD_PAGE_SIZE"], app.config["MAX_PAGE_SIZE"])
    try:
        contest_list = codeforces.fetch_contest_list()
    except codeforces.CodeforcesError as e:
        logger.warning(f"Codeforces contest list unavailable: {e}", extra={"section": "cf"})
        return json_fail(str(e), 502)

    finished = [c for c in contest_list if c.get("phase") == "FINISHED"]
    finished.sort(key=lambda c: c.get("startTimeSeconds") or 0, reverse=True)
    result = paginate([codeforces.format_contest_summary(c) for c in finished], page, per_page)
    result["contests"] = result.pop("items")
    return json_success(result)


@api.route("/contest/<int:contest_id>/standings")
def contest_standings(contest_id):
    page, per_page = page_args(app.config["LEADERBOARD_PAGE_SIZE"], app.config["MAX_PAGE_SIZE"])
    try:
        standings = codeforces.fetch_standings(contest_id, start=(page - 1) * per_page + 1,
                                               count=per_page)
    except codeforces.CodeforcesError as e:
        logger.warning(f"Codeforces standings for contest {contest_id} unavailable: {e}",
                       extra={"section": "cf"})
        return json_fail(str(e), 502)

    # Mark rows belonging to registered users
    members = {row["cfusername"].lower(): row["username"]
               for row in db.execute("SELECT username, cfusername FROM users")}
    rows = []
    for raw in standings.get("rows", []):
        row = codeforces.format_standings_row(raw)
        row["users"] = [members[handle.lower()] for handle in row["handles"]
                        if handle and handle.lower() in members]
        rows.append(row)

    return json_success({
        "contest": codeforces.format_contest_summary(standings.get("contest", {})),
        "problems": [{"index": p.get("index"), "name": p.get("name"), "rating": p.get("rating")}
                     for p in standings.get("problems", [])],
        "rows": rows,
        "page": page,
        "per_page": per_page,
    })


@api.route("/<username>")
def get_user(username):
    user = find_user(username)
    if not user:
        return json_fail('User not found !', 404)
    if not user["logged_in"]:
        return json_fail('Access denied! This user is not logged in.', 403)
    return json_success(user_public(user))


@api.route("/", methods=["POST"])
def create_user():
    body = request_body()
    message = register_chk(body)
    if message:
        return json_fail(message, 400)

    if app.config["VERIFY_CF_HANDLES"]:
        exists, error = codeforces.verify_handle(body["cfusername"])
        if error:
            return json_fail(error, 503)
        if not exists:
            return json_fail('Codeforces username does not exist', 400)

    handles = {field: body.get(field) or None for field in PLATFORM_HANDLES}
    try:
        db.execute(("INSERT INTO users(username, email, password, role, name, cfusername, "
                    "ccusername, lcusername, acusername, created_at, updated_at) "
                    "VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))"),
                   body["username"], body["email"], generate_password_hash(body["password"]),
                   body["role"], body.get("name") or "", body["cfusername"],
                   handles["ccusername"], handles["lcusername"], handles["acusername"])
    except ValueError:
        return json_fail('Username, email or Codeforces username already exists', 400)

    logger.info((f"User {body['username']} has created an account "
                 f"on IP {request.remote_addr}"), extra={"section": "auth"})
    return json_success(user_public(find_user(body["username"])), 201)


@api.route("/login/<username>", methods=["PUT"])
def login(username):
    password = request_body().get("password")
    if not password:
        return json_fail('Password is required', 400)

    user = find_user(username)
    if not user:
        return json_fail('User not found', 404)
    if user["logged_in"]:
        return json_fail('User already logged in', 403)
    if not password_chk(user, password):
        return json_fail('Incorrect password', 400)

    db.execute("UPDATE users SET logged_in=1, updated_at=datetime('now') WHERE id=?", user["id"])

    # Remember which user has logged in
    session.permanent = True
    session["user_id"] = user["id"]
    session["username"] = user["username"]

    logger.info((f"User #{user['id']} ({username}) logged in "
                 f"on IP {request.remote_addr}"), extra={"section": "auth"})
    return json_response({
        "message": "Login successful",
        "user": user_public(find_user(username)),
    }, 200)


@api.route("/logout/<username>", methods=["PUT"])
def logout(username):
    user = find_user(username)
    if not user:
        return json_fail('User not found', 404)
    if not user["logged_in"]:
        return json_fail('User already logged out!', 403)

    db.execute("UPDATE users SET logged_in=0, updated_at=datetime('now') WHERE id=?", user["id"])
    if session.get("username") == username:
        session.clear()

    logger.info(f"User #{user['id']} ({username}) logged out", extra={"section": "auth"})
    return json_success(user_public(find_user(username)))


@api.route("/<username>", methods=["PUT"])
def update_user(username):
    body = request_body()
    user = find_user(username)
    if not user:
        return json_fail('User not found', 404)
    if not password_chk(user, body.get("password")):
        return json_fail('Incorrect password', 400)

    changes = {field: body[field] for field in UPDATABLE_FIELDS if field in body}
    new_password = body.get("new_password")
    if any(value is not None and not isinstance(value, str)
           for value in list(changes.values()) + [new_password]):
        return json_fail('Text fields must be strings', 400)
    for field in PLATFORM_HANDLES:
        if field in changes and not changes[field]:
            changes[field] = None
    if "email" in changes and not changes["email"]:
        return json_fail('Email cannot be blank', 400)

    if new_password is not None:
        if len(new_password) < 8:
            return json_fail('Password must be at least 8 characters', 400)
        changes["password"] = generate_password_hash(new_password)

    if changes:
        assignments = ", ".join(f"{field}=:{field}" for field in changes)
        try:
            db.execute(f"UPDATE users SET {assignments}, updated_at=datetime('now') WHERE id=:uid",
                       uid=user["id"], **changes)
        except ValueError:
            return json_fail('Email or platform username already in use', 400)
        logger.info(f"User #{user['id']} ({username}) updated {', '.join(sorted(changes))}",
                    extra={"section": "users"})

    return json_success(user_public(find_user(username)))


@api.route("/<username>", methods=["DELETE"])
def delete_user(username):
    user = find_user(username)
    if not user:
        return json_fail('User not found !', 404)
    if not password_chk(user, request_body().get("password")):
        return json_fail('Incorrect password !', 400)

    db.execute("DELETE FROM users WHERE id=?", user["id"])
    if session.get("username") == username:
        session.clear()

    logger.info(f"User #{user['id']} ({username}) deleted their account",
                extra={"section": "users"})
    return json_response({"message": "User deleted successfully"}, 200)
