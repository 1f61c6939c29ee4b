import logging, re, json, math

from functools import wraps
from flask import make_response, request
from werkzeug.security import check_password_hash

from db import *

ROLES = ("admin", "user", "guest")
# Paths under /api/users that would shadow a user of the same name
RESERVED_USERNAMES = ("contests", "leaderboard")
PLATFORM_HANDLES = ("ccusername", "lcusername", "acusername")

def verify_text(text):
    """
    Check if text only contains A-Z, a-z, 0-9, underscores, and dashes
    """
    return bool(re.match(r'^[\w\-]+$', text))

def json_response(payload, http_code: int):
    resp = make_response((json.dumps(payload, default=str), http_code))
    resp.headers['Content-Type'] = 'application/json; charset=utf-8'
    return resp

def json_fail(message: str, http_code: int):
    """
    Return the fail message as a JSON response with the specified http code
    """
    return json_response({"status": "fail", "message": message}, http_code)

def json_success(data, http_code: int = 200):
    """
    Return data as a successful JSON response
    """
    return json_response({"status": "success", "data": data}, http_code)

def request_body():
    """
    JSON body of the current request, falling back to form fields
    """
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form.to_dict()

def find_user(username):
    rows = db.execute("SELECT * FROM users WHERE username=:username", username=username)
    return rows[0] if rows else None

def user_public(row):
    """
    Strip a users row down to what the API may return
    """
    return {
        "id": row["id"],
        "username": row["username"],
        "email": row["email"],
        "role": row["role"],
        "name": row["name"],
        "cfusername": row["cfusername"],
        "ccusername": row["ccusername"],
        "lcusername": row["lcusername"],
        "acusername": row["acusername"],
        "loggedIn": bool(row["logged_in"]),
        "cfImageUrl": row["cf_image_url"],
        "cfRating": row["cf_rating"],
        "cfMaxRating": row["cf_max_rating"],
        "cfRank": row["cf_rank"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }

def password_chk(user, password):
    """
    Determines if password matches the stored hash of user
    """
    logger = logging.getLogger("CODEWARS")
    if not isinstance(password, str) or not password \
            or not check_password_hash(user["password"], password):
        logger.info(f"Incorrect password for {user['username']} from IP {request.remote_addr}",
                    extra={"section": "auth"})
        return False
    return True

def register_chk(body):
    """
    Determines if the user is allowed to register
    Returns an error message, or None if the body is acceptable
    """
    required = ("username", "email", "password", "role", "cfusername")
    if any(not body.get(field) for field in required):
        return 'Username, email, password, role, and Codeforces username are required !'

    text_fields = required + ("name",) + PLATFORM_HANDLES
    if any(body.get(field) is not None and not isinstance(body[field], str) for field in text_fields):
        return 'Text fields must be strings'

    if not verify_text(body["username"]):
        return 'Invalid username'
    if body["username"].lower() in RESERVED_USERNAMES:
        return 'This username is reserved'

    if len(body["password"]) < 8:
        return 'Password must be at least 8 characters'

    if body["role"] not in ROLES:
        return 'Role must be one of ' + ', '.join(ROLES)

    return None

def admin_required(f):
    """
    Decorate routes whose first URL argument names an admin who must be
    logged in.
    """
    @wraps(f)
    def decorated_function(admin_name, *args, **kwargs):
        admin = db.execute("SELECT * FROM users WHERE username=:username AND role='admin'",
                           username=admin_name)
        if not admin:
            return json_fail('Access denied! Only admins can perform this action.', 403)
        if not admin[0]["logged_in"]:
            return json_fail('Access denied! This Admin is not logged in.', 403)
        return f(admin_name, *args, **kwargs)
    return decorated_function

def page_args(default_size, max_size):
    """
    Read page and per_page from the query string, clamped to sane values
    """
    page = max(request.args.get("page", 1, type=int), 1)
    per_page = request.args.get("per_page", default_size, type=int)
    per_page = min(max(per_page, 1), max_size)
    return page, per_page

def paginate(rows, page, per_page):
    total = len(rows)
    start = (page - 1) * per_page
    return {
        "items": rows[start:start + per_page],
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": math.ceil(total / per_page) if total else 0,
    }
