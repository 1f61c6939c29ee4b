import os
import secrets
import sys

SECRET_KEY = os.environ.get("CODEWARS_SECRET_KEY")
if not SECRET_KEY:
    try:
        with open("secret_key.txt", "r") as file:
            SECRET_KEY = file.readline().strip()
    except Exception as e:
        sys.stderr.write(str(e))
        SECRET_KEY = secrets.token_hex(48)  # 384 bits
        with open("secret_key.txt", "w+") as file:
            file.write(SECRET_KEY)

DATABASE = os.environ.get("CODEWARS_DATABASE", "database.db")

SESSION_PERMANENT = True
PERMANENT_SESSION_LIFETIME = 30 * 24 * 60 * 60
SESSION_TYPE = "filesystem"
SESSION_COOKIE_SAMESITE = "Strict"
SESSION_COOKIE_HTTPONLY = True
SESSION_FILE_DIR = os.environ.get("CODEWARS_SESSION_DIR", "session")
LOGGING_FILE_LOCATION = os.environ.get("CODEWARS_LOG_FILE", "logs/application.log")
os.makedirs(SESSION_FILE_DIR, 0o770, True)
os.makedirs(os.path.dirname(LOGGING_FILE_LOCATION) or ".", 0o770, True)

# Contest calendar
CLIST_API_URL = "https://clist.by/api/v3/contest/"
CLIST_API_KEY = os.environ.get("CLIST_API_KEY", "")
CLIST_PAGE_LIMIT = 100
CONTEST_ALLOWED_HOSTS = [
    "codeforces.com",
    "atcoder.jp",
    "codechef.com",
    "topcoder.com",
    "leetcode.com",
    "hackerrank.com",
    "hackerearth.com",
]
CONTEST_MAX_DURATION = 24 * 60 * 60
DISPLAY_OFFSET_MINUTES = int(os.environ.get("DISPLAY_OFFSET_MINUTES", 330))  # UTC+5:30
WEEK_STARTS_ON = 0  # Monday

# Users
VERIFY_CF_HANDLES = os.environ.get("VERIFY_CF_HANDLES", "1") != "0"
LEADERBOARD_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
