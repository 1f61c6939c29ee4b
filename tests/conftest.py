import os
import tempfile

import pytest

# Settings are read when the application is imported, so point every file
# it touches at a scratch directory first.
TEST_DIR = tempfile.mkdtemp(prefix="codewars-test-")
os.environ["CODEWARS_DATABASE"] = os.path.join(TEST_DIR, "database.db")
os.environ["CODEWARS_SECRET_KEY"] = "test-secret-key"
os.environ["CODEWARS_SESSION_DIR"] = os.path.join(TEST_DIR, "session")
os.environ["CODEWARS_LOG_FILE"] = os.path.join(TEST_DIR, "logs", "application.log")
open(os.environ["CODEWARS_DATABASE"], "w").close()

from werkzeug.security import generate_password_hash  # noqa: E402

from application import app as flask_app  # noqa: E402
from db import db  # noqa: E402

PASSWORD = "correct-horse"


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, VERIFY_CF_HANDLES=False, CLIST_API_KEY="tester:key")
    db.execute("DELETE FROM users")
    yield flask_app
    db.execute("DELETE FROM users")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, role="user", logged_in=False, cfusername=None,
              rating=0, max_rating=0, password=PASSWORD):
        db.execute(("INSERT INTO users(username, email, password, role, cfusername, logged_in, "
                    "cf_rating, cf_max_rating, created_at, updated_at) "
                    "VALUES(?, ?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))"),
                   username, f"{username}@example.com",
                   generate_password_hash(password, method="pbkdf2:sha256:1000"),
                   role, cfusername or f"cf_{username}", int(logged_in), rating, max_rating)
        return db.execute("SELECT * FROM users WHERE username=?", username)[0]
    return _make
