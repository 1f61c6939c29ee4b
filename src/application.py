import logging

from flask import Flask, request
from flask_session import Session
from werkzeug.exceptions import HTTPException, InternalServerError, default_exceptions

from helpers import *  # noqa
from db import db
from create_database import create_tables

app = Flask(__name__)
app.config.from_object('settings')

LOG_HANDLER = logging.FileHandler(app.config['LOGGING_FILE_LOCATION'])
LOG_HANDLER.setFormatter(
    logging.Formatter(fmt="[CODEWARS] [{section}] [{levelname}] [{asctime}] {message}",
                      style='{'))
logger = logging.getLogger("CODEWARS")
logger.addHandler(LOG_HANDLER)
logger.propagate = False
for handler in logging.root.handlers[:]:
    logging.root.removeHandler(handler)
logging.basicConfig(
    filename=app.config['LOGGING_FILE_LOCATION'],
    level=logging.DEBUG,
    format='%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s',
)
logging.getLogger().addHandler(logging.StreamHandler())

# Configure flask-session
Session(app)

create_tables(db)

# Load api
from views.api import api as view_api
from views.users import api as view_users
from views.cf import api as view_cf
from views.contests import api as view_contests
app.register_blueprint(view_api, url_prefix="/api")
app.register_blueprint(view_users, url_prefix="/api/users")
app.register_blueprint(view_cf, url_prefix="/api/cf")
app.register_blueprint(view_contests, url_prefix="/api/contests")


@app.route("/")
def index():
    return json_response({"message": "Welcome to Backend root!"}, 200)


# Error handling
def errorhandler(e):
    if not isinstance(e, HTTPException):
        e = InternalServerError()
    if e.code == 500:
        logger.error(f"Internal server error on {request.path}", extra={"section": "app"})
        return json_fail("Internal Server Error", 500)
    return json_fail(e.description, e.code)

for code in default_exceptions:
    app.errorhandler(code)(errorhandler)


@app.after_request
def security_policies(response):
    response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['X-XSS-Protection'] = '1; mode=block'
    return response

if __name__ == "__main__":
    app.run(debug=True, port=3000)
