from flask import Blueprint
from datetime import datetime
import pytz

from helpers import *  # noqa

api = Blueprint("api", __name__)


@api.route("/")
def api_index():
    return json_response({"message": "API is working!"}, 200)


@api.route("/health")
def health():
    return json_response({
        "status": "OK",
        "timestamp": datetime.now(pytz.UTC).isoformat(),
    }, 200)
