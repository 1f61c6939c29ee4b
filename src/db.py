from cs50 import SQL
import sys
import os

from settings import DATABASE

try:
    db = SQL(f"sqlite:///{DATABASE}")
except Exception as e:
    sys.stderr.write(str(e))
    if not os.path.exists(DATABASE):
        open(DATABASE, "w").close()
    db = SQL(f"sqlite:///{DATABASE}")
