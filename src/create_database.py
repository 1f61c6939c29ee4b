from db import db


def create_tables(db):
    db.execute("BEGIN")

    db.execute("""CREATE TABLE IF NOT EXISTS 'users' (
                    'id' integer PRIMARY KEY NOT NULL,
                    'username' varchar(32) NOT NULL UNIQUE,
                    'email' varchar(128) NOT NULL UNIQUE,
                    'password' varchar(256) NOT NULL,
                    'role' varchar(8) NOT NULL DEFAULT('user'),
                    'name' varchar(128) NOT NULL DEFAULT(''),
                    'cfusername' varchar(64) NOT NULL UNIQUE,
                    'ccusername' varchar(64) UNIQUE,
                    'lcusername' varchar(64) UNIQUE,
                    'acusername' varchar(64) UNIQUE,
                    'logged_in' boolean NOT NULL DEFAULT(0),
                    'cf_image_url' varchar(256) NOT NULL DEFAULT(''),
                    'cf_rating' integer NOT NULL DEFAULT(0),
                    'cf_max_rating' integer NOT NULL DEFAULT(0),
                    'cf_rank' varchar(32) NOT NULL DEFAULT('unrated'),
                    'created_at' datetime NOT NULL DEFAULT(0),
                    'updated_at' datetime NOT NULL DEFAULT(0)
                );""")

    db.execute("CREATE INDEX IF NOT EXISTS idx_users_cf_rating ON users(cf_rating)")

    db.execute("COMMIT")


if __name__ == "__main__":
    create_tables(db)
