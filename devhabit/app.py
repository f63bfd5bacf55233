#
# DevHabit application factory
#
# It can be ran standalone like this:
# python -m devhabit.app [Listener-IP]
#
# This will run the api on http://Listener-Ip:5000, the swagger ui is served on /docs
#
import os
import sys
from flask import Flask
from .app_init import DB, log
from .api import DevHabitAPI

DEFAULT_DATABASE_URI = "sqlite:///devhabit.db"


def create_app(config=None, sort_mappings=None):
    """
    :param config: dict with flask config settings, e.g. {"SQLALCHEMY_DATABASE_URI": "sqlite://"}
    :param sort_mappings: SortMappingRegistry, defaults to the habit and tag sort mappings
    :return: Flask app serving the DevHabit api
    """
    app = Flask("devhabit")
    app.config.update(SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URI), API_PREFIX=os.environ.get("API_PREFIX", ""))
    if config:
        app.config.update(config)

    DB.init_app(app)
    with app.app_context():
        DB.create_all()
        DevHabitAPI(app, sort_mappings=sort_mappings, prefix=app.config["API_PREFIX"])
    return app


if __name__ == "__main__":
    HOST = sys.argv[1] if len(sys.argv) > 1 else "0.0.0.0"
    PORT = 5000
    app = create_app()
    log.info(f"Starting API: http://{HOST}:{PORT}{app.config['API_PREFIX']}")
    app.run(host=HOST, port=PORT)
