import logging
import os
import sys
from flask_swagger_ui import get_swaggerui_blueprint
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from .request import DevHabitRequest
import flask.app


class DevHabit:
    """This class configures the Flask application to serve the DevHabit resources
    :param app: a Flask application.
    :param prefix: URL prefix where the swagger ui should be hosted. Default is ''

    The class variables are the configuration defaults, app.config takes precedence (cfr. config.get_config)
    """

    # Configuration settings are stored as class variables
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    HATEOAS_MEDIA_TYPE = "application/vnd.dev-habit.hateoas+json"
    SWAGGER_UI_PATH = "/docs"
    CONFIG_OPTIONS = ("DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "HATEOAS_MEDIA_TYPE", "SWAGGER_UI_PATH")

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, prefix: str = "", app_db: SQLAlchemy = None, swaggerui_blueprint: bool = True) -> None:
        """
        API and application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app_db is None:
            app_db = app.extensions["sqlalchemy"]
        self.db = app_db

        app.request_class = DevHabitRequest
        app.url_map.strict_slashes = False

        for option in self.CONFIG_OPTIONS:
            app.config.setdefault(option, getattr(DevHabit, option))
        # flask-restful appends "did you mean" suggestions to 404 messages otherwise
        app.config.setdefault("ERROR_404_HELP", False)

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)
        elif app.config.get("LOGLEVEL") is not None:
            log.setLevel(app.config["LOGLEVEL"])

        if swaggerui_blueprint is True:
            ui_path = prefix + app.config["SWAGGER_UI_PATH"]
            swaggerui_blueprint = get_swaggerui_blueprint(
                ui_path, f"{prefix}/swagger.json", config={"docExpansion": "none", "defaultModelsExpandDepth": -1}
            )
            app.register_blueprint(swaggerui_blueprint, url_prefix=ui_path)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. http://flask.pocoo.org/docs/0.12/patterns/sqlalchemy/"""
            self.db.session.remove()

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        """
        log = logging.getLogger(__name__.split(".")[0])
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = DevHabit.init_logging(LOGLEVEL)
