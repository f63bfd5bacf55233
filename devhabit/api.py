# flask_restful_swagger2 API subclass
from http import HTTPStatus
from functools import wraps
from typing import Callable
import werkzeug
from flask import Flask
from flask_restful import abort
from flask_restful.representations.json import output_json
from flask_restful.utils import OrderedDict
from flask_restful_swagger_2 import Api as FRSApiBase
import devhabit
from .config import get_config, is_debug
from .errors import DevHabitError
from .json_encoder import DevHabitJSONProvider
from .links import HABITS_ENDPOINT, HABIT_ENDPOINT, HABIT_TAGS_ENDPOINT, TAGS_ENDPOINT, TAG_ENDPOINT
from .mappings import default_sort_mappings
from .resources import HabitsAPI, HabitAPI, HabitTagsAPI, TagsAPI, TagAPI, UserAPI

HTTP_METHODS = ["GET", "POST", "PATCH", "DELETE", "PUT"]
USER_ENDPOINT = "user"

# endpoint name, resource class, url
RESOURCES = [
    (HABITS_ENDPOINT, HabitsAPI, "/habits"),
    (HABIT_ENDPOINT, HabitAPI, "/habits/<string:habit_id>"),
    (HABIT_TAGS_ENDPOINT, HabitTagsAPI, "/habits/<string:habit_id>/tags"),
    (TAGS_ENDPOINT, TagsAPI, "/tags"),
    (TAG_ENDPOINT, TagAPI, "/tags/<string:tag_id>"),
    (USER_ENDPOINT, UserAPI, "/users/<string:user_id>"),
]


class DevHabitAPI(FRSApiBase):
    """
    Subclass of the flask_restful_swagger API class that exposes the DevHabit resources
    and generates the corresponding swagger documentation

    :param app: Flask app, the database (devhabit.DB) should be initialized for it
    :param sort_mappings: SortMappingRegistry used by the collection endpoints
    :param prefix: url prefix of the endpoints, e.g. "/api"
    """

    def __init__(self, app: Flask, sort_mappings=None, prefix: str = "", description: str = "DevHabit API", swaggerui_blueprint: bool = True, **kwargs) -> None:
        app_db = kwargs.pop("app_db", None)
        devhabit.DevHabit(app, app_db=app_db, prefix=prefix, swaggerui_blueprint=swaggerui_blueprint)
        self.sort_mappings = sort_mappings if sort_mappings is not None else default_sort_mappings()

        super().__init__(
            app,
            api_spec_url=kwargs.pop("api_spec_url", "/swagger"),
            title=kwargs.pop("title", "DevHabit"),
            api_version=kwargs.pop("api_version", devhabit.__version__),
            description=description,
            prefix=prefix,
            base_path=prefix,
            **kwargs,
        )
        app.json = DevHabitJSONProvider(app)
        # error documents are rendered by flask-restful in the negotiated media type
        self.representations = OrderedDict([("application/json", output_json), (get_config("HATEOAS_MEDIA_TYPE"), output_json)])
        self.expose_resources()
        app.extensions["devhabit"] = self

    def expose_resources(self) -> None:
        """
        Create the api classes for the resources and add them to the app, e.g.

        @api_decorator
        class HabitsAPI(resources.HabitsAPI):
            sort_mappings = self.sort_mappings
        """
        for endpoint, resource, url in RESOURCES:
            properties = {"sort_mappings": self.sort_mappings}
            api_class = api_decorator(type(resource.__name__, (resource,), properties))
            devhabit.log.info(f"Exposing {endpoint} on {url}")
            self.add_resource(api_class, url, endpoint=endpoint)


def api_decorator(cls):
    """Decorator for the API views: add generic exception handling

    The swagger documentation of the methods is kept (functools.wraps copies the swagger operation object)

    :param cls: The class that will be decorated (e.g. HabitsAPI)
    :return: decorated class
    """
    for method_name in [method.lower() for method in HTTP_METHODS]:
        method = getattr(cls, method_name, None)
        if not method:
            continue
        decorated_method = http_method_decorator(method)
        setattr(cls, method_name, decorated_method)
    return cls


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the supported HTTP methods (get, post, put, patch, delete)
    - commit the database
    - convert all exceptions to a JSON serializable error document

    This method will be called for all requests
    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        """Wrap the method and perform error handling
        :param *args:
        :param **kwargs:
        :return: result of the wrapped method
        """
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        message = HTTPStatus.INTERNAL_SERVER_ERROR.phrase
        errors = None
        try:
            result = fun(*args, **kwargs)
            devhabit.DB.session.commit()
            return result

        except DevHabitError as exc:
            if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
                devhabit.log.exception(exc)
            else:
                devhabit.log.info(f"{exc.status_code}: {exc}")
            status_code = exc.status_code
            errors = exc.errors

        except werkzeug.exceptions.HTTPException as exc:
            status_code = exc.code
            message = exc.description
            devhabit.log.error(message)

        except Exception as exc:
            devhabit.log.exception(exc)
            if is_debug():
                message = str(exc)

        devhabit.DB.session.rollback()
        if errors is None:
            errors = [dict(title=message, detail=message, code=str(status_code))]
        abort(status_code, errors=errors)

    return method_wrapper
