# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# If set to debug, too much sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#     "errors": [
#         {
#             "title": "Invalid Sort Field: ",
#             "detail": "The sort field 'bogus' is not supported",
#             "code": "400"
#         }
#     ]
# }
#
import traceback
from flask import has_request_context, request
from sqlalchemy.exc import DontWrapMixin
from http import HTTPStatus
import devhabit
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class DevHabitError(Exception, DontWrapMixin):
    """
    Base class of the errors that are converted to a json error payload
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = "Error: "

    def __init__(self, message="", status_code=None):
        Exception.__init__(self, message)
        if status_code is not None:
            self.status_code = status_code
        self.message = self.__class__.message

    @property
    def errors(self):
        """
        :return: list of error objects to be returned in the response body
        """
        return [dict(title=self.message, detail=self.message, code=str(self.status_code))]


class NotFoundError(DevHabitError):
    """
    This exception is raised when an item was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value
    message = "NotFoundError "

    def __init__(self, message="", status_code=HTTPStatus.NOT_FOUND.value):
        DevHabitError.__init__(self, message, status_code)
        devhabit.log.info("Not found: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class GenericError(DevHabitError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = "Generic Error: "

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value):
        DevHabitError.__init__(self, message, status_code)
        devhabit.log.error("Generic Error: %s", message)
        if is_debug():
            if has_request_context():
                devhabit.log.info(f"Error in {request.url}")
            devhabit.log.debug(traceback.format_exc(120))
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


class ConfigurationError(GenericError):
    """
    Raised when the application is wired incorrectly, e.g. a resource without sort mappings.
    This is a programming error: the details are logged but never sent to the client.
    """

    message = "Configuration Error: "

    def __init__(self, message):
        GenericError.__init__(self, message)
        if is_debug():
            # only the log gets the mapping table details
            self.message = self.__class__.message + HIDDEN_LOG


class PreconditionError(GenericError):
    """
    Raised when a value that should have been validated by the request binding layer is invalid
    """

    message = "Precondition Error: "


class ValidationError(DevHabitError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Validation Error: "

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value):
        DevHabitError.__init__(self, message, status_code)
        devhabit.log.warning("ValidationError: %s", message)
        self.message += message


class ConflictError(ValidationError):
    """
    Raised when the request conflicts with the current state, e.g. a duplicate tag name
    """

    message = "Conflict: "

    def __init__(self, message=""):
        ValidationError.__init__(self, message, HTTPStatus.CONFLICT.value)


class AggregateValidationError(ValidationError):
    """
    A validation error for a list of offending query parameter tokens,
    every token is reported in its own error object
    """

    parameter = None  # name of the offending query parameter

    def __init__(self, invalid):
        """
        :param invalid: list of (token, explanation) tuples
        """
        self.invalid = list(invalid)
        ValidationError.__init__(self, ", ".join(detail for _, detail in self.invalid))

    @property
    def tokens(self):
        return [token for token, _ in self.invalid]

    @property
    def errors(self):
        title = self.__class__.message.strip()
        return [dict(title=title, detail=detail, code=str(self.status_code), source=dict(parameter=self.parameter)) for _, detail in self.invalid]


class InvalidSortField(AggregateValidationError):
    """
    One or more clauses of the sort= query parameter can't be applied
    """

    message = "Invalid Sort Field: "
    parameter = "sort"


class InvalidField(AggregateValidationError):
    """
    One or more names in the fields= query parameter don't exist on the resource
    """

    message = "Invalid Field: "
    parameter = "fields"
