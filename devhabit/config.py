# Configuration settings should be set in app.config
# get_config falls back to the DevHabit class defaults and then to the environment
import os
import logging
from flask import current_app
import devhabit
from typing import Optional, Union


def get_config(option: str) -> Optional[Union[bool, int, str]]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # no app context or the app didn't configure the option
        result = getattr(devhabit.DevHabit, option, os.environ.get(option, None))
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter holding an integer, may be set as a string in the environment
    :return: integer value
    """
    value = get_config(option)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise devhabit.errors.ConfigurationError(f"Invalid integer configuration value {option}={value!r}")


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return devhabit.log.getEffectiveLevel() < logging.INFO
