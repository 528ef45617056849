"""Action error taxonomy.

Every action raises an ``ActionError`` subclass. Driver and schema errors are
translated by the ``action`` decorator, with the original kept as the cause.
"""
import functools
import logging

from bson.errors import InvalidId
from mongoengine.errors import NotUniqueError, OperationError, ValidationError
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class ActionError(Exception):
    pass


class NotFoundError(ActionError):
    pass


class ValidationFailure(ActionError):
    pass


class StoreFailure(ActionError):
    pass


def action(description):
    """Log failures of the wrapped action and re-raise them as ActionError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ActionError as error:
                logger.error("Error %s: %s", description, error)
                raise
            except (ValidationError, NotUniqueError, InvalidId) as error:
                logger.error("Error %s: %s", description, error)
                raise ValidationFailure(f"Failed to {description}: {error}") from error
            except (OperationError, PyMongoError) as error:
                logger.exception("Error %s", description)
                raise StoreFailure(f"Failed to {description}: {error}") from error

        return wrapper

    return decorator
