from functools import wraps

from tortoise.exceptions import BaseORMException

from gamespot.service.errors import StorageError


def translates_storage_errors(original_function):
    """Re-raises any ORM failure from the wrapped coroutine as a :class:`StorageError`."""

    @wraps(original_function)
    async def new_func(*args, **kwargs):
        try:
            return await original_function(*args, **kwargs)
        except BaseORMException as error:
            raise StorageError(f"Database error: {error}") from error

    return new_func
