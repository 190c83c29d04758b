"""
Decorators
----------

The routes of the API take and give JSON. Rather than every handler
parsing, validating and dumping by hand, they are wrapped with
:func:`expects` for the request body and :func:`returns` for the response.

.. code:: python

    @expects(BookingRequestSchema())
    @returns(BookingSchema(), not_found=(ErrorSchema(), HTTPStatus.NOT_FOUND))
    async def post(self):
        console = self.request["data"]["console"]
        ...
        if missing:
            return "not_found", {"success": False, "error": "Console not found"}
        return {"success": True, "console": console, "end_time": end_time}

.. note:: Passing ``None`` as the schema to either decorator leaves the
    route untouched.
"""

from functools import wraps
from http import HTTPStatus
from json import JSONDecodeError
from typing import Optional, Tuple, Union, Dict

from aiohttp import web
from aiohttp.web_urldispatcher import View
from marshmallow import Schema, ValidationError
from marshmallow_jsonschema import JSONSchema

from gamespot.serializer.models import ErrorSchema

error_schema = ErrorSchema()


def error_response(status: HTTPStatus, error: str, **extra) -> web.Response:
    """A failure in the shape every route fails with."""
    return web.json_response(error_schema.dump({"success": False, "error": error, **extra}), status=status)


def expects(schema: Optional[Schema], into="data"):
    """
    Validates the JSON body of the request against the schema, and stores
    the loaded data on the request under ``into``.

    Requests that are not JSON, are malformed, or do not validate are turned
    away with a 400, along with the JSON schema of the expected body.

    :param schema: The schema the body must validate.
    :param into: The request key for the loaded data.
    """

    if schema is None:
        return lambda x: x

    if not isinstance(schema, Schema):
        raise TypeError(f"Expected a Schema, got {type(schema).__name__}")

    json_schema = JSONSchema().dump(schema)["definitions"][type(schema).__name__]

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            request = self.request

            if not request.body_exists or request.content_type != "application/json":
                return error_response(
                    HTTPStatus.BAD_REQUEST, f"This route ({request.method}: {request.rel_url}) only accepts JSON.",
                    schema=json_schema
                )

            try:
                body = await request.json()
            except JSONDecodeError as err:
                return error_response(HTTPStatus.BAD_REQUEST, "Could not parse supplied JSON.", errors=err.args)

            try:
                request[into] = schema.load(body)
            except ValidationError as err:
                return error_response(
                    HTTPStatus.BAD_REQUEST, "The request did not validate properly.",
                    errors=err.messages, schema=json_schema
                )

            return await original_function(self, **kwargs)

        return new_func

    return decorator


def returns(
    schema: Optional[Schema] = None, return_code: HTTPStatus = HTTPStatus.OK,
    **named_schema: Union[Schema, Tuple[Schema, HTTPStatus]]
):
    """
    Dumps whatever the route returns through the schema, so routes can
    return plain dictionaries (or lists, for ``many`` schemas).

    Routes with other outcomes name them as keyword arguments, each with its
    schema and optionally its status code, and pick one by returning a
    ``(name, data)`` tuple. Anything else is dumped with the unnamed schema.

    Data that cannot be dumped is a 500, rather than a half written response.

    :param schema: The schema of a successful response.
    :param return_code: The status code of a successful response.
    :param named_schema: The other outcomes of the route.
    """

    if schema is None and not named_schema:
        return lambda x: x

    outcomes: Dict[Optional[str], Tuple[Schema, HTTPStatus]] = {None: (schema, return_code)}
    for outcome, outcome_schema in named_schema.items():
        outcomes[outcome] = outcome_schema if isinstance(outcome_schema, tuple) else (outcome_schema, return_code)

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            result = await original_function(self, **kwargs)
            outcome, data = result if named_schema and isinstance(result, tuple) else (None, result)

            try:
                matched_schema, status = outcomes[outcome]
                return web.json_response(matched_schema.dump(data), status=status)
            except (ValidationError, KeyError, ValueError, TypeError) as err:
                return error_response(
                    HTTPStatus.INTERNAL_SERVER_ERROR, "We tried to send you data back, but it came out wrong.",
                    errors=err.messages if isinstance(err, ValidationError) else [str(arg) for arg in err.args]
                )

        return new_func

    return decorator
