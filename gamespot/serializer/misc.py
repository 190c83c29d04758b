"""
Request Serializers
-------------------

Defines the schemas that the bodies of incoming requests must validate.
Unknown fields are ignored so that older frontends keep working.
"""

from marshmallow import Schema, EXCLUDE
from marshmallow.fields import Integer, String
from marshmallow.validate import Length, Range

from gamespot.models.util import RelayAction
from gamespot.serializer.fields import EnumField


class ConsoleRequestSchema(Schema):
    """A request naming a console."""

    class Meta:
        unknown = EXCLUDE

    console = String(required=True, validate=Length(min=1), metadata={"description": "The name of the console."})


class BookingRequestSchema(ConsoleRequestSchema):
    minutes = Integer(required=True, validate=Range(min=1), metadata={"description": "The length of the session."})


class PaymentRequestSchema(BookingRequestSchema):
    method = String(required=True, validate=Length(min=1), metadata={"description": "How the customer paid."})
    photo_data = String(
        data_key="photoData", allow_none=True,
        metadata={"description": "A photo of the receipt, as base64 or an image data URL."}
    )


class PowerControlRequestSchema(ConsoleRequestSchema):
    action = EnumField(RelayAction, required=True, metadata={"description": "Whether to power on or off."})
