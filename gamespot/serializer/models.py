"""
Model Serializers
-----------------

Defines the serializers for the responses of the system.
"""

from marshmallow import Schema
from marshmallow.fields import Integer, Boolean, String, Nested, DateTime, Dict, Raw, List

from gamespot.serializer.fields import Many


class ErrorSchema(Schema):
    """The body of every failed request."""

    success = Boolean(required=True)
    error = String(required=True)
    errors = Raw()
    schema = Dict()


class HealthSchema(Schema):
    status = String(required=True)
    timestamp = DateTime(required=True)
    mode = String(required=True)


class ConsoleSchema(Schema):
    """The schema corresponding to the :class:`~gamespot.models.console.Console` model."""

    name = String(required=True)
    booked = Boolean(required=True)
    remaining_time = Integer(data_key="remainingTime", allow_none=True)


class BookingSchema(Schema):
    success = Boolean(required=True)
    console = String(required=True)
    end_time = Integer(data_key="endTime", required=True)


class RelayOutcomeSchema(Schema):
    """The outcome of a press, whether it was real, simulated, failed or is still running."""

    success = Boolean(required=True)
    action = String()
    simulated = Boolean()
    duration_ms = Integer(data_key="durationMs")
    attempts = Integer()
    response = Dict()
    pending = Boolean()
    error = String()
    timeout = Boolean()


class PaymentSchema(Schema):
    """The schema corresponding to the :class:`~gamespot.models.payment.Payment` model."""

    id = Integer(required=True)
    console = String(required=True)
    minutes = Integer(required=True)
    method = String(required=True)
    user = String()
    paid_at = DateTime(data_key="paidAt")
    photo_url = String(data_key="photoUrl", allow_none=True)
    photo_saved = Boolean(data_key="photoSaved")


class PaymentReceiptSchema(Schema):
    success = Boolean(required=True)
    console = String(required=True)
    payment_id = Integer(data_key="paymentId", required=True)
    end_time = Integer(data_key="endTime", required=True)
    test_mode = Boolean(data_key="testMode", required=True)
    photo_saved = Boolean(data_key="photoSaved")
    power_on = Nested(RelayOutcomeSchema(), data_key="powerOn")


class PowerControlSchema(RelayOutcomeSchema):
    """A press requested directly, flattened alongside the console it was for."""

    console = String(required=True)
    test_mode = Boolean(data_key="testMode", required=True)


class ResetSchema(Schema):
    success = Boolean(required=True)
    test_mode = Boolean(data_key="testMode", required=True)
    consoles = List(String())
    power_off = Dict(keys=String(), values=Nested(RelayOutcomeSchema()), data_key="powerOff")


class RelayStatusSchema(Schema):
    console = String(required=True)
    host = String(required=True)
    port = Integer(required=True)
    status = String(required=True)
    detail = Raw()


class RelayStatusReportSchema(Schema):
    timestamp = DateTime(required=True)
    test_mode = Boolean(data_key="testMode", required=True)
    controllers = Many(RelayStatusSchema())
