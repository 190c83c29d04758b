"""
Payment Related Views
-------------------------

Takes payments, which book the console they are for, and lists the
payments taken so far.
"""
from http import HTTPStatus

from aiohttp_apispec import docs

from gamespot.serializer.decorators import expects, returns
from gamespot.serializer.misc import PaymentRequestSchema
from gamespot.serializer.models import PaymentReceiptSchema, PaymentSchema, ErrorSchema
from gamespot.service.errors import ValidationError, NotFoundError
from gamespot.views.base import BaseView
from gamespot.views.utils import failure


class PayView(BaseView):
    """
    Takes a payment for a console.
    """
    url = "/pay"
    name = "pay"

    @docs(summary="Pay For A Console")
    @expects(PaymentRequestSchema())
    @returns(
        PaymentReceiptSchema(),
        invalid=(ErrorSchema(), HTTPStatus.BAD_REQUEST),
        not_found=(ErrorSchema(), HTTPStatus.NOT_FOUND),
    )
    async def post(self):
        """
        A payment always books the console, replacing any session it had.
        When a free console with a relay is paid for it is powered on; how
        that went is reported in ``powerOn``, but the payment stands either way.
        """
        data = self.request["data"]

        try:
            receipt = await self.booking_manager.pay(
                data["console"], data["minutes"], data["method"], data.get("photo_data")
            )
        except ValidationError as error:
            return "invalid", failure(error)
        except NotFoundError as error:
            return "not_found", failure(error)

        response = {
            "success": True,
            "console": receipt.payment.console,
            "payment_id": receipt.payment.id,
            "end_time": receipt.end_time,
            "test_mode": receipt.test_mode,
            "photo_saved": receipt.payment.photo_saved,
        }
        if receipt.power_on is not None:
            response["power_on"] = receipt.power_on
        return response


class PaymentsView(BaseView):
    """
    Gets the payment log.
    """
    url = "/payments"
    name = "payments"

    @docs(summary="Get All Payments")
    @returns(PaymentSchema(many=True))
    async def get(self):
        """Lists every payment, most recent first."""
        return [payment.serialize() for payment in await self.booking_manager.payment_ledger.list()]
