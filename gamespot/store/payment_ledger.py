"""
Payment Ledger
--------------

The append-only log of payments. Records are never changed or deleted
once written, and writing one never waits on a relay.
"""
from typing import List, Optional

from gamespot.models import Payment
from gamespot.models.util import normalize_photo
from gamespot.store.util import translates_storage_errors


class PaymentLedger:

    def __init__(self, payer: str):
        self.payer = payer
        """The user recorded against each payment."""

    @translates_storage_errors
    async def record(self, console: str, minutes: int, method: str, photo_data: Optional[str] = None) -> Payment:
        """
        Records a payment.

        The photo receipt is stored as an image data URL, or as null when
        none was taken.
        """
        return await Payment.create(
            console=console,
            minutes=minutes,
            method=method,
            user=self.payer,
            photo_data=normalize_photo(photo_data),
        )

    @translates_storage_errors
    async def list(self) -> List[Payment]:
        """
        Gets every payment, most recent first.

        Ids only ever increase, and are kept by migrations, so they order the
        log even where older rows store their time in a different format.
        """
        return await Payment.all().order_by("-id")
