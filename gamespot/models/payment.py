"""
Payment
---------------------------

A single payment taken at the kiosk. Payments are only ever appended.
"""
from datetime import datetime
from typing import Dict, Any

from tortoise import Model, fields

from gamespot.models.util import normalize_photo


class Payment(Model):
    id = fields.IntField(pk=True)
    console = fields.CharField(max_length=255)
    minutes = fields.IntField()
    method = fields.CharField(max_length=255)
    user = fields.CharField(max_length=255)
    paid_at: datetime = fields.DatetimeField(auto_now_add=True)

    photo_data = fields.TextField(null=True)
    """The photo receipt as an image data URL."""

    class Meta:
        table = "payments"

    @property
    def photo_saved(self) -> bool:
        return self.photo_data is not None

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "console": self.console,
            "minutes": self.minutes,
            "method": self.method,
            "user": self.user,
            "paid_at": self.paid_at,
            "photo_url": normalize_photo(self.photo_data),
            "photo_saved": self.photo_saved,
        }

    def __str__(self):
        return f"[{self.id}] {self.console} {self.minutes}m ({self.method})"
