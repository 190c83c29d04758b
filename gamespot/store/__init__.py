"""
.. autoclasstree:: gamespot.store

The store package holds the durable state of the kiosk: the console
roster with its bookings, the payment log, and the schema they live in.
"""

from .migrations import migrate, describe_tables
from .payment_ledger import PaymentLedger
from .session_store import SessionStore
