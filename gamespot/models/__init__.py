"""
The models package contains all the models used on the server.

.. autoclasstree:: gamespot.models
"""

from .console import Console
from .payment import Payment
