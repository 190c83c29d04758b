"""
.. autoclasstree:: gamespot.serializer

The serializer package houses all the schemas for the input/output in the system.
The serializers are used to validate any raw data (such as JSON) coming in and to
shape the data going out of the system.

Field names on the wire are camelCase, which is what the kiosk frontend
speaks. Internally everything is snake_case and the schemas translate
between the two with ``data_key``.
"""

from .fields import EnumField, Many
from .decorators import expects, returns
