"""
Shared base model.

The frontend speaks camelCase JSON (``etfName``, ``monthlyAmount``)
while the Python side uses snake_case attributes.  ``CamelModel`` maps
between the two; responses are serialized with the camelCase aliases
and requests are accepted in either form.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
