"""
Shared response base: camelCase on the wire, snake_case in Python
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OkResponse(CamelModel):
    """Every success body carries ok=true"""
    ok: bool = True
