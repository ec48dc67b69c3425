"""
Shared schema base - camelCase on the wire, snake_case in Python
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case input and serializes to camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
