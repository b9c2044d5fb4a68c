from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# 24h clock, zero padded, so plain string comparison orders times correctly
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CamelModel(BaseModel):
    """Base for every request/response schema: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
