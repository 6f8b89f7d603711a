"""Base schema for JSON bodies exchanged with clients.

Python attributes stay snake_case; the wire format is camelCase
(``market_id`` <-> ``marketId``). Dump with ``model_dump(by_alias=True)``.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
