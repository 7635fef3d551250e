from humps import camelize
from pydantic import BaseModel, ConfigDict


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=camelize, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(frozen=True)
