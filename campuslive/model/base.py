import datetime

import pydantic as p


class BaseModel(p.BaseModel):
    model_config = p.ConfigDict(serialize_by_alias=True)


class FrozenModel(BaseModel):
    model_config = p.ConfigDict(frozen=True)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)
