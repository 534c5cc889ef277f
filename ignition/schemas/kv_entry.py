from ignition.schemas.base import BaseSchema


class KvEntryCreate(BaseSchema):
    key: str
    value: str


class KvEntryUpdate(BaseSchema):
    value: str | None = None
