from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )


class StoredRecord(BaseModel):
    """Flat record persisted in the shared store.

    Attributes are snake_case in Python and camelCase on disk, so records written
    by earlier versions of the app (and by other tools) read back unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
