from pydantic import BaseModel, ConfigDict, Field


class BookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    time_phrase: str = Field(alias="timePhrase")


class CancelRequest(BaseModel):
    name: str = Field(min_length=1)


class RescheduleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    new_time: str = Field(alias="newTime")
