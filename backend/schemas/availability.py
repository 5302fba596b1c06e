from datetime import datetime, time

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator, model_validator

from backend.scheduling.timeline import as_utc


def parse_time_of_day(value):
    """Accept ``HH:MM`` (or longer ``HH:MM:SS...``) strings and ``time`` objects."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    if isinstance(value, str):
        normalized = value.strip()[:5]
        try:
            return datetime.strptime(normalized, '%H:%M').time()
        except ValueError as exc:
            raise ValueError(f'invalid time string: {value}') from exc

    raise ValueError('time of day must be an HH:MM string')


class AvailabilityRuleRequest(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    slot_length_minutes: int = Field(gt=0)
    available: bool = True

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def validate_time_of_day(cls, value):
        return parse_time_of_day(value)

    @model_validator(mode='after')
    def validate_window(self):
        if self.end_time <= self.start_time:
            raise ValueError('end_time must be after start_time')
        return self


class AvailabilityRulePatch(BaseModel):
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    slot_length_minutes: int | None = Field(default=None, gt=0)
    available: bool | None = None

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def validate_time_of_day(cls, value):
        if value is None:
            return None
        return parse_time_of_day(value)

    @model_validator(mode='after')
    def validate_window(self):
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError('end_time must be after start_time')
        return self

    def changes(self) -> dict:
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class AvailabilityRuleResponse(BaseModel):
    id: int
    user_id: str = Field(validation_alias=AliasChoices('user_id', 'subject_id'))
    day_of_week: int
    start_time: time
    end_time: time
    slot_length_minutes: int
    available: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer('created_at', 'updated_at')
    def serialize_instant(self, value: datetime | None) -> datetime | None:
        return as_utc(value)

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    start_utc: datetime
    end_utc: datetime

    @field_serializer('start_utc', 'end_utc')
    def serialize_instant(self, value: datetime) -> datetime:
        return as_utc(value)
