from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator, model_validator

from backend.scheduling.timeline import as_utc, normalize_instant

MAX_DESCRIPTION_LENGTH = 2000


class CreateBookingRequest(BaseModel):
    candidate_email: str
    start_at_utc: datetime
    end_at_utc: datetime
    source: str | None = None
    type: str | None = None
    description: str | None = None
    title: str | None = None

    @field_validator('start_at_utc', 'end_at_utc')
    @classmethod
    def validate_instant(cls, value: datetime) -> datetime:
        return normalize_instant(value)

    @field_validator('candidate_email')
    @classmethod
    def validate_candidate_email(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Candidate email is required.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is not None and len(value) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')
        return value

    @model_validator(mode='after')
    def validate_range(self):
        if self.start_at_utc >= self.end_at_utc:
            raise ValueError('start must be before end')
        return self

    def booking_metadata(self) -> dict:
        return {
            'source': self.source,
            'type': self.type,
            'description': self.description,
            'title': self.title,
        }


class BookingResponse(BaseModel):
    id: str
    user_id: str = Field(validation_alias=AliasChoices('user_id', 'subject_id'))
    candidate_email: str = Field(validation_alias=AliasChoices('candidate_email', 'candidate_contact'))
    start_at_utc: datetime = Field(validation_alias=AliasChoices('start_at_utc', 'start_at'))
    end_at_utc: datetime = Field(validation_alias=AliasChoices('end_at_utc', 'end_at'))
    status: str
    source: str | None = None
    type: str | None = None
    description: str | None = None
    title: str | None = None
    created_at: datetime | None = None

    @field_serializer('start_at_utc', 'end_at_utc', 'created_at')
    def serialize_instant(self, value: datetime | None) -> datetime | None:
        return as_utc(value)

    class Config:
        from_attributes = True
