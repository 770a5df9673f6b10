import re
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, Field, StringConstraints, model_validator

from app.schemas.events import CamelModel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

PHONE_DIGITS = 10


def normalize_phone(value: str) -> str:
    """Strip formatting and require exactly ten digits: '123-456-7890' -> '1234567890'."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != PHONE_DIGITS:
        raise ValueError(f"phone number must contain exactly {PHONE_DIGITS} digits")
    return digits


PhoneStr = Annotated[NonEmptyStr, AfterValidator(normalize_phone)]


class Participant(CamelModel):
    name: NonEmptyStr
    email: NonEmptyStr
    phone: PhoneStr


class IndividualRegistrationIn(CamelModel):
    type: Literal["individual"]
    name: NonEmptyStr
    email: NonEmptyStr
    phone: PhoneStr

    @property
    def seats(self) -> int:
        return 1


class TeamRegistrationIn(CamelModel):
    type: Literal["team"]
    team_name: NonEmptyStr
    participants: list[Participant] = Field(min_length=1)
    number_of_participants: int | None = None

    @model_validator(mode="after")
    def check_declared_size(self):
        if self.number_of_participants is not None and self.number_of_participants != len(self.participants):
            raise ValueError("numberOfParticipants does not match the participants list")
        return self

    @property
    def seats(self) -> int:
        return len(self.participants)


RegistrationIn = Annotated[Union[IndividualRegistrationIn, TeamRegistrationIn], Field(discriminator="type")]


class RegistrationResult(CamelModel):
    message: str
    registration_id: int
    registration_type: str
    team_id: int | None = None
    team_code: str | None = None


class RegistrationOut(CamelModel):
    """One roster row: an individual contact or a team with its participants."""

    id: int
    user_id: int
    registration_type: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    team_id: int | None = None
    team_name: str | None = None
    participants: list[Participant] | None = None
    number_of_participants: int
    created_at: datetime | None = None

    @classmethod
    def from_registration(cls, registration) -> "RegistrationOut":
        return cls(
            id=registration.id,
            user_id=registration.user_id,
            registration_type=registration.registration_type,
            name=registration.name,
            email=registration.email,
            phone=registration.phone,
            team_id=registration.team_id,
            team_name=registration.team_name,
            participants=registration.participants,
            number_of_participants=registration.participant_count,
            created_at=registration.created_at,
        )
