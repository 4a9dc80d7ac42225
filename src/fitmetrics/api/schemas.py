"""Request bodies accepted by the API."""

import datetime as dt

from pydantic import BaseModel, Field

from fitmetrics.domain.accounts import NewClientAccount
from fitmetrics.domain.diary import MealInput
from fitmetrics.domain.goals import GoalTargets
from fitmetrics.domain.measurements import MeasurementInput


class MealPayload(BaseModel):
    """Single meal inside a diary day snapshot."""

    name: str = Field(min_length=1)
    time: dt.datetime | None = None
    protein: float = Field(ge=0)
    fat: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fiber: float = Field(ge=0)

    def to_domain(self) -> MealInput:
        return MealInput(
            name=self.name,
            time=self.time,
            protein=self.protein,
            fat=self.fat,
            carbs=self.carbs,
            fiber=self.fiber,
        )


class DiarySyncRequest(BaseModel):
    """Full snapshot of one diary day."""

    date: str = Field(min_length=1)
    meals: list[MealPayload] = Field(default_factory=list)


class MeasurementSyncRequest(BaseModel):
    """Circumferences recorded for the week containing ``date``."""

    date: str = Field(min_length=1)
    chest: float | None = None
    waist: float | None = None
    hips: float | None = None
    left_arm: float | None = None
    right_arm: float | None = None
    left_leg: float | None = None
    right_leg: float | None = None

    def to_domain(self, day: dt.date) -> MeasurementInput:
        return MeasurementInput(
            day=day,
            chest=self.chest,
            waist=self.waist,
            hips=self.hips,
            left_arm=self.left_arm,
            right_arm=self.right_arm,
            left_leg=self.left_leg,
            right_leg=self.right_leg,
        )


class SurveySyncRequest(BaseModel):
    """Survey answers for one day, as bucket strings."""

    date: str = Field(min_length=1)
    weight: float | None = None
    motivation: str | None = None
    sleep: str | None = None
    stress: str | None = None
    digestion: str | None = None
    water: str | None = None
    hunger: str | None = None
    libido: str | None = None
    comment: str | None = None


class GoalsRequest(BaseModel):
    """Daily macro targets set by a trainer."""

    daily_protein: float = Field(ge=0)
    daily_fat: float = Field(ge=0)
    daily_carbs: float = Field(ge=0)
    daily_fiber: float | None = Field(default=None, ge=0)

    def to_domain(self) -> GoalTargets:
        return GoalTargets(
            protein=self.daily_protein,
            fat=self.daily_fat,
            carbs=self.daily_carbs,
            fiber=self.daily_fiber,
        )


class InviteCreateRequest(BaseModel):
    client_name: str | None = None


class RegisterClientRequest(BaseModel):
    """Client registration forwarded by the authentication layer."""

    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password_hash: str = Field(min_length=1)
    name: str = Field(min_length=2)
    phone: str | None = None
    birth_date: dt.date | None = None
    invite_code: str = Field(min_length=6, max_length=6)

    def to_domain(self) -> NewClientAccount:
        return NewClientAccount(
            email=self.email,
            password_hash=self.password_hash,
            name=self.name,
            phone=self.phone,
            birth_date=self.birth_date,
        )


class ChangeTrainerRequest(BaseModel):
    invite_code: str = Field(min_length=1)
