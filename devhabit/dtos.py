"""
Data transfer objects

The response DTOs are dataclasses, their fields are the public fields of the resources:
the FieldShaper and the json encoder use the camelCased attribute names.

The request DTOs are parsed from the (camelCased) json payloads with `from_json`,
only the structure and the value types are checked here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional
from .errors import ValidationError
from .models import FrequencyType, HabitStatus, HabitType


@dataclass
class FrequencyDto:
    type: FrequencyType
    times_per_period: int


@dataclass
class TargetDto:
    value: int
    unit: str


@dataclass
class MilestoneDto:
    target: int
    current: int


@dataclass
class HabitDto:
    id: str
    name: str
    description: Optional[str]
    type: HabitType
    frequency: FrequencyDto
    target: TargetDto
    status: HabitStatus
    is_archived: bool
    end_date: Optional[date]
    milestone: Optional[MilestoneDto]
    created_at_utc: datetime
    updated_at_utc: Optional[datetime] = None
    last_completed_at_utc: Optional[datetime] = None


@dataclass
class HabitWithTagsDto(HabitDto):
    tags: List[str] = field(default_factory=list)


@dataclass
class TagDto:
    id: str
    name: str
    description: Optional[str]
    created_at_utc: datetime
    updated_at_utc: Optional[datetime] = None


@dataclass
class UserDto:
    id: str
    email: str
    name: str
    created_at_utc: datetime
    updated_at_utc: Optional[datetime] = None


#
# Request payload parsing
#
def json_value(payload, key, expected_type, required=True, default=None):
    if not isinstance(payload, dict):
        raise ValidationError(f"Expected an object, got {payload!r}")
    value = payload.get(key)
    if value is None:
        if required:
            raise ValidationError(f"'{key}' is required")
        return default
    # bool is an int subclass
    if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
        raise ValidationError(f"Invalid value for '{key}': {value!r}")
    return value


def json_enum(payload, key, enum_cls, required=True, default=None):
    value = json_value(payload, key, str, required, None)
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid value for '{key}': '{value}', expected one of {allowed}")


def json_date(payload, key):
    value = json_value(payload, key, str, required=False)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date for '{key}': '{value}'")


@dataclass
class FrequencyInput:
    type: FrequencyType
    times_per_period: int

    @classmethod
    def from_json(cls, payload):
        return cls(json_enum(payload, "type", FrequencyType), json_value(payload, "timesPerPeriod", int))


@dataclass
class TargetInput:
    value: int
    unit: str

    @classmethod
    def from_json(cls, payload):
        return cls(json_value(payload, "value", int), json_value(payload, "unit", str))


@dataclass
class CreateHabitDto:
    name: str
    description: Optional[str]
    type: HabitType
    frequency: FrequencyInput
    target: TargetInput
    end_date: Optional[date] = None
    milestone_target: Optional[int] = None

    @classmethod
    def from_json(cls, payload):
        milestone = json_value(payload, "milestone", dict, required=False)
        return cls(
            name=json_value(payload, "name", str),
            description=json_value(payload, "description", str, required=False),
            type=json_enum(payload, "type", HabitType),
            frequency=FrequencyInput.from_json(json_value(payload, "frequency", dict)),
            target=TargetInput.from_json(json_value(payload, "target", dict)),
            end_date=json_date(payload, "endDate"),
            milestone_target=json_value(milestone, "target", int) if milestone is not None else None,
        )


class UpdateHabitDto(CreateHabitDto):
    """
    PUT payload, same structure as the POST payload
    """


@dataclass
class CreateTagDto:
    name: str
    description: Optional[str] = None

    @classmethod
    def from_json(cls, payload):
        return cls(name=json_value(payload, "name", str), description=json_value(payload, "description", str, required=False))


class UpdateTagDto(CreateTagDto):
    pass


@dataclass
class UpsertHabitTagsDto:
    tag_ids: List[str]

    @classmethod
    def from_json(cls, payload):
        tag_ids = json_value(payload, "tagIds", list)
        if not all(isinstance(tag_id, str) for tag_id in tag_ids):
            raise ValidationError("'tagIds' must be a list of strings")
        return cls(list(dict.fromkeys(tag_ids)))
