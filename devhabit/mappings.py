# Entity <-> DTO mappings and the sort mappings of the exposed resources
#
from .dtos import FrequencyDto, HabitDto, HabitWithTagsDto, MilestoneDto, TagDto, TargetDto, UserDto
from .dtos import FrequencyInput, TargetInput, json_value, json_date, json_enum
from .errors import ValidationError
from .models import Habit, HabitStatus, HabitType, Tag
from .sorting import SortMapping, SortMappingDefinition, SortMappingRegistry
from .util import new_id, utcnow


HABIT_SORT_MAPPINGS = SortMappingDefinition(
    HabitDto,
    Habit,
    [
        SortMapping("name", "name"),
        SortMapping("description", "description"),
        SortMapping("type", "type"),
        SortMapping("frequency.type", "frequency_type"),
        SortMapping("frequency.timesPerPeriod", "frequency_times_per_period"),
        SortMapping("target.value", "target_value"),
        SortMapping("target.unit", "target_unit"),
        SortMapping("status", "status"),
        SortMapping("isArchived", "is_archived"),
        SortMapping("endDate", "end_date"),
        # progress first, then the size of the milestone
        SortMapping("milestone", "milestone_current"),
        SortMapping("milestone", "milestone_target"),
        SortMapping("createdAtUtc", "created_at_utc"),
        SortMapping("updatedAtUtc", "updated_at_utc"),
        SortMapping("lastCompletedAtUtc", "last_completed_at_utc"),
        # the youngest habit has the most recent creation time
        SortMapping("age", "created_at_utc", reverse=True),
    ],
    default_sort="createdAtUtc desc",
)

TAG_SORT_MAPPINGS = SortMappingDefinition(
    TagDto,
    Tag,
    [
        SortMapping("name", "name"),
        SortMapping("description", "description"),
        SortMapping("createdAtUtc", "created_at_utc"),
        SortMapping("updatedAtUtc", "updated_at_utc"),
    ],
    default_sort="name asc",
)


def default_sort_mappings():
    """
    :return: SortMappingRegistry with the sort mappings of the exposed collections
    """
    registry = SortMappingRegistry(HABIT_SORT_MAPPINGS, TAG_SORT_MAPPINGS)
    return registry


#
# Habits
#
def habit_to_dto(habit: Habit) -> HabitDto:
    return HabitDto(
        id=habit.id,
        name=habit.name,
        description=habit.description,
        type=habit.type,
        frequency=FrequencyDto(type=habit.frequency_type, times_per_period=habit.frequency_times_per_period),
        target=TargetDto(value=habit.target_value, unit=habit.target_unit),
        status=habit.status,
        is_archived=habit.is_archived,
        end_date=habit.end_date,
        milestone=None if habit.milestone_target is None else MilestoneDto(target=habit.milestone_target, current=habit.milestone_current or 0),
        created_at_utc=habit.created_at_utc,
        updated_at_utc=habit.updated_at_utc,
        last_completed_at_utc=habit.last_completed_at_utc,
    )


def habit_with_tags_to_dto(habit: Habit) -> HabitWithTagsDto:
    dto = habit_to_dto(habit)
    return HabitWithTagsDto(**vars(dto), tags=[tag.name for tag in habit.tags])


def _set_frequency(habit: Habit, frequency: FrequencyInput) -> None:
    habit.frequency_type = frequency.type
    habit.frequency_times_per_period = frequency.times_per_period


def _set_target(habit: Habit, target: TargetInput) -> None:
    habit.target_value = target.value
    habit.target_unit = target.unit


def _set_milestone_target(habit: Habit, milestone_target) -> None:
    if milestone_target is None:
        return
    if habit.milestone_target is None:
        habit.milestone_current = 0
    # the milestone progress is tracked by the server, it's never set from a payload
    habit.milestone_target = milestone_target


def create_habit_entity(dto) -> Habit:
    """
    :param dto: CreateHabitDto
    :return: new, ongoing Habit
    """
    habit = Habit(
        id=new_id("h"),
        name=dto.name,
        description=dto.description,
        type=dto.type,
        status=HabitStatus.ONGOING,
        is_archived=False,
        end_date=dto.end_date,
        created_at_utc=utcnow(),
    )
    _set_frequency(habit, dto.frequency)
    _set_target(habit, dto.target)
    _set_milestone_target(habit, dto.milestone_target)
    return habit


def update_habit_from_dto(habit: Habit, dto) -> None:
    """
    :param dto: UpdateHabitDto
    """
    habit.name = dto.name
    habit.description = dto.description
    habit.type = dto.type
    habit.end_date = dto.end_date
    _set_frequency(habit, dto.frequency)
    _set_target(habit, dto.target)
    _set_milestone_target(habit, dto.milestone_target)
    habit.updated_at_utc = utcnow()


def _patch_milestone(habit, payload):
    _set_milestone_target(habit, json_value(payload, "target", int))


HABIT_PATCH_ATTRIBUTES = {
    "name": lambda habit, payload: setattr(habit, "name", json_value(payload, "name", str)),
    "description": lambda habit, payload: setattr(habit, "description", json_value(payload, "description", str, required=False)),
    "type": lambda habit, payload: setattr(habit, "type", json_enum(payload, "type", HabitType)),
    "status": lambda habit, payload: setattr(habit, "status", json_enum(payload, "status", HabitStatus)),
    "isArchived": lambda habit, payload: setattr(habit, "is_archived", json_value(payload, "isArchived", bool)),
    "endDate": lambda habit, payload: setattr(habit, "end_date", json_date(payload, "endDate")),
    "frequency": lambda habit, payload: _set_frequency(habit, FrequencyInput.from_json(json_value(payload, "frequency", dict))),
    "target": lambda habit, payload: _set_target(habit, TargetInput.from_json(json_value(payload, "target", dict))),
    "milestone": lambda habit, payload: _patch_milestone(habit, json_value(payload, "milestone", dict)),
}


def patch_habit(habit: Habit, payload: dict) -> None:
    """
    Partial update: only the attributes present in the payload are modified

    :param payload: json object with a subset of the HABIT_PATCH_ATTRIBUTES keys
    """
    unknown = [key for key in payload if key not in HABIT_PATCH_ATTRIBUTES]
    if unknown:
        raise ValidationError(f"Attributes can't be patched: {', '.join(unknown)}")
    if not payload:
        raise ValidationError("Empty patch document")
    for key in payload:
        HABIT_PATCH_ATTRIBUTES[key](habit, payload)
    habit.updated_at_utc = utcnow()


#
# Tags & Users
#
def tag_to_dto(tag: Tag) -> TagDto:
    return TagDto(
        id=tag.id,
        name=tag.name,
        description=tag.description,
        created_at_utc=tag.created_at_utc,
        updated_at_utc=tag.updated_at_utc,
    )


def create_tag_entity(dto) -> Tag:
    return Tag(id=new_id("t"), name=dto.name, description=dto.description, created_at_utc=utcnow())


def update_tag_from_dto(tag: Tag, dto) -> None:
    tag.name = dto.name
    tag.description = dto.description
    tag.updated_at_utc = utcnow()


def user_to_dto(user) -> UserDto:
    return UserDto(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at_utc=user.created_at_utc,
        updated_at_utc=user.updated_at_utc,
    )
