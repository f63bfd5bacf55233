# SQLAlchemy models
#
# The nested value objects of a habit (frequency, target, milestone) are stored as columns
# of the habits table, e.g. frequency.type -> habits.frequency_type
#
import enum
from .app_init import DB
from .util import utcnow


class _NamedEnum(enum.Enum):
    """
    Enum stored and serialized by its value, parsed case insensitively
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class HabitType(_NamedEnum):
    NONE = "None"
    BINARY = "Binary"
    MEASURABLE = "Measurable"


class HabitStatus(_NamedEnum):
    NONE = "None"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"


class FrequencyType(_NamedEnum):
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


def _enum_column(enum_cls):
    return DB.Enum(enum_cls, values_callable=lambda members: [member.value for member in members], native_enum=False, length=20)


class User(DB.Model):
    __tablename__ = "users"
    id = DB.Column(DB.String(500), primary_key=True)
    email = DB.Column(DB.String(300), nullable=False, unique=True)
    name = DB.Column(DB.String(100), nullable=False)
    # id of the user at the identity provider
    identity_id = DB.Column(DB.String(500), nullable=True, unique=True)
    created_at_utc = DB.Column(DB.DateTime, nullable=False, default=utcnow)
    updated_at_utc = DB.Column(DB.DateTime, nullable=True)


class HabitTag(DB.Model):
    __tablename__ = "habit_tags"
    habit_id = DB.Column(DB.String(500), DB.ForeignKey("habits.id", ondelete="CASCADE"), primary_key=True)
    tag_id = DB.Column(DB.String(500), DB.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
    created_at_utc = DB.Column(DB.DateTime, nullable=False, default=utcnow)


class Habit(DB.Model):
    __tablename__ = "habits"
    id = DB.Column(DB.String(500), primary_key=True)
    user_id = DB.Column(DB.String(500), DB.ForeignKey("users.id"), nullable=True)
    name = DB.Column(DB.String(100), nullable=False)
    description = DB.Column(DB.String(500), nullable=True)
    type = DB.Column(_enum_column(HabitType), nullable=False, default=HabitType.NONE)
    frequency_type = DB.Column(_enum_column(FrequencyType), nullable=False, default=FrequencyType.NONE)
    frequency_times_per_period = DB.Column(DB.Integer, nullable=False, default=1)
    target_value = DB.Column(DB.Integer, nullable=False, default=1)
    target_unit = DB.Column(DB.String(100), nullable=False, default="")
    status = DB.Column(_enum_column(HabitStatus), nullable=False, default=HabitStatus.ONGOING)
    is_archived = DB.Column(DB.Boolean, nullable=False, default=False)
    end_date = DB.Column(DB.Date, nullable=True)
    # a habit without milestone has no milestone_target
    milestone_target = DB.Column(DB.Integer, nullable=True)
    milestone_current = DB.Column(DB.Integer, nullable=True)
    created_at_utc = DB.Column(DB.DateTime, nullable=False, default=utcnow)
    updated_at_utc = DB.Column(DB.DateTime, nullable=True)
    last_completed_at_utc = DB.Column(DB.DateTime, nullable=True)

    habit_tags = DB.relationship("HabitTag", cascade="all, delete-orphan")
    tags = DB.relationship("Tag", secondary="habit_tags", viewonly=True, order_by="Tag.name")


class Tag(DB.Model):
    __tablename__ = "tags"
    id = DB.Column(DB.String(500), primary_key=True)
    user_id = DB.Column(DB.String(500), DB.ForeignKey("users.id"), nullable=True)
    name = DB.Column(DB.String(50), nullable=False, unique=True)
    description = DB.Column(DB.String(500), nullable=True)
    created_at_utc = DB.Column(DB.DateTime, nullable=False, default=utcnow)
    updated_at_utc = DB.Column(DB.DateTime, nullable=True)

    habit_tags = DB.relationship("HabitTag", cascade="all, delete-orphan")
