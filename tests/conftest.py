from datetime import datetime, timedelta
import pytest
from devhabit import DB, create_app
from devhabit.models import FrequencyType, Habit, HabitStatus, HabitType, Tag
from devhabit.util import new_id

HATEOAS = "application/vnd.dev-habit.hateoas+json"
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://", "SERVER_NAME": "localhost"})
    yield app
    with app.app_context():
        DB.session.remove()
        DB.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def habit_payload(**overrides):
    payload = {
        "name": "Read",
        "description": "Read a book",
        "type": "Binary",
        "frequency": {"type": "Daily", "timesPerPeriod": 1},
        "target": {"value": 30, "unit": "minutes"},
    }
    payload.update(overrides)
    return payload


def add_habit(app, name, habit_type=HabitType.BINARY, minutes_ago=0, habit_id=None, **attributes):
    """
    Insert a habit directly in the database, the creation time is BASE_TIME - minutes_ago
    :return: habit id
    """
    habit_id = habit_id or new_id("h")
    values = dict(
        frequency_type=FrequencyType.DAILY,
        frequency_times_per_period=1,
        target_value=1,
        target_unit="times",
        status=HabitStatus.ONGOING,
        is_archived=False,
        created_at_utc=BASE_TIME - timedelta(minutes=minutes_ago),
    )
    values.update(attributes)
    with app.app_context():
        habit = Habit(id=habit_id, name=name, type=habit_type, **values)
        DB.session.add(habit)
        DB.session.commit()
    return habit_id


def add_tag(app, name, tag_id=None):
    tag_id = tag_id or new_id("t")
    with app.app_context():
        DB.session.add(Tag(id=tag_id, name=name, created_at_utc=BASE_TIME))
        DB.session.commit()
    return tag_id
