from datetime import datetime

import pytest

from conftest import HATEOAS, add_habit, add_tag, habit_payload
from devhabit import DB
from devhabit.models import HabitStatus, HabitType, User


def names(response):
    return [item["name"] for item in response.json["items"]]


def strip_links(items):
    return [{key: value for key, value in item.items() if key != "links"} for item in items]


@pytest.fixture
def abc_habits(app):
    add_habit(app, "B", HabitType.BINARY, minutes_ago=2)
    add_habit(app, "A", HabitType.BINARY, minutes_ago=1)
    add_habit(app, "C", HabitType.MEASURABLE, minutes_ago=0)


def test_create_habit(client):
    response = client.post("/habits", json=habit_payload(milestone={"target": 10, "current": 5}))
    assert response.status_code == 201
    habit = response.json
    assert habit["id"].startswith("h_")
    assert response.headers["Location"] == f"http://localhost/habits/{habit['id']}"
    assert habit["status"] == "Ongoing"
    assert habit["frequency"] == {"type": "Daily", "timesPerPeriod": 1}
    assert habit["target"] == {"value": 30, "unit": "minutes"}
    assert habit["milestone"] == {"target": 10, "current": 0}
    assert habit["isArchived"] is False
    assert habit["updatedAtUtc"] is None
    assert "links" not in habit
    assert response.mimetype == "application/json"


def test_create_habit_with_links(client):
    response = client.post("/habits", json=habit_payload(), headers={"Accept": HATEOAS})
    assert response.status_code == 201
    assert response.headers["Content-Type"] == HATEOAS
    assert [link["rel"] for link in response.json["links"]] == ["self", "update", "partial-update", "delete", "upsert-tags"]


@pytest.mark.parametrize(
    "payload",
    [
        habit_payload(name=None),
        habit_payload(type="Sometimes"),
        habit_payload(frequency={"type": "Daily", "timesPerPeriod": "often"}),
        habit_payload(target={"value": True, "unit": "minutes"}),
        habit_payload(endDate="tomorrow"),
    ],
)
def test_create_habit_validation(client, payload):
    response = client.post("/habits", json=payload)
    assert response.status_code == 400
    assert response.json["errors"][0]["code"] == "400"


def test_create_habit_requires_json_object(client):
    response = client.post("/habits", data="not json", content_type="application/json")
    assert response.status_code == 400
    response = client.post("/habits", json=["a", "list"])
    assert response.status_code == 400


def test_collection_envelope(client, abc_habits):
    response = client.get("/habits")
    assert response.status_code == 200
    assert list(response.json) == ["items", "page", "pageSize", "totalCount", "totalPages", "hasPreviousPage", "hasNextPage"]
    assert response.json["page"] == 1
    assert response.json["pageSize"] == 10
    assert response.json["totalCount"] == 3
    assert response.json["totalPages"] == 1
    # default order: most recently created first
    assert names(response) == ["C", "A", "B"]


def test_sort_scenario(client, abc_habits):
    response = client.get("/habits", query_string={"sort": "type asc,name asc"})
    assert names(response) == ["A", "B", "C"]


def test_sort_secondary_field_orders_ties(client, abc_habits):
    response = client.get("/habits", query_string={"sort": "type asc,name desc"})
    assert names(response) == ["B", "A", "C"]


def test_sort_ties_are_ordered_by_id(client, app):
    for habit_id in ["h_3", "h_1", "h_2"]:
        add_habit(app, "Same", habit_id=habit_id)
    for _ in range(3):
        response = client.get("/habits", query_string={"sort": "name asc"})
        assert [item["id"] for item in response.json["items"]] == ["h_1", "h_2", "h_3"]


def test_sort_reversed_mapping(client, app):
    add_habit(app, "old", minutes_ago=30)
    add_habit(app, "new", minutes_ago=0)
    add_habit(app, "mid", minutes_ago=10)
    assert names(client.get("/habits", query_string={"sort": "age asc"})) == ["new", "mid", "old"]
    assert names(client.get("/habits", query_string={"sort": "age desc"})) == ["old", "mid", "new"]


def test_sort_nested_field(client, app):
    add_habit(app, "x", target_value=5)
    add_habit(app, "y", target_value=1)
    assert names(client.get("/habits", query_string={"sort": "Target.Value"})) == ["y", "x"]


def test_sort_unknown_fields(client, abc_habits):
    response = client.get("/habits", query_string={"sort": "bogus1,bogus2,name asc"})
    assert response.status_code == 400
    errors = response.json["errors"]
    assert len(errors) == 2
    assert "bogus1" in errors[0]["detail"]
    assert "bogus2" in errors[1]["detail"]


def test_sort_invalid_direction(client, abc_habits):
    response = client.get("/habits", query_string={"sort": "name upwards"})
    assert response.status_code == 400


def test_fields(client, abc_habits):
    response = client.get("/habits", query_string={"fields": "NAME,Status"})
    assert response.status_code == 200
    for item in response.json["items"]:
        assert list(item) == ["name", "status"]


def test_unknown_fields(client, abc_habits):
    response = client.get("/habits", query_string={"fields": "name,color,size"})
    assert response.status_code == 400
    assert [error["detail"] for error in response.json["errors"]] == ["The field 'color' does not exist", "The field 'size' does not exist"]


def test_unknown_fields_on_empty_collection(client):
    assert client.get("/habits", query_string={"fields": "color"}).status_code == 400


def test_links_gating(client, abc_habits):
    query = {"sort": "name", "pageSize": 2}
    plain = client.get("/habits", query_string=query)
    hateoas = client.get("/habits", query_string=query, headers={"Accept": HATEOAS})
    assert "links" not in plain.json
    assert all("links" not in item for item in plain.json["items"])
    assert strip_links(hateoas.json["items"]) == plain.json["items"]
    assert {key: value for key, value in hateoas.json.items() if key not in ("items", "links")} == {
        key: value for key, value in plain.json.items() if key != "items"
    }
    assert hateoas.headers["Content-Type"] == HATEOAS
    assert [link["rel"] for link in hateoas.json["links"]] == ["self", "create", "next-page"]
    assert hateoas.json["links"][2]["href"] == "http://localhost/habits?page=2&pageSize=2&sort=name"
    assert hateoas.json["items"][0]["links"][0] == {"href": f"http://localhost/habits/{hateoas.json['items'][0]['id']}", "rel": "self", "method": "GET"}


def test_links_require_exact_media_type(client, abc_habits):
    response = client.get("/habits", headers={"Accept": "application/vnd.dev-habit.hateoas"})
    assert "links" not in response.json


def test_paging(client, app):
    for i in range(5):
        add_habit(app, f"habit {i}", minutes_ago=i)
    response = client.get("/habits", query_string={"page": 2, "pageSize": 2, "sort": "name"})
    assert names(response) == ["habit 2", "habit 3"]
    assert response.json["totalPages"] == 3
    assert response.json["hasPreviousPage"] is True
    assert response.json["hasNextPage"] is True

    response = client.get("/habits", query_string={"page": 9, "pageSize": 2})
    assert response.json["items"] == []
    assert response.json["hasNextPage"] is False


def test_page_size_is_capped(client):
    response = client.get("/habits", query_string={"pageSize": 1000})
    assert response.json["pageSize"] == 100


@pytest.mark.parametrize("query", [{"page": 0}, {"page": "first"}, {"pageSize": -1}])
def test_invalid_paging(client, query):
    assert client.get("/habits", query_string=query).status_code == 400


def test_filters(client, app, abc_habits):
    add_habit(app, "Reading", HabitType.MEASURABLE, description="books", status=HabitStatus.COMPLETED)
    assert names(client.get("/habits", query_string={"q": "read", "sort": "name"})) == ["Reading"]
    assert names(client.get("/habits", query_string={"q": "BOOKS"})) == ["Reading"]
    assert names(client.get("/habits", query_string={"type": "measurable", "sort": "name"})) == ["C", "Reading"]
    assert names(client.get("/habits", query_string={"status": "Completed"})) == ["Reading"]
    assert client.get("/habits", query_string={"type": "Sometimes"}).status_code == 400


def test_get_habit(client, app):
    habit_id = add_habit(app, "Read")
    response = client.get(f"/habits/{habit_id}")
    assert response.status_code == 200
    assert response.json["id"] == habit_id
    assert response.json["tags"] == []
    assert response.json["createdAtUtc"] == "2024-01-01T12:00:00+00:00"

    response = client.get(f"/habits/{habit_id}", query_string={"fields": "Tags,name"}, headers={"Accept": HATEOAS})
    assert list(response.json) == ["tags", "name", "links"]
    assert response.json["links"][0]["href"].startswith(f"http://localhost/habits/{habit_id}?fields=Tags")


def test_get_missing_habit(client):
    response = client.get("/habits/h_missing")
    assert response.status_code == 404
    assert response.json["errors"][0]["code"] == "404"


def test_get_habit_invalid_fields(client, app):
    habit_id = add_habit(app, "Read")
    assert client.get(f"/habits/{habit_id}", query_string={"fields": "bogus"}).status_code == 400


def test_update_habit(client, app):
    habit_id = add_habit(app, "Read")
    response = client.put(f"/habits/{habit_id}", json=habit_payload(name="Write", type="Measurable", milestone={"target": 3}))
    assert response.status_code == 204

    habit = client.get(f"/habits/{habit_id}").json
    assert habit["name"] == "Write"
    assert habit["type"] == "Measurable"
    assert habit["milestone"] == {"target": 3, "current": 0}
    assert habit["updatedAtUtc"] is not None
    assert client.put("/habits/h_missing", json=habit_payload()).status_code == 404


def test_patch_habit(client, app):
    habit_id = add_habit(app, "Read", description="books")
    response = client.patch(f"/habits/{habit_id}", json={"isArchived": True, "target": {"value": 3, "unit": "chapters"}})
    assert response.status_code == 204

    habit = client.get(f"/habits/{habit_id}").json
    assert habit["isArchived"] is True
    assert habit["target"] == {"value": 3, "unit": "chapters"}
    assert habit["name"] == "Read"
    assert habit["description"] == "books"
    assert habit["updatedAtUtc"] is not None


@pytest.mark.parametrize("payload", [{}, {"id": "h_other"}, {"createdAtUtc": "2020-01-01"}, {"isArchived": "yes"}])
def test_patch_habit_validation(client, app, payload):
    habit_id = add_habit(app, "Read")
    assert client.patch(f"/habits/{habit_id}", json=payload).status_code == 400
    assert client.get(f"/habits/{habit_id}").json["isArchived"] is False


def test_delete_habit(client, app):
    habit_id = add_habit(app, "Read")
    tag_id = add_tag(app, "health")
    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": [tag_id]}).status_code == 204
    assert client.delete(f"/habits/{habit_id}").status_code == 204
    assert client.get(f"/habits/{habit_id}").status_code == 404
    assert client.delete(f"/habits/{habit_id}").status_code == 404
    assert client.get(f"/tags/{tag_id}").status_code == 200


def test_upsert_habit_tags(client, app):
    habit_id = add_habit(app, "Read")
    health = add_tag(app, "health")
    mind = add_tag(app, "mind")

    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": [mind, health]}).status_code == 204
    assert client.get(f"/habits/{habit_id}").json["tags"] == ["health", "mind"]

    # identical set
    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": [health, mind]}).status_code == 204
    assert client.get(f"/habits/{habit_id}").json["tags"] == ["health", "mind"]

    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": [mind]}).status_code == 204
    assert client.get(f"/habits/{habit_id}").json["tags"] == ["mind"]

    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": []}).status_code == 204
    assert client.get(f"/habits/{habit_id}").json["tags"] == []


def test_upsert_habit_tags_validation(client, app):
    habit_id = add_habit(app, "Read")
    health = add_tag(app, "health")
    response = client.put(f"/habits/{habit_id}/tags", json={"tagIds": [health, "t_missing"]})
    assert response.status_code == 400
    assert "t_missing" in response.json["errors"][0]["detail"]
    assert client.get(f"/habits/{habit_id}").json["tags"] == []
    assert client.put(f"/habits/{habit_id}/tags", json={"tagIds": "t_1"}).status_code == 400
    assert client.put("/habits/h_missing/tags", json={"tagIds": []}).status_code == 404


def test_get_user(client, app):
    with app.app_context():
        DB.session.add(User(id="u_1", email="user@example.com", name="User", created_at_utc=datetime(2024, 1, 1)))
        DB.session.commit()
    response = client.get("/users/u_1")
    assert response.status_code == 200
    assert response.json == {"id": "u_1", "email": "user@example.com", "name": "User", "createdAtUtc": "2024-01-01T00:00:00+00:00", "updatedAtUtc": None}
    assert client.get("/users/u_missing").status_code == 404


def test_swagger_spec(client):
    response = client.get("/swagger.json")
    assert response.status_code == 200
    assert any(path.endswith("/habits") for path in response.json["paths"])
