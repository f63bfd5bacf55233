import pytest

from conftest import HATEOAS, add_tag


def test_create_tag(client):
    response = client.post("/tags", json={"name": "health", "description": "Healthy habits"})
    assert response.status_code == 201
    tag = response.json
    assert tag["id"].startswith("t_")
    assert list(tag) == ["id", "name", "description", "createdAtUtc", "updatedAtUtc"]
    assert response.headers["Location"] == f"http://localhost/tags/{tag['id']}"


def test_create_duplicate_tag(client, app):
    add_tag(app, "health")
    response = client.post("/tags", json={"name": "health"})
    assert response.status_code == 409
    assert response.json["errors"][0]["code"] == "409"


@pytest.mark.parametrize("payload", [{}, {"name": 42}, {"name": "ok", "description": ["no"]}])
def test_create_tag_validation(client, payload):
    assert client.post("/tags", json=payload).status_code == 400


def test_tags_collection(client, app):
    for name in ["mind", "body", "health"]:
        add_tag(app, name)
    response = client.get("/tags")
    assert response.status_code == 200
    # default order: name ascending
    assert [tag["name"] for tag in response.json["items"]] == ["body", "health", "mind"]
    assert response.json["totalCount"] == 3

    response = client.get("/tags", query_string={"sort": "Name desc", "fields": "NAME", "pageSize": 2})
    assert response.json["items"] == [{"name": "mind"}, {"name": "health"}]
    assert response.json["hasNextPage"] is True


def test_tags_collection_errors(client):
    response = client.get("/tags", query_string={"sort": "color,size desc"})
    assert response.status_code == 400
    assert len(response.json["errors"]) == 2
    assert client.get("/tags", query_string={"fields": "color"}).status_code == 400


def test_tags_collection_links(client, app):
    add_tag(app, "health", tag_id="t_1")
    response = client.get("/tags", headers={"Accept": HATEOAS})
    assert [link["rel"] for link in response.json["links"]] == ["self", "create"]
    assert [link["rel"] for link in response.json["items"][0]["links"]] == ["self", "update", "delete"]
    assert response.json["items"][0]["links"][0]["href"] == "http://localhost/tags/t_1"


def test_get_tag(client, app):
    tag_id = add_tag(app, "health")
    response = client.get(f"/tags/{tag_id}", query_string={"fields": "name"})
    assert response.json == {"name": "health"}
    assert client.get("/tags/t_missing").status_code == 404


def test_update_tag(client, app):
    tag_id = add_tag(app, "health")
    add_tag(app, "mind")
    assert client.put(f"/tags/{tag_id}", json={"name": "body"}).status_code == 204
    tag = client.get(f"/tags/{tag_id}").json
    assert tag["name"] == "body"
    assert tag["updatedAtUtc"] is not None
    # renaming to its own name is not a conflict
    assert client.put(f"/tags/{tag_id}", json={"name": "body", "description": "fit"}).status_code == 204
    assert client.put(f"/tags/{tag_id}", json={"name": "mind"}).status_code == 409


def test_delete_tag(client, app):
    tag_id = add_tag(app, "health")
    assert client.delete(f"/tags/{tag_id}").status_code == 204
    assert client.get(f"/tags/{tag_id}").status_code == 404
    assert client.delete(f"/tags/{tag_id}").status_code == 404
