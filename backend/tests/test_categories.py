import pytest

from storefront.models.category import Category


def test_list_categories_is_public(client, create_category):
    create_category("Books")
    create_category("Games", status="inactive")

    response = client.get("/api/categories")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 2
    assert [category["name"] for category in data["categories"]] == ["Books", "Games"]


def test_get_category(client, create_category):
    category = create_category()

    response = client.get(f"/api/categories/{category.id}")

    assert response.status_code == 200
    assert response.json()["data"]["category"]["name"] == "Books"


def test_get_category_invalid_id(client):
    response = client.get("/api/categories/abc")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid category ID"


@pytest.mark.parametrize("category_id", ["²", "99999999999999999999"])
def test_get_category_rejects_ids_outside_ascii_int64(client, category_id):
    response = client.get(f"/api/categories/{category_id}")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid category ID"


def test_get_category_not_found(client):
    response = client.get("/api/categories/42")

    assert response.status_code == 404


def test_mutating_routes_require_token(client, create_category):
    category = create_category()

    assert client.post("/api/categories", json={"name": "New"}).status_code == 401
    assert client.put(f"/api/categories/{category.id}", json={"name": "New"}).status_code == 401
    assert client.delete(f"/api/categories/{category.id}").status_code == 401


def test_create_category_defaults_to_active(client, user_headers):
    response = client.post("/api/categories", json={"name": "Music"}, headers=user_headers)

    assert response.status_code == 201
    category = response.json()["data"]["category"]
    assert category["name"] == "Music"
    assert category["status"] == "active"


def test_create_category_rejects_unknown_status(client, user_headers):
    response = client.post(
        "/api/categories",
        json={"name": "Music", "status": "archived"},
        headers=user_headers,
    )

    assert response.status_code == 422
    assert "status" in response.json()["errors"]


def test_create_category_duplicate_name(client, db_session, create_category, user_headers):
    create_category("Music")

    response = client.post("/api/categories", json={"name": "Music"}, headers=user_headers)

    assert response.status_code == 422
    assert response.json()["errors"]["name"] == ["The name has already been taken."]
    assert db_session.query(Category).count() == 1


def test_update_category_partial(client, create_category, user_headers):
    category = create_category("Books")

    response = client.put(
        f"/api/categories/{category.id}",
        json={"status": "inactive"},
        headers=user_headers,
    )

    assert response.status_code == 200
    updated = response.json()["data"]["category"]
    assert updated["status"] == "inactive"
    assert updated["name"] == "Books"


def test_update_category_can_keep_own_name(client, create_category, user_headers):
    category = create_category("Books")

    response = client.put(f"/api/categories/{category.id}", json={"name": "Books"}, headers=user_headers)

    assert response.status_code == 200


def test_update_category_rejects_name_of_other_category(client, create_category, user_headers):
    create_category("Games")
    category = create_category("Books")

    response = client.put(f"/api/categories/{category.id}", json={"name": "Games"}, headers=user_headers)

    assert response.status_code == 422


def test_update_category_empty_payload(client, db_session, create_category, user_headers):
    category_id = create_category("Books").id

    response = client.put(f"/api/categories/{category_id}", json={}, headers=user_headers)

    assert response.status_code == 400
    db_session.expire_all()
    assert db_session.get(Category, category_id).name == "Books"


def test_delete_category(client, db_session, create_category, user_headers):
    category_id = create_category().id

    response = client.delete(f"/api/categories/{category_id}", headers=user_headers)

    assert response.status_code == 200
    db_session.expire_all()
    assert db_session.get(Category, category_id) is None


def test_delete_category_with_products_conflicts(client, db_session, create_category, create_product, user_headers):
    categories = [create_category(f"Category {index}") for index in range(1, 6)]
    assert categories[4].id == 5
    create_product(categories[4])

    response = client.delete("/api/categories/5", headers=user_headers)

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert "1 associated product" in body["error"]
    db_session.expire_all()
    assert db_session.get(Category, 5) is not None


def test_unsupported_method_keeps_allow_header(client):
    response = client.patch("/api/categories")

    assert response.status_code == 405
    assert response.json()["success"] is False
    assert "GET" in response.headers["allow"]
