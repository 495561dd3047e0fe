"""Mini and tag HTTP endpoint tests."""

import base64
from pathlib import Path

from fastapi.testclient import TestClient
from PIL import Image


def _create_catalog(client: TestClient) -> dict[str, int]:
    hero = client.post("/categories", json={"name": "Heroes"}).json()["id"]
    fighter = client.post("/types", json={"name": "Fighter", "category_id": hero}).json()["id"]
    wizard = client.post("/types", json={"name": "Wizard", "category_id": hero}).json()["id"]
    company = client.post("/manufacturers", json={"name": "WizKids"}).json()["id"]
    line = client.post(
        "/product-lines", json={"name": "Nolzur's", "company_id": company}
    ).json()["id"]
    product_set = client.post(
        "/product-sets", json={"name": "Wave 1", "product_line_id": line}
    ).json()["id"]
    return {
        "hero": hero,
        "fighter": fighter,
        "wizard": wizard,
        "product_set": product_set,
    }


def _create_mini(client: TestClient, **overrides) -> dict:
    body = {"name": "Paladin", "location": "Shelf A"}
    body.update(overrides)
    response = client.post("/minis", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    def test_create_minimal(self, client) -> None:
        data = _create_mini(client)
        assert data["name"] == "Paladin"
        assert data["quantity"] == 1
        assert data["painted_by_id"] == 1
        assert data["base_size_id"] == 3
        assert data["painted_by_name"] == "prepainted"
        assert data["base_size_name"] == "medium"
        assert data["tag_names"] is None

    def test_create_with_relations(self, client) -> None:
        ids = _create_catalog(client)
        data = _create_mini(
            client,
            categories=[ids["hero"]],
            types=[ids["fighter"]],
            proxy_types=[ids["wizard"]],
            tags=["painted", "hero", "painted"],
            product_sets=[ids["product_set"]],
        )
        assert data["category_names"] == "Heroes"
        assert data["type_names"] == "Fighter"
        assert data["proxy_type_names"] == "Wizard"
        assert data["tag_names"] == "hero,painted"
        assert data["product_set_name"] == "Wave 1"
        assert data["manufacturer_name"] == "WizKids"

    def test_create_with_image(self, client, settings, png_data_url) -> None:
        data = _create_mini(client, image=png_data_url)
        mini_id = data["id"]
        assert data["image_path"].endswith(f"/{mini_id}.webp")
        assert data["original_image_path"].startswith("/images/minis/originals/")

        root = Path(settings.IMAGE_ROOT)
        relative = data["image_path"].removeprefix("/images/minis/")
        assert (root / relative).is_file()

    def test_missing_name(self, client) -> None:
        response = client.post("/minis", json={"location": "Shelf A"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["field"] == "name"
        assert body["message"]

    def test_unknown_category(self, client) -> None:
        response = client.post(
            "/minis", json={"name": "X", "location": "Y", "categories": [999]}
        )
        assert response.status_code == 400
        assert client.get("/minis").json() == []

    def test_type_both_regular_and_proxy(self, client) -> None:
        ids = _create_catalog(client)
        response = client.post(
            "/minis",
            json={
                "name": "X",
                "location": "Y",
                "types": [ids["fighter"]],
                "proxy_types": [ids["fighter"]],
            },
        )
        assert response.status_code == 400
        assert response.json()["field"] == "proxy_type_ids"

    def test_bad_image(self, client) -> None:
        response = client.post(
            "/minis", json={"name": "X", "location": "Y", "image": "not-base64!!"}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "IMAGE_ERROR"
        assert client.get("/minis").json() == []

    def test_oversized_image(self, client, make_image, monkeypatch) -> None:
        payload = base64.b64encode(make_image(size=(200, 200))).decode("ascii")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        response = client.post(
            "/minis", json={"name": "X", "location": "Y", "image": payload}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "IMAGE_ERROR"


class TestRead:
    def test_get(self, client) -> None:
        created = _create_mini(client)
        response = client.get(f"/minis/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_missing(self, client) -> None:
        response = client.get("/minis/999")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_relationships(self, client) -> None:
        ids = _create_catalog(client)
        created = _create_mini(
            client,
            categories=[ids["hero"]],
            types=[ids["fighter"]],
            tags=["hero"],
            product_sets=[ids["product_set"]],
        )
        data = client.get(f"/minis/{created['id']}/relationships").json()
        assert data["category_ids"] == [ids["hero"]]
        assert data["type_ids"] == [ids["fighter"]]
        assert data["proxy_type_ids"] == []
        assert len(data["tag_ids"]) == 1
        assert data["product_set_ids"] == [ids["product_set"]]

    def test_list_newest_first(self, client) -> None:
        first = _create_mini(client, name="A")
        second = _create_mini(client, name="B")
        ids = [m["id"] for m in client.get("/minis").json()]
        assert ids == [second["id"], first["id"]]

    def test_list_filters(self, client) -> None:
        _create_mini(client, name="Red Dragon", tags=["huge"])
        _create_mini(client, name="Goblin", tags=["small"])
        names = [m["name"] for m in client.get("/minis", params={"tag": "huge"}).json()]
        assert names == ["Red Dragon"]
        names = [m["name"] for m in client.get("/minis", params={"name": "gob"}).json()]
        assert names == ["Goblin"]

    def test_list_bad_order(self, client) -> None:
        response = client.get("/minis", params={"order_by": "password"})
        assert response.status_code == 400
        assert response.json()["field"] == "order_by"


class TestUpdate:
    def test_replace(self, client) -> None:
        ids = _create_catalog(client)
        created = _create_mini(client, tags=["old"], categories=[ids["hero"]])
        response = client.put(
            f"/minis/{created['id']}",
            json={
                "name": "Paladin (repainted)",
                "location": "Shelf B",
                "quantity": 3,
                "tags": ["new"],
                "painted_by_id": 2,
            },
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["name"] == "Paladin (repainted)"
        assert data["quantity"] == 3
        assert data["tag_names"] == "new"
        assert data["category_names"] is None
        assert data["painted_by_name"] == "self"

    def test_update_missing(self, client) -> None:
        response = client.put("/minis/999", json={"name": "X", "location": "Y"})
        assert response.status_code == 404

    def test_update_with_image(self, client, settings, png_data_url) -> None:
        created = _create_mini(client)
        response = client.put(
            f"/minis/{created['id']}",
            json={"name": "X", "location": "Y", "image": png_data_url},
        )
        assert response.status_code == 200
        relative = response.json()["original_image_path"].removeprefix("/images/minis/")
        assert (Path(settings.IMAGE_ROOT) / relative).is_file()


class TestDelete:
    def test_delete(self, client) -> None:
        created = _create_mini(client, tags=["hero"])
        assert client.delete(f"/minis/{created['id']}").status_code == 204
        assert client.get(f"/minis/{created['id']}").status_code == 404
        assert client.delete(f"/minis/{created['id']}").status_code == 404


class TestTags:
    def test_list_and_cleanup(self, client) -> None:
        kept = _create_mini(client, tags=["keep"])
        dropped = _create_mini(client, tags=["drop"])
        assert [t["name"] for t in client.get("/tags").json()] == ["drop", "keep"]

        client.delete(f"/minis/{dropped['id']}")
        assert client.delete("/tags/cleanup").status_code == 204
        assert [t["name"] for t in client.get("/tags").json()] == ["keep"]
        assert client.get(f"/minis/{kept['id']}").json()["tag_names"] == "keep"
