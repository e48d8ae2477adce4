import os

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _media_path(settings, url):
    return os.path.join(settings.MEDIA_ROOT, settings.MEDIA_FOLDER, url.rsplit("/", 1)[-1])


def test_create_product_without_image_uses_placeholder(client, settings, make_category, admin_headers):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "19.5", "category": str(category["id"])},
        headers=admin_headers,
    )

    assert response.status_code == 201
    product = response.json()["data"]
    assert product["image"] == settings.PLACEHOLDER_IMAGE
    assert product["stock"] == 0
    assert product["price"] == 19.5
    assert product["category"] == {"id": category["id"], "name": category["name"]}


def test_create_product_requires_fields(client, admin_headers, make_category):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "category": str(category["id"])},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide all required fields"


def test_create_product_with_unknown_category(client, admin_headers):
    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": "999"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Category not found: 999"


def test_create_product_rejects_negative_stock(client, admin_headers, make_category):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"]), "stock": "-1"},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_uploaded_image_is_hosted_and_served(client, settings, admin_headers, make_category):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"])},
        files={"image": ("lamp.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 201
    url = response.json()["data"]["image"]
    assert url.startswith("/media/ecommerce-products/")
    assert url.endswith(".png")
    assert os.path.exists(_media_path(settings, url))

    served = client.get(url)
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_non_image_upload_is_rejected(client, admin_headers, make_category):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"])},
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


def test_replacing_image_releases_previous_file(client, settings, admin_headers, make_category):
    category = make_category()
    created = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"])},
        files={"image": ("lamp.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    ).json()["data"]

    response = client.put(
        f"/api/products/{created['id']}",
        data={"price": "7.25"},
        files={"image": ("lamp2.jpg", b"\xff\xd8\xff" + b"\x00" * 32, "image/jpeg")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["price"] == 7.25
    assert updated["name"] == "Lamp"
    assert updated["image"] != created["image"]
    assert not os.path.exists(_media_path(settings, created["image"]))
    assert os.path.exists(_media_path(settings, updated["image"]))


def test_delete_product_releases_image(client, settings, admin_headers, make_category):
    category = make_category()
    created = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"])},
        files={"image": ("lamp.webp", b"RIFF" + b"\x00" * 32, "image/webp")},
        headers=admin_headers,
    ).json()["data"]

    response = client.delete(f"/api/products/{created['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Product deleted successfully"
    assert not os.path.exists(_media_path(settings, created["image"]))
    assert client.get(f"/api/products/{created['id']}").status_code == 404


def test_update_can_move_product_between_categories(client, admin_headers, make_category, make_product):
    toys = make_category(name="Toys")
    product = make_product(name="Kite")

    response = client.put(f"/api/products/{product['id']}", data={"category": str(toys["id"])}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["category"]["name"] == "Toys"


def test_update_with_unknown_category(client, admin_headers, make_product):
    product = make_product()

    response = client.put(f"/api/products/{product['id']}", data={"category": "999"}, headers=admin_headers)

    assert response.status_code == 400


def test_get_product_includes_category_description(client, make_product):
    product = make_product(name="Kite")

    response = client.get(f"/api/products/{product['id']}")

    data = response.json()["data"]
    assert data["name"] == "Kite"
    assert data["category"]["description"] == "Gadgets and devices"


def test_unknown_product(client, admin_headers):
    assert client.get("/api/products/999").json() == {"success": False, "message": "Product not found"}
    assert client.put("/api/products/999", data={"name": "X"}, headers=admin_headers).status_code == 404
    assert client.delete("/api/products/999", headers=admin_headers).status_code == 404


def test_customer_cannot_create_products(client, customer_headers, make_category):
    category = make_category()

    response = client.post(
        "/api/products",
        data={"name": "Lamp", "description": "Desk lamp", "price": "5", "category": str(category["id"])},
        headers=customer_headers,
    )

    assert response.status_code == 403


def test_filters_combine(client, make_category, make_product):
    books = make_category(name="Books")
    toys = make_category(name="Toys")
    make_product(name="Cheap Novel", price=5, category_id=books["id"])
    make_product(name="Rare Novel", price=80, category_id=books["id"])
    make_product(name="Novelty Yo-yo", price=6, category_id=toys["id"])

    def names(**params):
        body = client.get("/api/products", params=params).json()
        assert body["count"] == len(body["data"])
        return sorted(p["name"] for p in body["data"])

    assert names() == ["Cheap Novel", "Novelty Yo-yo", "Rare Novel"]
    assert names(category=books["id"]) == ["Cheap Novel", "Rare Novel"]
    assert names(search="novel") == ["Cheap Novel", "Novelty Yo-yo", "Rare Novel"]
    assert names(search="rare yo-yo") == ["Novelty Yo-yo", "Rare Novel"]
    assert names(minPrice=6) == ["Novelty Yo-yo", "Rare Novel"]
    assert names(maxPrice=6) == ["Cheap Novel", "Novelty Yo-yo"]
    assert names(category=books["id"], search="novel", maxPrice=10) == ["Cheap Novel"]


def test_search_matches_description(client, make_product):
    make_product(name="Kite", description="Flies high on windy days")
    make_product(name="Ball")

    body = client.get("/api/products", params={"search": "WINDY"}).json()

    assert [p["name"] for p in body["data"]] == ["Kite"]


def test_list_is_newest_first(client, make_product):
    make_product(name="Old")
    make_product(name="New")

    body = client.get("/api/products").json()

    assert [p["name"] for p in body["data"]] == ["New", "Old"]
