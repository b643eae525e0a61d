import json
import os


def add_tee(client, admin_headers, image):
    return client.post(
        "/api/add-product",
        data={
            "name": "Tee",
            "category": "Shirts",
            "price": "499",
            "sizes": json.dumps(["S", "M"]),
            "image": image(),
        },
        headers=admin_headers,
        content_type="multipart/form-data",
    )


def upload_path(app, image_path):
    return os.path.join(app.config["UPLOAD_DIR"], os.path.basename(image_path))


def test_list_products_starts_empty(client):
    res = client.get("/api/products")
    assert res.status_code == 200
    assert res.get_json() == []


def test_add_product_with_image(app, client, admin_headers, image):
    res = add_tee(client, admin_headers, image)
    assert res.status_code == 200
    body = res.get_json()
    product = body["product"]

    assert body["success"] is True
    assert product["price"] == 499 and isinstance(product["price"], int)
    assert product["sizes"] == ["S", "M"]
    assert product["image"].startswith("/uploads/product-")
    assert product["image"].endswith(".png")
    assert os.path.exists(upload_path(app, product["image"]))

    assert client.get("/api/products").get_json() == [product]
    served = client.get(product["image"])
    assert served.status_code == 200
    assert served.data == b"\x89PNG fake image"


def test_add_product_json_body_without_image(client, admin_headers):
    res = client.post(
        "/api/add-product",
        json={"name": "Kurti", "category": "Ethnic", "price": 1299.5, "sizes": "S, M,L"},
        headers=admin_headers,
    )
    product = res.get_json()["product"]
    assert product["price"] == 1299.5
    assert product["sizes"] == ["S", "M", "L"]
    assert product["image"] == ""


def test_add_product_missing_fields(client, admin_headers):
    res = client.post("/api/add-product", data={"name": "Tee"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.get_json() == {"success": False, "message": "Missing fields: category, price"}
    assert client.get("/api/products").get_json() == []


def test_add_product_bad_price(client, admin_headers):
    res = client.post(
        "/api/add-product",
        data={"name": "Tee", "category": "Shirts", "price": "cheap"},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert "price" in res.get_json()["message"]


def test_add_product_rejects_unknown_image_type(app, client, admin_headers, image):
    res = client.post(
        "/api/add-product",
        data={"name": "Tee", "category": "Shirts", "price": "1", "image": image("run.exe")},
        headers=admin_headers,
        content_type="multipart/form-data",
    )
    assert res.status_code == 400
    assert os.listdir(app.config["UPLOAD_DIR"]) == []


def test_add_product_requires_admin(client):
    res = client.post("/api/add-product", data={"name": "Tee", "category": "Shirts", "price": "1"})
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_update_product_partial(client, admin_headers, image):
    product = add_tee(client, admin_headers, image).get_json()["product"]

    res = client.post(
        "/api/update-product",
        data={"id": product["id"], "price": "599", "name": ""},
        headers=admin_headers,
    )
    assert res.status_code == 200
    updated = res.get_json()["product"]
    assert updated == dict(product, price=599)


def test_update_product_replaces_image(app, client, admin_headers, image):
    product = add_tee(client, admin_headers, image).get_json()["product"]
    old_file = upload_path(app, product["image"])

    res = client.post(
        "/api/update-product",
        data={"id": product["id"], "image": image("new.jpg", b"jpeg")},
        headers=admin_headers,
        content_type="multipart/form-data",
    )
    updated = res.get_json()["product"]
    assert updated["image"] != product["image"]
    assert updated["image"].endswith(".jpg")
    assert os.path.exists(upload_path(app, updated["image"]))
    assert not os.path.exists(old_file)


def test_update_unknown_product_cleans_new_upload(app, client, admin_headers, image):
    res = client.post(
        "/api/update-product",
        data={"id": "404", "image": image()},
        headers=admin_headers,
        content_type="multipart/form-data",
    )
    assert res.status_code == 404
    assert res.get_json() == {"success": False, "message": "Product not found"}
    assert os.listdir(app.config["UPLOAD_DIR"]) == []


def test_update_product_requires_id(client, admin_headers):
    res = client.post("/api/update-product", data={"name": "x"}, headers=admin_headers)
    assert res.status_code == 400


def test_delete_product_removes_record_and_image(app, client, admin_headers, image):
    product = add_tee(client, admin_headers, image).get_json()["product"]

    res = client.post("/api/delete-product", json={"id": product["id"]}, headers=admin_headers)
    assert res.get_json() == {"success": True}
    assert client.get("/api/products").get_json() == []
    assert not os.path.exists(upload_path(app, product["image"]))


def test_delete_unknown_product(client, admin_headers, image):
    add_tee(client, admin_headers, image)
    before = client.get("/api/products").get_json()

    res = client.post("/api/delete-product", json={"id": "nope"}, headers=admin_headers)
    assert res.status_code == 404
    assert client.get("/api/products").get_json() == before


def test_corrupt_products_file(client, admin_headers, products_file):
    with open(products_file, "w", encoding="utf-8") as f:
        f.write("[{oops")

    assert client.get("/api/products").get_json() == []

    res = client.post(
        "/api/add-product",
        json={"name": "Tee", "category": "Shirts", "price": 1},
        headers=admin_headers,
    )
    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Internal server error"}
    assert open(products_file, encoding="utf-8").read() == "[{oops"


def test_cors_header_for_known_origin(client):
    res = client.get("/api/products", headers={"Origin": "http://localhost:3000"})
    assert res.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

    res = client.get("/api/products", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in res.headers


def test_cors_preflight_allows_requested_headers(client):
    res = client.options(
        "/api/add-product",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Requested-With",
        },
    )
    assert res.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert res.headers["Access-Control-Allow-Credentials"] == "true"
    assert "x-requested-with" in res.headers["Access-Control-Allow-Headers"].lower()
    assert "POST" in res.headers["Access-Control-Allow-Methods"]


def test_add_product_price_too_large_for_float(client, admin_headers):
    res = client.post(
        "/api/add-product",
        json={"name": "Tee", "category": "Shirts", "price": int("9" * 400)},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert "price" in res.get_json()["message"]
    assert client.get("/api/products").get_json() == []
