import io

import pytest

from storefront import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATA_DIR": str(tmp_path / "data"),
        "PRODUCTS_FILE": str(tmp_path / "data" / "products.json"),
        "ORDERS_FILE": str(tmp_path / "data" / "orders.json"),
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "LOG_DIR": str(tmp_path / "logs"),
        "SECRET_KEY": "test-secret",
        "ADMIN_USERNAME": "admin",
        "ADMIN_PASSWORD": "hunter2",
        "ADMIN_PASSWORD_HASH": "",
        "RAZORPAY_KEY_ID": "rzp_test_key",
        "RAZORPAY_KEY_SECRET": "rzp_test_secret",
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/admin/login", json={"username": "admin", "password": "hunter2"})
    assert res.status_code == 200
    return {"Authorization": "Bearer " + res.get_json()["token"]}


@pytest.fixture
def products_file(app):
    return app.config["PRODUCTS_FILE"]


@pytest.fixture
def orders_file(app):
    return app.config["ORDERS_FILE"]


@pytest.fixture
def image():
    def make(name="tee.png", content=b"\x89PNG fake image"):
        return (io.BytesIO(content), name)
    return make
