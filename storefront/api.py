import logging

from flask import Blueprint, current_app, jsonify, request

from storefront import catalog, orders
from storefront.auth import require_admin
from storefront.catalog import missing_fields, parse_amount
from storefront.errors import StorefrontError, ValidationError
from storefront.providers.razorpay import new_receipt
from storefront.uploads import remove_image, save_image

log = logging.getLogger(__name__)

api = Blueprint("api", __name__)


def services():
    return current_app.extensions["storefront"]


def body():
    """Request fields from a JSON body or a (multipart) form."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    data = request.form.to_dict()
    sizes = request.form.getlist("sizes")
    if len(sizes) > 1:
        data["sizes"] = sizes
    return data


def require(data, *fields):
    missing = missing_fields(data, fields)
    if missing:
        raise ValidationError("Missing fields: " + ", ".join(missing))


def uploaded_image():
    cfg = current_app.config
    return save_image(request.files.get("image"), cfg["UPLOAD_DIR"], cfg["ALLOWED_IMAGE_EXTENSIONS"])


# ---------- products ----------

@api.get("/products")
def list_products():
    return jsonify(services().products.list())


@api.post("/add-product")
@require_admin
def add_product():
    data = body()
    product = catalog.new_product(data)
    product["image"] = uploaded_image()
    try:
        product = services().products.append(product)
    except StorefrontError:
        remove_image(product["image"], current_app.config["UPLOAD_DIR"])
        raise
    return jsonify(success=True, product=product)


@api.post("/update-product")
@require_admin
def update_product():
    data = body()
    require(data, "id")
    patch = catalog.product_patch(data)
    image = uploaded_image()
    if image:
        patch["image"] = image
    try:
        product = services().products.update(data["id"], patch)
    except StorefrontError:
        remove_image(image, current_app.config["UPLOAD_DIR"])
        raise
    return jsonify(success=True, product=product)


@api.post("/delete-product")
@require_admin
def delete_product():
    data = body()
    require(data, "id")
    services().products.delete(data["id"])
    return jsonify(success=True)


# ---------- orders ----------

@api.get("/orders")
@require_admin
def list_orders():
    return jsonify(services().orders.list())


@api.post("/order")
def create_order():
    order = orders.new_order(body())
    order = services().orders.append(order)
    return jsonify(success=True, order=order)


@api.post("/delete-order")
@require_admin
def delete_order():
    data = body()
    require(data, "id")
    services().orders.delete(data["id"])
    return jsonify(success=True)


@api.post("/update-payment")
def update_payment():
    data = body()
    order_id = data.get("id") or data.get("orderId")
    if not order_id:
        raise ValidationError("Missing fields: id")
    patch = orders.payment_patch(data)
    order = services().orders.update(order_id, patch)
    return jsonify(success=True, order=order)


# ---------- payments ----------

@api.post("/create-order")
def create_payment_order():
    data = body()
    require(data, "amount")
    amount = parse_amount(data["amount"], "amount")
    if amount <= 0:
        raise ValidationError("amount must be greater than zero")
    gateway_order = services().gateway.create_order(
        amount,
        currency=current_app.config["PAYMENT_CURRENCY"],
        receipt=new_receipt(),
    )
    return jsonify(gateway_order)


# ---------- admin ----------

@api.post("/admin/login")
def admin_login():
    data = body()
    require(data, "username", "password")
    token = services().auth.login(data["username"], data["password"])
    return jsonify(success=True, token=token)
