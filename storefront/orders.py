from datetime import datetime, timezone

from storefront.catalog import missing_fields, parse_amount, present
from storefront.errors import ValidationError

REQUIRED_ORDER_FIELDS = ("name", "mobile", "address", "city", "state", "pincode", "items", "total")
CUSTOMER_FIELDS = ("name", "mobile", "email", "address", "city", "state", "pincode")
ITEM_FIELDS = ("productId", "name", "image", "size", "price", "quantity")

PAID = "Paid"
PENDING = "Pending"


def payment_status(payment_id):
    return PAID if present(payment_id) else PENDING


def _line_item(raw, position):
    if not isinstance(raw, dict):
        raise ValidationError(f"items[{position}] must be an object")
    item = {k: raw[k] for k in ITEM_FIELDS if k in raw}
    if "productId" not in item and "id" in raw:
        item["productId"] = raw["id"]
    if "productId" in item:
        item["productId"] = str(item["productId"])
    if "price" in item:
        item["price"] = parse_amount(item["price"], f"items[{position}].price")
    return item


def new_order(body, now=None):
    """Build the stored order from a checkout payload.

    ``id`` is left to the store; ``date`` is stamped here.
    """
    missing = missing_fields(body, REQUIRED_ORDER_FIELDS)
    if missing:
        raise ValidationError("Missing fields: " + ", ".join(missing))

    items = body["items"]
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    order = {
        "date": (now or datetime.now(timezone.utc)).isoformat(),
    }
    for field in CUSTOMER_FIELDS:
        if body.get(field) is not None:
            order[field] = str(body[field]).strip()
    order["items"] = [_line_item(raw, i) for i, raw in enumerate(items)]
    order["total"] = parse_amount(body["total"], "total")

    payment_id = body.get("paymentId")
    order["paymentId"] = str(payment_id).strip() if present(payment_id) else None
    order["paymentStatus"] = payment_status(payment_id)
    return order


def payment_patch(body):
    payment_id = body.get("paymentId")
    status = body.get("paymentStatus")
    if not present(payment_id) and not present(status):
        raise ValidationError("Missing fields: paymentId or paymentStatus")

    patch = {}
    if present(payment_id):
        patch["paymentId"] = str(payment_id).strip()
    patch["paymentStatus"] = str(status).strip() if present(status) else PAID
    return patch
