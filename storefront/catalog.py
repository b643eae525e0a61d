import json
import math

from storefront.errors import ValidationError

REQUIRED_PRODUCT_FIELDS = ("name", "category", "price")


def present(value):
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def missing_fields(body, required):
    return [f for f in required if not present(body.get(f))]


def parse_amount(value, field="price"):
    """Numbers and numeric strings; integral values come back as ``int``."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(number) or number < 0:
        raise ValidationError(f"{field} must be a non-negative number")
    return int(number) if number.is_integer() else number


def parse_sizes(value):
    if value is None or value == "":
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                raise ValidationError("sizes must be a JSON array")
        else:
            value = [s.strip() for s in text.split(",") if s.strip()]
    if not isinstance(value, list):
        raise ValidationError("sizes must be a list")
    return [str(s) for s in value]


def new_product(body, image=""):
    missing = missing_fields(body, REQUIRED_PRODUCT_FIELDS)
    if missing:
        raise ValidationError("Missing fields: " + ", ".join(missing))
    return {
        "name": str(body["name"]).strip(),
        "category": str(body["category"]).strip(),
        "price": parse_amount(body["price"]),
        "sizes": parse_sizes(body.get("sizes")),
        "image": image,
    }


def product_patch(body):
    # blank fields keep the stored value
    patch = {}
    for field in ("name", "category"):
        if present(body.get(field)):
            patch[field] = str(body[field]).strip()
    if present(body.get("price")):
        patch["price"] = parse_amount(body["price"])
    if present(body.get("sizes")):
        patch["sizes"] = parse_sizes(body["sizes"])
    return patch
