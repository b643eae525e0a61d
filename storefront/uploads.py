import logging
import os
import random
import time

from werkzeug.utils import secure_filename

from storefront.errors import StorageError, ValidationError

log = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


def allowed_image_extension(filename, allowed):
    extension = os.path.splitext(filename)[1].lower().lstrip(".")
    return bool(extension) and extension in allowed


def save_image(image_file, upload_dir, allowed):
    """Store an uploaded image and return its public ``/uploads/...`` path.

    Returns ``""`` when the request carried no file.
    """
    if not image_file or not getattr(image_file, "filename", ""):
        return ""

    original = secure_filename(image_file.filename)
    if not original or not allowed_image_extension(original, allowed):
        raise ValidationError(
            "Unsupported image format. Upload one of: " + ", ".join(sorted(allowed))
        )

    extension = os.path.splitext(original)[1].lower()
    unique = f"product-{int(time.time() * 1000)}-{random.randint(1, 10**9)}{extension}"
    try:
        os.makedirs(upload_dir, exist_ok=True)
        image_file.save(os.path.join(upload_dir, unique))
    except OSError as e:
        raise StorageError(f"could not store upload {unique}: {e}") from e

    log.info("stored upload %s", unique)
    return URL_PREFIX + unique


def remove_image(image_path, upload_dir):
    """Best-effort removal of the file behind an ``/uploads/...`` reference."""
    if not image_path or not image_path.startswith(URL_PREFIX):
        return False
    name = image_path[len(URL_PREFIX):]
    if not name or name != secure_filename(name):
        log.warning("ignoring suspicious upload reference %r", image_path)
        return False

    path = os.path.join(upload_dir, name)
    try:
        os.remove(path)
    except FileNotFoundError:
        log.warning("upload %s already gone", name)
        return False
    except OSError as e:
        log.warning("could not remove upload %s: %s", name, e)
        return False
    log.info("removed upload %s", name)
    return True
