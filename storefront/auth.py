import hmac
import logging
from functools import wraps

from flask import current_app, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from storefront.errors import AuthError

log = logging.getLogger(__name__)

TOKEN_SALT = "storefront-admin"


class AdminAuth:
    """Configured admin credentials plus signed, expiring bearer tokens."""

    def __init__(self, secret_key, username, password_hash=None, ttl_hours=24):
        self.username = username
        self.password_hash = password_hash
        self.max_age = int(ttl_hours * 3600)
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)

    @classmethod
    def from_config(cls, config):
        password_hash = config.get("ADMIN_PASSWORD_HASH")
        if not password_hash and config.get("ADMIN_PASSWORD"):
            password_hash = generate_password_hash(config["ADMIN_PASSWORD"])
        if not password_hash:
            log.warning("no admin password configured, admin login is disabled")
        return cls(
            config["SECRET_KEY"],
            config.get("ADMIN_USERNAME") or "admin",
            password_hash,
            config.get("ADMIN_TOKEN_TTL_HOURS", 24),
        )

    def login(self, username, password):
        if not self.password_hash or not username or not password:
            raise AuthError("Invalid credentials")
        user_ok = hmac.compare_digest(str(username).encode(), self.username.encode())
        password_ok = check_password_hash(self.password_hash, str(password))
        if not (user_ok and password_ok):
            log.warning("failed admin login for %r from %s", username, request.remote_addr)
            raise AuthError("Invalid credentials")
        log.info("admin %s logged in", self.username)
        return self._serializer.dumps({"sub": self.username})

    def verify(self, token):
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            raise AuthError("Session expired")
        except BadSignature:
            raise AuthError("Unauthorized")
        if data.get("sub") != self.username:
            raise AuthError("Unauthorized")
        return data["sub"]


def bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return ""
    return header[len("Bearer "):].strip()


def require_admin(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if not token:
            log.warning("admin route %s called without a token", request.path)
            raise AuthError("Unauthorized")
        current_app.extensions["storefront"].auth.verify(token)
        return f(*args, **kwargs)
    return decorated
