import logging
import os
from dataclasses import dataclass
from functools import partial

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from storefront import config
from storefront.api import api
from storefront.auth import AdminAuth
from storefront.errors import StorefrontError
from storefront.logger import setup_logger
from storefront.providers.razorpay import RazorpayClient
from storefront.record_store import RecordStore
from storefront.uploads import remove_image

log = logging.getLogger(__name__)


@dataclass
class Services:
    products: RecordStore
    orders: RecordStore
    gateway: RazorpayClient
    auth: AdminAuth


def create_app(overrides=None):
    settings = config.load(overrides)

    upload_dir = os.path.abspath(settings["UPLOAD_DIR"])
    os.makedirs(upload_dir, exist_ok=True)
    settings["UPLOAD_DIR"] = upload_dir

    app = Flask(__name__, static_folder=upload_dir, static_url_path="/uploads")
    app.config.update(settings)
    setup_logger(app.config["LOG_DIR"])

    gateway = RazorpayClient(
        app.config["RAZORPAY_KEY_ID"],
        app.config["RAZORPAY_KEY_SECRET"],
        app.config["RAZORPAY_BASE_URL"],
        app.config["GATEWAY_TIMEOUT"],
    )
    if not gateway.configured:
        log.warning("Razorpay keys missing. Payments will not work.")

    app.extensions["storefront"] = Services(
        products=RecordStore(
            app.config["PRODUCTS_FILE"],
            entity="Product",
            file_field="image",
            release_file=partial(remove_image, upload_dir=upload_dir),
        ),
        orders=RecordStore(app.config["ORDERS_FILE"], entity="Order"),
        gateway=gateway,
        auth=AdminAuth.from_config(app.config),
    )

    CORS(
        app,
        origins=app.config["CORS_ORIGINS"],
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE"],
    )
    app.register_blueprint(api, url_prefix="/api")

    @app.get("/")
    def home():
        return jsonify(message="Storefront backend running")

    @app.errorhandler(StorefrontError)
    def storefront_error(e):
        if e.public_message:
            log.error("%s: %s", type(e).__name__, e.message)
        return jsonify(success=False, message=e.public_message or e.message), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(success=False, message=e.description), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        log.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify(success=False, message="Internal server error"), 500

    log.info("storefront ready (products=%s, orders=%s)", app.config["PRODUCTS_FILE"], app.config["ORDERS_FILE"])
    return app
