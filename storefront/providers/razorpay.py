import logging
import time

import requests

from storefront.errors import GatewayError

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"


def to_minor_units(amount):
    # rupees -> paise
    return int(round(float(amount) * 100))


def new_receipt():
    return f"rcpt_{int(time.time() * 1000)}"


class RazorpayClient:
    def __init__(self, key_id, key_secret, base_url=DEFAULT_BASE_URL, timeout=10):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount, currency="INR", receipt=None):
        if not self.configured:
            raise GatewayError("Razorpay keys missing")

        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt or new_receipt(),
        }
        try:
            res = requests.post(
                f"{self.base_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
            res.raise_for_status()
            order = res.json()
            if not isinstance(order, dict):
                raise GatewayError(f"Razorpay returned {type(order).__name__}, expected an object")
        except requests.RequestException as e:
            raise GatewayError(f"Razorpay order request failed: {e}") from e
        except ValueError as e:
            raise GatewayError(f"Razorpay returned a non-JSON body: {e}") from e

        log.info("created payment order %s for %s %s", order.get("id"), payload["amount"], currency)
        return order
