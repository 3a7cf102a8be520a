"""
PayPal payment gateway (Orders v2 API).

Only the request/response contract matters to the rest of the app:
create_order(amount, currency, owner_tag) -> order handle dict
capture_order(order_id) -> ProviderCapture
Provider errors and timeouts surface as UpstreamUnavailable; nothing is retried.
"""
from collections import namedtuple
from urllib.parse import quote

import requests

from utils.errors import AppError, UpstreamUnavailable

ProviderCapture = namedtuple("ProviderCapture", ["order_id", "status", "captured_amount", "currency", "owner_tag", "raw"])


def parse_capture(data):
    """Extract the first capture of the first purchase unit from a capture response."""
    units = data.get("purchase_units") or [{}]
    unit = units[0] or {}
    captures = (unit.get("payments") or {}).get("captures") or [{}]
    capture = captures[0] or {}
    amount = capture.get("amount") or {}
    try:
        value = float(amount.get("value") or 0)
    except (TypeError, ValueError):
        value = 0.0
    return ProviderCapture(
        order_id=data.get("id"),
        status=capture.get("status") or data.get("status"),
        captured_amount=value,
        currency=amount.get("currency_code"),
        owner_tag=unit.get("custom_id") or capture.get("custom_id"),
        raw=data,
    )


class PayPalGateway:
    """Payment-provider collaborator, registered as app.extensions['payment_gateway']."""

    def __init__(self, app=None):
        self.client_id = None
        self.client_secret = None
        self.api_base = None
        self.timeout = 10
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.client_id = app.config.get("PAYPAL_CLIENT_ID")
        self.client_secret = app.config.get("PAYPAL_CLIENT_SECRET")
        self.api_base = app.config["PAYPAL_API_BASE"]
        self.timeout = app.config.get("UPSTREAM_TIMEOUT_SECONDS", 10)
        app.extensions["payment_gateway"] = self

    def _request(self, method, endpoint, **kwargs):
        try:
            return requests.request(method, f"{self.api_base}{endpoint}", timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise UpstreamUnavailable("Payment provider timed out. Please try again.", status_code=504)
        except requests.RequestException:
            raise UpstreamUnavailable("Could not reach the payment provider.")

    @staticmethod
    def _raise_for_status(resp, fallback):
        if resp.ok:
            return
        message = fallback
        try:
            message = resp.json().get("message") or fallback
        except ValueError:
            pass
        raise UpstreamUnavailable(message, status_code=resp.status_code)

    def get_access_token(self):
        if not self.client_id or not self.client_secret:
            raise AppError("PayPal credentials not configured", status_code=500)
        resp = self._request(
            "POST",
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        self._raise_for_status(resp, "Failed to obtain PayPal token")
        return resp.json()["access_token"]

    def _authorized(self, method, endpoint, **kwargs):
        token = self.get_access_token()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        return self._request(method, endpoint, headers=headers, **kwargs)

    def create_order(self, amount, currency, owner_tag):
        """Create a CAPTURE-intent order tagged with the owning user id."""
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "amount": {"currency_code": currency, "value": amount},
                    "custom_id": owner_tag,
                }
            ],
        }
        resp = self._authorized("POST", "/v2/checkout/orders", json=body)
        self._raise_for_status(resp, "Failed to create order")
        return resp.json()

    def capture_order(self, order_id):
        resp = self._authorized("POST", f"/v2/checkout/orders/{quote(order_id, safe='')}/capture")
        self._raise_for_status(resp, "Failed to capture order")
        return parse_capture(resp.json())
