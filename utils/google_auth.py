"""
Google sign-in: verify an ID token through Google's tokeninfo endpoint.
"""
from collections import namedtuple

import requests

from utils.errors import Unauthorized, UpstreamUnavailable

GoogleIdentity = namedtuple("GoogleIdentity", ["subject", "email", "email_verified", "audience", "name"])


def _truthy(value):
    # tokeninfo returns booleans as the strings "true"/"false"
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


class GoogleTokenVerifier:
    """Identity-provider collaborator, registered as app.extensions['google_verifier']."""

    def __init__(self, app=None):
        self.client_id = None
        self.tokeninfo_url = None
        self.timeout = 10
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.client_id = app.config.get("GOOGLE_CLIENT_ID")
        self.tokeninfo_url = app.config["GOOGLE_TOKENINFO_URL"]
        self.timeout = app.config.get("UPSTREAM_TIMEOUT_SECONDS", 10)
        app.extensions["google_verifier"] = self

    def verify(self, id_token):
        """Return a GoogleIdentity or raise Unauthorized / UpstreamUnavailable."""
        if not id_token:
            raise Unauthorized("Google credential is required")
        try:
            resp = requests.get(self.tokeninfo_url, params={"id_token": id_token}, timeout=self.timeout)
        except requests.Timeout:
            raise UpstreamUnavailable("Google sign-in timed out. Please try again.", status_code=504)
        except requests.RequestException:
            raise UpstreamUnavailable("Could not reach Google to verify the sign-in.")

        if resp.status_code >= 500:
            raise UpstreamUnavailable("Google sign-in is unavailable. Please try again.")
        if not resp.ok:
            raise Unauthorized("Failed to verify Google token")
        try:
            data = resp.json()
        except ValueError:
            raise Unauthorized("Failed to verify Google token")

        identity = GoogleIdentity(
            subject=data.get("sub"),
            email=(data.get("email") or "").strip().lower() or None,
            email_verified=_truthy(data.get("email_verified")),
            audience=data.get("aud"),
            name=data.get("name"),
        )
        if self.client_id and identity.audience != self.client_id:
            raise Unauthorized("Google client ID mismatch")
        if not identity.subject or not identity.email:
            raise Unauthorized("Google token is missing the account identity")
        if not identity.email_verified:
            raise Unauthorized("Google email not verified")
        return identity
