"""
Request body helper shared by the JSON routes
"""
from flask import request

from utils.errors import ValidationError


def request_payload():
    """JSON object body, or the form when no JSON was sent."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
