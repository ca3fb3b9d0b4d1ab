"""Models module initialization"""

from rest_routes.models.request import HttpMethod, RestRequest
from rest_routes.models.result import Failure, RestResponse, Success

__all__ = [
    "Failure",
    "HttpMethod",
    "RestRequest",
    "RestResponse",
    "Success",
]
