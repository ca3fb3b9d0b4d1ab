"""
Result envelope returned by every client call

A call yields exactly one of Success or Failure. Branch on ``status``,
``isinstance`` or a ``match`` statement:

    >>> result = await client.get("/pokemon/:name", params={"name": "pikachu"})
    >>> if isinstance(result, Success):
    ...     print(result.data["id"])
    ... else:
    ...     print(result.error.get_description())
"""

from dataclasses import dataclass, field
from typing import Generic, Literal, NoReturn, Optional, TypeVar, Union

import requests

from rest_routes.exceptions import RestError


T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful call carrying the decoded payload"""
    data: T
    response: requests.Response
    status: Literal["success"] = field(default="success", init=False)

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the decoded payload"""
        return self.data


@dataclass(frozen=True)
class Failure:
    """
    Failed call carrying the error

    ``response`` is set whenever a transport response was received,
    including non-success statuses and undecodable bodies.
    """
    error: RestError
    response: Optional[requests.Response] = None
    status: Literal["error"] = field(default="error", init=False)

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error"""
        raise self.error


RestResponse = Union[Success[T], Failure]
