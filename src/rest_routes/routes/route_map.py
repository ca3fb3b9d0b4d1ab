"""
Route map
Registry of path templates per HTTP method with their request and response shapes
"""

import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from rest_routes.exceptions import DecodeFailure, RouteError
from rest_routes.models.request import HttpMethod, RestRequest
from rest_routes.utils.headers import get_header
from rest_routes.utils.url import placeholder_names


logger = logging.getLogger(__name__)

T = TypeVar("T")

MethodLike = Union[HttpMethod, str]


def _as_method(method: MethodLike) -> HttpMethod:
    try:
        return HttpMethod(method.upper() if isinstance(method, str) else method)
    except ValueError as e:
        raise RouteError(f"Unsupported HTTP method: {method}", field="method") from e


def _as_keys(keys: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
    if keys is None:
        return None
    if isinstance(keys, str):
        return frozenset([keys])
    return frozenset(keys)


@dataclass(frozen=True)
class Route:
    """
    Contract for one method and path template

    ``response`` and ``body`` accept anything pydantic can validate: models,
    TypedDicts, builtins, generics. ``Any`` leaves the value unchecked.
    ``query`` lists the permitted query keys (``None`` permits any) and
    ``headers`` lists header names that must be present on the call.
    """
    method: HttpMethod
    path: str
    response: Any = Any
    body: Any = Any
    query: Optional[FrozenSet[str]] = None
    headers: Optional[FrozenSet[str]] = field(default=None)
    _response_adapter: Optional[TypeAdapter] = field(
        default=None, init=False, repr=False, compare=False
    )
    _body_adapter: Optional[TypeAdapter] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", _as_method(self.method))
        object.__setattr__(self, "query", _as_keys(self.query))
        object.__setattr__(self, "headers", _as_keys(self.headers))

        if not self.path.startswith("/"):
            raise RouteError(
                f"Path template must start with '/': {self.path}", field="path"
            )
        if not self.method.allows_body and self.body is not Any:
            raise RouteError(
                f"{self.method.value} {self.path} cannot declare a body", field="body"
            )

        object.__setattr__(self, "_response_adapter", self._adapter_for("response"))
        object.__setattr__(self, "_body_adapter", self._adapter_for("body"))

    def _adapter_for(self, name: str) -> Optional[TypeAdapter]:
        declared = getattr(self, name)
        if declared is Any:
            return None
        try:
            return TypeAdapter(declared)
        except PydanticSchemaGenerationError as e:
            raise RouteError(
                f"{self.method.value} {self.path} declares an unsupported "
                f"{name} type: {declared!r}",
                field=name,
                cause=e,
            ) from e

    @property
    def key(self) -> Tuple[HttpMethod, str]:
        return self.method, self.path

    @property
    def params(self) -> Tuple[str, ...]:
        """Placeholder names declared by the path template"""
        return tuple(placeholder_names(self.path))

    def validate_request(
        self, request: RestRequest, headers: Optional[Mapping[str, str]] = None
    ) -> None:
        """
        Check a call request against this route

        Args:
            request: The call request
            headers: Merged headers that will be sent

        Raises:
            RouteError: If params, query keys, headers or body do not match
        """
        supplied = request.params or {}

        missing = [name for name in self.params if name not in supplied]
        if missing:
            raise RouteError(
                f"{self.method.value} {self.path} is missing path parameters: "
                f"{', '.join(missing)}",
                field="params",
                details={"missing": missing},
            )

        unknown = sorted(set(supplied) - set(self.params))
        if unknown:
            raise RouteError(
                f"{self.method.value} {self.path} does not declare path parameters: "
                f"{', '.join(unknown)}",
                field="params",
                details={"unknown": unknown},
            )

        if self.query is not None and request.query:
            unknown = sorted(set(request.query) - self.query)
            if unknown:
                raise RouteError(
                    f"{self.method.value} {self.path} does not accept query keys: "
                    f"{', '.join(unknown)}",
                    field="query",
                    details={"unknown": unknown},
                )

        if self.headers:
            missing = sorted(
                name for name in self.headers if get_header(headers, name) is None
            )
            if missing:
                raise RouteError(
                    f"{self.method.value} {self.path} requires headers: "
                    f"{', '.join(missing)}",
                    field="headers",
                    details={"missing": missing},
                )

        if not self.method.allows_body:
            if request.body is not None:
                raise RouteError(
                    f"{self.method.value} requests cannot carry a body", field="body"
                )
            return

        if self._body_adapter is not None:
            try:
                self._body_adapter.validate_python(request.body)
            except ValidationError as e:
                raise RouteError(
                    f"Invalid body for {self.method.value} {self.path}",
                    field="body",
                    cause=e,
                    details={"errors": e.errors(include_url=False)},
                ) from e

    def decode(self, payload: Any, status_code: Optional[int] = None) -> Any:
        """
        Convert a decoded payload into the declared response type

        Raises:
            DecodeFailure: If the payload does not match the response type
        """
        if self._response_adapter is None:
            return payload

        try:
            return self._response_adapter.validate_python(payload)
        except ValidationError as e:
            raise DecodeFailure(
                f"Response for {self.method.value} {self.path} does not match "
                f"the declared response type",
                status_code=status_code,
                cause=e,
                details={"errors": e.errors(include_url=False)},
            ) from e


class RouteMap:
    """
    Registry of routes keyed by method and path template

    Example:
        >>> routes = RouteMap()
        >>> routes.get("/pokemon/:name", response=Pokemon)
        >>> routes.get("/pokemon", response=PokemonList, query=["limit", "offset"])
        >>>
        >>> @routes.route("POST", "/pokemon", body=NewPokemon)
        ... class CreatedPokemon(BaseModel):
        ...     id: int
    """

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: Dict[Tuple[HttpMethod, str], Route] = {}
        for route in routes:
            self.add(route)

    def add(self, route: Route) -> Route:
        """
        Register a route

        Raises:
            RouteError: If the method and path are already registered
        """
        if route.key in self._routes:
            raise RouteError(
                f"Route already registered: {route.method.value} {route.path}",
                field="path",
            )
        self._routes[route.key] = route
        logger.debug(f"Registered route {route.method.value} {route.path}")
        return route

    def register(
        self,
        method: MethodLike,
        path: str,
        *,
        response: Any = Any,
        body: Any = Any,
        query: Optional[Iterable[str]] = None,
        headers: Optional[Iterable[str]] = None,
    ) -> Route:
        """Build and register a route"""
        return self.add(
            Route(
                method=_as_method(method),
                path=path,
                response=response,
                body=body,
                query=query,
                headers=headers,
            )
        )

    def route(
        self,
        method: MethodLike,
        path: str,
        *,
        body: Any = Any,
        query: Optional[Iterable[str]] = None,
        headers: Optional[Iterable[str]] = None,
    ) -> Callable[[T], T]:
        """Decorator registering the decorated type as the route's response"""

        def decorator(response_type: T) -> T:
            self.register(
                method, path, response=response_type, body=body, query=query, headers=headers
            )
            return response_type

        return decorator

    def get(
        self,
        path: str,
        *,
        response: Any = Any,
        query: Optional[Iterable[str]] = None,
        headers: Optional[Iterable[str]] = None,
    ) -> Route:
        return self.register(
            HttpMethod.GET, path, response=response, query=query, headers=headers
        )

    def post(self, path: str, **kwargs: Any) -> Route:
        return self.register(HttpMethod.POST, path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Route:
        return self.register(HttpMethod.PATCH, path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Route:
        return self.register(HttpMethod.PUT, path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Route:
        return self.register(HttpMethod.DELETE, path, **kwargs)

    def lookup(self, method: MethodLike, path: str) -> Route:
        """
        Find the route for a method and path template

        Raises:
            RouteError: If no such route is registered
        """
        key = (_as_method(method), path)
        route = self._routes.get(key)
        if route is None:
            raise RouteError(
                f"No route registered for {key[0].value} {path}", field="path"
            )
        return route

    def routes(self, method: Optional[MethodLike] = None) -> List[Route]:
        """List registered routes, optionally for a single method"""
        if method is None:
            return list(self._routes.values())
        wanted = _as_method(method)
        return [route for route in self._routes.values() if route.method is wanted]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        try:
            return (_as_method(key[0]), key[1]) in self._routes
        except RouteError:
            return False

    def __iter__(self) -> Iterator[Route]:
        return iter(list(self._routes.values()))

    def __len__(self) -> int:
        return len(self._routes)
