"""
Route map module
"""

from rest_routes.routes.route_map import Route, RouteMap

__all__ = [
    "Route",
    "RouteMap",
]
