"""
Client Examples for rest_routes
Demonstrates untyped calls, route maps and configuration against the Poke API
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel

from rest_routes import (
    ConfigLoader,
    ConfigValidator,
    Failure,
    RestClient,
    RouteMap,
    Success,
)


POKE_API = "https://pokeapi.co/api/v2"


class NamedResource(BaseModel):
    name: str
    url: str


class PokemonType(BaseModel):
    type: NamedResource


class Pokemon(BaseModel):
    id: int
    name: str
    height: int
    weight: int
    base_experience: Optional[int] = None
    types: List[PokemonType]


class PokemonList(BaseModel):
    count: int
    next: Optional[str]
    previous: Optional[str]
    results: List[NamedResource]


# =============================================================================
# Example 1: Untyped client
# =============================================================================

async def untyped_example() -> None:
    """Call any path; payloads come back as parsed JSON or text"""
    async with RestClient(POKE_API, {"Content-Type": "application/json"}) as client:
        result = await client.get("/pokemon/:name", params={"name": "pikachu"})

        if isinstance(result, Success):
            print(f"  {result.data['name']} has id {result.data['id']}")
        else:
            print(f"  failed: {result.error.get_description()}")


# =============================================================================
# Example 2: Route map with typed responses
# =============================================================================

routes = RouteMap()
routes.get("/pokemon/:name", response=Pokemon)
routes.get("/pokemon/[name]", response=Pokemon)
routes.get("/pokemon", response=PokemonList, query=["limit", "offset"])


async def typed_example() -> None:
    """Calls are checked against the route map and decoded into models"""
    async with RestClient(POKE_API, {"Content-Type": "application/json"},
                          routes=routes) as client:
        listing, bulbasaur = await asyncio.gather(
            client.get("/pokemon", query={"limit": "5", "offset": "0"}),
            client.get("/pokemon/[name]", params={"name": "1"}),
        )

        if isinstance(listing, Success):
            print(f"  first five: {[p.name for p in listing.data.results]}")
        if isinstance(bulbasaur, Success):
            print(f"  #1 is {bulbasaur.data.name}")

        missing = await client.get("/pokemon/:name", params={"name": "not-a-pokemon"})
        if isinstance(missing, Failure) and missing.response is not None:
            print(f"  unknown pokemon: HTTP {missing.response.status_code}")


# =============================================================================
# Example 3: Configuration
# =============================================================================

def config_example() -> RestClient:
    """Build a client from validated configuration"""
    validator = ConfigValidator()
    result = validator.validate({"base_url": "pokeapi.co/api/v2"})
    for error in result.errors:
        print(f"  - {error.field}: {error.message}")

    config = ConfigLoader().load(
        config={
            "base_url": POKE_API,
            "default_headers": {"Accept": "application/json"},
        }
    )
    client = RestClient.from_config(config, routes=routes)
    client.set_audit_log_callback(
        lambda entry: print(f"  audit: {entry.method} {entry.url} -> {entry.status_code}")
    )
    return client


# =============================================================================
# Run Examples
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("1. Untyped client:")
    asyncio.run(untyped_example())

    print("\n2. Route map:")
    asyncio.run(typed_example())

    print("\n3. Configuration:")
    client = config_example()
    asyncio.run(client.get("/pokemon/:name", params={"name": "eevee"}))
    client.close()
