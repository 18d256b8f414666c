"""Read-only query endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from amm_engine.api.models import (
    AmountsOutRequest,
    AmountsOutResponse,
    PoolResponse,
    RouteRequest,
    RouteResponse,
)
from amm_engine.errors import (
    InvalidInput,
    MathError,
    NoRouteExists,
    PoolDoesNotExist,
    SwapError,
)
from amm_engine.pools.store import PoolStore, get_default_store
from amm_engine.routing.router import Router
from amm_engine.swap import SwapEngine

logger = structlog.get_logger()

router = APIRouter()


def get_store() -> PoolStore:
    """Dependency provider for the pool store.

    Override this in tests to inject a populated store:
        app.dependency_overrides[get_store] = lambda: store
    """
    return get_default_store()


def get_router() -> Router:
    """Dependency provider for the route finder."""
    return Router()


@router.get("/pools")
def list_pools(store: PoolStore = Depends(get_store)) -> list[PoolResponse]:
    """All stored pools, in insertion order."""
    return [PoolResponse.from_pool(pool) for pool in store.pools()]


@router.post("/route")
def best_route(
    request: RouteRequest,
    store: PoolStore = Depends(get_store),
    route_finder: Router = Depends(get_router),
) -> RouteResponse:
    """Find the output-maximizing route for a trade without executing it.

    Error Handling:
        - No route within the hop cap: 404
        - Zero amount or identical tokens: 422
    """
    logger.info(
        "route_requested",
        amount_in=request.amount_in,
        token_in=request.token_in,
        token_out=request.token_out,
    )
    try:
        route, amount_out = route_finder.find_best_route(
            int(request.amount_in),
            request.token_in,
            request.token_out,
            store.snapshot(),
            max_hops=request.max_hops,
        )
    except NoRouteExists as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return RouteResponse(
        route=list(route.path),
        amounts=[str(a) for a in route.amounts],
        amount_out=str(amount_out),
    )


@router.post("/amounts-out")
def amounts_out(
    request: AmountsOutRequest,
    store: PoolStore = Depends(get_store),
    route_finder: Router = Depends(get_router),
) -> AmountsOutResponse:
    """Amounts received at each step of a fixed path.

    Error Handling:
        - A hop without a pool: 404
        - A hop that cannot be priced: 422
    """
    try:
        amounts = route_finder.engine.amounts_out(
            int(request.amount_in), request.path, store.snapshot()
        )
    except PoolDoesNotExist as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (SwapError, MathError, InvalidInput) as e:
        logger.info("amounts_out_rejected", path=request.path, reason=type(e).__name__)
        raise HTTPException(status_code=422, detail=str(e)) from e

    return AmountsOutResponse(amounts=[str(a) for a in amounts])
