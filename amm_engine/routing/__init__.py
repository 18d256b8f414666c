"""Route search over the pool graph."""

from amm_engine.routing.graph import TokenGraph
from amm_engine.routing.router import Route, Router

__all__ = ["TokenGraph", "Route", "Router"]
