"""Liveness and storage diagnostics."""

from fastapi import APIRouter, Depends

from nutritrack.core.errors import PersistenceError
from nutritrack.features.registry import Services, get_services
from nutritrack.features.storage import InMemoryStore

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz(services: Services = Depends(get_services)):
    """Readiness: which storage adapter is live and whether it answers reads."""
    inner = getattr(services.store, "inner", services.store)
    try:
        inner.read("__readyz__")
        reachable = True
    except PersistenceError:
        reachable = False
    return {
        "ok": reachable,
        "storage": "memory" if isinstance(inner, InMemoryStore) else "sql",
    }
