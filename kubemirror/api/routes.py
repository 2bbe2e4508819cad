"""Route handlers for the read-only status API.

Handlers read a single store snapshot per request, so each response
reflects one fully-applied event boundary.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from kubemirror.api.schemas import ErrorResponse, HealthResponse, ObjectEntry, ObjectListResponse
from kubemirror.cache.store import Store
from kubemirror.models.resources import ResourceIdentity

router = APIRouter()


def _store(request: Request) -> Store:
    return request.app.state.store  # type: ignore[no-any-return]


def _not_found(identity: ResourceIdentity) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error="NOT_FOUND", detail=f"object {identity} is not in the mirror").model_dump(),
    )


@router.get("/objects", response_model=ObjectListResponse)
async def list_objects(request: Request, namespace: str | None = None) -> ObjectListResponse:
    snapshot = _store(request).snapshot()
    identities = sorted(snapshot, key=lambda i: (i.namespace or "", i.name))
    items = [
        ObjectEntry(namespace=identity.namespace, name=identity.name, object=snapshot[identity])
        for identity in identities
        if namespace is None or identity.namespace == namespace
    ]
    return ObjectListResponse(resource=request.app.state.resource, count=len(items), items=items)


@router.get("/objects/{namespace}/{name}", response_model=ObjectEntry)
async def get_namespaced_object(request: Request, namespace: str, name: str) -> ObjectEntry | JSONResponse:
    identity = ResourceIdentity(namespace=namespace, name=name)
    obj = _store(request).get(identity)
    if obj is None:
        return _not_found(identity)
    return ObjectEntry(namespace=namespace, name=name, object=obj)


@router.get("/objects/{name}", response_model=ObjectEntry)
async def get_cluster_object(request: Request, name: str) -> ObjectEntry | JSONResponse:
    identity = ResourceIdentity(namespace=None, name=name)
    obj = _store(request).get(identity)
    if obj is None:
        return _not_found(identity)
    return ObjectEntry(namespace=None, name=name, object=obj)


health_router = APIRouter()


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse | JSONResponse:
    store = _store(request)
    body = HealthResponse(
        status="ok" if store.ready else "warming",
        ready=store.ready,
        resource=request.app.state.resource,
        objects=len(store),
    )
    if not store.ready:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
