"""Routes backing the header search box."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.dependencies import IdentityDependency
from storefront.models.search import SearchInput, SearchSessionCreated, SearchSnapshot
from storefront.services.gateway.rest_gateway import GatewayDependency
from storefront.services.search.controller import IncrementalSearchController
from storefront.services.search.scheduler import Scheduler, get_scheduler
from storefront.services.search.session_registry import (
    SearchSessionRegistry,
    get_session_registry,
)

router = APIRouter(prefix="/search/sessions", tags=["search"])

RegistryDependency = Annotated[SearchSessionRegistry, Depends(get_session_registry)]
SchedulerDependency = Annotated[Scheduler, Depends(get_scheduler)]


def _get_controller(
    session_id: str,
    registry: RegistryDependency,
) -> IncrementalSearchController:
    controller = registry.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Unknown search session")
    return controller


ControllerDependency = Annotated[IncrementalSearchController, Depends(_get_controller)]


@router.post(
    "",
    response_model=SearchSessionCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Open a search-as-you-type session",
)
async def open_session(
    gateway: GatewayDependency,
    registry: RegistryDependency,
    scheduler: SchedulerDependency,
    identity: IdentityDependency,
) -> SearchSessionCreated:
    session_id, _ = registry.create(gateway, scheduler, identity)
    return SearchSessionCreated(session_id=session_id)


@router.post(
    "/{session_id}/input",
    response_model=SearchSnapshot,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Report the current contents of the search box",
)
async def submit_input(
    payload: SearchInput,
    controller: ControllerDependency,
) -> SearchSnapshot:
    controller.on_input(payload.text)
    return controller.snapshot()


@router.get(
    "/{session_id}",
    response_model=SearchSnapshot,
    summary="Poll the results and loading state of a search session",
)
async def get_session(controller: ControllerDependency) -> SearchSnapshot:
    return controller.snapshot()


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close a search session and drop any pending lookup",
)
async def close_session(session_id: str, registry: RegistryDependency) -> None:
    if not registry.close(session_id):
        raise HTTPException(status_code=404, detail="Unknown search session")
