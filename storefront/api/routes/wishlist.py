"""Routes exposing the shopper's wishlist."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from storefront.api.dependencies import IdentityDependency
from storefront.models.wishlist import ToggleOutcome, ToggleResult, WishlistResponse
from storefront.services.gateway.rest_gateway import GatewayDependency
from storefront.services.wishlist.view_model import WishlistViewModel

router = APIRouter(prefix="/wishlist", tags=["wishlist"])

_OUTCOME_STATUS = {
    ToggleOutcome.ADDED: status.HTTP_200_OK,
    ToggleOutcome.REMOVED: status.HTTP_200_OK,
    ToggleOutcome.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ToggleOutcome.FAILED: status.HTTP_502_BAD_GATEWAY,
}


@router.get(
    "",
    response_model=WishlistResponse,
    summary="Current wishlist membership for the signed-in shopper",
)
async def get_wishlist(
    gateway: GatewayDependency,
    identity: IdentityDependency,
) -> WishlistResponse:
    view_model = WishlistViewModel(gateway, identity)
    await view_model.refresh()
    return view_model.to_response()


@router.post(
    "/{product_id}/toggle",
    response_model=ToggleResult,
    summary="Add the product to the wishlist or remove it",
    responses={
        401: {"model": ToggleResult, "description": "Sign in required"},
        502: {"model": ToggleResult, "description": "Backend rejected the change"},
    },
)
async def toggle_wishlist_item(
    product_id: int,
    gateway: GatewayDependency,
    identity: IdentityDependency,
) -> JSONResponse:
    view_model = WishlistViewModel(gateway, identity)
    result = await view_model.toggle(product_id, refresh_first=True)
    return JSONResponse(
        status_code=_OUTCOME_STATUS[result.outcome],
        content=result.model_dump(mode="json"),
    )
