"""Store-wide content and visit tracking."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from storefront.api.dependencies import IdentityDependency
from storefront.models.site import AboutContent, BusinessSettings, VisitPayload
from storefront.services.gateway.rest_gateway import GatewayDependency

router = APIRouter(prefix="/site", tags=["site"])


@router.get("/settings", response_model=BusinessSettings)
async def get_business_settings(gateway: GatewayDependency) -> BusinessSettings:
    return await gateway.get_business_settings()


@router.get("/about", response_model=AboutContent)
async def get_about_content(gateway: GatewayDependency) -> AboutContent:
    content = await gateway.get_about_content()
    if content is None:
        raise HTTPException(status_code=404, detail="About content not configured")
    return content


@router.post("/visits", status_code=status.HTTP_202_ACCEPTED)
async def track_visit(
    payload: VisitPayload,
    gateway: GatewayDependency,
    identity: IdentityDependency,
) -> dict[str, str]:
    await gateway.track_website_visit(
        payload.page_url, identity.user_id if identity else None
    )
    return {"status": "accepted"}
