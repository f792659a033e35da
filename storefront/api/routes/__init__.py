"""API route registration."""

from fastapi import FastAPI

from storefront.api.routes import analytics, products, search, site, system, wishlist


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(products.router)
    app.include_router(search.router)
    app.include_router(wishlist.router)
    app.include_router(site.router)
    app.include_router(analytics.router)
