"""Store-wide content: business settings and the about page."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BusinessSettings(BaseModel):
    """Branding and contact details shown in the header and footer."""

    id: int = 1
    business_name: str = "Sanjib Textile"
    tagline: str = "Premium Sportswear for Every Athlete"
    description: str = (
        "We create premium sportswear that empowers athletes at every level."
    )
    phone: str = "+91 7595858158"
    email: str = "orders@sanjibtextile.com"
    whatsapp: str = "+91 7595858158"
    address: str = "India"
    logo_url: str = ""
    hero_title: str = "Premium Sportswear for Every Athlete"
    hero_subtitle: str = (
        "Discover our collection of high-quality bottom wear designed for "
        "performance, comfort, and style."
    )
    hero_image: str = ""
    primary_color: str | None = None
    secondary_color: str | None = None
    font_style: str | None = None
    show_contact_bar: bool | None = None
    contact_bar_message: str | None = None
    facebook_url: str | None = "https://facebook.com/sanjibtextile"
    instagram_url: str | None = "https://instagram.com/sanjibtextile"
    twitter_url: str | None = "https://twitter.com/sanjibtextile"
    linkedin_url: str | None = "https://linkedin.com/company/sanjibtextile"
    created_at: str | None = None
    updated_at: str | None = None


class AboutStatistics(BaseModel):
    customers: int = 0
    products: int = 0
    rating: float = 0.0
    years: int = 0


class AboutContent(BaseModel):
    """Editable copy of the about page."""

    id: int = 1
    hero_title: str = ""
    hero_subtitle: str = ""
    story_title: str = ""
    story_content: str = ""
    story_image: str = ""
    values_title: str = ""
    values_subtitle: str = ""
    team_title: str = ""
    team_subtitle: str = ""
    contact_title: str = ""
    contact_subtitle: str = ""
    statistics: AboutStatistics = Field(default_factory=AboutStatistics)
    created_at: str | None = None
    updated_at: str | None = None


class VisitPayload(BaseModel):
    """Page visit reported by the storefront layout."""

    page_url: str = Field(..., min_length=1, max_length=2048)
