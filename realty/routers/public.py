"""
Public pages: home, listing detail with the inquiry form, categories, search and not found.
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from realty.models.user import User
from realty.schemas.forms import FormErrors, validate_form
from realty.schemas.listing import MessageForm, SearchForm
from realty.services.listing import ListingService
from realty.services.inquiry import InquiryService
from realty.templating import render
from realty.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_listing_service,
    get_inquiry_service,
    verify_csrf
)
from realty.utils.exceptions import ListingNotFoundError, NotFoundError

router = APIRouter(tags=["Public"])

NOT_FOUND_PAGE = "/404"


def _not_found() -> RedirectResponse:
    return RedirectResponse(NOT_FOUND_PAGE, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", summary="Home page")
async def home(
    request: Request,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return render(request, "public/home.html", {
        "title": "Home",
        "categories": await listing_service.list_categories(),
        "price_tiers": await listing_service.list_price_tiers(),
        "listings": await listing_service.list_published(),
    })


@router.get("/listings/{listing_id:uuid}", summary="Listing detail")
async def show_listing(
    request: Request,
    listing_id: UUID,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        view = await listing_service.view_listing(listing_id, current_user)
    except ListingNotFoundError:
        return _not_found()

    return render(request, "listings/show.html", {"title": view.listing.title, "view": view, "sent": False})


@router.post("/listings/{listing_id:uuid}", summary="Send an inquiry", dependencies=[Depends(verify_csrf)])
async def send_message(
    request: Request,
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
):
    """
    Store an inquiry and show the listing again with a confirmation.

    Any existing listing takes messages, published or not.
    """
    result = validate_form(MessageForm, await request.form())
    form_errors = result if isinstance(result, FormErrors) else None

    try:
        if form_errors is None:
            await inquiry_service.post_message(listing_id, current_user, result.value)
        view = await listing_service.view_listing(listing_id, current_user, include_unpublished=True)
    except ListingNotFoundError:
        return _not_found()

    context = {"title": view.listing.title, "view": view, "sent": form_errors is None}
    return render(request, "listings/show.html", context, form_errors=form_errors)


@router.get("/categories/{category_id:uuid}", summary="Published listings in a category")
async def category_listings(
    request: Request,
    category_id: UUID,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        category, listings = await listing_service.list_by_category(category_id)
    except NotFoundError:
        return _not_found()

    return render(request, "public/category.html", {
        "title": category.name,
        "category": category,
        "listings": listings,
    })


@router.post("/search", summary="Search published listings by title", dependencies=[Depends(verify_csrf)])
async def search(
    request: Request,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    result = validate_form(SearchForm, await request.form())
    if isinstance(result, FormErrors):
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)

    term = result.value.term
    return render(request, "public/search.html", {
        "title": "Search results",
        "term": term,
        "listings": await listing_service.search_published(term),
    })


@router.get("/404", summary="Not found page")
async def not_found(
    request: Request,
    current_user: Optional[User] = Depends(get_optional_current_user)
):
    return render(request, "404.html", {"title": "Not found"}, status_code=status.HTTP_404_NOT_FOUND)
