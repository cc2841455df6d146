"""
Owner pages for managing listings: index, draft creation, the image step,
editing, deletion, publish state and the inquiry mailbox.
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Body, Depends, File, Query, Request, UploadFile, status
from fastapi.responses import RedirectResponse

from realty.models.user import User
from realty.schemas.forms import FormErrors, validate_form
from realty.schemas.listing import ListingForm, PublishStatusUpdate
from realty.services.listing import ListingService
from realty.services.inquiry import InquiryService
from realty.templating import render
from realty.utils.dependencies import (
    get_current_user,
    get_listing_service,
    get_inquiry_service,
    verify_csrf
)
from realty.utils.exceptions import (
    ValidationError,
    FileUploadError,
    ListingNotFoundError,
    ListingOwnershipError,
    ListingAlreadyPublishedError
)
from realty.utils.pagination import parse_page_token

router = APIRouter(tags=["Listings"], dependencies=[Depends(verify_csrf)])

# Missing listings and refused access look the same to the caller
REFUSALS = (ListingNotFoundError, ListingOwnershipError, ListingAlreadyPublishedError)

OWNER_INDEX = "/my-listings"


def _back_to_index() -> RedirectResponse:
    return RedirectResponse(OWNER_INDEX, status_code=status.HTTP_303_SEE_OTHER)


async def _render_listing_form(
    request: Request,
    listing_service: ListingService,
    title: str,
    action: str,
    data: Optional[dict] = None,
    form_errors: Optional[FormErrors] = None
):
    context = {
        "title": title,
        "action": action,
        "categories": await listing_service.list_categories(),
        "price_tiers": await listing_service.list_price_tiers(),
    }
    if form_errors is None:
        context["data"] = data or {}
    return render(request, "listings/form.html", context, form_errors=form_errors)


@router.get("/my-listings", summary="Owner's listing index")
async def my_listings(
    request: Request,
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    page_number = parse_page_token(page)
    if page_number is None:
        return RedirectResponse(f"{OWNER_INDEX}?page=1", status_code=status.HTTP_303_SEE_OTHER)

    owned = await listing_service.list_owned(current_user, page_number)

    return render(request, "listings/admin.html", {"title": "My listings", "page": owned})


@router.get("/listings/create", summary="New listing form")
async def create_listing_form(
    request: Request,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await _render_listing_form(request, listing_service, "Create listing", "/listings/create")


@router.post("/listings/create", summary="Save a listing draft")
async def create_listing(
    request: Request,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    """
    Store the draft and continue to the image step.
    """
    result = validate_form(ListingForm, await request.form())
    if isinstance(result, FormErrors):
        return await _render_listing_form(
            request, listing_service, "Create listing", "/listings/create", form_errors=result
        )

    try:
        listing = await listing_service.create_listing(result.value, current_user)
    except ValidationError as e:
        errors = FormErrors(errors=e.field_errors, data=result.value.model_dump(mode="json"))
        return await _render_listing_form(
            request, listing_service, "Create listing", "/listings/create", form_errors=errors
        )

    return RedirectResponse(f"/listings/{listing.id}/image", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/listings/{listing_id:uuid}/image", summary="Image upload form")
async def add_image_form(
    request: Request,
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        listing = await listing_service.get_listing_for_image(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    return render(request, "listings/add_image.html", {"title": f"Add image: {listing.title}", "listing": listing})


@router.post("/listings/{listing_id:uuid}/image", summary="Upload the image and publish")
async def add_image(
    request: Request,
    listing_id: UUID,
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        await listing_service.attach_image(listing_id, current_user, image)
    except REFUSALS:
        return _back_to_index()
    except FileUploadError as e:
        listing = await listing_service.get_listing_for_image(listing_id, current_user)
        return render(
            request,
            "listings/add_image.html",
            {"title": f"Add image: {listing.title}", "listing": listing},
            form_errors=FormErrors(errors=e.field_errors),
        )

    return _back_to_index()


@router.get("/listings/{listing_id:uuid}/edit", summary="Edit listing form")
async def edit_listing_form(
    request: Request,
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        listing = await listing_service.get_owned_listing(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    return await _render_listing_form(
        request,
        listing_service,
        f"Edit listing: {listing.title}",
        f"/listings/{listing.id}/edit",
        data=ListingForm.initial_data(listing),
    )


@router.post("/listings/{listing_id:uuid}/edit", summary="Save listing changes")
async def edit_listing(
    request: Request,
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        listing = await listing_service.get_owned_listing(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    title = f"Edit listing: {listing.title}"
    action = f"/listings/{listing.id}/edit"

    result = validate_form(ListingForm, await request.form())
    if isinstance(result, FormErrors):
        return await _render_listing_form(request, listing_service, title, action, form_errors=result)

    try:
        await listing_service.update_listing(listing_id, result.value, current_user)
    except REFUSALS:
        return _back_to_index()
    except ValidationError as e:
        errors = FormErrors(errors=e.field_errors, data=result.value.model_dump(mode="json"))
        return await _render_listing_form(request, listing_service, title, action, form_errors=errors)

    return _back_to_index()


@router.post("/listings/{listing_id:uuid}/delete", summary="Delete a listing")
async def delete_listing(
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    try:
        await listing_service.delete_listing(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    return _back_to_index()


@router.put("/listings/{listing_id:uuid}/status", summary="Change the publish state")
async def change_status(
    listing_id: UUID,
    payload: Optional[PublishStatusUpdate] = Body(None),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    """
    Write the publish flag given in the body, or flip it when none is given.
    """
    try:
        if payload is not None and payload.published is not None:
            await listing_service.set_published(listing_id, current_user, payload.published)
        else:
            await listing_service.toggle_published(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    return {"result": True}


@router.get("/listings/{listing_id:uuid}/messages", summary="Inquiries about a listing")
async def listing_messages(
    request: Request,
    listing_id: UUID,
    current_user: User = Depends(get_current_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
):
    try:
        listing, messages = await inquiry_service.list_for_listing(listing_id, current_user)
    except REFUSALS:
        return _back_to_index()

    return render(
        request,
        "listings/messages.html",
        {"title": f"Messages: {listing.title}", "listing": listing, "messages": messages},
    )
