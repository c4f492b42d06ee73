from typing import List, Optional

from fastapi import Depends, Form, Request
from pydantic import BaseModel, ValidationError

from campus_market.api.dependencies import get_settings
from campus_market.core.config import Settings
from campus_market.schemas.listing_schema import ListingForm, ListingUpdateForm
from campus_market.services.exceptions import FieldValidationError
from campus_market.services.storage.staging import ImageStagingArea


def parse_form(model_cls: type[BaseModel], data: dict) -> BaseModel:
    """Validate form fields, reporting the first bad field the way the form shows it."""
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "form"
        raise FieldValidationError(field, error["msg"]) from e


async def listing_form(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    condition: str = Form(...),
    price: str = Form(...),
    negotiable: bool = Form(False),
    pickup_location: Optional[str] = Form(None),
) -> ListingForm:
    return parse_form(
        ListingForm,
        {
            "title": title.strip(),
            "description": description.strip(),
            "category": category,
            "condition": condition,
            "price": price,
            "negotiable": negotiable,
            "pickup_location": (pickup_location or "").strip() or None,
        },
    )


async def listing_update_form(
    request: Request,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    condition: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    negotiable: Optional[bool] = Form(None),
    pickup_location: Optional[str] = Form(None),
    remove_image_ids: Optional[List[str]] = Form(None),
) -> ListingUpdateForm:
    # only fields the client sent count as set
    data = {
        key: value
        for key, value in {
            "title": title.strip() if title is not None else None,
            "description": description.strip() if description is not None else None,
            "category": category,
            "condition": condition,
            "price": price,
            "negotiable": negotiable,
        }.items()
        if value is not None
    }
    # blank form values arrive as None, so look at the raw form for the key
    raw_form = await request.form()
    if "pickup_location" in raw_form:
        # an empty value clears the pickup location
        data["pickup_location"] = (pickup_location or "").strip() or None
    data["remove_image_ids"] = remove_image_ids or []
    return parse_form(ListingUpdateForm, data)


def get_staging_area(settings: Settings = Depends(get_settings)) -> ImageStagingArea:
    return ImageStagingArea(
        directory=settings.staging_dir,
        max_images=settings.max_listing_images,
        max_bytes=settings.max_image_bytes,
    )
