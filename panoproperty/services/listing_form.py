"""Listing form: validate seller input, upload media, and persist a listing.

A submission runs these steps strictly in order and stops at the first
failure:

1. upload a newly chosen thumbnail
2. insert (create) or update (edit) the properties row
3. upload panoramas that have no URL yet
4. require at least one panorama
5. edit mode only: delete the listing's existing photo rows
6. insert the new photo rows in submitted order

Nothing is rolled back. A failure after step 2 leaves the properties row in
place (possibly with no photos) and is logged as a partial write. Steps 5
and 6 are not atomic either, so concurrent edits of one listing are last
writer wins.
"""

import math
import re
from enum import Enum
from pathlib import PurePath
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError
from ulid import ULID

from panoproperty.models.photo import photo_rows
from panoproperty.models.property import (
    Agent,
    ListingFields,
    Panorama,
    Property,
    LISTING_TYPES,
    PROPERTY_TYPES,
    property_from_row,
    property_to_row,
)
from panoproperty.models.session import UserSession
from panoproperty.services.supabase_client import (
    upload_public_file,
    insert_property,
    update_property,
    delete_photos_for_property,
    insert_photos,
)
from panoproperty.utils.config import AppConfig
from panoproperty.utils.errors import PanoPropertyError, ListingValidationError
from panoproperty.utils.logging import (
    get_structured_logger,
    correlation_context,
    log_timing,
    mask_user_id,
)

logger = get_structured_logger(__name__)

DEFAULT_PANORAMA_LABEL = "Living Room"
DEFAULT_EXTENSION = "jpg"

PANORAMA_ERROR = "Each 360 photo must have a label, and empty rows should be removed."
MISSING_FIELDS_ERROR = "Please fill in all required fields."
NO_PHOTOS_ERROR = "Please upload at least one 360 photo."
NOT_OWNER_ERROR = "You can only edit your own listings."
SIGN_IN_ERROR = "Sign in as a seller to list a property."
SAVE_FAILED_ERROR = "Failed to save property"

REQUIRED_FIELDS = {
    "title": "Title",
    "address": "Address",
    "city": "City",
    "state": "State",
    "price": "Price",
    "bedrooms": "Bedrooms",
    "bathrooms": "Bathrooms",
    "sqft": "Square feet",
    "year_built": "Year built",
    "agent_name": "Agent name",
    "agent_email": "Agent email",
}


class UploadFile(BaseModel):
    """A file picked in the form, held in memory until upload."""
    name: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        suffix = PurePath(self.name).suffix.lstrip(".")
        return suffix.lower() or DEFAULT_EXTENSION


class PanoramaInput(BaseModel):
    """One panorama row: a label plus either a new file or an existing URL."""
    label: str = ""
    file: Optional[UploadFile] = None
    url: Optional[str] = None

    @property
    def has_media(self) -> bool:
        return self.file is not None or bool(self.url)

    @property
    def has_label(self) -> bool:
        return bool(self.label.strip())

    @property
    def is_empty(self) -> bool:
        return not self.has_label and not self.has_media

    @property
    def is_complete(self) -> bool:
        return self.has_label and self.has_media


class ListingFormData(BaseModel):
    """Scalar inputs exactly as typed."""
    title: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    price: str = ""
    listing_type: str = "sale"
    property_type: str = "house"
    bedrooms: str = ""
    bathrooms: str = ""
    sqft: str = ""
    year_built: str = ""
    description: str = ""
    features_text: str = ""
    is_new: bool = False
    is_featured: bool = False
    agent_name: str = ""
    agent_phone: str = ""
    agent_email: str = ""
    agent_photo: str = ""
    matterport_url: str = ""


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


def parse_features(text: str) -> list[str]:
    """Split comma-separated features, trimming and dropping blanks."""
    return [feature.strip() for feature in text.split(",") if feature.strip()]


def slugify_label(label: str) -> str:
    return re.sub(r"\s+", "-", label.strip().lower())


def thumbnail_path(user_id: str, upload: UploadFile) -> str:
    """``<user>/thumbnails/<ulid>.<ext>``; the ULID encodes the upload time."""
    return f"{user_id}/thumbnails/{ULID()}.{upload.extension}"


def panorama_path(user_id: str, property_id: str, index: int, panorama: PanoramaInput) -> str:
    """``<user>/<property>/<n>-<label>.<ext>`` with ``n`` starting at 1."""
    return f"{user_id}/{property_id}/{index + 1}-{slugify_label(panorama.label)}.{panorama.file.extension}"


def _parse_float(value: str, minimum: float = 0) -> Optional[float]:
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(number) or number < minimum:
        return None
    return number


def _parse_int(value: str, minimum: Optional[int] = None) -> Optional[int]:
    try:
        number = int(value.strip())
    except ValueError:
        return None
    if minimum is not None and number < minimum:
        return None
    return number


NUMERIC_PARSERS: dict[str, Callable[[str], Optional[float]]] = {
    "price": _parse_float,
    "bedrooms": _parse_float,
    "bathrooms": _parse_float,
    "sqft": lambda value: _parse_int(value, minimum=1),
    "year_built": _parse_int,
}


class ListingForm:
    """Create/edit form for one listing."""

    def __init__(self, on_auth_required: Optional[Callable[[], None]] = None):
        self.on_auth_required = on_auth_required
        self.reset()

    # Form editing

    def reset(self) -> None:
        """Clear every input and return to create mode."""
        self.data = ListingFormData()
        self.thumbnail_file: Optional[UploadFile] = None
        self.thumbnail_url: str = ""
        self.panoramas: list[PanoramaInput] = [PanoramaInput(label=DEFAULT_PANORAMA_LABEL)]
        self.editing: Optional[Property] = None
        self.state = FormState.EDITING
        self.error: Optional[str] = None
        self.field_errors: dict[str, str] = {}

    def load(self, prop: Property) -> None:
        """Fill the form from an existing listing and switch to edit mode."""
        self.reset()
        self.editing = prop
        self.data = ListingFormData(
            title=prop.title,
            address=prop.address,
            city=prop.city,
            state=prop.state,
            zip=prop.zip,
            price=_format_number(prop.price),
            listing_type=prop.listing_type,
            property_type=prop.property_type,
            bedrooms=_format_number(prop.bedrooms),
            bathrooms=_format_number(prop.bathrooms),
            sqft=str(prop.sqft),
            year_built=str(prop.year_built),
            description=prop.description,
            features_text=", ".join(prop.features),
            is_new=prop.is_new,
            is_featured=prop.is_featured,
            agent_name=prop.agent.name,
            agent_phone=prop.agent.phone,
            agent_email=prop.agent.email,
            agent_photo=prop.agent.photo,
            matterport_url=prop.matterport_url,
        )
        self.thumbnail_url = prop.thumbnail_url or ""
        if prop.panoramas:
            self.panoramas = [PanoramaInput(label=p.label, url=p.url) for p in prop.panoramas]

    def update(self, **values) -> None:
        unknown = set(values) - set(ListingFormData.model_fields)
        if unknown:
            raise ValueError(f"Unknown listing form fields: {', '.join(sorted(unknown))}")
        self.data = self.data.model_copy(update=values)
        self._touch()

    def set_thumbnail(self, upload: Optional[UploadFile]) -> None:
        self.thumbnail_file = upload
        self._touch()

    def add_panorama(self) -> None:
        self.panoramas.append(PanoramaInput())
        self._touch()

    def remove_panorama(self, index: int) -> None:
        del self.panoramas[index]
        self._touch()

    def update_panorama(self, index: int, **patch) -> None:
        self.panoramas[index] = self.panoramas[index].model_copy(update=patch)
        self._touch()

    def _touch(self) -> None:
        if self.state in (FormState.FAILED, FormState.SUCCESS):
            self.state = FormState.EDITING

    # Validation

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    @property
    def is_submitting(self) -> bool:
        return self.state == FormState.SUBMITTING

    @property
    def panoramas_valid(self) -> bool:
        """At least one row has media, and every row is empty or complete."""
        if not any(p.has_media for p in self.panoramas):
            return False
        return all(p.is_empty or p.is_complete for p in self.panoramas)

    def validation_errors(self) -> dict[str, str]:
        """Inline messages keyed by field name; empty when the form can be submitted."""
        errors: dict[str, str] = {}
        for field, label in REQUIRED_FIELDS.items():
            if not getattr(self.data, field).strip():
                errors[field] = f"{label} is required."

        for field, parse in NUMERIC_PARSERS.items():
            if field not in errors and parse(getattr(self.data, field)) is None:
                errors[field] = f"{REQUIRED_FIELDS[field]} must be a valid number."

        if self.data.listing_type not in LISTING_TYPES:
            errors["listing_type"] = "Choose sale or rent."
        if self.data.property_type not in PROPERTY_TYPES:
            errors["property_type"] = "Choose a property type."

        if not self.panoramas_valid:
            errors["panoramas"] = PANORAMA_ERROR
        return errors

    @property
    def can_submit(self) -> bool:
        return not self.validation_errors()

    def to_listing_fields(self, seller_id: str, thumbnail_url: Optional[str]) -> ListingFields:
        """Typed listing values; raises ListingValidationError on bad input."""
        errors = self.validation_errors()
        if errors:
            raise ListingValidationError(MISSING_FIELDS_ERROR, errors)
        data = self.data
        try:
            return ListingFields(
                seller_id=seller_id,
                title=data.title,
                address=data.address,
                city=data.city,
                state=data.state,
                zip=data.zip,
                price=_parse_float(data.price),
                listing_type=data.listing_type,
                property_type=data.property_type,
                bedrooms=_parse_float(data.bedrooms),
                bathrooms=_parse_float(data.bathrooms),
                sqft=_parse_int(data.sqft, minimum=1),
                year_built=_parse_int(data.year_built),
                description=data.description,
                features=parse_features(data.features_text),
                is_new=data.is_new,
                is_featured=data.is_featured,
                thumbnail_url=thumbnail_url or None,
                matterport_url=data.matterport_url,
                agent=Agent(
                    name=data.agent_name,
                    phone=data.agent_phone,
                    email=data.agent_email,
                    photo=data.agent_photo,
                ),
            )
        except ValidationError as e:
            raise ListingValidationError(str(e))

    # Submission

    async def submit(
        self,
        session: Optional[UserSession],
        on_created: Optional[Callable[[Property], None]] = None,
        on_updated: Optional[Callable[[Property], None]] = None,
    ) -> Optional[Property]:
        """Validate and persist the listing.

        Returns the saved Property, or None when the submission was rejected
        or failed; the reason is left in ``error`` (and ``field_errors`` for
        validation problems). Invalid input never reaches the network.
        """
        if self.is_submitting:
            logger.debug("Ignoring submit while another submission is in flight")
            return None

        if session is None:
            if self.on_auth_required:
                self.on_auth_required()
            self.error = SIGN_IN_ERROR
            return None

        self.field_errors = self.validation_errors()
        if self.field_errors:
            self.error = PANORAMA_ERROR if "panoramas" in self.field_errors else MISSING_FIELDS_ERROR
            logger.info("Listing submission rejected", invalid_fields=sorted(self.field_errors))
            return None

        if self.is_editing and self.editing.seller_id != session.user_id:
            self.error = NOT_OWNER_ERROR
            logger.warning(
                "Edit rejected for listing owned by someone else",
                user_id=mask_user_id(session.user_id),
                property_id=self.editing.id,
            )
            return None

        self.state = FormState.SUBMITTING
        self.error = None
        mode = "edit" if self.is_editing else "create"

        with correlation_context():
            try:
                with log_timing("listing_submit", logger=logger, mode=mode):
                    prop = await self._persist(session.user_id)
            except PanoPropertyError as e:
                self.state = FormState.FAILED
                self.error = str(e) or SAVE_FAILED_ERROR
                logger.error(
                    "Listing submission failed",
                    user_id=mask_user_id(session.user_id),
                    mode=mode,
                    error=self.error,
                )
                return None

            logger.info(
                "Listing saved",
                user_id=mask_user_id(session.user_id),
                property_id=prop.id,
                mode=mode,
                photo_count=len(prop.panoramas),
            )

        editing = self.is_editing
        self.reset()
        self.state = FormState.SUCCESS
        if editing:
            if on_updated:
                on_updated(prop)
        elif on_created:
            on_created(prop)
        return prop

    async def _persist(self, user_id: str) -> Property:
        thumbnail_url = self.thumbnail_url
        if self.thumbnail_file is not None:
            thumbnail_url = await upload_public_file(
                AppConfig.THUMBNAIL_BUCKET,
                thumbnail_path(user_id, self.thumbnail_file),
                self.thumbnail_file.content,
                self.thumbnail_file.content_type,
            )

        row = property_to_row(self.to_listing_fields(user_id, thumbnail_url))
        if self.is_editing:
            saved_row = await update_property(self.editing.id, user_id, row)
        else:
            saved_row = await insert_property(row)
        property_id = str(saved_row["id"])

        try:
            panoramas = await self._resolve_panoramas(user_id, property_id)
            if not panoramas:
                raise ListingValidationError(NO_PHOTOS_ERROR)

            if self.is_editing:
                await delete_photos_for_property(property_id)
            await insert_photos(photo_rows(property_id, panoramas))
        except PanoPropertyError as e:
            logger.error(
                "Listing row saved but photos were not",
                partial_write=True,
                user_id=mask_user_id(user_id),
                property_id=property_id,
                error=str(e),
            )
            raise

        prop = property_from_row(saved_row, panoramas)
        if prop.thumbnail_url is None and thumbnail_url:
            prop = prop.model_copy(update={"thumbnail_url": thumbnail_url})
        return prop

    async def _resolve_panoramas(self, user_id: str, property_id: str) -> list[Panorama]:
        """Upload new panorama files; rows that already have a URL pass through."""
        resolved: list[Panorama] = []
        complete = [p for p in self.panoramas if p.is_complete]
        for index, panorama in enumerate(complete):
            if panorama.file is not None:
                url = await upload_public_file(
                    AppConfig.PANORAMA_BUCKET,
                    panorama_path(user_id, property_id, index, panorama),
                    panorama.file.content,
                    panorama.file.content_type,
                )
                resolved.append(Panorama(url=url, label=panorama.label))
            elif panorama.url:
                resolved.append(Panorama(url=panorama.url, label=panorama.label))
        return resolved


def _format_number(value: float) -> str:
    """Show whole numbers without a trailing ``.0``."""
    return str(int(value)) if float(value).is_integer() else str(value)
