"""
Shared field types for step payloads.
Payloads arrive camelCase from the frontend; models expose snake_case attributes.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, StringConstraints
from pydantic.alias_generators import to_camel

PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"
PINCODE_PATTERN = r"^[0-9]{6}$"
MOBILE_PATTERN = r"^[0-9]{10}$"
AADHAAR_PATTERN = r"^[0-9]{12}$"


def _blank_to_none(v: Any) -> Any:
    """Optional text fields accept "" from HTML forms; store it as null."""
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
PanNumber = Annotated[str, StringConstraints(pattern=PAN_PATTERN)]
Pincode = Annotated[str, StringConstraints(pattern=PINCODE_PATTERN)]
MobileNumber = Annotated[str, StringConstraints(pattern=MOBILE_PATTERN)]
OptionalMobileNumber = Annotated[
    Optional[Annotated[str, StringConstraints(pattern=MOBILE_PATTERN)]],
    BeforeValidator(_blank_to_none),
]
OptionalAadhaar = Annotated[
    Optional[Annotated[str, StringConstraints(pattern=AADHAAR_PATTERN)]],
    BeforeValidator(_blank_to_none),
]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]
YesNo = Literal["Yes", "No"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Address(CamelModel):
    """Postal address, stored as one JSON value per address column."""
    address_line1: RequiredStr
    address_line2: OptionalStr = None
    city: RequiredStr
    state: RequiredStr
    pincode: Pincode

    def to_storage_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=False)
