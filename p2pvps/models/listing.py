"""
Listing
---------------------------

The marketplace listing data. These are owned by the ob-contract service
and the OpenBazaar integration, so they are plain data classes rather than
database models.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ListingState(str, Enum):
    LISTED = "Listed"
    RENTED = "Rented"
    EXPIRED = "Expired"


@dataclass
class ObContract:
    """The contract behind a single store listing of a device."""

    client_device: str
    owner_user: str
    price: int
    expiration: datetime
    title: str
    description: str
    renter_user: str = ""
    listing_uri: str = ""
    listing_slug: str = ""
    image_hash: str = ""
    listing_state: ListingState = ListingState.LISTED
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class DeviceLogin:
    """A login and SSH port allocated to a device by port control."""

    username: str
    password: str
    port: int
