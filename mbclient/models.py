"""Pydantic models for MediaBrowser API responses.

The server speaks PascalCase (``Id``, ``ItemCount``); attributes here are
snake_case and either spelling is accepted on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal


class ImageType(str, Enum):
    PRIMARY = "Primary"
    ART = "Art"
    BACKDROP = "Backdrop"
    BANNER = "Banner"
    LOGO = "Logo"
    THUMBNAIL = "Thumbnail"
    DISC = "Disc"
    BOX = "Box"
    SCREENSHOT = "Screenshot"
    MENU = "Menu"

    def __str__(self) -> str:
        return self.value


class ApiModel(BaseModel):
    # Unknown fields are kept, this layer does not own the schema.
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="allow",
    )


class ApiBaseItem(ApiModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    path: Optional[str] = None
    parent_id: Optional[str] = None
    sort_name: Optional[str] = None
    overview: Optional[str] = None
    production_year: Optional[int] = None
    official_rating: Optional[str] = None
    community_rating: Optional[float] = None
    run_time_ticks: Optional[int] = None
    genres: List[str] = []
    studios: List[str] = []
    date_created: Optional[str] = None
    premiere_date: Optional[str] = None
    backdrop_image_paths: List[str] = []
    primary_image_path: Optional[str] = None
    logo_image_path: Optional[str] = None


class UserItemData(ApiModel):
    rating: Optional[float] = None
    playback_position_ticks: int = 0
    play_count: int = 0
    is_favorite: bool = False


class PersonInfo(ApiModel):
    name: str
    type: Optional[str] = None
    overview: Optional[str] = None


class ApiBaseItemWrapper(ApiModel):
    """An item as served to a particular user, with its children inlined."""

    item: ApiBaseItem
    user_item_data: Optional[UserItemData] = None
    children: List[ApiBaseItemWrapper] = []
    type: Optional[str] = None
    is_folder: bool = False
    parent_id: Optional[str] = None
    parent_backdrop_item_id: Optional[str] = None
    parent_backdrop_count: int = 0
    parent_logo_item_id: Optional[str] = None
    backdrop_count: int = 0
    child_count: int = 0
    people: List[PersonInfo] = []


class User(ApiModel):
    id: str
    name: str
    last_login_date: Optional[str] = None
    last_activity_date: Optional[str] = None
    has_image: bool = False


class Genre(ApiModel):
    id: Optional[str] = None
    name: str
    path: Optional[str] = None
    primary_image_path: Optional[str] = None


class Studio(ApiModel):
    id: Optional[str] = None
    name: str
    path: Optional[str] = None
    primary_image_path: Optional[str] = None


T = TypeVar("T")


class CategoryInfo(ApiModel, Generic[T]):
    """A genre or studio together with how many of the user's items carry it."""

    item: T
    item_count: int = 0


class UserConfiguration(ApiModel):
    max_parental_rating: Optional[int] = None
    is_administrator: bool = False
    use_custom_library: bool = False
