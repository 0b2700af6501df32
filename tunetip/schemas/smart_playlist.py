# ============================================================================
# FILE: tunetip/schemas/smart_playlist.py
# ============================================================================
import math
from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from tunetip.config import settings
from tunetip.core.exceptions import BadRequestError
from tunetip.schemas.track import TrackResponse

CRITERIA_TYPES = (
    "genre",
    "artist",
    "date_range",
    "most_tipped",
    "recently_played",
    "followed_artists_latest",
)

def _string_list(value: Any) -> List[str]:
    """Accept a scalar or a list, trim entries, drop empties"""
    if value is None or value == "":
        return []
    items = value if isinstance(value, (list, tuple, set)) else [value]
    return [str(item).strip() for item in items if str(item).strip()]

def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # fromisoformat before 3.11 does not accept the Z suffix
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError("Invalid date range")

class CriteriaBase(BaseModel):
    """Fields shared by every criteria variant"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    limit: int = settings.SMART_PLAYLIST_DEFAULT_LIMIT

    @field_validator("limit", mode="before")
    @classmethod
    def clamp_limit(cls, value: Any) -> int:
        # missing or zero falls back to the default, anything above the max is clamped
        if value is None or value == 0:
            return settings.SMART_PLAYLIST_DEFAULT_LIMIT
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            raise ValueError("Limit must be a number")
        if value < 1:
            raise ValueError("Limit must be at least 1")
        return int(min(value, settings.SMART_PLAYLIST_MAX_LIMIT))

class GenreCriteria(CriteriaBase):
    type: Literal["genre"] = "genre"
    genres: List[str] = []

    @model_validator(mode="before")
    @classmethod
    def collect_genres(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("genres") if data.get("genres") is not None else data.get("genre")
            data["genres"] = _string_list(raw)
            if not data["genres"]:
                raise ValueError("At least one genre is required")
        return data

class ArtistCriteria(CriteriaBase):
    type: Literal["artist"] = "artist"
    artist_ids: List[int] = []

    @model_validator(mode="before")
    @classmethod
    def collect_artist_ids(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("artist_ids") if data.get("artist_ids") is not None else data.get("artist_id")
            values = _string_list(raw)
            if not values:
                raise ValueError("At least one artist is required")
            try:
                data["artist_ids"] = [int(v) for v in values]
            except ValueError:
                raise ValueError("Artist ids must be integers")
        return data

class DateRangeCriteria(CriteriaBase):
    type: Literal["date_range"] = "date_range"
    date_from: Optional[date] = Field(None, alias="from")
    date_to: Optional[date] = Field(None, alias="to")

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def parse_bound(cls, value: Any) -> Optional[date]:
        return _parse_date(value)

    @model_validator(mode="after")
    def require_a_bound(self) -> "DateRangeCriteria":
        if self.date_from is None and self.date_to is None:
            raise ValueError("Date range requires a from or to value")
        return self

class MostTippedCriteria(CriteriaBase):
    type: Literal["most_tipped"] = "most_tipped"

class RecentlyPlayedCriteria(CriteriaBase):
    type: Literal["recently_played"] = "recently_played"

class FollowedArtistsCriteria(CriteriaBase):
    type: Literal["followed_artists_latest"] = "followed_artists_latest"

Criteria = Annotated[
    Union[
        GenreCriteria,
        ArtistCriteria,
        DateRangeCriteria,
        MostTippedCriteria,
        RecentlyPlayedCriteria,
        FollowedArtistsCriteria,
    ],
    Field(discriminator="type"),
]

_criteria_adapter = TypeAdapter(Criteria)

def _first_error_message(error: ValidationError) -> str:
    message = error.errors()[0].get("msg", "Invalid criteria")
    return message.replace("Value error, ", "", 1)

def normalize_criteria(raw: Any) -> CriteriaBase:
    """
    Validate a client-supplied criteria object into one closed variant.

    Preview, creation and refresh all go through here, so the same input
    always yields the same limit and filters.

    Raises:
        BadRequestError: unknown type, missing filter values, bad limit or dates
    """
    if isinstance(raw, CriteriaBase):
        return raw
    if not isinstance(raw, dict):
        raise BadRequestError("Criteria must be a valid object")

    criteria_type = str(raw.get("type") or "").strip()
    if not criteria_type:
        raise BadRequestError("Criteria type is required")
    if criteria_type not in CRITERIA_TYPES:
        raise BadRequestError(f"Unsupported criteria type: {criteria_type}")

    try:
        return _criteria_adapter.validate_python({**raw, "type": criteria_type})
    except ValidationError as e:
        raise BadRequestError(_first_error_message(e)) from e

def criteria_to_json(criteria: CriteriaBase) -> Dict[str, Any]:
    """Serialize a validated variant for storage"""
    return criteria.model_dump(mode="json", by_alias=True)

class SmartPlaylistCreate(BaseModel):
    """Schema for creating a smart playlist; criteria is validated by the service"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: bool = False
    cover_image: Optional[str] = Field(None, max_length=500)
    criteria: Dict[str, Any]
    auto_update: bool = True

class SmartPlaylistPreview(BaseModel):
    criteria: Dict[str, Any]

class SmartPlaylistPreviewResponse(BaseModel):
    criteria: Dict[str, Any]
    tracks: List[TrackResponse]

class SmartPlaylistRefreshResponse(BaseModel):
    refreshed: int
