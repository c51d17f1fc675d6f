"""Pydantic models for the portable backup document."""

from dataclasses import dataclass, field
from datetime import date as calendar_date
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

SNAPSHOT_VERSION = 2
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class BookmarkEntry(_SnapshotModel):
    """Bookmark as stored in a backup document."""

    id: int | None = None
    name: str
    url: str
    custom_icon: str | None = None
    group: str | None = None
    description: str | None = None


class BackgroundEntry(_SnapshotModel):
    """Background settings section; every field is optional."""

    background_url: str | None = None
    background_input_mode: Literal["color", "upload", "url", "bing"] | None = None
    background_blur: float | None = Field(default=None, ge=0)
    background_color: str | None = None
    bing_wallpaper_url: str | None = None


class FoodEntry(_SnapshotModel):
    """Food library item as stored in a backup document."""

    id: int | None = None
    image: str = ""
    name: str
    category: str = ""
    quantity: float
    unit: str
    carbs: float
    protein: float
    fat: float
    calories: float


class IntakeEntry(_SnapshotModel):
    """Intake record as stored in a backup document."""

    id: int | None = None
    food_id: int | None = None
    food_name: str
    food_image: str = ""
    quantity: float
    unit: str
    carbs: float
    protein: float
    fat: float
    calories: float
    meal_type: Literal["breakfast", "lunch", "dinner"]
    date: str = Field(pattern=ISO_DATE_PATTERN)

    @field_validator("date")
    @classmethod
    def _check_calendar_date(cls, value: str) -> str:
        calendar_date.fromisoformat(value)
        return value


class DailyLimitsEntry(_SnapshotModel):
    """Daily macro targets section."""

    carbs: float
    protein: float
    fat: float


class IntakeSettingsEntry(_SnapshotModel):
    """Intake settings section."""

    daily_limits: DailyLimitsEntry | None = None


class SnapshotV1(_SnapshotModel):
    """Legacy bookmarks-only backup."""

    version: Literal[1]
    bookmarks: list[BookmarkEntry]


class SnapshotV2(_SnapshotModel):
    """Full backup covering every domain."""

    version: Literal[2]
    bookmarks: list[BookmarkEntry]
    background_settings: BackgroundEntry | None = None
    food_library: list[FoodEntry] = Field(default_factory=list)
    intake_records: list[IntakeEntry] = Field(default_factory=list)
    intake_settings: IntakeSettingsEntry | None = None


Snapshot = Annotated[SnapshotV1 | SnapshotV2, Field(discriminator="version")]

SNAPSHOT_ADAPTER: TypeAdapter[SnapshotV1 | SnapshotV2] = TypeAdapter(Snapshot)


@dataclass(frozen=True)
class ImportFailure:
    """A record that could not be written during import."""

    section: str
    name: str
    reason: str


@dataclass
class ImportResult:
    """Counts of records created by an import."""

    bookmarks: int = 0
    foods: int = 0
    intake_records: int = 0
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Return the number of newly created records across all domains."""
        return self.bookmarks + self.foods + self.intake_records


@dataclass(frozen=True)
class BackupFile:
    """A serialized backup ready to hand to a file-save trigger."""

    filename: str
    content: bytes
    media_type: str = "application/json"
