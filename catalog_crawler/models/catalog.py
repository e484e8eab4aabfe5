"""
Catalog data models.

Contains dataclasses for the brand -> device reference -> device record
hierarchy, and the Batch unit that gets checkpointed.
"""

from dataclasses import dataclass, field

STATUS_OK = "ok"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class Brand:
    """A catalog brand and the URL of its (first) device listing page."""

    name: str
    listing_url: str


@dataclass(frozen=True)
class DeviceReference:
    """A pointer to one device detail page, discovered on a brand listing."""

    model: str
    detail_url: str
    brand: Brand


@dataclass(frozen=True)
class DeviceRecord:
    """
    Resolved result of fetching one device reference.

    A record with status "error" carries the failure reason instead of a
    display name, so partial brand results survive individual failures.
    """

    model: str
    display_name: str = ""
    status: str = STATUS_OK
    error: str = ""

    @classmethod
    def ok(cls, model: str, display_name: str) -> "DeviceRecord":
        return cls(model=model, display_name=display_name)

    @classmethod
    def failed(cls, model: str, reason: str) -> "DeviceRecord":
        return cls(model=model, status=STATUS_ERROR, error=reason)

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "model": self.model,
            "name": self.display_name,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class Batch:
    """
    A group of fully processed brands, persisted as one checkpoint.

    `entries` maps brand name to that brand's device records. A batch is
    written once and never modified afterwards.
    """

    id: int
    entries: dict = field(default_factory=dict)

    @property
    def brand_names(self) -> list[str]:
        return list(self.entries)

    @property
    def device_count(self) -> int:
        return sum(len(records) for records in self.entries.values())

    @property
    def error_count(self) -> int:
        return sum(
            1 for records in self.entries.values() for r in records if r.is_error
        )
