"""Typed containers shared across the resolution modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from .config import TitleMetadata


@dataclass(frozen=True)
class YearUnknown:
    """Seed year missing or without a 4-digit year in it."""


@dataclass(frozen=True)
class YearValue:
    year: str

    @property
    def value(self) -> int:
        return int(self.year)


SeedYear = Union[YearUnknown, YearValue]


@dataclass(frozen=True)
class MetadataPresent:
    metadata: TitleMetadata


@dataclass(frozen=True)
class MetadataAbsent:
    """Title page fetched, but neither JSON-LD nor the page title gave anything usable."""


@dataclass(frozen=True)
class FetchFailed:
    reason: str


MetadataOutcome = Union[MetadataPresent, MetadataAbsent, FetchFailed]


class Validation(NamedTuple):
    """Validator verdict; unpacks as ``(accepted, metadata)``."""

    accepted: bool
    metadata: Optional[TitleMetadata] = None
