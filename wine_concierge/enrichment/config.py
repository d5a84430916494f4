"""
Enrichment Configuration
========================

Tunables for the enrichment pipeline, read from the environment, and the
registry of rating guides whose scores may be attached to a wine. Guides are
loaded from YAML; a built-in list is used when no file is present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_MIN_RATING_CONFIDENCE = 0.4
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_NOTES_LANGUAGE = "Italian"


@dataclass(frozen=True)
class RatingGuide:
    """A wine guide or review platform recognized as a rating source."""

    id: str
    name: str
    rating_system: str = ""
    philosophy: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RatingGuide:
        """Create from dictionary."""
        return cls(
            id=str(data["id"]).strip().lower(),
            name=str(data["name"]),
            rating_system=str(data.get("rating_system", "")),
            philosophy=str(data.get("philosophy", "")),
        )


BUILTIN_GUIDES: tuple[RatingGuide, ...] = (
    RatingGuide("gambero-rosso", "Gambero Rosso", "Tre Bicchieri (1-3 glasses)"),
    RatingGuide("veronelli", "Veronelli", "Stars (1-3) + Soli (1-3 suns)"),
    RatingGuide("bibenda", "Bibenda", "Grappoli (1-5 bunches)"),
    RatingGuide("doctorwine", "DoctorWine (Cernilli)", "50-100 points"),
    RatingGuide("wine-spectator", "Wine Spectator", "50-100 points"),
    RatingGuide("robert-parker", "Robert Parker Wine Advocate", "50-100 points"),
    RatingGuide("james-suckling", "James Suckling", "50-100 points"),
    RatingGuide("jancis-robinson", "Jancis Robinson", "0-20 points"),
    RatingGuide("decanter", "Decanter", "50-100 points"),
    RatingGuide("vinous", "Vinous (Antonio Galloni)", "50-100 points"),
    RatingGuide("wine-enthusiast", "Wine Enthusiast", "50-100 points"),
)


class GuideRegistry:
    """
    Whitelist of rating guides.

    Membership decides whether an inferred rating may be persisted.
    """

    def __init__(self, guides: list[RatingGuide] | tuple[RatingGuide, ...] | None = None) -> None:
        self._guides: dict[str, RatingGuide] = {}
        for guide in guides if guides is not None else BUILTIN_GUIDES:
            self._guides[guide.id] = guide
        self._config_path: Path | None = None

    def load_config(self, config_path: Path | str) -> None:
        """
        Load guides from a YAML file, replacing the current set.

        Args:
            config_path: Path to a wine_guides.yaml file

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file defines no guides.
        """
        config_path = Path(config_path).expanduser().resolve()
        if not config_path.exists():
            raise FileNotFoundError(f"Guide configuration not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        guides = [RatingGuide.from_dict(g) for g in data.get("guides", [])]
        if not guides:
            raise ValueError(f"No guides defined in {config_path}")

        self._config_path = config_path
        self._guides = {g.id: g for g in guides}

    @property
    def config_path(self) -> Path | None:
        """Path the guides were loaded from, None for the built-in list."""
        return self._config_path

    def ids(self) -> frozenset[str]:
        """Identifiers of every recognized guide."""
        return frozenset(self._guides)

    def get(self, guide_id: str) -> RatingGuide | None:
        """Look up a guide by identifier."""
        return self._guides.get(guide_id)

    def is_valid(self, guide_id: str) -> bool:
        """Check whether a guide identifier is whitelisted."""
        return guide_id in self._guides

    def list_guides(self) -> list[RatingGuide]:
        """All guides in configuration order."""
        return list(self._guides.values())

    def __len__(self) -> int:
        return len(self._guides)


# Global registry instance
_default_guides: GuideRegistry | None = None


def get_default_guides() -> GuideRegistry:
    """
    Get the default guide registry.

    Loads guides from WINE_GUIDES_CONFIG_PATH, or config/wine_guides.yaml at
    the project root, falling back to the built-in list.
    """
    global _default_guides

    if _default_guides is None:
        _default_guides = GuideRegistry()

        config_path = os.environ.get("WINE_GUIDES_CONFIG_PATH")
        if config_path:
            path = Path(config_path)
        else:
            project_root = Path(__file__).parent.parent.parent
            path = project_root / "config" / "wine_guides.yaml"

        if path.exists():
            _default_guides.load_config(path)

    return _default_guides


def reset_default_guides() -> None:
    """Reset the default guide registry (useful for testing)."""
    global _default_guides
    _default_guides = None


@dataclass
class EnrichmentConfig:
    """Tunables for one enrichment service."""

    min_rating_confidence: float = DEFAULT_MIN_RATING_CONFIDENCE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_base_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    notes_language: str = DEFAULT_NOTES_LANGUAGE

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_rating_confidence <= 1.0:
            raise ValueError(
                f"min_rating_confidence must be within [0, 1], got {self.min_rating_confidence}"
            )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.retry_base_delay_ms < 0:
            raise ValueError(
                f"retry_base_delay_ms must not be negative, got {self.retry_base_delay_ms}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> EnrichmentConfig:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        return cls(
            min_rating_confidence=float(
                data.get("min_rating_confidence", DEFAULT_MIN_RATING_CONFIDENCE)
            ),
            max_attempts=int(data.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
            retry_base_delay_ms=int(data.get("retry_base_delay_ms", DEFAULT_RETRY_DELAY_MS)),
            notes_language=str(data.get("notes_language", DEFAULT_NOTES_LANGUAGE)),
        )

    @classmethod
    def from_env(cls) -> EnrichmentConfig:
        """
        Create from environment variables.

        ENRICHMENT_MIN_CONFIDENCE, ENRICHMENT_MAX_RETRIES,
        ENRICHMENT_RETRY_DELAY_MS and ENRICHMENT_NOTES_LANGUAGE override
        the defaults.
        """
        env_keys = {
            "min_rating_confidence": "ENRICHMENT_MIN_CONFIDENCE",
            "max_attempts": "ENRICHMENT_MAX_RETRIES",
            "retry_base_delay_ms": "ENRICHMENT_RETRY_DELAY_MS",
            "notes_language": "ENRICHMENT_NOTES_LANGUAGE",
        }
        data = {key: os.environ[var] for key, var in env_keys.items() if os.environ.get(var)}
        return cls.from_dict(data)
