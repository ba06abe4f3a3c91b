"""Plant naming request and response models."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 300

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")


class NameRequest(BaseModel):
    """Request body for the naming endpoint."""

    description: str = Field(
        ...,
        description="Short free-text description of the houseplant",
    )

    @field_validator("description")
    @classmethod
    def check_description(cls, value: str) -> str:
        """Trim, then enforce length bounds and at least one letter or digit."""
        value = value.strip()
        if not DESCRIPTION_MIN_LENGTH <= len(value) <= DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"description must be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} characters"
            )
        if not _ALPHANUMERIC.search(value):
            raise ValueError("description must contain a letter or digit")
        return value


class NameResult(BaseModel):
    """A generated plant name and the reason behind it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="The punny plant name")
    why: str = Field(..., description="One short witty rationale")


FALLBACK_RESULT = NameResult(
    name="Leafy McLeaface",
    why="Cheerful, punny, and easy to like.",
)
