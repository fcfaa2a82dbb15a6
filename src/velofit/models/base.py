"""Base model class and velofit-specific Pydantic configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class VelofitModel(BaseModel):
    """Base class for all velofit data models.

    Models accept both their Python field names and the camelCase keys used
    by the embedded workout payload and by browser-side collaborators.
    Unknown keys are ignored so payloads written by newer versions still load.
    """

    model_config = ConfigDict(
        # Accept field names alongside aliases
        populate_by_name=True,
        # Validate on assignment
        validate_assignment=True,
        # Tolerate keys from other writers
        extra="ignore",
    )
