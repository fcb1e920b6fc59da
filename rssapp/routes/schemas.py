"""
Request body models for the feed endpoints.

Models reject unknown keys and non-string values. Every field is optional so
that presence can be told apart from value: a key missing from the body (or
sent as null) is absent, ``""`` is present-but-empty.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class FeedCreateInput(BaseModel):
    """Body of POST /v1/admin/feeds."""

    model_config = ConfigDict(extra='forbid', strict=True)

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    site_url: Optional[str] = None


class FeedUpdateInput(BaseModel):
    """Body of PATCH /v1/feeds/<id>."""

    model_config = ConfigDict(extra='forbid', strict=True)

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    site_url: Optional[str] = None
    language: Optional[str] = None

    def present_fields(self) -> Dict[str, Any]:
        """Fields sent in the body with a non-null value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
