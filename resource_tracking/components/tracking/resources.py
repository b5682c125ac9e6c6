"""
Resource payload parsing.

Maps the backend's resource JSON onto a ResourceDescriptor and resolves the
embeddable URL for third-party video links.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import ResourceDescriptor, ResourceType

DEFAULT_API_BASE_URL = "http://localhost:8000/api"

YOUTUBE_EMBED = "https://www.youtube.com/embed/{video_id}"
VIMEO_EMBED = "https://player.vimeo.com/video/{video_id}"


class ApiResourceContent(BaseModel):
    url: str = ""
    file_name: str | None = Field(default=None, alias="fileName")
    mime_type: str | None = Field(default=None, alias="mimeType")
    is_external: bool = Field(default=False, alias="isExternal")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApiResource(BaseModel):
    """Subset of the backend resource document the tracker needs."""

    id: str = Field(alias="_id")
    type: ResourceType
    content: ApiResourceContent = Field(default_factory=ApiResourceContent)
    duration: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_descriptor(self, api_base_url: str = DEFAULT_API_BASE_URL) -> ResourceDescriptor:
        url = self.content.url or None
        if url and self.content.is_external:
            if self.type == ResourceType.VIDEO:
                url = resolve_embed_url(url)
        elif url:
            url = resolve_file_url(url, api_base_url)
        return ResourceDescriptor(
            id=self.id,
            type=self.type,
            is_external=self.content.is_external,
            duration_hint=self.duration,
            url=url,
        )


def parse_resource(
    payload: Mapping[str, Any],
    api_base_url: str = DEFAULT_API_BASE_URL,
) -> ResourceDescriptor:
    """
    Build a descriptor from a backend resource document.

    Uploaded files are served by the backend host, so their relative URLs
    are resolved against api_base_url.

    Raises:
        ValueError: If the payload lacks an id or has an unknown type.
    """
    try:
        return ApiResource.model_validate(dict(payload)).to_descriptor(api_base_url)
    except ValidationError as e:
        raise ValueError(f"Invalid resource payload:\n{e}") from e


def resolve_embed_url(url: str) -> str:
    """
    Embeddable player URL for YouTube and Vimeo links.

    Other URLs are returned unchanged.
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    segments = [s for s in parsed.path.split("/") if s]

    if host in ("youtube.com", "m.youtube.com") and parsed.path == "/watch":
        video_id = parse_qs(parsed.query).get("v", [""])[0]
        if video_id:
            return YOUTUBE_EMBED.format(video_id=video_id)
    elif host == "youtu.be" and segments:
        return YOUTUBE_EMBED.format(video_id=segments[0])
    elif host == "vimeo.com" and segments:
        return VIMEO_EMBED.format(video_id=segments[0])

    return url


def resolve_file_url(url: str, api_base_url: str) -> str:
    """
    Absolute URL for a file uploaded to the backend.

    Files are served from the backend root, i.e. the API base without its
    trailing /api segment. Absolute URLs are returned unchanged.
    """
    if urlparse(url).scheme:
        return url
    root = api_base_url.rstrip("/")
    if root.endswith("/api"):
        root = root[: -len("/api")]
    return f"{root}/{url.lstrip('/')}"
