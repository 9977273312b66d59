"""Media types understood by the resource client.

The canonical serialization of every element is JSON. XML is the one
alternate representation the servers know how to negotiate by filename
extension; anything else falls back to the canonical extension.
"""

from __future__ import annotations

from enum import Enum


class MediaType(str, Enum):
    """Media types used in `Accept` and `Content-Type` headers."""

    JSON = "application/json"
    XML = "application/xml"
    TEXT = "text/plain"
    OCTET_STREAM = "application/octet-stream"
    WILDCARD = "*/*"

    @classmethod
    def canonical(cls) -> "MediaType":
        """Return the canonical serialization media type."""

        return cls.JSON

    @classmethod
    def normalize(cls, value: "MediaType | str") -> str:
        """Return the bare media type string (parameters like charset dropped)."""

        raw = value.value if isinstance(value, MediaType) else str(value)
        return raw.split(";", 1)[0].strip().lower()

    @classmethod
    def extension_for(cls, value: "MediaType | str") -> str:
        """Filename suffix used to negotiate `value` through the URL.

        JSON needs no suffix, XML maps to `.xml` and any other type defaults
        to the canonical `.json`.
        """

        normalized = cls.normalize(value)
        if normalized == cls.JSON.value:
            return ""
        if normalized == cls.XML.value:
            return ".xml"
        return ".json"
