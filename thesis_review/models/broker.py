"""
Broker callback payloads.

Dependencies: pydantic
System role: Inbound contracts of the completion and failure callbacks
"""

import base64
import binascii
import json
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BrokerCallback(BaseModel):
    """
    Delivery report posted by the broker after a message completes or
    exhausts its retries.

    ``source_body`` carries the original request body, base64-encoded.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: str | None = Field(
        default=None, validation_alias=AliasChoices("sourceMessageId", "messageId", "message_id")
    )
    status: int | None = None
    url: str | None = None
    retried: int | None = None
    source_body: str | None = Field(
        default=None, validation_alias=AliasChoices("sourceBody", "source_body")
    )
    body: str | None = None
    error: str | None = None

    def original_payload(self) -> dict[str, Any] | None:
        """Decode the original message body, or None if it is absent or unreadable."""
        for candidate in (self.source_body, self.body):
            if not candidate:
                continue
            for decode in (_from_base64_json, json.loads):
                try:
                    data = decode(candidate)
                except (ValueError, binascii.Error):
                    continue
                if isinstance(data, dict):
                    return data
        return None


def _from_base64_json(value: str) -> Any:
    return json.loads(base64.b64decode(value, validate=True))
