"""Pydantic models for the HTTP bridge.

Response Structure:
    Successful responses use ResponseEnvelope with:
    - data: The list of outbound plugin messages produced
    - meta: Timestamp, version and the number of messages

Error Structure:
    Error responses use ErrorEnvelope with:
    - error: ErrorDetail containing code and message
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, StrictStr


class MetaModel(BaseModel):
    """Metadata included in all successful responses."""
    timestamp: str
    version: str
    total: Optional[int] = None


class ResponseEnvelope(BaseModel):
    data: Any
    meta: MetaModel


class ErrorDetail(BaseModel):
    """Machine-readable code (see responses.py) plus a human message."""
    code: str
    message: str


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


class InboundMessage(BaseModel):
    """Body of ``POST /messages``: a ``type`` plus type-specific fields.

    Only the discriminator is checked here; payload validation happens in the
    session so the UI gets the same errors over HTTP as over the host channel.
    """
    model_config = ConfigDict(extra="allow")

    type: StrictStr


class UIStateModel(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None
    closed: bool = False
