"""
Image processing API models.

This module contains models for render operations:
- Single image render requests and responses
- Batch requests and the streamed batch event messages
- Filter preset descriptions
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.constants import BatchConstants
from core.enums import BatchEventType

from .render import FilterOptions, RenderPlan


class RenderRequest(BaseModel):
    """Request to render a single image"""

    model_config = ConfigDict(populate_by_name=True)

    source_bytes: str = Field(..., alias="sourceBytes", description="Base64 encoded source image")
    source_mime: Optional[str] = Field(None, alias="sourceMime", description="Source mime type")
    name: str = Field(BatchConstants.DEFAULT_ITEM_NAME, description="Original file name")
    preset: Optional[str] = Field(None, description="Filter preset id (replaces filters/sharpen)")
    options: RenderPlan = Field(default_factory=RenderPlan)

    @field_validator("options", mode="before")
    @classmethod
    def _null_options(cls, value: Any) -> Any:
        return {} if value is None else value


class RenderResponse(BaseModel):
    """Response from a single image render"""

    model_config = ConfigDict(populate_by_name=True)

    encoded_bytes: str = Field(..., alias="encodedBytes", description="Base64 encoded output")
    output_mime: str = Field(..., alias="outputMime")
    width: int
    height: int
    processing_time_ms: int


class BatchRequest(BaseModel):
    """Ordered list of render requests"""

    items: List[RenderRequest] = Field(
        ..., min_length=1, max_length=BatchConstants.MAX_BATCH_ITEMS
    )


class BatchEventMessage(BaseModel):
    """One line of the batch event stream"""

    model_config = ConfigDict(populate_by_name=True)

    type: BatchEventType
    index: Optional[int] = None
    name: Optional[str] = None
    encoded_bytes: Optional[str] = Field(None, alias="encodedBytes")
    output_mime: Optional[str] = Field(None, alias="outputMime")
    value: Optional[float] = None
    message: Optional[str] = None
    completed: Optional[int] = None


class PresetInfo(BaseModel):
    """Named filter preset"""

    id: str
    label: str
    filters: FilterOptions
    sharpen: float
