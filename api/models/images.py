"""Pydantic models for image and layout endpoints."""

from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

MobileRowType = Literal['16:9-single', '1:1-9:16', '1:1-1:1', '9:16-9:16', '16:9-9:16']
AspectTag = Literal['16:9', '9:16', '1:1']

# Admin client may send camelCase field names
_ALIASED = ConfigDict(populate_by_name=True)


class ImageCreate(BaseModel):
    model_config = _ALIASED

    url: Optional[str] = None
    section_id: Optional[str] = Field(None, validation_alias=AliasChoices('section_id', 'sectionId'))
    alt: Optional[str] = ''
    title: Optional[str] = ''
    description: Optional[str] = ''
    width: Optional[int] = None
    height: Optional[int] = None
    order: int = 0
    category: Optional[str] = None
    tags: List[str] = []
    featured: bool = False
    mobile_row_type: Optional[MobileRowType] = Field(None, validation_alias=AliasChoices('mobile_row_type', 'mobileRowType'))
    mobile_row_order: Optional[int] = Field(None, validation_alias=AliasChoices('mobile_row_order', 'mobileRowOrder'))
    mobile_position: Optional[int] = Field(None, validation_alias=AliasChoices('mobile_position', 'mobilePosition'))
    aspect_ratio: Optional[AspectTag] = Field(None, validation_alias=AliasChoices('aspect_ratio', 'aspectRatio'))


class ImageUpdate(BaseModel):
    model_config = _ALIASED

    url: Optional[str] = None
    section_id: Optional[str] = Field(None, validation_alias=AliasChoices('section_id', 'sectionId'))
    alt: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    order: Optional[int] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
    mobile_row_type: Optional[MobileRowType] = Field(None, validation_alias=AliasChoices('mobile_row_type', 'mobileRowType'))
    mobile_row_order: Optional[int] = Field(None, validation_alias=AliasChoices('mobile_row_order', 'mobileRowOrder'))
    mobile_position: Optional[int] = Field(None, validation_alias=AliasChoices('mobile_position', 'mobilePosition'))
    aspect_ratio: Optional[AspectTag] = Field(None, validation_alias=AliasChoices('aspect_ratio', 'aspectRatio'))


class Image(BaseModel):
    model_config = {'from_attributes': True}

    id: str
    url: str
    section_id: Optional[str] = None
    alt: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    order: int = 0
    category: Optional[str] = None
    tags: List[str] = []
    featured: bool = False
    mobile_row_type: Optional[str] = None
    mobile_row_order: Optional[int] = None
    mobile_position: Optional[int] = None
    aspect_ratio: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ReorderRequest(BaseModel):
    ids: List[str]


class RevealRequest(BaseModel):
    session: str
    image_id: str


class RevealResponse(BaseModel):
    session: str
    revealed: List[str]


class LayoutItem(BaseModel):
    image_id: str
    url: str
    alt: str
    index: int
    width: Optional[float] = None
    height: Optional[float] = None
    width_percent: Optional[float] = None
    aspect_ratio: Optional[float] = None
    reveal_delay_ms: int = 0
    revealed: bool = False


class LayoutRow(BaseModel):
    height: Optional[float] = None
    items: List[LayoutItem]


class LayoutResponse(BaseModel):
    mode: str
    container_width: float
    row_count: int
    rows: List[LayoutRow]
