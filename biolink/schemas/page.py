from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from typing import Optional, List

from biolink.schemas.block import BlockResponse
from biolink.services.render_service import is_hex_color

# Schemas pour les pages

class PageCreate(BaseModel):
    title: str
    slug: str
    description: Optional[str] = None
    template: str = "minimal"

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

class PageUpdate(BaseModel):
    # le slug n'est pas modifiable
    title: Optional[str] = None
    description: Optional[str] = None
    profile_pic: Optional[str] = None
    theme: Optional[str] = None
    button_style: Optional[str] = None
    font_family: Optional[str] = None
    bg_type: Optional[str] = None
    bg_color: Optional[str] = None
    gradient_from: Optional[str] = None
    gradient_to: Optional[str] = None
    bg_image_url: Optional[str] = None
    text_color: Optional[str] = None
    button_color: Optional[str] = None
    button_text_color: Optional[str] = None
    animation: Optional[str] = None
    custom_css: Optional[str] = None

    @field_validator("bg_color", "gradient_from", "gradient_to", "text_color", "button_color", "button_text_color")
    @classmethod
    def check_color(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_hex_color(v):
            raise ValueError("Color must be a hex value like #aabbcc")
        return v

    @field_validator("bg_type")
    @classmethod
    def check_bg_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("solid", "gradient", "image"):
            raise ValueError("bg_type must be solid, gradient or image")
        return v

class PageResponse(BaseModel):
    id: int
    user_id: int
    slug: str
    title: str
    description: Optional[str]
    profile_pic: Optional[str]
    is_published: bool
    theme: str
    button_style: str
    font_family: str
    bg_type: str
    bg_color: Optional[str]
    gradient_from: Optional[str]
    gradient_to: Optional[str]
    bg_image_url: Optional[str]
    text_color: Optional[str]
    button_color: Optional[str]
    button_text_color: Optional[str]
    animation: Optional[str]
    custom_css: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PageWithBlocks(PageResponse):
    blocks: List[BlockResponse] = []

class SlugAvailability(BaseModel):
    slug: str
    available: bool
