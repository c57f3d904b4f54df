from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from datetime import datetime
from typing import Optional, Any, List, Literal

from biolink.services.render_service import normalize_datetime

BlockType = Literal[
    "link", "header", "text", "image", "video", "music", "social", "divider",
    "countdown", "map", "form", "product", "pdf", "html", "email",
]

class BlockCreate(BaseModel):
    """Créer un block"""
    type: BlockType = "link"
    title: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    icon: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    position: Optional[int] = None  # None = ajout en fin de page
    is_active: bool = True
    is_visible: bool = True
    visible_from: Optional[datetime] = None
    visible_to: Optional[datetime] = None

    @field_validator("visible_from", "visible_to")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # stocké en UTC naïf
        return normalize_datetime(v) if v is not None else None

    @model_validator(mode="after")
    def check_window(self):
        if self.visible_from and self.visible_to and self.visible_from > self.visible_to:
            raise ValueError("visible_from must be before visible_to")
        return self

class BlockUpdate(BaseModel):
    """Modifier un block"""
    type: Optional[BlockType] = None
    title: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    icon: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None
    is_visible: Optional[bool] = None
    visible_from: Optional[datetime] = None
    visible_to: Optional[datetime] = None

    @field_validator("visible_from", "visible_to")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # stocké en UTC naïf
        return normalize_datetime(v) if v is not None else None

    @model_validator(mode="after")
    def check_window(self):
        if self.visible_from and self.visible_to and self.visible_from > self.visible_to:
            raise ValueError("visible_from must be before visible_to")
        return self

class BlockResponse(BaseModel):
    """Block retourné"""
    id: int
    page_id: int
    user_id: int
    type: str
    title: Optional[str]
    url: Optional[str]
    content: Optional[str]
    image_url: Optional[str]
    icon: Optional[str]
    settings: Optional[dict[str, Any]]
    position: int
    is_active: bool
    is_visible: bool
    visible_from: Optional[datetime]
    visible_to: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class BlockOrder(BaseModel):
    """Nouvel ordre complet des blocks d'une page (drag & drop)"""
    block_ids: List[int]

    @field_validator("block_ids")
    @classmethod
    def check_unique(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("block_ids must not contain duplicates")
        return v

