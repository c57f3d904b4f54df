from pydantic import BaseModel
from typing import Optional, List, Any

# Schemas du descripteur de rendu (sortie du render_service)

class ButtonStyleBundle(BaseModel):
    style: str
    background: str
    text_color: str
    border: Optional[str] = None
    border_radius: str
    box_shadow: Optional[str] = None

class StyleBundle(BaseModel):
    theme: str
    background: str
    font_family: str
    font_stack: str
    text_color: str
    button: ButtonStyleBundle
    animation: str = "none"
    custom_css: Optional[str] = None

class RenderedBlock(BaseModel):
    id: Optional[int] = None
    type: str
    title: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    icon: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    position: int = 0
    animation_delay_ms: Optional[int] = None

class RenderedPage(BaseModel):
    slug: Optional[str] = None
    title: str
    description: Optional[str] = None
    profile_pic: Optional[str] = None
    style: StyleBundle
    blocks: List[RenderedBlock] = []
    show_branding: bool = True
