from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON, Text
from datetime import datetime
from biolink.core.database import Base

BLOCK_TYPES = (
    "link", "header", "text", "image", "video", "music", "social", "divider",
    "countdown", "map", "form", "product", "pdf", "html", "email",
)
FREE_BLOCK_TYPES = ("link", "header", "text", "image", "social", "divider")

class Block(Base):
    __tablename__ = "blocks"

    id = Column(Integer, primary_key=True, index=True)
    page_id = Column(Integer, ForeignKey("pages.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String, default="link")
    title = Column(String, nullable=True)
    url = Column(String, nullable=True)
    content = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    settings = Column(JSON, nullable=True)  # ex: {"target_date": ...} pour countdown
    position = Column(Integer, default=0)  # ordre dans la page, départage par id
    is_active = Column(Boolean, default=True)
    is_visible = Column(Boolean, default=True)
    visible_from = Column(DateTime, nullable=True)
    visible_to = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
