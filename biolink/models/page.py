"""Page model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text
from datetime import datetime
from biolink.core.database import Base


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    slug = Column(String(30), unique=True, nullable=False, index=True)  # immuable après création
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    profile_pic = Column(String, nullable=True)
    is_published = Column(Boolean, default=False)

    # Design
    theme = Column(String, default="default")
    button_style = Column(String, default="rounded")
    font_family = Column(String, default="inter")
    bg_type = Column(String, default="solid")  # "solid", "gradient", "image"
    bg_color = Column(String, nullable=True)
    gradient_from = Column(String, nullable=True)
    gradient_to = Column(String, nullable=True)
    bg_image_url = Column(String, nullable=True)
    text_color = Column(String, nullable=True)
    button_color = Column(String, nullable=True)
    button_text_color = Column(String, nullable=True)
    animation = Column(String, default="none")
    custom_css = Column(Text, nullable=True)  # Pro

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
