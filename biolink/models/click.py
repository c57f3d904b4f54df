from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime
from biolink.core.database import Base

class Click(Base):
    # append-only, aucune donnée d'identité
    __tablename__ = "clicks"

    id = Column(Integer, primary_key=True, index=True)
    page_id = Column(Integer, ForeignKey("pages.id"), nullable=False, index=True)
    block_id = Column(Integer, ForeignKey("blocks.id", ondelete="SET NULL"), nullable=True, index=True)
    clicked_at = Column(DateTime, default=datetime.utcnow, index=True)
    device = Column(String, nullable=True)  # "mobile", "tablet", "desktop"
    country = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
