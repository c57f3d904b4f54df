from pydantic import BaseModel
from typing import Optional, List

class ClickCreate(BaseModel):
    """Clic envoyé par la page publique"""
    block_id: Optional[int] = None
    device: Optional[str] = None  # déduit du User-Agent si absent
    country: Optional[str] = None
    referrer: Optional[str] = None

class DayCount(BaseModel):
    date: str  # YYYY-MM-DD
    count: int

class NamedCount(BaseModel):
    name: str
    count: int

class PageClicks(BaseModel):
    page_id: int
    title: str
    slug: str
    clicks: int

class BlockClicks(BaseModel):
    block_id: int
    clicks: int

class AnalyticsSummary(BaseModel):
    days: int
    total_clicks: int
    today_clicks: int
    clicks_by_day: List[DayCount]
    devices: List[NamedCount]
    top_countries: List[NamedCount]
    pages: List[PageClicks]
    top_blocks: List[BlockClicks]
