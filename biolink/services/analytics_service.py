"""
Service analytics - enregistrement des clics et agrégats du dashboard
"""

import re
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from biolink.models.click import Click
from biolink.models.page import Page
from biolink.schemas.analytics import (
    AnalyticsSummary,
    BlockClicks,
    DayCount,
    NamedCount,
    PageClicks,
)

DEVICES = ("mobile", "tablet", "desktop")
TOP_COUNTRIES = 5
TOP_BLOCKS = 10

_TABLET = re.compile(r"ipad|tablet|playbook|silk|(android(?!.*mobile))", re.IGNORECASE)
_MOBILE = re.compile(r"mobi|iphone|ipod|android|blackberry|opera mini|iemobile", re.IGNORECASE)


def detect_device(user_agent: Optional[str]) -> Optional[str]:
    """Classe d'appareil déduite du User-Agent (tablet testé avant mobile)"""
    if not user_agent:
        return None
    if _TABLET.search(user_agent):
        return "tablet"
    if _MOBILE.search(user_agent):
        return "mobile"
    return "desktop"


def record_click(db: Session, page_id: int, block_id: Optional[int] = None,
                 device: Optional[str] = None, country: Optional[str] = None,
                 referrer: Optional[str] = None, clicked_at: Optional[datetime] = None) -> Click:
    click = Click(
        page_id=page_id,
        block_id=block_id,
        device=device if device in DEVICES else None,
        country=country.strip()[:64] if country and country.strip() else None,
        referrer=referrer[:500] if referrer else None,
        clicked_at=clicked_at or datetime.utcnow(),
    )
    db.add(click)
    db.commit()
    db.refresh(click)
    return click


def summarize_clicks(clicks: Iterable, pages: List, days: int, now: datetime) -> AnalyticsSummary:
    """
    Agrège une liste de clics (fonction pure).

    - clics par jour sur toute la fenêtre (jours sans clic = 0)
    - répartition par appareil, top 5 pays, clics par page / par block
    """
    clicks = list(clicks)
    today = now.date()
    first_day = today - timedelta(days=days - 1)

    by_day = Counter()
    devices = Counter()
    countries = Counter()
    by_page = Counter()
    by_block = Counter()

    for click in clicks:
        day = click.clicked_at.date()
        if first_day <= day <= today:
            by_day[day] += 1
        devices[click.device or "unknown"] += 1
        countries[click.country or "unknown"] += 1
        by_page[click.page_id] += 1
        if click.block_id is not None:
            by_block[click.block_id] += 1

    clicks_by_day = [
        DayCount(date=(first_day + timedelta(days=i)).isoformat(), count=by_day[first_day + timedelta(days=i)])
        for i in range(days)
    ]

    page_rows = sorted(
        (PageClicks(page_id=p.id, title=p.title, slug=p.slug, clicks=by_page[p.id]) for p in pages),
        key=lambda row: (-row.clicks, row.page_id),
    )

    return AnalyticsSummary(
        days=days,
        total_clicks=len(clicks),
        today_clicks=by_day[today],
        clicks_by_day=clicks_by_day,
        devices=[NamedCount(name=name, count=count) for name, count in devices.most_common()],
        top_countries=[NamedCount(name=name, count=count) for name, count in countries.most_common(TOP_COUNTRIES)],
        pages=page_rows,
        top_blocks=[BlockClicks(block_id=block_id, clicks=count) for block_id, count in by_block.most_common(TOP_BLOCKS)],
    )


def get_user_analytics(db: Session, user_id: int, days: int = 30, now: Optional[datetime] = None) -> AnalyticsSummary:
    now = now or datetime.utcnow()
    since = datetime.combine((now - timedelta(days=days - 1)).date(), datetime.min.time())

    pages = db.query(Page).filter(Page.user_id == user_id).order_by(Page.id).all()
    page_ids = [p.id for p in pages]

    clicks = []
    if page_ids:
        clicks = db.query(Click).filter(
            Click.page_id.in_(page_ids),
            Click.clicked_at >= since,
            Click.clicked_at <= now
        ).order_by(Click.clicked_at).all()

    return summarize_clicks(clicks, pages, days, now)
