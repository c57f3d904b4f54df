"""
Router des pages publiques (sans authentification).

Endpoints:
- GET  /u/{slug}        - descripteur de rendu d'une page publiée
- POST /u/{slug}/click  - enregistre un clic (analytics)
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from biolink.core.database import get_db
from biolink.models.block import Block
from biolink.schemas.analytics import ClickCreate
from biolink.schemas.render import RenderedPage
from biolink.services.analytics_service import detect_device, record_click
from biolink.services.page_service import get_published_page
from biolink.services.render_service import resolve_page

router = APIRouter(prefix="/u", tags=["public"])

@router.get("/{slug}", response_model=RenderedPage)
def public_page(slug: str, db: Session = Depends(get_db)):
    page, owner, blocks = get_published_page(db, slug)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")

    # plan du propriétaire pour les fonctionnalités Pro, heure courante en UTC
    is_pro = bool(owner and owner.is_pro)
    return resolve_page(page, blocks, datetime.utcnow(), is_pro)

@router.post("/{slug}/click", status_code=status.HTTP_201_CREATED)
def track_click(
    slug: str,
    click: ClickCreate,
    db: Session = Depends(get_db),
    user_agent: Optional[str] = Header(None),
    referer: Optional[str] = Header(None)
):
    page, _, _ = get_published_page(db, slug)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")

    if click.block_id is not None:
        block = db.query(Block).filter(Block.id == click.block_id, Block.page_id == page.id).first()
        if not block:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block not found")

    record_click(
        db,
        page_id=page.id,
        block_id=click.block_id,
        device=click.device or detect_device(user_agent),
        country=click.country,
        referrer=click.referrer or referer
    )
    return {"recorded": True}
