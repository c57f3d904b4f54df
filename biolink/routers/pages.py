from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from biolink.core.database import get_db
from biolink.core.deps import get_current_user
from biolink.models.user import User
from biolink.models.page import Page
from biolink.schemas.page import PageCreate, PageUpdate, PageResponse, PageWithBlocks, SlugAvailability
from biolink.schemas.block import BlockResponse
from biolink.schemas.render import RenderedPage
from biolink.services import page_service
from biolink.services.render_service import normalize_datetime, resolve_page
from typing import List, Optional

router = APIRouter(prefix="/pages", tags=["pages"])

def _get_owned_page(db: Session, page_id: int, user: User) -> Page:
    page = page_service.get_user_page(db, user.id, page_id)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return page

# Crée une page (non publiée)
@router.post("", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
def create_page(page_data: PageCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return page_service.create_page(
        db, current_user,
        title=page_data.title,
        slug=page_data.slug,
        description=page_data.description,
        template=page_data.template
    )

@router.get("", response_model=List[PageResponse])
def list_pages(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Page).filter(Page.user_id == current_user.id).order_by(Page.id).all()

@router.get("/slug-available", response_model=SlugAvailability)
def slug_available(slug: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # vérifie le slug normalisé, comme à la création
    clean = page_service.normalize_slug(slug)
    available = len(clean) >= page_service.SLUG_MIN_LENGTH and page_service.is_slug_available(db, clean)
    return {"slug": clean, "available": available}

@router.get("/{page_id}", response_model=PageWithBlocks)
def get_page(page_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    page, blocks = page_service.get_page_with_blocks(db, current_user.id, page_id)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    data = PageResponse.model_validate(page).model_dump()
    return PageWithBlocks(**data, blocks=[BlockResponse.model_validate(b) for b in blocks])

@router.put("/{page_id}", response_model=PageResponse)
def update_page(page_id: int, page_data: PageUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Maj partielle des champs de la page.

    Les champs absents du body ne sont pas touchés. Les couleurs / CSS
    peuvent être remis à null explicitement.
    """
    page = _get_owned_page(db, page_id, current_user)

    updates = page_data.model_dump(exclude_unset=True)
    page_service.check_design_update(updates, current_user.is_pro)

    for field, value in updates.items():
        if value is None and field in ("title", "theme", "button_style", "font_family", "bg_type", "animation"):
            continue
        setattr(page, field, value)

    db.commit()
    db.refresh(page)
    return page

@router.post("/{page_id}/publish", response_model=PageResponse)
def publish_page(page_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    page = _get_owned_page(db, page_id, current_user)
    page.is_published = True
    db.commit()
    db.refresh(page)
    return page

@router.post("/{page_id}/unpublish", response_model=PageResponse)
def unpublish_page(page_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    page = _get_owned_page(db, page_id, current_user)
    page.is_published = False
    db.commit()
    db.refresh(page)
    return page

@router.get("/{page_id}/preview", response_model=RenderedPage)
def preview_page(page_id: int, at: Optional[datetime] = None, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # aperçu live pour l'éditeur, même si la page n'est pas publiée
    page, blocks = page_service.get_page_with_blocks(db, current_user.id, page_id)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    now = normalize_datetime(at) if at else datetime.utcnow()
    return resolve_page(page, blocks, now, current_user.is_pro)
