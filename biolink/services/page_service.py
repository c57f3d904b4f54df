# IMPORTS
import re
import logging
from sqlalchemy.orm import Session
from biolink.core.errors import BioLinkError, InvalidSlugError, PlanLimitError, SlugTakenError
from biolink.models.page import Page
from biolink.models.block import Block
from biolink.models.user import User
from biolink.services.render_service import PRO_ANIMATIONS, PRO_FONTS
from typing import List, Tuple, Optional

logger = logging.getLogger(__name__)

SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 30
FREE_MAX_PAGES = 1

# Templates proposés à la création d'une page
TEMPLATES = {
    "minimal": {"theme": "default", "button_style": "rounded", "bg_color": "#ffffff"},
    "dark": {"theme": "dark", "button_style": "rounded", "bg_color": "#0a0a0a"},
    "purple": {"theme": "purple", "button_style": "pill", "bg_color": "#7c3aed"},
    "ocean": {"theme": "ocean", "button_style": "pill", "bg_color": "#2563eb"},
    "sunset": {"theme": "sunset", "button_style": "rounded", "bg_color": "#f97316"},
    "forest": {"theme": "forest", "button_style": "rounded", "bg_color": "#15803d", "pro": True},
}


def normalize_slug(value: str) -> str:
    # minuscules, espaces -> tirets, seulement [a-z0-9-], 30 caractères max
    slug = re.sub(r"\s+", "-", value.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return slug[:SLUG_MAX_LENGTH]


def is_slug_available(db: Session, slug: str) -> bool:
    return db.query(Page.id).filter(Page.slug == slug).first() is None


def create_page(db: Session, user: User, title: str, slug: str,
                description: Optional[str] = None, template: str = "minimal") -> Page:
    """
    Crée une page non publiée pour l'user.

    Règles:
    - slug normalisé, 3 caractères minimum, unique
    - plan Free: une seule page, templates Pro interdits
    """
    clean_slug = normalize_slug(slug)
    if len(clean_slug) < SLUG_MIN_LENGTH:
        raise InvalidSlugError(f"Slug must be at least {SLUG_MIN_LENGTH} characters")

    preset = TEMPLATES.get(template)
    if preset is None:
        raise BioLinkError(f"Unknown template: {template}")

    if not user.is_pro:
        page_count = db.query(Page).filter(Page.user_id == user.id).count()
        if page_count >= FREE_MAX_PAGES:
            raise PlanLimitError("Free plan is limited to one page")
        if preset.get("pro"):
            raise PlanLimitError("This template requires the Pro plan")

    if not is_slug_available(db, clean_slug):
        raise SlugTakenError("Slug already taken")

    page = Page(
        user_id=user.id,
        slug=clean_slug,
        title=title,
        description=description,
        is_published=False,
        theme=preset["theme"],
        button_style=preset["button_style"],
        font_family="inter",
        bg_type="solid",
        bg_color=preset["bg_color"],
        animation="none",
    )
    db.add(page)
    db.commit()
    db.refresh(page)
    logger.info("Page %s created by user %s (slug=%s)", page.id, user.id, page.slug)
    return page


def check_design_update(updates: dict, is_pro: bool) -> None:
    """Refuse les valeurs de design réservées au plan Pro"""
    if is_pro:
        return
    if updates.get("bg_type") in ("gradient", "image"):
        raise PlanLimitError("Gradient and image backgrounds require the Pro plan")
    if updates.get("font_family") in PRO_FONTS:
        raise PlanLimitError("This font requires the Pro plan")
    if updates.get("animation") in PRO_ANIMATIONS:
        raise PlanLimitError("This animation requires the Pro plan")
    if updates.get("custom_css"):
        raise PlanLimitError("Custom CSS requires the Pro plan")


def get_user_page(db: Session, user_id: int, page_id: int) -> Optional[Page]:
    return db.query(Page).filter(Page.id == page_id, Page.user_id == user_id).first()


def get_page_with_blocks(db: Session, user_id: int, page_id: int) -> Tuple[Optional[Page], List[Block]]:
    page = get_user_page(db, user_id, page_id)

    if not page:
        return None, []

    blocks = db.query(Block).filter(Block.page_id == page_id).order_by(Block.position, Block.id).all()

    return page, blocks


def get_published_page(db: Session, slug: str) -> Tuple[Optional[Page], Optional[User], List[Block]]:
    # page publique: page publiée + son propriétaire (pour le plan) + ses blocks
    page = db.query(Page).filter(Page.slug == slug, Page.is_published == True).first()
    if not page:
        return None, None, []

    owner = db.query(User).filter(User.id == page.user_id).first()
    blocks = db.query(Block).filter(Block.page_id == page.id).all()

    return page, owner, blocks
