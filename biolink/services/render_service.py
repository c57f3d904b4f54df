"""
Service de rendu des pages publiques.

Transforme une page + ses blocks + l'heure courante en descripteur de rendu:
- blocks visibles, triés par position
- bundle de style résolu (fond, police, boutons, animation, CSS perso)

Fonctions pures: aucune I/O, aucun état partagé, jamais d'exception sur un
champ optionnel mal formé (on retombe sur les valeurs par défaut).
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from dateutil.parser import isoparse

from biolink.models.block import BLOCK_TYPES, FREE_BLOCK_TYPES
from biolink.schemas.render import (
    ButtonStyleBundle,
    RenderedBlock,
    RenderedPage,
    StyleBundle,
)

logger = logging.getLogger(__name__)

ANIMATION_STEP_MS = 80

# ============ THÈMES ============

THEMES = {
    "default": {"background": "#ffffff", "text": "#111827", "button": "#111827", "button_text": "#ffffff"},
    "dark": {"background": "#0a0a0a", "text": "#f9fafb", "button": "#f9fafb", "button_text": "#0a0a0a"},
    "purple": {"background": "#7c3aed", "text": "#ffffff", "button": "#ffffff", "button_text": "#7c3aed"},
    "ocean": {"background": "#2563eb", "text": "#ffffff", "button": "#ffffff", "button_text": "#2563eb"},
    "sunset": {"background": "#f97316", "text": "#ffffff", "button": "#ffffff", "button_text": "#c2410c"},
    "forest": {"background": "#15803d", "text": "#ffffff", "button": "#ffffff", "button_text": "#15803d"},
}
DEFAULT_THEME = "default"

# ============ POLICES ============

FONT_STACKS = {
    "inter": "'Inter', system-ui, -apple-system, sans-serif",
    "roboto": "'Roboto', system-ui, sans-serif",
    "poppins": "'Poppins', system-ui, sans-serif",
    "montserrat": "'Montserrat', system-ui, sans-serif",
    "nunito": "'Nunito', system-ui, sans-serif",
    "playfair": "'Playfair Display', Georgia, serif",
    "merriweather": "'Merriweather', Georgia, serif",
    "lora": "'Lora', Georgia, serif",
    "serif": "Georgia, 'Times New Roman', serif",
    "mono": "'JetBrains Mono', ui-monospace, monospace",
    "space-grotesk": "'Space Grotesk', system-ui, sans-serif",
    "dm-serif": "'DM Serif Display', Georgia, serif",
    "cabinet": "'Cabinet Grotesk', system-ui, sans-serif",
}
PRO_FONTS = ("space-grotesk", "dm-serif", "cabinet")
DEFAULT_FONT = "inter"

# ============ BOUTONS ============

BUTTON_STYLES = {
    "rounded": {"border_radius": "8px", "box_shadow": None},
    "pill": {"border_radius": "9999px", "box_shadow": None},
    "square": {"border_radius": "0", "box_shadow": None},
    "outline": {"border_radius": "8px", "box_shadow": None},
    "soft-shadow": {"border_radius": "8px", "box_shadow": "0 8px 30px rgba(0, 0, 0, 0.12)"},
}
BUTTON_STYLE_ALIASES = {"shadow": "soft-shadow"}
DEFAULT_BUTTON_STYLE = "rounded"

# ============ ANIMATIONS ============

ANIMATIONS = ("none", "fade", "slide-up", "slide-down", "bounce", "zoom")
PRO_ANIMATIONS = ("slide-up", "slide-down", "bounce", "zoom")

GRADIENT_DIRECTION = "135deg"

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_STYLE_CLOSE = re.compile(r"</\s*style", re.IGNORECASE)


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def _color(value: Any) -> Optional[str]:
    return value if is_hex_color(value) else None


def normalize_datetime(value: datetime) -> datetime:
    # tout est comparé en UTC naïf (les colonnes DateTime sont naïves)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class _MalformedBound(Exception):
    pass


def _parse_bound(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return normalize_datetime(value)
    if isinstance(value, str):
        try:
            return normalize_datetime(isoparse(value.strip()))
        except (ValueError, OverflowError):
            raise _MalformedBound(value)
    raise _MalformedBound(value)


def is_within_window(block: Any, now: datetime) -> bool:
    """
    Vérifie que `now` tombe dans [visible_from, visible_to].

    Une borne absente est toujours satisfaite. Une borne illisible masque
    le block (fail-closed).
    """
    now = normalize_datetime(now)
    try:
        start = _parse_bound(getattr(block, "visible_from", None))
        end = _parse_bound(getattr(block, "visible_to", None))
    except _MalformedBound as e:
        logger.warning("Block %s hidden: malformed visibility bound %r", getattr(block, "id", None), e.args[0])
        return False

    if start is not None and now < start:
        return False
    if end is not None and now > end:
        return False
    return True


def _sort_key(block: Any):
    # (position, id): id croissant = ordre d'insertion, les ids absents passent en dernier
    position = getattr(block, "position", None)
    block_id = getattr(block, "id", None)
    return (
        position if isinstance(position, int) else 0,
        block_id is None,
        block_id if block_id is not None else 0,
    )


def resolve_visible_blocks(blocks: Iterable[Any], now: datetime) -> List[Any]:
    """Filtre les blocks inactifs, masqués ou hors fenêtre, triés par position."""
    visible = [
        block for block in blocks
        if getattr(block, "is_active", True) is not False
        and getattr(block, "is_visible", True) is not False
        and is_within_window(block, now)
    ]
    return sorted(visible, key=_sort_key)


def resolve_animation_delay(index: int, style: Optional[str]) -> Optional[int]:
    """Délai d'entrée échelonné (ms), None si pas d'animation."""
    if not style or style == "none":
        return None
    return index * ANIMATION_STEP_MS


def _resolve_background(page: Any, theme: dict, is_pro: bool) -> str:
    bg_type = getattr(page, "bg_type", None)

    if is_pro and bg_type == "gradient":
        start = _color(getattr(page, "gradient_from", None))
        end = _color(getattr(page, "gradient_to", None))
        if start and end:
            return f"linear-gradient({GRADIENT_DIRECTION}, {start}, {end})"

    if is_pro and bg_type == "image":
        image_url = getattr(page, "bg_image_url", None)
        if isinstance(image_url, str) and image_url.strip():
            safe_url = image_url.strip().replace('"', "%22")
            return f'url("{safe_url}") center / cover no-repeat'

    return _color(getattr(page, "bg_color", None)) or theme["background"]


def _resolve_font(page: Any, is_pro: bool) -> str:
    font = getattr(page, "font_family", None)
    if not isinstance(font, str) or font not in FONT_STACKS:
        return DEFAULT_FONT
    if font in PRO_FONTS and not is_pro:
        return DEFAULT_FONT
    return font


def _resolve_animation(page: Any, is_pro: bool) -> str:
    animation = getattr(page, "animation", None)
    if not isinstance(animation, str) or animation not in ANIMATIONS:
        return "none"
    if animation in PRO_ANIMATIONS and not is_pro:
        return "none"
    return animation


def _resolve_button(page: Any, theme: dict) -> ButtonStyleBundle:
    style_id = getattr(page, "button_style", None)
    if not isinstance(style_id, str):
        style_id = DEFAULT_BUTTON_STYLE
    style_id = BUTTON_STYLE_ALIASES.get(style_id, style_id)
    if style_id not in BUTTON_STYLES:
        style_id = DEFAULT_BUTTON_STYLE
    shape = BUTTON_STYLES[style_id]

    color = _color(getattr(page, "button_color", None)) or theme["button"]
    text_color = _color(getattr(page, "button_text_color", None)) or theme["button_text"]

    if style_id == "outline":
        return ButtonStyleBundle(
            style=style_id,
            background="transparent",
            text_color=_color(getattr(page, "button_text_color", None)) or color,
            border=f"2px solid {color}",
            border_radius=shape["border_radius"],
            box_shadow=shape["box_shadow"],
        )

    return ButtonStyleBundle(
        style=style_id,
        background=color,
        text_color=text_color,
        border=None,
        border_radius=shape["border_radius"],
        box_shadow=shape["box_shadow"],
    )


def sanitize_custom_css(css: Any) -> Optional[str]:
    if not isinstance(css, str) or not css.strip():
        return None
    return _STYLE_CLOSE.sub("", css)


def resolve_style(page: Any, is_pro: bool) -> StyleBundle:
    """
    Calcule le bundle de style d'une page.

    Les champs Pro (gradient, image de fond, polices Pro, animations Pro,
    CSS perso) sont ignorés si is_pro est False.
    """
    theme_id = getattr(page, "theme", None)
    if not isinstance(theme_id, str) or theme_id not in THEMES:
        theme_id = DEFAULT_THEME
    theme = THEMES[theme_id]

    font = _resolve_font(page, is_pro)

    return StyleBundle(
        theme=theme_id,
        background=_resolve_background(page, theme, is_pro),
        font_family=font,
        font_stack=FONT_STACKS[font],
        text_color=_color(getattr(page, "text_color", None)) or theme["text"],
        button=_resolve_button(page, theme),
        animation=_resolve_animation(page, is_pro),
        custom_css=sanitize_custom_css(getattr(page, "custom_css", None)) if is_pro else None,
    )


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _describe_block(block: Any, delay: Optional[int]) -> RenderedBlock:
    settings = getattr(block, "settings", None)
    position = getattr(block, "position", None)
    block_id = getattr(block, "id", None)
    return RenderedBlock(
        id=block_id if isinstance(block_id, int) else None,
        type=block.type,
        title=_str(getattr(block, "title", None)),
        url=_str(getattr(block, "url", None)),
        content=_str(getattr(block, "content", None)),
        image_url=_str(getattr(block, "image_url", None)),
        icon=_str(getattr(block, "icon", None)),
        settings=settings if isinstance(settings, dict) else None,
        position=position if isinstance(position, int) else 0,
        animation_delay_ms=delay,
    )


def resolve_page(page: Any, blocks: Iterable[Any], now: datetime, is_pro: bool) -> RenderedPage:
    """Descripteur complet de ce que voit un visiteur à l'instant `now`."""
    style = resolve_style(page, is_pro)

    # types inconnus ignorés, types Pro retirés pour le plan Free
    allowed = BLOCK_TYPES if is_pro else FREE_BLOCK_TYPES
    visible = [b for b in resolve_visible_blocks(blocks, now) if getattr(b, "type", None) in allowed]

    rendered = [
        _describe_block(block, resolve_animation_delay(index, style.animation))
        for index, block in enumerate(visible)
    ]

    return RenderedPage(
        slug=_str(getattr(page, "slug", None)),
        title=_str(getattr(page, "title", None)) or "",
        description=_str(getattr(page, "description", None)),
        profile_pic=_str(getattr(page, "profile_pic", None)),
        style=style,
        blocks=rendered,
        show_branding=not is_pro,
    )
