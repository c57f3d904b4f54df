import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from biolink.services.render_service import (
    FONT_STACKS,
    is_within_window,
    resolve_animation_delay,
    resolve_page,
    resolve_style,
    resolve_visible_blocks,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def make_block(id, position=0, type="link", **fields):
    values = dict(
        id=id, position=position, type=type, title=f"Block {id}", url="https://example.com",
        content=None, image_url=None, icon=None, settings=None,
        is_active=True, is_visible=True, visible_from=None, visible_to=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


def make_page(**fields):
    values = dict(
        slug="alice", title="Alice", description=None, profile_pic=None,
        theme="default", button_style="rounded", font_family="inter",
        bg_type="solid", bg_color=None, gradient_from=None, gradient_to=None,
        bg_image_url=None, text_color=None, button_color=None, button_text_color=None,
        animation="none", custom_css=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


# ========== TEST VISIBILITÉ ==========

def test_inactive_and_hidden_blocks_are_excluded():
    blocks = [
        make_block(1),
        make_block(2, is_active=False),
        make_block(3, is_visible=False),
    ]
    assert [b.id for b in resolve_visible_blocks(blocks, NOW)] == [1]


def test_window_bounds():
    """visible_from / visible_to inclusifs, borne absente = toujours ok"""
    blocks = [
        make_block(1, visible_from=NOW + timedelta(minutes=1)),
        make_block(2, visible_to=NOW - timedelta(minutes=1)),
        make_block(3, visible_from=NOW - timedelta(days=1), visible_to=NOW + timedelta(days=1)),
        make_block(4, visible_from=NOW, visible_to=NOW),
        make_block(5, visible_from=None, visible_to=None),
    ]
    assert [b.id for b in resolve_visible_blocks(blocks, NOW)] == [3, 4, 5]


def test_window_with_aware_datetimes():
    # 13:00+01:00 == 12:00 UTC
    paris = timezone(timedelta(hours=1))
    block = make_block(1, visible_from=datetime(2026, 3, 15, 13, 0, tzinfo=paris))
    assert is_within_window(block, NOW) is True
    assert is_within_window(block, NOW - timedelta(seconds=1)) is False


def test_window_with_iso_strings():
    block = make_block(1, visible_from="2026-03-15T11:00:00Z", visible_to="2026-03-15T13:00:00")
    assert is_within_window(block, NOW) is True


def test_malformed_window_hides_block():
    block = make_block(1, visible_from="not-a-date")
    assert is_within_window(block, NOW) is False
    assert resolve_visible_blocks([block, make_block(2)], NOW)[0].id == 2


def test_sorted_by_position_then_id():
    blocks = [make_block(3, position=1), make_block(2, position=0), make_block(1, position=1)]
    assert [b.id for b in resolve_visible_blocks(blocks, NOW)] == [2, 1, 3]


def test_scheduled_block_appears_later():
    """Même block, résolu avant puis après le début de sa fenêtre"""
    block = make_block(1, visible_from=NOW + timedelta(hours=1))
    assert resolve_visible_blocks([block], NOW) == []
    assert [b.id for b in resolve_visible_blocks([block], NOW + timedelta(hours=2))] == [1]


def test_order_independent_of_input_order():
    blocks = [make_block(1, position=2), make_block(2, position=0), make_block(3, position=1), make_block(4, position=1)]
    for permutation in itertools.permutations(blocks):
        assert [b.id for b in resolve_visible_blocks(list(permutation), NOW)] == [2, 3, 4, 1]


def test_empty_blocks():
    assert resolve_visible_blocks([], NOW) == []


# ========== TEST ANIMATIONS ==========

def test_animation_delay():
    assert resolve_animation_delay(0, "fade") == 0
    assert resolve_animation_delay(3, "fade") == 240
    assert resolve_animation_delay(3, "none") is None
    assert resolve_animation_delay(3, None) is None
    assert resolve_animation_delay(3, "") is None


# ========== TEST STYLE ==========

def test_default_style():
    style = resolve_style(make_page(), is_pro=False)
    assert style.theme == "default"
    assert style.background == "#ffffff"
    assert style.font_family == "inter"
    assert style.font_stack == FONT_STACKS["inter"]
    assert style.button.style == "rounded"
    assert style.button.border_radius == "8px"
    assert style.animation == "none"
    assert style.custom_css is None


def test_unknown_values_fall_back_to_defaults():
    page = make_page(theme="neon", font_family="comic-sans", button_style="wobbly", animation="spin")
    style = resolve_style(page, is_pro=True)
    assert style.theme == "default"
    assert style.font_family == "inter"
    assert style.button.style == "rounded"
    assert style.animation == "none"


def test_malformed_fields_do_not_raise():
    page = make_page(theme=["x"], font_family={"a": 1}, button_style=42, animation=None,
                     bg_color="red", text_color=12, custom_css=123)
    style = resolve_style(page, is_pro=True)
    assert style.theme == "default"
    assert style.background == "#ffffff"
    assert style.custom_css is None


def test_gradient_background_pro_only():
    page = make_page(bg_type="gradient", gradient_from="#ff0000", gradient_to="#0000ff", bg_color="#123456")
    assert resolve_style(page, is_pro=True).background == "linear-gradient(135deg, #ff0000, #0000ff)"
    assert resolve_style(page, is_pro=False).background == "#123456"


def test_incomplete_gradient_falls_back():
    page = make_page(theme="dark", bg_type="gradient", gradient_from="#ff0000", gradient_to=None)
    assert resolve_style(page, is_pro=True).background == "#0a0a0a"


def test_image_background_pro_only():
    page = make_page(bg_type="image", bg_image_url="https://cdn.example.com/bg.jpg")
    assert resolve_style(page, is_pro=True).background == 'url("https://cdn.example.com/bg.jpg") center / cover no-repeat'
    assert resolve_style(page, is_pro=False).background == "#ffffff"


def test_pro_font_and_animation_gated():
    page = make_page(font_family="space-grotesk", animation="bounce")
    free = resolve_style(page, is_pro=False)
    pro = resolve_style(page, is_pro=True)
    assert free.font_family == "inter"
    assert free.animation == "none"
    assert pro.font_family == "space-grotesk"
    assert pro.animation == "bounce"


def test_custom_css_pro_only_and_sanitized():
    page = make_page(custom_css=".btn { color: red; }</style><script>alert(1)</script>")
    assert resolve_style(page, is_pro=False).custom_css is None
    css = resolve_style(page, is_pro=True).custom_css
    assert "</style" not in css
    assert ".btn { color: red; }" in css


def test_outline_button():
    page = make_page(button_style="outline", button_color="#ff0000")
    button = resolve_style(page, is_pro=False).button
    assert button.background == "transparent"
    assert button.border == "2px solid #ff0000"
    assert button.text_color == "#ff0000"


def test_shadow_alias():
    button = resolve_style(make_page(button_style="shadow"), is_pro=False).button
    assert button.style == "soft-shadow"
    assert button.box_shadow is not None


def test_theme_colors():
    style = resolve_style(make_page(theme="purple"), is_pro=False)
    assert style.background == "#7c3aed"
    assert style.button.background == "#ffffff"
    assert style.button.text_color == "#7c3aed"


# ========== TEST PAGE COMPLÈTE ==========

def test_resolve_page_with_animation_delays():
    page = make_page(animation="fade")
    blocks = [make_block(1, position=2), make_block(2, position=0), make_block(3, position=1, is_active=False)]
    rendered = resolve_page(page, blocks, NOW, is_pro=False)

    assert [b.id for b in rendered.blocks] == [2, 1]
    assert [b.animation_delay_ms for b in rendered.blocks] == [0, 80]
    assert rendered.show_branding is True
    assert rendered.slug == "alice"


def test_resolve_page_drops_pro_blocks_for_free_owner():
    blocks = [make_block(1, type="link"), make_block(2, type="video", position=1), make_block(3, type="unknown", position=2)]
    free = resolve_page(make_page(), blocks, NOW, is_pro=False)
    pro = resolve_page(make_page(), blocks, NOW, is_pro=True)

    assert [b.id for b in free.blocks] == [1]
    assert [b.id for b in pro.blocks] == [1, 2]
    assert pro.show_branding is False
    assert all(b.animation_delay_ms is None for b in pro.blocks)


def test_resolve_page_is_deterministic():
    page = make_page(animation="fade", bg_color="#abcdef")
    blocks = [make_block(1), make_block(2, position=1)]
    assert resolve_page(page, blocks, NOW, True) == resolve_page(page, blocks, NOW, True)


def test_resolve_page_empty():
    rendered = resolve_page(make_page(), [], NOW, is_pro=False)
    assert rendered.blocks == []
    assert rendered.title == "Alice"
