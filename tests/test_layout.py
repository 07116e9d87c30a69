import pytest

from fomcert.schemas.certificate import Watermark, WatermarkPosition
from fomcert.schemas.template import TemplateElement
from fomcert.services.html_renderer import render_html, render_preview
from fomcert.services.layout_fitter import fit_text, normalize_font_size, plain_text
from fomcert.services.layout_service import WATERMARK_ID, build_css, build_layout
from fomcert.services.placeholder_service import ResolvedDocument, hide_element

LONG_TEXT = "Faithful service " * 9  # 153 characters


def element(element_id, content="text", type="text", width=400, height=50, **style):
    return TemplateElement.model_validate({
        "id": element_id,
        "type": type,
        "content": content,
        "position": {"x": 10, "y": 20, "width": width, "height": height},
        "style": style,
    })


def document(*elements, **kwargs):
    return ResolvedDocument(
        elements=list(elements),
        page_width=kwargs.get("page_width", 800),
        page_height=kwargs.get("page_height", 600),
        document_height=kwargs.get("document_height", 600),
        expanded_ids=kwargs.get("expanded_ids", ()),
    )


@pytest.mark.parametrize("value,pixels", [
    (None, 16),
    ("", 16),
    (24, 24),
    (13.5, 13.5),
    ("18px", 18),
    ("1.5em", 24),
    ("2rem", 32),
    ("150%", 24),
    ("large", 20),
    ("X-Small", 12),
    ("huge", 16),
])
def test_normalize_font_size(value, pixels):
    assert normalize_font_size(value) == pixels


def test_plain_text_strips_tags_and_entities():
    assert plain_text("<b>Jane</b> &amp; John") == "Jane & John"


def test_short_text_that_fits_keeps_its_size():
    result = fit_text(24, 400, 50, "Jane Doe")

    assert result.font_size == 24
    assert result.line_height == "1.2"
    assert result.align_items == "center"


def test_short_text_is_shrunk_to_one_line_with_floor():
    assert fit_text(32, 100, 50, "Jonathan Alexander").font_size == 10


def test_short_text_is_capped_by_box_height():
    assert fit_text(40, 1000, 20, "Hi").font_size == 16


def test_long_text_keeps_twelve_pixel_floor():
    result = fit_text(12, 200, 30, LONG_TEXT)

    assert result.font_size == 12
    assert result.line_height == "1.4"
    assert result.align_items == "flex-start"


def test_long_text_shrinks_at_most_twenty_percent():
    assert fit_text(30, 200, 30, LONG_TEXT).font_size == round(30 * 0.8 * 1.01)


def test_explicit_line_height_is_kept():
    assert fit_text(16, 400, 50, "Jane", line_height=1.6).line_height == "1.6"


def test_shorter_text_never_gets_smaller_font():
    names = ["Al", "Jane Doe", "Jane Elizabeth Doe", "Jane Elizabeth Doe-Mensah"]
    sizes = [fit_text(28, 300, 40, name).font_size for name in names]

    assert sizes == sorted(sizes, reverse=True)


def test_longer_long_text_never_gets_larger_font():
    sizes = [fit_text(24, 200, 30, "a" * length).font_size for length in range(101, 400, 17)]

    assert sizes == sorted(sizes, reverse=True)
    assert min(sizes) >= 12


def test_crossing_the_long_text_threshold_switches_strategy():
    short = fit_text(24, 200, 30, "a" * 100)
    long = fit_text(24, 200, 30, "a" * 101)

    # Long text is allowed to overflow rather than shrink to one line
    assert (short.font_size, short.is_long) == (10, False)
    assert (long.font_size, long.is_long) == (19, True)
    assert long.line_height == "1.4"


def test_zero_sized_box_skips_fitting():
    assert fit_text(20, 0, 0, "Jane").font_size == round(20 * 1.02)


def test_build_css_for_text():
    css = build_css(element("name", "Jane Doe", fontSize=24, color="#2596be", textAlign="center",
                            rotation=15, textShadow="1px 1px #000", zIndex=3))

    assert css["left"] == "10px"
    assert css["top"] == "20px"
    assert css["width"] == "400px"
    assert css["font-size"] == "24px"
    assert css["color"] == "#2596be"
    assert css["text-align"] == "center"
    assert css["justify-content"] == "center"
    assert css["transform"] == "rotate(15deg)"
    assert css["text-shadow"] == "1px 1px #000"
    assert css["z-index"] == "3"


def test_build_css_without_fitting():
    css = build_css(element("pages", "<div></div>", fontSize="14px"), fit=False)

    assert css["font-size"] == "14px"
    assert "justify-content" not in css


def test_layout_orders_by_z_index_then_template_order():
    layout = build_layout(document(
        element("front", zIndex=2),
        element("back-1", zIndex=0),
        element("middle"),
        element("back-2", zIndex=0),
        hide_element(element("hidden", zIndex=1)),
    ))

    assert [box.element_id for box in layout.boxes] == ["back-1", "middle", "back-2", "front"]


def test_watermark_is_painted_last():
    watermark = Watermark(text="FOM-1A2B3C4D", hash="1a2b3c4d", position=WatermarkPosition(x=320, y=260, rotation=-5))
    layout = build_layout(document(element("top", zIndex=50)), watermark=watermark)

    box = layout.boxes[-1]
    assert box.element_id == WATERMARK_ID
    assert box.content == "FOM-1A2B3C4D"
    assert box.css["transform"] == "rotate(-5.00deg)"


def test_expanded_element_is_not_fitted():
    layout = build_layout(document(
        element("pages", "<div>page</div>", width=595, height=1684),
        page_width=595, page_height=842, document_height=1684, expanded_ids=("pages",),
    ))

    assert "justify-content" not in layout.boxes[0].css
    assert layout.document_height == 1684


def test_render_html_standalone_and_preview():
    layout = build_layout(
        document(element("name", "Jane &amp; John"), element("logo", "/Logo.png", type="image")),
        background_color="#ffffff",
    )

    html = render_html(layout, title="Certificate - Jane", font_urls=["https://fonts.example.org/serif.css"])
    assert html.lstrip().startswith("<!DOCTYPE html>")
    assert "<title>Certificate - Jane</title>" in html
    assert 'href="https://fonts.example.org/serif.css"' in html
    assert "Jane &amp; John</div>" in html
    assert '<img data-element="logo" src="/Logo.png"' in html
    assert "background-color: #ffffff" in html

    preview = render_preview(layout, font_urls=["https://fonts.example.org/serif.css"])
    assert "<!DOCTYPE html>" not in preview
    assert '<link rel="stylesheet" href="https://fonts.example.org/serif.css">' in preview
    assert 'data-element="name"' in preview
