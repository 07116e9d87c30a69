"""
HTML Renderer
Serializes a page layout into standalone HTML (downloads) or a fragment (previews)
"""

from typing import List, Optional

from fomcert.services.layout_service import PageLayout
from fomcert.templating import env


def render_html(
    layout: PageLayout,
    title: str = "Certificate",
    font_urls: Optional[List[str]] = None,
    standalone: bool = True,
) -> str:
    template = env.get_template("document.html")
    return template.render(
        layout=layout,
        title=title,
        font_urls=font_urls or [],
        standalone=standalone,
    )


def render_preview(layout: PageLayout, font_urls: Optional[List[str]] = None) -> str:
    """Fragment for embedding in an admin page, font stylesheets linked inline"""
    return render_html(layout, font_urls=font_urls, standalone=False)
