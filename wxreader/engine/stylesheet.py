from __future__ import annotations

from wxreader.engine.selectors import (
    CLASS_COMPACT,
    CLASS_INK,
    CLASS_SELECTED,
    COMPACT_PADDING_PROPERTY,
)

_TEMPLATE = """
/* ink screen mode */
.{ink} * {{ animation: none !important; transition: none !important; }}
.{ink}, .{ink} body {{ background: #f7f7f7 !important; color: #111 !important; }}
.{ink} img, .{ink} canvas, .{ink} video {{ filter: grayscale(1) contrast(1.05); }}
.{ink} .wr_highlight_bg {{ background: rgba(0, 0, 0, 0.12) !important; }}
.{selected} {{ outline: {outline}px solid #111 !important; outline-offset: 2px; }}

/* book content, comment elements excluded */
.readerChapterContent,
.readerChapterContent_container,
.readerChapterContent p:not([class*="review"]),
.readerChapterContent span:not([class*="review"]),
.readerChapterContent div:not([class*="review"]),
.preRenderContent p:not([class*="review"]),
.preRenderContent span:not([class*="review"]),
.preRenderContent div:not([class*="review"]) {{
  font-size: {content_font_size} !important;
  line-height: {content_line_height} !important;
}}

:root {{ {padding_property}: {padding}px; }}

/* compact mode: hide reader chrome */
.{compact} .readerTopBar,
.{compact} .readerControls,
.{compact} .readerFooter,
.{compact} .renderTarget_pager,
.{compact} .readerTopBar_container,
.{compact} .renderTargetPageInfo_header,
.{compact} .renderTargetPageInfo_header_chapterTitle,
.{compact} [class*="TopBar"],
.{compact} [class*="Footer"],
.{compact} [class*="pager"] {{
  display: none !important;
}}

/* compact mode: containers fill the viewport */
.{compact} body,
.{compact} #app,
.{compact} .wr_horizontalReader_app,
.{compact} .wr_horizontalReader_app_content,
.{compact} .readerChapterContent_container,
.{compact} .renderTargetContainer,
.{compact} .wr_canvasContainer {{
  width: 100vw !important;
  height: 100vh !important;
  margin: 0 !important;
  padding: 0 !important;
  max-width: none !important;
  top: 0 !important;
  left: 0 !important;
  right: 0 !important;
  bottom: 0 !important;
  box-sizing: border-box !important;
}}
.{compact} .page {{ padding: var({padding_property}) !important; }}
.{compact} .preRenderContent {{ padding: 0 !important; }}
.{compact} canvas {{ margin: 0 !important; }}
.{compact} .wr_white_reader,
.{compact} .readerChapterContent {{
  background-color: #ffffff !important;
}}
.{compact} .readerChapterContent {{
  height: calc(100vh - 25px) !important;
  margin-top: 15px !important;
  padding: 0 !important;
  border: none !important;
  position: relative !important;
  overflow: visible !important;
}}

/* comment list and reply detail */
[class*="reviewDetail"] .content,
[class*="reviewDetail"] .content *,
[class*="reviewDetail"] p,
[class*="reviewDetail"] span,
[class*="reviewDetail"] div,
[class*="reviews_panel"] .reader_float_reviews_panel_item_content,
[class*="reviews_panel"] .reader_float_reviews_panel_item_content *,
[class*="reviews_panel"] *,
[class*="item_content"] {{
  font-size: {comment_font_size} !important;
  line-height: {comment_line_height} !important;
}}
[class*="float_panel"][class*="review"] {{
  width: {panel_width}px !important;
  max-width: 90vw !important;
}}
"""


def build_stylesheet(config: dict) -> str:
    """Render the injected rule sheet from the ``ui`` and ``panel`` sections."""
    ui = dict(config.get("ui") or {})
    panel = dict(config.get("panel") or {})
    return _TEMPLATE.format(
        ink=CLASS_INK,
        compact=CLASS_COMPACT,
        selected=CLASS_SELECTED,
        padding_property=COMPACT_PADDING_PROPERTY,
        outline=ui.get("selection_outline_width", 2),
        content_font_size=ui.get("content_font_size", "40px"),
        content_line_height=ui.get("content_line_height", "1.8"),
        comment_font_size=ui.get("comment_font_size", "20px"),
        comment_line_height=ui.get("comment_line_height", "1.6"),
        padding=ui.get("compact_padding", 5),
        panel_width=panel.get("width", 420),
    ).strip()
