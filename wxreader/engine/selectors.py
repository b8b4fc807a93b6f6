"""Class-name based selectors for the WeRead reader markup.

The host page has no stable schema. These lists are ordered guesses, most
specific first, and every consumer treats "nothing matched" as a valid state.
"""

from __future__ import annotations

from typing import Tuple

CLASS_SELECTED = "wxrd-selected"
CLASS_INK = "wxrd-ink"
CLASS_COMPACT = "wxrd-compact"
STYLE_ID = "wxrd-style"
COMPACT_PADDING_PROPERTY = "--wxrd-compact-padding"
PANEL_APPLIED_LEFT_ATTRIBUTE = "data-wxrd-panel-left"

# Highlights
HIGHLIGHT_SELECTOR = ".wr_underline_wrapper"
HIGHLIGHT_COLOR_PREFIX = "wr_underline_color_"
HIGHLIGHT_KEY_ATTRIBUTES: Tuple[str, ...] = (
    "data-underline-id",
    "data-wr-underline-id",
    "data-wr-id",
    "data-underline",
    "data-range",
    "data-uid",
)
HIGHLIGHT_KEY_FRAGMENTS: Tuple[str, ...] = ("underline", "range")

# Panels used for tier resolution
DETAIL_PANEL_SELECTORS: Tuple[str, ...] = (
    ".comment_detail_float_panel_reviewDetail",
)
COMMENT_PANEL_SELECTORS: Tuple[str, ...] = (
    ".reader_float_panel_reviewDetail",
    ".readerFloatPanel_reviewDetail",
    '[class*="reviewDetail"]',
    '[class*="float_panel"][class*="review"]',
)

# Comment list
COMMENT_LIST_PANEL_SELECTORS: Tuple[str, ...] = (
    '[class*="float_panel"][class*="review"]',
    '[class*="ReviewsPanel"]',
    '[class*="reviewDetail"]',
    ".reader_floatReviewsPanel_content",
    ".reader_float_panel_reviewDetail",
    ".readerFloatPanel_reviewDetail",
)
COMMENT_ITEM_SELECTORS: Tuple[str, ...] = (
    '[class*="comment_list_item"]',
    '[class*="commentListItem"]',
    '[class*="review_item"]',
    '[class*="reviewItem"]',
    '[class*="list_item"]:not([class*="sub_item"])',
    '[class*="listItem"]:not([class*="subItem"])',
    ".reader_float_panel_reviewDetail_comment_list_item",
    ".readerFloatPanel_reviewDetail_comment_list_item",
)
COMMENT_CONTENT_SELECTOR = '[class*="panel_item_content"], [class*="item_content"]'

# Reply thread
REPLY_PANEL_SELECTORS: Tuple[str, ...] = (
    ".reader_float_panel_reviewDetail",
    ".comment_detail_float_panel_reviewDetail",
    '[class*="float_panel_reviewDetail"]',
)
REPLY_ITEM_SELECTORS: Tuple[str, ...] = (
    '.reader_float_panel_reviewDetail_comment_list_item:not([class*="sub_item"])',
    '.comment_detail_float_panel_reviewDetail_comment_list_item:not([class*="sub_item"])',
    '[class*="reviewDetail_comment_list_item"]:not([class*="sub_item"])',
)
SUB_REPLY_SELECTOR = '[class*="sub_item"], [class*="subItem"]'

# Back / close
BACK_BUTTON_SELECTOR = ".reader_float_panel_header_backBtn"
DETAIL_CLOSE_SELECTOR = (
    ".comment_detail_float_panel_reviewDetail .reader_float_panel_header_closeBtn"
)
REVIEW_PANEL_SELECTORS: Tuple[str, ...] = (
    '.reviews_panel, [class*="float_panel"][class*="review"]',
)
CLOSE_BUTTON_SELECTOR = (
    '.reader_float_panel_header_closeBtn, [class*="close"], [class*="Close"]'
)
CLOSE_BUTTON_FALLBACK_SELECTOR = (
    '.reader_float_panel_header_closeBtn, .icon_close, [class*="close"]'
)

# Scrolling
SCROLL_PANEL_SELECTORS: Tuple[str, ...] = (
    '[class*="float_panel"][class*="review"]',
    ".reader_float_panel_reviewDetail",
    ".comment_detail_float_panel_reviewDetail",
)
SCROLL_AREA_SELECTORS: Tuple[str, ...] = (
    '[class*="list_wrapper"]',
    '[class*="scroll_area"]',
    '[class*="content"]',
)

# Text extraction
CONTENT_TEXT_SELECTORS: Tuple[str, ...] = (
    ".reader_float_reviews_panel_item_content",
    ".reader_float_panel_reviewDetail_comment_list_item_content",
    ".reader_float_panel_reviewDetail_comment_list_item_content_reply",
    '[class*="item_content"]:not([class*="divider"])',
)
HIGHLIGHT_TEXT_PANEL_SELECTORS: Tuple[str, ...] = (
    ".reader_float_panel_reviewDetail",
    ".comment_detail_float_panel_reviewDetail",
)
HIGHLIGHT_TEXT_SELECTOR = (
    ".reader_float_panel_reviewDetail_content, "
    ".comment_detail_float_panel_reviewDetail_content"
)
HIGHLIGHT_TEXT_WRAPPER_SELECTOR = (
    ".reader_float_panel_reviewDetail_content_wrapper, "
    ".comment_detail_float_panel_reviewDetail_content_wrapper"
)
COPY_PANEL_SELECTORS: Tuple[str, ...] = ('[class*="float_panel"][class*="review"]',)
COPY_BUTTON_SELECTOR = '[class*="toolbar_item_copy"]'

# Floating panel repositioned next to the active highlight
FLOATING_PANEL_SELECTORS: Tuple[str, ...] = (
    '[class*="float_panel"][class*="review"]',
    ".reader_float_panel_reviewDetail",
    ".comment_detail_float_panel_reviewDetail",
)

# Comment text that gets inline font reinforcement
FONT_REINFORCE_SELECTORS: Tuple[str, ...] = (
    ".reader_float_reviews_panel_item_content",
    ".reader_float_panel_reviewDetail_content",
    ".ck-content",
    '[class*="reviewDetail"] [class*="content"]',
)

EDITABLE_SELECTOR = (
    'input, textarea, [contenteditable="true"], [contenteditable=""], '
    ".ck-editor__editable"
)
