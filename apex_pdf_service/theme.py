"""
Static style tables for the APEX report.

Palette, score bands, deal-o-meter tiers and inline icons. Tables are
read-only mappings so render code cannot alter them between requests.
"""

from types import MappingProxyType

FONT_IMPORT_URL = "https://fonts.googleapis.com/css2?family=Lexend:wght@400;500;600;700&display=swap"

PALETTE = MappingProxyType({
    "page_bg": "#121212",
    "card_bg": "#1e1e1e",
    "border": "#2d2d2d",
    "border_strong": "#404040",
    "text": "#e5e5e5",
    "text_soft": "#d4d4d4",
    "text_muted": "#a3a3a3",
    "text_faint": "#525252",
    "accent": "#a78bfa",
    "sale": "#f87171",
    "badge_bg": "#991b1b",
    "badge_text": "#fecaca",
    "good": "#22c55e",
    "bad": "#ef4444",
})

# (upper bound inclusive, band name); anything above the last bound is "excellent"
SCORE_BANDS = (
    (3, "poor"),
    (6, "caution"),
    (8, "favorable"),
)
TOP_SCORE_BAND = "excellent"

SCORE_BAND_STYLES = MappingProxyType({
    "poor": "background-color:rgba(127, 29, 29, 0.5); color:#fca5a5;",
    "caution": "background-color:rgba(113, 63, 18, 0.5); color:#fcd34d;",
    "favorable": "background-color:rgba(76, 29, 149, 0.5); color:#c4b5fd;",
    "excellent": "background-color:rgba(20, 83, 45, 0.5); color:#86efac;",
})

DEFAULT_DEAL_RATING = "frosty"

DEAL_METER_STYLES = MappingProxyType({
    "frosty": "width: 20%; background-image: linear-gradient(to right, #3b82f6, #60a5fa);",
    "luke-warm": "width: 45%; background-image: linear-gradient(to right, #3b82f6, #facc15);",
    "hot": "width: 70%; background-image: linear-gradient(to right, #f59e0b, #ef4444);",
    "pipin-hot": "width: 95%; background-image: linear-gradient(to right, #ef4444, #dc2626, #b91c1c);",
})

SCORECARD_SECTIONS = (
    ("Discounts", "discounts", "discountsScore"),
    ("Messaging", "messaging", "messagingScore"),
    ("Competitiveness", "competitiveness", "competitivenessScore"),
)

_ICON_STYLE = "flex-shrink: 0; margin-top: 0.125rem; display: inline-block; vertical-align: middle;"

CHECK_CIRCLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    f'stroke-linejoin="round" style="color: {PALETTE["good"]}; {_ICON_STYLE}">'
    '<path d="M12 22c5.523 0 10-4.477 10-10S17.523 2 12 2 2 6.477 2 12s4.477 10 10 10z"></path>'
    '<path d="m9 12 2 2 4-4"></path></svg>'
)

X_CIRCLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    f'stroke-linejoin="round" style="color: {PALETTE["bad"]}; {_ICON_STYLE}">'
    '<circle cx="12" cy="12" r="10"></circle><path d="m15 9-6 6"></path>'
    '<path d="m9 9 6 6"></path></svg>'
)

SECTION_LABEL_STYLE = (
    f"font-size: 0.875rem; font-weight: 600; color: {PALETTE['text_muted']}; "
    "text-transform: uppercase; margin-bottom: 0.5rem;"
)
