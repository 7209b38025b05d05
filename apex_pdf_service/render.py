"""
HTML rendering for the APEX deal report.

Pure functions that turn the report models into a complete, self-contained
HTML document for PDF rendering via Playwright. No I/O happens here: images
must already be resolved to data URLs by apex_pdf_service.images.

Every interpolated value coming from the request is HTML-escaped.
"""

from html import escape
from typing import Any, Iterable, List, Optional
from urllib.parse import urlparse

from .models import AnalysisPoints, CompetitorReport, Deal, FinalReport, ResolvedCompetitor
from .theme import (
    CHECK_CIRCLE_SVG,
    DEAL_METER_STYLES,
    DEFAULT_DEAL_RATING,
    FONT_IMPORT_URL,
    PALETTE,
    SCORE_BAND_STYLES,
    SCORE_BANDS,
    SCORECARD_SECTIONS,
    SECTION_LABEL_STYLE,
    TOP_SCORE_BAND,
    X_CIRCLE_SVG,
)

DEFAULT_CLIENT_NAME = "Deal Scorecard"


def _text(value: Any) -> str:
    """Escape a value for use in element content or a quoted attribute."""
    if value is None:
        return ""
    return escape(str(value), quote=True)


def format_number(value: Optional[float]) -> str:
    """
    Format a score or percentage the way the frontend shows it.

    Whole numbers drop the trailing ".0"; missing values render as "N/A".

    Example:
        >>> format_number(7.0)
        "7"
        >>> format_number(7.5)
        "7.5"
    """
    if value is None:
        return "N/A"
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def format_price(value: Optional[float]) -> str:
    """Dollar amount with two decimals, or "" for a missing/zero price."""
    if not value:
        return ""
    return f"${value:.2f}"


def safe_data_url(value: Optional[str]) -> Optional[str]:
    """Return value only if it is an inline image data URL."""
    if value and value.startswith("data:image/"):
        return value
    return None


def client_display_name(client_url: str) -> str:
    """
    Derive the scorecard title from the client's URL.

    Args:
        client_url: Client site URL, e.g. "https://www.example.com/path"

    Returns:
        "Deal Scorecard: example.com", or "Deal Scorecard" if the URL
        has no parseable hostname.
    """
    try:
        hostname = urlparse(client_url).hostname
    except (ValueError, AttributeError):
        hostname = None
    if not hostname:
        return DEFAULT_CLIENT_NAME
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return f"{DEFAULT_CLIENT_NAME}: {hostname}"


def score_band(numeric_score: float) -> str:
    """
    Classify an overall score (0-10) into a color band.

    Upper bounds are inclusive: 3 is "poor", 6 is "caution", 8 is
    "favorable", anything higher is "excellent".
    """
    for upper_bound, band in SCORE_BANDS:
        if numeric_score <= upper_bound:
            return band
    return TOP_SCORE_BAND


def analysis_points_html(points: Optional[AnalysisPoints]) -> str:
    """
    Render good/bad findings as an icon list.

    Good points come first, then bad points, each group in input order.
    When both groups are empty a single placeholder line is returned.
    """
    good: List[str] = (points.good if points else None) or []
    bad: List[str] = (points.bad if points else None) or []

    if not good and not bad:
        return f'<li style="color: {PALETTE["text_muted"]}; font-style: italic;">No specific points provided.</li>'

    items = []
    for icon, group in ((CHECK_CIRCLE_SVG, good), (X_CIRCLE_SVG, bad)):
        for point in group:
            items.append(
                f'<li style="display: flex; align-items: flex-start; gap: 0.5rem;">{icon}'
                f'<span style="color: {PALETTE["text_soft"]};">{_text(point)}</span></li>'
            )

    return (
        '<ul style="list-style: none; margin: 0; padding: 0; display: flex; '
        'flex-direction: column; gap: 0.5rem;">'
        + "".join(items)
        + "</ul>"
    )


def deal_meter_html(deal_rating: Optional[str]) -> str:
    """Render the deal-o-meter gauge; unknown ratings show as frosty."""
    bar_style = DEAL_METER_STYLES.get(deal_rating or "", DEAL_METER_STYLES[DEFAULT_DEAL_RATING])
    return (
        f'<div style="width: 100%; height: 1rem; background-color: {PALETTE["border"]}; '
        'border-radius: 9999px; overflow: hidden;">'
        f'<div style="height: 100%; border-radius: 9999px; {bar_style}"></div></div>'
    )


def deal_item_html(deal: Deal) -> str:
    """
    Render one top deal: sale price, struck-through original price and a
    discount badge. The badge only appears for a positive percentDiscount.
    """
    sale_price = format_price(deal.salePrice)
    original_price = format_price(deal.originalPrice)

    original_html = ""
    if original_price:
        original_html = (
            '<span style="font-size: 0.875rem; text-decoration: line-through; '
            f'color: {PALETTE["text_faint"]}; margin-left: 0.5rem;">{original_price}</span>'
        )

    badge_html = ""
    if deal.percentDiscount and deal.percentDiscount > 0:
        badge_html = (
            f'<span style="background-color:{PALETTE["badge_bg"]}; color:{PALETTE["badge_text"]}; '
            'font-size: 0.75rem; font-weight: 700; padding: 0.125rem 0.5rem; '
            'border-radius: 9999px; margin-left: 0.5rem;">'
            f"{format_number(deal.percentDiscount)}% OFF</span>"
        )

    return f"""
        <li style="border-bottom: 1px solid {PALETTE['border']}; padding-bottom: 0.75rem; margin-bottom: 0.75rem;">
            <p style="color:{PALETTE['accent']};">{_text(deal.name)}</p>
            <div style="color:{PALETTE['text_soft']}; margin-top: 0.25rem; display: flex; align-items: center;">
                <span style="font-size: 1.125rem; font-weight: 700; color: {PALETTE['sale']};">{sale_price}</span>
                {original_html}
                {badge_html}
            </div>
        </li>"""


def _labelled(label: str, body: str) -> str:
    return f'<div><h4 style="{SECTION_LABEL_STYLE}">{label}</h4>{body}</div>'


def competitor_card_html(competitor: ResolvedCompetitor, report: CompetitorReport) -> str:
    """
    Render the teardown card for one competitor.

    Args:
        competitor: Competitor with resolved logo/creative data URLs
        report: Comparison entry whose competitorName matches competitor.name

    Returns:
        HTML fragment for the card
    """
    name = _text(competitor.name)

    logo_url = safe_data_url(competitor.logoDataUrl)
    if logo_url:
        logo_html = (
            f'<img src="{_text(logo_url)}" alt="{name} Logo" style="width: 4rem; height: 4rem; '
            f'border-radius: 9999px; object-fit: contain; border: 1px solid {PALETTE["border_strong"]}; '
            'background-color: white; padding: 0.25rem;" />'
        )
    else:
        logo_html = (
            f'<div style="width: 4rem; height: 4rem; border-radius: 9999px; background-color: {PALETTE["border"]}; '
            'display:flex; align-items:center; justify-content:center; '
            f'color: {PALETTE["text_muted"]}; font-size:0.75rem; text-align:center;">No Logo</div>'
        )

    deals = competitor.topDeals or []
    if deals:
        deals_html = "".join(deal_item_html(deal) for deal in deals)
    else:
        deals_html = f'<p style="color:{PALETTE["text_muted"]};">No top deals found.</p>'

    creative_html = ""
    creative_url = safe_data_url(competitor.creativeDataUrl)
    if creative_url:
        creative_html = (
            f'<div style="padding-top: 1.5rem;"><h4 style="{SECTION_LABEL_STYLE}">Ad Creative</h4>'
            f'<img src="{_text(creative_url)}" alt="{name} Ad Creative" style="width: 100%; '
            f'border-radius: 0.5rem; object-fit: contain; border: 1px solid {PALETTE["border"]};" /></div>'
        )

    value_style = f"font-size: 1rem; color: {PALETTE['text']};"
    deal_type_html = _labelled("Deal Type", f'<p style="{value_style}">{_text(competitor.dealType or "N/A")}</p>')
    duration_html = _labelled("Duration", f'<p style="{value_style}">{_text(competitor.dealDuration or "N/A")}</p>')
    top_deals_html = _labelled(
        "Top Deals",
        '<ul style="list-style: none; margin: 0; padding: 0; display: flex; '
        f'flex-direction: column; gap: 0.75rem;">{deals_html}</ul>',
    )

    return f"""
    <div style="background-color: {PALETTE['card_bg']}; border-radius: 1rem; border: 1px solid {PALETTE['border']}; overflow: hidden; margin-bottom: 1.5rem; break-inside: avoid;">
        <div style="display: flex; align-items: center; gap: 1rem; padding: 1.5rem; border-bottom: 1px solid {PALETTE['border']};">
            {logo_html}
            <div>
                <h3 style="font-size: 1.5rem; font-weight: 700; color: white;">{name}</h3>
                <p style="color:{PALETTE['accent']}; font-size: 0.875rem; word-break: break-all;">{_text(competitor.url)}</p>
            </div>
        </div>
        <div style="padding: 1.5rem; display: flex; flex-direction: column; gap: 1.5rem;">
            <div style="display: grid; grid-template-columns: repeat(2, minmax(0, 1fr)); gap: 1rem;">
                {deal_type_html}
                {duration_html}
            </div>
            {_labelled('Deal-o-Meter', deal_meter_html(report.dealRating))}
            {_labelled('How You Compare', analysis_points_html(report.analysis))}
            {top_deals_html}
            {creative_html}
        </div>
    </div>"""


def competitor_chips_html(competitors: Iterable[ResolvedCompetitor]) -> str:
    return "".join(
        f'<span style="background-color:{PALETTE["border"]}; color:{PALETTE["text"]}; font-size:0.875rem; '
        f'padding:0.25rem 0.75rem; border-radius:9999px;">{_text(c.name)}</span>'
        for c in competitors
    )


def teardown_cards_html(final_report: FinalReport, competitors: Iterable[ResolvedCompetitor]) -> str:
    """One card per competitor that has a comparison entry; others are skipped."""
    cards = []
    for competitor in competitors:
        report = final_report.report_for(competitor.name)
        if report is not None:
            cards.append(competitor_card_html(competitor, report))
    return "".join(cards)


def build_report_html(
    final_report: FinalReport,
    client_info: Any,
    competitors: List[ResolvedCompetitor],
    client_url: str,
) -> str:
    """
    Build the complete report document with embedded styles.

    Includes:
    - Header with the client URL
    - Competitor Summary with name chips
    - Scorecard: overall score badge, summary and the three scored sections
    - Competitor Teardown with one card per matched competitor

    Args:
        final_report: Analysis result (recommendation + per-competitor comparison)
        client_info: Client metadata from the request (not rendered)
        competitors: Competitors with images already resolved
        client_url: Client site URL

    Returns:
        Complete HTML document string
    """
    recommendation = final_report.recommendation
    band_style = SCORE_BAND_STYLES[score_band(recommendation.numericScore)]

    sections_html = "".join(
        f"""
                            <div>
                                <div style="display: flex; justify-content: space-between; align-items: center; margin-bottom: 0.5rem;">
                                    <h4 style="font-size:1.25rem; color:white; font-weight:600;">{title}</h4>
                                    <span style="background-color:{PALETTE['border']}; color:{PALETTE['text_muted']}; padding:0.25rem 0.75rem; border-radius:9999px;">{format_number(getattr(recommendation, score_field))} / 10</span>
                                </div>
                                {analysis_points_html(getattr(recommendation, points_field))}
                            </div>"""
        for title, points_field, score_field in SCORECARD_SECTIONS
    )

    return f"""<!DOCTYPE html>
<html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>APEX Report</title>
        <style>
            @import url('{FONT_IMPORT_URL}');
            body {{
                background-color: {PALETTE['page_bg']};
                color: {PALETTE['text']};
                font-family: 'Lexend', sans-serif;
            }}
        </style>
    </head>
    <body>
        <div style="width: 800px; margin: auto; padding: 40px;">
            <header style="text-align:center; margin-bottom:2rem;">
                <h1 style="font-size:2.25rem; font-weight:700; color:{PALETTE['accent']}; margin-bottom:0.5rem;">APEX Report</h1>
                <p style="font-size:1.125rem; color:{PALETTE['text_muted']};">Client: {_text(client_url)}</p>
            </header>

            <div style="background-color:{PALETTE['card_bg']}; padding: 2rem; border-radius:1rem; border:1px solid {PALETTE['border']}; margin-bottom: 2rem;">
                <h2 style="font-size:1.5rem; color:white; font-weight:700; margin-bottom:1rem;">Competitor Summary</h2>
                <p style="color:{PALETTE['text_muted']}; margin-bottom:1rem;">Analysis based on <strong style="color:{PALETTE['accent']};">{len(competitors)}</strong> relevant competitors.</p>
                <div style="display: flex; flex-wrap: wrap; gap: 0.5rem;">
                    {competitor_chips_html(competitors)}
                </div>
            </div>

            <div style="background-color:{PALETTE['card_bg']}; padding:2rem; border-radius:1rem; border:1px solid {PALETTE['border']}; box-shadow: 0 0 0 2px rgba(139, 92, 246, 0.3); margin-bottom: 2rem;">
                <div style="display: flex; justify-content: space-between; align-items: center; gap: 1rem; margin-bottom: 1rem;">
                    <h2 style="font-size:1.875rem; color:white; font-weight:700;">{_text(client_display_name(client_url))}</h2>
                    <span style="font-size:1.125rem; font-weight:700; padding:0.5rem 1rem; border-radius:9999px; {band_style}">{format_number(recommendation.numericScore)}/10: {_text(recommendation.rating.upper())}</span>
                </div>
                <div style="display: flex; flex-direction: column; gap: 1.5rem;">
                    <div>
                        <h4 style="font-size:1.25rem; color:white; font-weight:600; margin-bottom:0.5rem;">Summary</h4>
                        <p style="color:{PALETTE['text_soft']};">{_text(recommendation.summary)}</p>
                    </div>{sections_html}
                </div>
            </div>

            <div>
                <h2 style="font-size:1.875rem; color:white; font-weight:700; margin-bottom:1.5rem; padding-top: 2rem; border-top: 1px solid {PALETTE['border']};">Competitor Teardown</h2>
                <div>
                    {teardown_cards_html(final_report, competitors)}
                </div>
            </div>
        </div>
    </body>
</html>
"""
