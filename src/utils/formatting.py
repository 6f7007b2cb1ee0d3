"""
Presentation helpers.

Static lookup tables and view-model builders for the dashboard:
summary cards, pie slices, review table rows and the CLI text summary.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Union

from src.agents.aggregation import round_half_up
from src.models.review import ReviewRecord, parse_timestamp
from src.models.stats import AggregateResult, BreakdownEntry, StatsSummary

RATING_EMOJI: Dict[int, str] = {
    0: "😡",
    1: "😡",
    2: "😠",
    3: "😞",
    4: "😐",
    5: "😕",
    6: "🙂",
    7: "😊",
    8: "😄",
    9: "🤩",
    10: "✨",
}

PANEL_COLORS: Dict[str, str] = {
    "tnps": "#1565c0",
    "responders": "#607d8b",
    "promoters": "#388e3c",
    "neutral": "#ffb300",
    "detractors": "#d32f2f",
}

PIE_COLORS = ("#4CAF50", "#FFC107", "#F44336")  # green, amber, red

NOT_AVAILABLE = "N/A"

REVIEW_TABLE_COLUMNS = (
    "Customer Name",
    "Mobile",
    "Client Email",
    "VIN",
    "Job Card",
    "Invoice No",
    "Invoice Date",
    "Invoice File",
    "Transcribed Text",
    "Review Date",
    "Rating",
    "Voice Audio",
)


def rating_emoji(rating: Optional[int]) -> str:
    """Emoji for a 0-10 rating, blank when unrated."""
    if isinstance(rating, bool):
        return ""
    return RATING_EMOJI.get(rating, "")


def format_date(value: Union[str, date, None]) -> str:
    """Format a date or timestamp as DD/MM/YYYY, "N/A" when missing."""
    if not value:
        return NOT_AVAILABLE
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        if parsed is None:
            return NOT_AVAILABLE
        value = parsed
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%d/%m/%Y")


def summary_cards(summary: StatsSummary) -> List[Dict]:
    """
    Build the five dashboard cards in display order.

    Each card has a title, display value, optional count and caption,
    and its panel color.
    """
    return [
        {
            "key": "tnps",
            "title": "Service TNPS",
            "value": f"{summary.tnps:.1f}",
            "count": None,
            "caption": "(Promoters% – Detractors%)",
            "color": PANEL_COLORS["tnps"],
        },
        {
            "key": "responders",
            "title": "Responders",
            "value": str(summary.responders),
            "count": None,
            "caption": None,
            "color": PANEL_COLORS["responders"],
        },
        {
            "key": "promoters",
            "title": "Promoters %",
            "value": f"{summary.promoters.percent:.1f}%",
            "count": summary.promoters.count,
            "caption": "TNPS 9–10",
            "color": PANEL_COLORS["promoters"],
        },
        {
            "key": "detractors",
            "title": "Detractors %",
            "value": f"{summary.detractors.percent:.1f}%",
            "count": summary.detractors.count,
            "caption": "TNPS 0–6",
            "color": PANEL_COLORS["detractors"],
        },
        {
            "key": "neutral",
            "title": "Passives %",
            "value": f"{summary.neutral.percent:.1f}%",
            "count": summary.neutral.count,
            "caption": "TNPS 7–8",
            "color": PANEL_COLORS["neutral"],
        },
    ]


def breakdown_slices(breakdown: List[BreakdownEntry]) -> List[Dict]:
    """
    Build pie chart slices for the feedback breakdown.

    Labels show each slice's share of the classified reviews as a whole
    percentage rounded half up, e.g. "Positive: 40%".
    """
    total = sum(entry.count for entry in breakdown)
    slices = []
    for idx, entry in enumerate(breakdown):
        share = entry.count / total if total else 0.0
        slices.append({
            "name": entry.category,
            "value": entry.count,
            "label": f"{entry.category}: {int(round_half_up(share * 100, 0))}%",
            "color": PIE_COLORS[idx % len(PIE_COLORS)],
        })
    return slices


def review_table(records: List[ReviewRecord]) -> List[Dict[str, str]]:
    """Build review table rows keyed by REVIEW_TABLE_COLUMNS."""
    rows = []
    for record in records:
        invoice = record.invoice_data
        if record.rating is None:
            rating_cell = NOT_AVAILABLE
        else:
            rating_cell = f"{record.rating} {rating_emoji(record.rating)}".rstrip()

        rows.append({
            "Customer Name": record.customer_name or NOT_AVAILABLE,
            "Mobile": record.customer_mobile or NOT_AVAILABLE,
            "Client Email": record.client_email or NOT_AVAILABLE,
            "VIN": invoice.vin or NOT_AVAILABLE,
            "Job Card": invoice.job_card_number or NOT_AVAILABLE,
            "Invoice No": invoice.invoice_number or NOT_AVAILABLE,
            "Invoice Date": format_date(invoice.invoice_date),
            "Invoice File": record.invoice_file_url or NOT_AVAILABLE,
            "Transcribed Text": record.transcribed_text or NOT_AVAILABLE,
            "Review Date": format_date(record.created_at),
            "Rating": rating_cell,
            "Voice Audio": record.voice_data or NOT_AVAILABLE,
        })
    return rows


def render_summary_text(result: AggregateResult) -> str:
    """Render the cards, histogram and breakdown as plain text for the CLI."""
    lines = []
    for card in summary_cards(result.summary):
        line = f"{card['title']:<14} {card['value']:>8}"
        if card["count"] is not None:
            line += f"  ({card['count']})"
        if card["caption"]:
            line += f"  {card['caption']}"
        lines.append(line)

    lines.append(f"{'Average rating':<14} {result.summary.average_rating:>8.2f}")
    lines.append("")
    lines.append("Ratings Distribution (0–10)")
    peak = max((bucket.count for bucket in result.histogram), default=0)
    for bucket in result.histogram:
        bar = "#" * round(20 * bucket.count / peak) if peak else ""
        lines.append(f"{bucket.rating:>3} {RATING_EMOJI[bucket.rating]} {bar} {bucket.count}")

    lines.append("")
    lines.append("Review Breakdown")
    slices = breakdown_slices(result.breakdown)
    if not slices:
        lines.append("  (no classified reviews)")
    for slice_ in slices:
        lines.append(f"  {slice_['label']} ({slice_['value']})")

    return "\n".join(lines)
