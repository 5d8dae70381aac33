"""
PDF rendering of the survey analytics report.

Sections, in order:
- Title and generation date
- Summary statistics table
- Satisfaction by question (new page)
- Key feedback themes (new page, only when themes exist)
- Common feedback keywords (below the previous table, only when keywords exist)

Placement is driven by a LayoutCursor that each section receives and
advances; it tracks the current page, the running vertical offset and the
end of the most recent table.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from .report_model import ReportModel

LOGGER = logging.getLogger(__name__)

# ============================================================================
# PAGE GEOMETRY (offsets are measured from the top edge of the page)
# ============================================================================
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT = 14 * mm
MARGIN_RIGHT = 14 * mm
MARGIN_BOTTOM = 18 * mm
HEADING_TOP = 22 * mm
SECTION_GAP = 14 * mm
HEADING_GAP = 4 * mm
FOOTER_OFFSET = 10 * mm

REPORT_TITLE = "Survey Analytics Report"
KEYWORD_TABLE_LIMIT = 10

COLORS = {
    'primary': HexColor('#3498db'),
    'secondary': HexColor('#7f8c8d'),
    'background_light': HexColor('#ecf0f1'),
    'border': HexColor('#bdc3c7'),
    'text_dark': HexColor('#2c3e50'),
}

FONT_TITLE = 'Helvetica-Bold'
FONT_HEADING = 'Helvetica-Bold'
FONT_BODY = 'Helvetica'


class ReportRenderError(RuntimeError):
    """Raised when the PDF artefact cannot be produced."""


@dataclass(frozen=True)
class SectionPlacement:
    name: str
    page: int
    top: float
    bottom: float
    end_page: int


@dataclass
class RenderedReport:
    filename: str
    content: bytes
    page_count: int
    placements: List[SectionPlacement] = field(default_factory=list)

    def placement(self, name: str) -> Optional[SectionPlacement]:
        for placement in self.placements:
            if placement.name == name:
                return placement
        return None

    def save(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        return path


# ============================================================================
# LAYOUT CURSOR
# ============================================================================
class LayoutCursor:
    """Running position on the canvas, threaded through every section."""

    def __init__(self, pdf: canvas.Canvas, page_size: Tuple[float, float] = A4):
        self.pdf = pdf
        self.page_width, self.page_height = page_size
        self.page = 1
        self.offset = 0.0
        self.last_table_end: Optional[float] = None

    @property
    def content_width(self) -> float:
        return self.page_width - MARGIN_LEFT - MARGIN_RIGHT

    @property
    def available(self) -> float:
        return self.page_height - MARGIN_BOTTOM - self.offset

    def new_page(self) -> None:
        self._draw_footer()
        self.pdf.showPage()
        self.page += 1
        self.offset = HEADING_TOP
        self.last_table_end = None

    def continue_below(self) -> None:
        """Move to a fixed gap below the most recent table (or current offset)."""
        anchor = self.last_table_end if self.last_table_end is not None else self.offset
        self.offset = anchor + SECTION_GAP

    def text(self, value: str, *, font: str, size: int, color=COLORS['text_dark']) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        self.pdf.drawString(MARGIN_LEFT, self.page_height - self.offset, value)

    def draw_table(self, table: Table) -> None:
        """Draw *table* at the cursor, splitting it across pages when needed."""
        remaining = table
        while True:
            _, height = remaining.wrapOn(self.pdf, self.content_width, self.available)
            if height <= self.available:
                remaining.drawOn(self.pdf, MARGIN_LEFT, self.page_height - self.offset - height)
                self.offset += height
                self.last_table_end = self.offset
                return

            parts = remaining.split(self.content_width, self.available)
            if len(parts) < 2:
                if self.offset <= HEADING_TOP:
                    raise ReportRenderError("Table row does not fit on an empty page")
                self.new_page()
                continue

            head, remaining = parts[0], parts[1]
            _, head_height = head.wrapOn(self.pdf, self.content_width, self.available)
            head.drawOn(self.pdf, MARGIN_LEFT, self.page_height - self.offset - head_height)
            self.new_page()

    def finish(self) -> None:
        self._draw_footer()

    def _draw_footer(self) -> None:
        self.pdf.setFont(FONT_BODY, 8)
        self.pdf.setFillColor(COLORS['secondary'])
        self.pdf.drawRightString(self.page_width - MARGIN_RIGHT, FOOTER_OFFSET, f"Page {self.page}")


# ============================================================================
# TABLES
# ============================================================================
def _build_table(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    col_fractions: Sequence[float],
    width: float,
    striped: bool = False,
) -> Table:
    table = Table(
        [list(header)] + [list(row) for row in rows],
        colWidths=[width * fraction for fraction in col_fractions],
        repeatRows=1,
    )
    style_commands = [
        # Header row
        ('BACKGROUND', (0, 0), (-1, 0), COLORS['primary']),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), FONT_HEADING),

        # Data rows
        ('FONTNAME', (0, 1), (-1, -1), FONT_BODY),
        ('TEXTCOLOR', (0, 1), (-1, -1), COLORS['text_dark']),
        ('FONTSIZE', (0, 0), (-1, -1), 10),

        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ('LEFTPADDING', (0, 0), (-1, -1), 6),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (1, 1), (-1, -1), 'RIGHT'),
    ]
    if striped:
        style_commands.append(
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, COLORS['background_light']])
        )
    else:
        style_commands.append(('GRID', (0, 0), (-1, -1), 0.5, COLORS['border']))
    table.setStyle(TableStyle(style_commands))
    return table


def _summary_rows(model: ReportModel) -> List[List[str]]:
    stats = model.stats
    return [
        ['Total Responses', str(stats.total_responses)],
        ['Average Satisfaction', f"{stats.average_satisfaction_display} / 5.0"],
        ['Unique Services', str(stats.unique_services)],
        ['Responses with Feedback', f"{stats.with_feedback} ({stats.feedback_rate_display}%)"],
    ]


# ============================================================================
# SECTIONS
# ============================================================================
def _title_section(cursor: LayoutCursor, title: str, generated_at: datetime) -> SectionPlacement:
    cursor.offset = HEADING_TOP
    cursor.text(title, font=FONT_TITLE, size=20)
    cursor.offset += 8 * mm
    cursor.text(f"Generated: {generated_at:%B} {generated_at.day}, {generated_at.year}",
                font=FONT_BODY, size=10, color=COLORS['secondary'])
    return SectionPlacement('title', cursor.page, HEADING_TOP, cursor.offset, cursor.page)


def _table_section(
    cursor: LayoutCursor,
    name: str,
    heading: str,
    table: Table,
    *,
    new_page: bool,
) -> SectionPlacement:
    if new_page:
        cursor.new_page()
    else:
        cursor.continue_below()
        if cursor.available < HEADING_GAP + 3 * SECTION_GAP:
            cursor.new_page()

    page, top = cursor.page, cursor.offset
    cursor.text(heading, font=FONT_HEADING, size=14)
    cursor.offset += HEADING_GAP
    cursor.draw_table(table)
    return SectionPlacement(name, page, top, cursor.offset, cursor.page)


def _draw_report(
    cursor: LayoutCursor,
    model: ReportModel,
    title: str,
    generated_at: datetime,
    keyword_limit: int,
) -> List[SectionPlacement]:
    width = cursor.content_width
    placements = [_title_section(cursor, title, generated_at)]

    placements.append(_table_section(
        cursor, 'summary', 'Summary Statistics',
        _build_table(['Metric', 'Value'], _summary_rows(model), (0.5, 0.5), width),
        new_page=False,
    ))

    question_rows = [[q.question, f"{q.score:.2f}", str(q.responses)] for q in model.question_scores]
    placements.append(_table_section(
        cursor, 'questions', 'Satisfaction by Question',
        _build_table(['Question', 'Average Score', 'Responses'], question_rows, (0.6, 0.2, 0.2),
                     width, striped=True),
        new_page=True,
    ))

    if model.themes:
        theme_rows = [[t.theme, str(t.count)] for t in model.themes]
        placements.append(_table_section(
            cursor, 'themes', 'Key Feedback Themes',
            _build_table(['Theme', 'Mentions'], theme_rows, (0.7, 0.3), width),
            new_page=True,
        ))

    if model.keywords:
        keyword_rows = [[k.word, str(k.count)] for k in model.keywords[:keyword_limit]]
        placements.append(_table_section(
            cursor, 'keywords', 'Common Feedback Keywords',
            _build_table(['Keyword', 'Frequency'], keyword_rows, (0.7, 0.3), width),
            new_page=False,
        ))

    return placements


# ============================================================================
# PUBLIC API
# ============================================================================
def report_filename(generated_at: datetime) -> str:
    return f"survey-analytics-{generated_at:%Y-%m-%d}.pdf"


def render_pdf_report(
    model: ReportModel,
    generated_at: Optional[datetime] = None,
    *,
    title: str = REPORT_TITLE,
    keyword_limit: int = KEYWORD_TABLE_LIMIT,
) -> RenderedReport:
    """
    Lay *model* out as a paginated PDF document.

    Args:
        model: Assembled report data
        generated_at: Generation timestamp (defaults to the model's)
        title: Title printed on page 1
        keyword_limit: Rows shown in the keyword table

    Returns:
        RenderedReport with the PDF bytes, dated filename and section placements

    Raises:
        ReportRenderError: If reportlab fails to produce the document
    """
    generated_at = generated_at or model.generated_at
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(title)
    cursor = LayoutCursor(pdf)

    try:
        placements = _draw_report(cursor, model, title, generated_at, keyword_limit)
        cursor.finish()
        pdf.save()
    except ReportRenderError:
        raise
    except Exception as exc:
        LOGGER.error("PDF rendering failed: %s", exc)
        raise ReportRenderError(f"Unable to render report: {exc}") from exc

    report = RenderedReport(
        filename=report_filename(generated_at),
        content=buffer.getvalue(),
        page_count=cursor.page,
        placements=placements,
    )
    LOGGER.info("Rendered %s (%d pages, %d bytes)", report.filename, report.page_count, len(report.content))
    return report


__all__ = [
    "KEYWORD_TABLE_LIMIT",
    "LayoutCursor",
    "RenderedReport",
    "ReportRenderError",
    "SectionPlacement",
    "render_pdf_report",
    "report_filename",
]
