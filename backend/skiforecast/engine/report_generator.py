"""
PDF export of the resort comparison table using fpdf2.

Produces a landscape report with one section per metric: a day header row,
a time header row, and one row per resort across all 30 slots. Resorts that
failed to load are listed on the first page.
"""

from datetime import datetime

from fpdf import FPDF

from skiforecast.config import UnitSystem, PLACEHOLDER
from skiforecast.models.table import ComparisonTable, MetricSection, TableCell

_NAME_COL_WIDTH = 40
_SLOT_COL_WIDTH = 7.2
_ROW_HEIGHT = 5

# Cell fill colors keyed by CSS class
_CLASS_FILLS = {
    "temp-freezing": (190, 215, 255),
    "temp-cold": (215, 230, 255),
    "temp-cool": (235, 243, 255),
    "temp-mild": (255, 240, 220),
    "wind-light": (235, 250, 235),
    "wind-moderate": (255, 250, 210),
    "wind-high": (255, 225, 190),
    "wind-extreme": (255, 195, 195),
    "condition-snow": (225, 240, 255),
    "condition-rain": (220, 225, 240),
    "condition-cloudy": (235, 235, 235),
    "condition-sunny": (255, 248, 205),
}


class ForecastReport(FPDF):
    """Landscape letter pages with a run summary header and a page footer."""

    def __init__(self, title: str, unit_system: UnitSystem, resort_count: int):
        super().__init__(orientation="L", unit="mm", format="letter")
        self._report_title = title
        self._summary = f"{_unit_label(unit_system)} | {resort_count} resorts"
        self.set_auto_page_break(auto=True, margin=12)

    def header(self):
        self.set_font("Helvetica", "B", 8)
        self.set_text_color(90, 90, 90)
        self.cell(0, 5, _latin1(f"{self._report_title} | {self._summary}"), align="L")
        generated = datetime.now().strftime("Generated %a %b %d, %I:%M %p")
        self.cell(0, 5, generated, align="R", new_x="LMARGIN", new_y="NEXT")
        self.set_draw_color(170, 190, 215)
        self.line(10, self.get_y(), self.w - 10, self.get_y())
        self.ln(2)

    def footer(self):
        self.set_y(-10)
        self.set_font("Helvetica", "", 7)
        self.set_text_color(140, 140, 140)
        self.cell(0, 5, "Source: National Weather Service", align="L")
        self.cell(0, 5, f"{self.page_no()} of {{nb}}", align="R")


def _unit_label(unit_system: UnitSystem) -> str:
    if unit_system == UnitSystem.METRIC:
        return "Metric (°C, km/h, m, cm/mm)"
    return "Imperial (°F, mph, ft, in)"


def generate_report(table: ComparisonTable, title: str = "Ski Resort Forecast") -> bytes:
    """Generate a PDF of the comparison table and return the bytes."""
    resort_count = len(table.sections[0].rows) if table.sections else 0
    pdf = ForecastReport(title, table.unit_system, resort_count + len(table.errors))
    pdf.alias_nb_pages()
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, title, align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 9)
    pdf.set_text_color(60, 60, 60)
    pdf.cell(0, 5, f"Units: {_unit_label(table.unit_system)}", align="C", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(3)

    if table.errors:
        pdf.set_font("Helvetica", "B", 9)
        pdf.set_text_color(160, 30, 30)
        for err in table.errors:
            pdf.cell(
                0, 5, _latin1(f"Failed to load {err.resort_name}: {err.message}"),
                new_x="LMARGIN", new_y="NEXT",
            )
        pdf.ln(2)

    if not table.columns:
        pdf.set_font("Helvetica", "I", 10)
        pdf.set_text_color(80, 80, 80)
        pdf.cell(0, 8, "No forecast data available.", new_x="LMARGIN", new_y="NEXT")
        return pdf.output()

    for section in table.sections:
        _add_metric_section(pdf, table, section)

    return pdf.output()


def _add_metric_section(pdf: FPDF, table: ComparisonTable, section: MetricSection) -> None:
    """Render one metric block: heading, day row, time row, resort rows."""
    needed = _ROW_HEIGHT * (len(section.rows) + 3) + 8
    if pdf.get_y() + needed > pdf.h - 15:
        pdf.add_page()

    pdf.set_font("Helvetica", "B", 11)
    pdf.set_text_color(30, 30, 30)
    pdf.cell(0, 7, _latin1(section.label), new_x="LMARGIN", new_y="NEXT")

    # Day header
    pdf.set_font("Helvetica", "B", 6)
    pdf.set_fill_color(220, 220, 220)
    pdf.cell(_NAME_COL_WIDTH, _ROW_HEIGHT, "", border=1, fill=True)
    for group in table.day_groups:
        pdf.cell(
            _SLOT_COL_WIDTH * group.span, _ROW_HEIGHT, _latin1(group.day_label),
            border=1, fill=True, align="C",
        )
    pdf.ln()

    # Time header
    pdf.set_fill_color(235, 235, 235)
    pdf.cell(_NAME_COL_WIDTH, _ROW_HEIGHT, "Resort", border=1, fill=True, align="L")
    for col in table.columns:
        pdf.cell(_SLOT_COL_WIDTH, _ROW_HEIGHT, col.time_label, border=1, fill=True, align="C")
    pdf.ln()

    # Resort rows
    pdf.set_font("Helvetica", "", 6)
    pdf.set_text_color(40, 40, 40)
    for row in section.rows:
        pdf.cell(_NAME_COL_WIDTH, _ROW_HEIGHT, _latin1(row.resort_name)[:28], border=1, align="L")
        for cell in row.cells:
            fill = _CLASS_FILLS.get(cell.css_class or "")
            if fill:
                pdf.set_fill_color(*fill)
            pdf.cell(
                _SLOT_COL_WIDTH, _ROW_HEIGHT, _cell_text(section.metric_id, cell),
                border=1, fill=fill is not None, align="C",
            )
        pdf.ln()
    pdf.ln(3)


def _cell_text(metric_id: str, cell: TableCell) -> str:
    # Core fonts can't draw the condition icons; show the short forecast text instead
    if metric_id == "conditions" and isinstance(cell.value, str):
        return _latin1(cell.value)[:6]
    return _latin1(cell.text)


def _latin1(text: str) -> str:
    """Make text safe for the built-in Helvetica font."""
    text = text.replace(PLACEHOLDER, "-")
    return text.encode("latin-1", errors="replace").decode("latin-1")
