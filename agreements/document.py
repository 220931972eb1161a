"""
Rental agreement layout and PDF rendering.

Layout and rendering are split in two steps. ``build_agreement_blocks`` turns
the validated request into an ordered list of ``Block`` instructions (text
plus font size, weight, alignment and indent) and has no side effects.
``render_blocks`` flows those blocks into a ReportLab ``SimpleDocTemplate``
over an in-memory buffer; the template takes care of page breaks, so long
terms or many services simply continue on the next page.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from agreements.config import get_settings
from agreements.models import CostBreakdown, DurationBreakdown

NOT_AVAILABLE = "N/A"
SIGNATURE_LINE = "_____________________"
DATE_LINE = "Date: _______________"

TITLE_SIZE = 20
SUBTITLE_SIZE = 12
HEADING_SIZE = 14
SUBHEADING_SIZE = 12
BODY_SIZE = 10
LINE_GAP = 12
ITEM_INDENT = 18

_ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "justify": TA_JUSTIFY}
_PAGE_SIZES = {"LETTER": LETTER, "A4": A4}


@dataclass(frozen=True)
class Block:
    """One layout instruction for the page-flowing writer."""

    kind: str
    text: str = ""
    font_size: float = BODY_SIZE
    bold: bool = False
    align: str = "left"
    indent: float = 0
    height: float = 0
    columns: Tuple[Tuple[str, ...], ...] = ()


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _has(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return bool(value)
    return value != 0 and value is not False


def _text(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(_text(item) for item in value)
    return str(value)


def _or_na(value: Any) -> str:
    return _text(value) if _has(value) else NOT_AVAILABLE


def format_amount(value: Any) -> str:
    """Money as ``1,250`` or ``1,333.33``; non-numeric values are echoed."""
    if value is None:
        return "0"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = float(str(value).replace(",", ""))
        except ValueError:
            return str(value)
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_address(address: Any) -> str:
    """Join the non-empty address parts with commas."""
    if not isinstance(address, Mapping):
        return ""
    parts = [address.get(key) for key in ("street", "city", "state", "postalCode", "country")]
    return ", ".join(_text(part) for part in parts if _has(part))


class _BlockWriter:
    def __init__(self) -> None:
        self.blocks: List[Block] = []

    def title(self, text: str) -> None:
        self.blocks.append(Block("title", text, font_size=TITLE_SIZE, bold=True, align="center"))

    def subtitle(self, text: str) -> None:
        self.blocks.append(Block("subtitle", text, font_size=SUBTITLE_SIZE, align="center"))

    def heading(self, text: str) -> None:
        self.blocks.append(Block("heading", text, font_size=HEADING_SIZE, bold=True))
        self.gap(0.5)

    def subheading(self, text: str) -> None:
        self.blocks.append(Block("subheading", text, font_size=SUBHEADING_SIZE, bold=True))

    def field(self, label: str, value: Any) -> None:
        self.blocks.append(Block("field", f"{label}: {value}"))

    def line(self, text: str, indent: float = 0) -> None:
        self.blocks.append(Block("field", text, indent=indent))

    def paragraph(self, text: str) -> None:
        self.blocks.append(Block("paragraph", text, align="justify"))

    def gap(self, lines: float = 1) -> None:
        self.blocks.append(Block("spacer", height=LINE_GAP * lines))

    def signatures(self, *columns: Sequence[str]) -> None:
        self.blocks.append(Block("signatures", columns=tuple(tuple(column) for column in columns)))


def _contact_fields(writer: _BlockWriter, party: Mapping[str, Any]) -> None:
    contact = party.get("contact")
    if not isinstance(contact, Mapping):
        return
    writer.field("Phone", _or_na(contact.get("phone")))
    writer.field("Email", _or_na(contact.get("email")))
    if _has(contact.get("alternatePhone")):
        writer.field("Alternate Phone", _text(contact["alternatePhone"]))


def _agreement_section(writer: _BlockWriter, details: Mapping[str, Any], duration: DurationBreakdown) -> None:
    writer.heading("AGREEMENT DETAILS")
    writer.field("Start Date", _or_na(details.get("startDate")))
    writer.field("End Date", _or_na(details.get("endDate")))
    writer.field("Duration", duration.describe())
    writer.field("Total Days", duration.total_days)
    writer.gap()


def _landlord_section(writer: _BlockWriter, landlord: Mapping[str, Any]) -> None:
    writer.heading("LANDLORD INFORMATION")
    writer.field("Name", _or_na(landlord.get("name")))
    _contact_fields(writer, landlord)
    if isinstance(landlord.get("address"), Mapping):
        writer.field("Address", format_address(landlord["address"]))
    if _has(landlord.get("taxID")):
        writer.field("Tax ID", _text(landlord["taxID"]))
    if _has(landlord.get("bankAccountNumber")):
        writer.field("Bank Account", _text(landlord["bankAccountNumber"]))
        writer.field("Bank Name", _or_na(landlord.get("bankName")))
        writer.field("Bank IFSC", _or_na(landlord.get("bankIFSC")))
    writer.gap()


def _tenant_section(writer: _BlockWriter, tenant: Mapping[str, Any]) -> None:
    writer.heading("TENANT INFORMATION")
    writer.field("Name", _or_na(tenant.get("name")))
    _contact_fields(writer, tenant)
    if _has(tenant.get("occupation")):
        writer.field("Occupation", _text(tenant["occupation"]))
    if _has(tenant.get("employer")):
        writer.field("Employer", _text(tenant["employer"]))
    if _has(tenant.get("idProofType")):
        writer.field("ID Proof Type", _text(tenant["idProofType"]))
        writer.field("ID Proof Number", _or_na(tenant.get("idProofNumber")))
    writer.gap()


def _family_section(writer: _BlockWriter, family_members: Sequence[Any]) -> None:
    if not family_members:
        return
    writer.heading("FAMILY MEMBERS")
    for index, member in enumerate(family_members, start=1):
        member = _mapping(member)
        writer.line(
            f"{index}. {_or_na(member.get('name'))} "
            f"({_or_na(member.get('relationship'))}, Age: {_or_na(member.get('age'))})"
        )
        if _has(member.get("idProofType")):
            writer.line(f"ID: {_text(member['idProofType'])} - {_or_na(member.get('idProofNumber'))}", indent=ITEM_INDENT)
    writer.gap()


# (input key, label, unit suffix)
_PROPERTY_ATTRIBUTES = [
    ("carpetArea", "Carpet Area", " sq ft"),
    ("builtUpArea", "Built-up Area", " sq ft"),
    ("furnishingStatus", "Furnishing Status", ""),
    ("numberOfBedrooms", "Bedrooms", ""),
    ("numberOfBathrooms", "Bathrooms", ""),
    ("floorNumber", "Floor Number", ""),
    ("parkingSpaces", "Parking Spaces", ""),
    ("amenities", "Amenities", ""),
]


def _property_section(writer: _BlockWriter, property_info: Mapping[str, Any]) -> None:
    writer.heading("PROPERTY DETAILS")
    if isinstance(property_info.get("address"), Mapping):
        writer.field("Address", format_address(property_info["address"]))
    writer.field("Property Type", _or_na(property_info.get("propertyType")))
    for key, label, unit in _PROPERTY_ATTRIBUTES:
        if _has(property_info.get(key)):
            writer.field(label, f"{_text(property_info[key])}{unit}")
    writer.gap()


def _financial_section(writer: _BlockWriter, details: Mapping[str, Any], costs: CostBreakdown) -> None:
    writer.heading("FINANCIAL DETAILS")
    writer.field("Monthly Rent", format_amount(details.get("rentAmount") or 0))
    writer.field("Security Deposit", format_amount(details.get("securityDeposit") or 0))
    if _has(details.get("maintenanceCharges")):
        writer.field("Maintenance Charges", format_amount(details["maintenanceCharges"]))
    writer.field("Total Monthly Cost", format_amount(costs.monthly_total))
    writer.field("Total Yearly Cost", format_amount(costs.yearly_total))
    if _has(details.get("paymentDueDay")):
        writer.field("Payment Due Day", f"{_text(details['paymentDueDay'])} of each month")
    if _has(details.get("paymentMode")):
        writer.field("Payment Mode", _text(details["paymentMode"]))
    writer.gap()


def _services_section(writer: _BlockWriter, services: Sequence[Any]) -> None:
    if not services:
        return
    writer.heading("ADDITIONAL SERVICES")
    for index, service in enumerate(services, start=1):
        service = _mapping(service)
        name = service.get("serviceName") or "Service"
        frequency = service.get("billingFrequency") or "Monthly"
        writer.line(f"{index}. {_text(name)}: {format_amount(service.get('cost') or 0)} ({_text(frequency)})")
        if _has(service.get("description")):
            writer.line(f"Description: {_text(service['description'])}", indent=ITEM_INDENT)
    writer.gap()


def _cost_breakdown_section(writer: _BlockWriter, costs: CostBreakdown) -> None:
    if not costs.breakdown:
        return
    writer.heading("COST BREAKDOWN")
    for item in costs.breakdown:
        writer.line(f"{item.item}: {format_amount(item.amount)} ({item.frequency})")
    writer.gap()


def _terms_section(writer: _BlockWriter, details: Mapping[str, Any]) -> None:
    writer.heading("TERMS AND CONDITIONS")
    if _has(details.get("lockInPeriod")):
        writer.field("Lock-in Period", f"{_text(details['lockInPeriod'])} months")
    if _has(details.get("noticePeriod")):
        writer.field("Notice Period", f"{_text(details['noticePeriod'])} days")
    if _has(details.get("rentEscalation")):
        frequency = details.get("escalationFrequency") or 12
        writer.field("Rent Escalation", f"{_text(details['rentEscalation'])}% every {_text(frequency)} months")
    if _has(details.get("terms")):
        writer.gap(0.5)
        writer.paragraph(_text(details["terms"]))
    if _has(details.get("specialConditions")):
        writer.gap()
        writer.subheading("Special Conditions:")
        writer.paragraph(_text(details["specialConditions"]))
    writer.gap(2)


def _signature_section(writer: _BlockWriter, landlord: Mapping[str, Any], tenant: Mapping[str, Any]) -> None:
    writer.heading("SIGNATURES")
    writer.gap(1.5)
    writer.signatures(
        (SIGNATURE_LINE, "Landlord Signature", f"Name: {_or_na(landlord.get('name'))}", DATE_LINE),
        (SIGNATURE_LINE, "Tenant Signature", f"Name: {_or_na(tenant.get('name'))}", DATE_LINE),
    )


def build_agreement_blocks(
    agreement_number: str,
    landlord: Mapping[str, Any],
    tenant: Mapping[str, Any],
    property_info: Mapping[str, Any],
    agreement_details: Mapping[str, Any],
    additional_services: Optional[Sequence[Any]],
    family_members: Optional[Sequence[Any]],
    duration: DurationBreakdown,
    costs: CostBreakdown,
) -> List[Block]:
    landlord = _mapping(landlord)
    tenant = _mapping(tenant)
    details = _mapping(agreement_details)

    writer = _BlockWriter()
    writer.title("RENTAL AGREEMENT")
    writer.gap()
    writer.subtitle(f"Agreement Number: {agreement_number}")
    writer.gap(2)

    _agreement_section(writer, details, duration)
    _landlord_section(writer, landlord)
    _tenant_section(writer, tenant)
    _family_section(writer, family_members or [])
    _property_section(writer, _mapping(property_info))
    _financial_section(writer, details, costs)
    _services_section(writer, additional_services or [])
    _cost_breakdown_section(writer, costs)
    _terms_section(writer, details)
    _signature_section(writer, landlord, tenant)
    return writer.blocks


def _paragraph_style(block: Block, cache: Dict[Tuple[Any, ...], ParagraphStyle]) -> ParagraphStyle:
    key = (block.font_size, block.bold, block.align, block.indent)
    style = cache.get(key)
    if style is None:
        style = ParagraphStyle(
            f"Agreement{len(cache)}",
            fontName="Helvetica-Bold" if block.bold else "Helvetica",
            fontSize=block.font_size,
            leading=block.font_size * 1.25,
            alignment=_ALIGNMENTS.get(block.align, TA_LEFT),
            leftIndent=block.indent,
        )
        cache[key] = style
    return style


def _signature_table(block: Block, style: ParagraphStyle, width: float) -> Table:
    rows = list(zip(*block.columns))
    data = [[Paragraph(escape(cell), style) for cell in row] for row in rows]
    table = Table(data, colWidths=[width / 2] * 2, hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    return table


def _build_story(blocks: Sequence[Block], frame_width: float) -> List[Any]:
    styles: Dict[Tuple[Any, ...], ParagraphStyle] = {}
    story: List[Any] = []
    for block in blocks:
        if block.kind == "spacer":
            story.append(Spacer(1, block.height))
        elif block.kind == "signatures":
            story.append(_signature_table(block, _paragraph_style(block, styles), frame_width))
        else:
            story.append(Paragraph(escape(block.text).replace("\n", "<br/>"), _paragraph_style(block, styles)))
    return story


@contextmanager
def _pdf_buffer() -> Iterator[BytesIO]:
    buffer = BytesIO()
    try:
        yield buffer
    finally:
        buffer.close()


def render_blocks(blocks: Sequence[Block], title: str) -> bytes:
    """Flow ``blocks`` into a paginated PDF and return its bytes."""
    settings = get_settings()
    margin = settings.page_margin
    with _pdf_buffer() as buffer:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=_PAGE_SIZES[settings.page_size],
            leftMargin=margin,
            rightMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=title,
            author=settings.document_author,
        )
        doc.build(_build_story(blocks, doc.width))
        return buffer.getvalue()


def render_agreement_pdf(
    agreement_number: str,
    landlord: Mapping[str, Any],
    tenant: Mapping[str, Any],
    property_info: Mapping[str, Any],
    agreement_details: Mapping[str, Any],
    additional_services: Optional[Sequence[Any]],
    family_members: Optional[Sequence[Any]],
    duration: DurationBreakdown,
    costs: CostBreakdown,
) -> bytes:
    blocks = build_agreement_blocks(
        agreement_number,
        landlord,
        tenant,
        property_info,
        agreement_details,
        additional_services,
        family_members,
        duration,
        costs,
    )
    return render_blocks(blocks, title=f"Rental Agreement - {agreement_number}")
