"""
Guest form PDF
Renders a submitted booking as the one-page guest registration sheet that
goes to building administration.
"""

import io
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from guestform.models import GuestSubmission

logger = logging.getLogger(__name__)


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)


class GuestFormPDFGenerator:
    """Build the guest registration PDF for one booking"""

    def __init__(self, booking: GuestSubmission):
        self.booking = booking
        self.margin = 0.6 * inch
        self.header_bg = colors.HexColor("#e5e7eb")

    def sections(self) -> list[tuple[str, list[tuple[str, str]]]]:
        b = self.booking
        sections = [
            (
                "Unit and Owner Information",
                [
                    ("Unit Owner", b.unit_owner),
                    ("Tower & Unit Number", b.tower_and_unit_number),
                    ("Onsite Contact Person", b.owner_onsite_contact_person),
                    ("Contact Number", b.owner_contact_number),
                ],
            ),
            (
                "Primary Guest",
                [
                    ("Name", b.primary_guest_name),
                    ("Email", b.guest_email),
                    ("Phone Number", b.guest_phone_number),
                    ("Address", b.guest_address),
                    ("Nationality", b.nationality),
                ],
            ),
            (
                "Stay Details",
                [
                    ("Check-in", f"{_text(b.check_in_date)} {_text(b.check_in_time)}"),
                    ("Check-out", f"{_text(b.check_out_date)} {_text(b.check_out_time)}"),
                    ("Number of Nights", b.number_of_nights),
                    ("Number of Adults", b.number_of_adults),
                    ("Number of Children", b.number_of_children),
                ],
            ),
        ]

        additional = [
            (f"Guest {i}", name)
            for i, name in enumerate(
                [b.guest2_name, b.guest3_name, b.guest4_name, b.guest5_name], start=2
            )
            if name
        ]
        if additional:
            sections.append(("Additional Guests", additional))

        if b.need_parking:
            sections.append(
                (
                    "Parking",
                    [
                        ("Car Plate Number", b.car_plate_number),
                        ("Car Brand & Model", b.car_brand_model),
                        ("Car Color", b.car_color),
                    ],
                )
            )

        if b.has_pets:
            sections.append(
                (
                    "Pet",
                    [
                        ("Name", b.pet_name),
                        ("Breed", b.pet_breed),
                        ("Age", b.pet_age),
                        ("Vaccination Date", b.pet_vaccination_date),
                    ],
                )
            )

        return [(title, [(k, _text(v)) for k, v in rows]) for title, rows in sections]

    def generate(self) -> bytes:
        logger.info(f"📄 Generating guest form PDF for booking {self.booking.id}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Guest Form - {self.booking.primary_guest_name}",
        )

        styles = getSampleStyleSheet()
        story = [
            Paragraph("Guest Registration Form", styles["Title"]),
            Spacer(1, 0.15 * inch),
        ]

        for title, rows in self.sections():
            table = Table(
                [[title, ""]] + [[label, value] for label, value in rows],
                colWidths=[2.2 * inch, 4.6 * inch],
            )
            table.setStyle(
                TableStyle(
                    [
                        ("SPAN", (0, 0), (1, 0)),
                        ("BACKGROUND", (0, 0), (1, 0), self.header_bg),
                        ("FONTNAME", (0, 0), (1, 0), "Helvetica-Bold"),
                        ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 9),
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                        ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ]
                )
            )
            story.append(table)
            story.append(Spacer(1, 0.15 * inch))

        doc.build(story)
        return buffer.getvalue()


def generate_guest_form_pdf(booking: GuestSubmission) -> bytes:
    return GuestFormPDFGenerator(booking).generate()
