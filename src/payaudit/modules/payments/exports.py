"""CSV and Excel rendering for payment verification exports."""

import csv
import io
from collections import Counter
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from payaudit.modules.payments.models import PaymentVerification, VerificationStatus


class ExportFormat(StrEnum):
    CSV = "csv"
    EXCEL = "excel"

    @property
    def extension(self) -> str:
        return "xlsx" if self is ExportFormat.EXCEL else "csv"

    @property
    def media_type(self) -> str:
        if self is ExportFormat.EXCEL:
            return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        return "text/csv"


EXPORT_COLUMNS = [
    "Payment ID",
    "Booking ID",
    "User ID",
    "Month",
    "Amount",
    "Currency",
    "Payment Method",
    "Transaction Reference",
    "Payment Date",
    "Status",
    "Submitted At",
    "Verified At",
    "Receipt Number",
]

RECORDS_SHEET = "Payment Records"
SUMMARY_SHEET = "Summary"

_HEADER_FONT = Font(bold=True, color="FFFFFFFF")
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF2D5016")


def export_filename(
    generated_at: datetime,
    export_format: ExportFormat = ExportFormat.CSV,
) -> str:
    """Name for an export file generated at the given time."""
    return f"payments-export-{generated_at:%Y%m%d-%H%M%S}.{export_format.extension}"


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def render_payments_csv(payments: Sequence[PaymentVerification]) -> tuple[str, int]:
    """Render payment verifications as CSV.

    Args:
        payments: Verifications to include, in output order

    Returns:
        Tuple of (CSV text, number of data rows)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)

    count = 0
    for payment in payments:
        writer.writerow(
            [
                str(payment.id),
                str(payment.booking_id),
                str(payment.user_id),
                payment.month_number,
                f"{payment.amount:.2f}",
                str(payment.currency),
                str(payment.payment_method),
                payment.transaction_reference or "",
                payment.payment_date.isoformat(),
                str(payment.verification_status),
                _iso(payment.submitted_at),
                _iso(payment.verified_at),
                payment.receipt_number or "",
            ]
        )
        count += 1

    return buffer.getvalue(), count


def _naive(value: datetime | None) -> datetime | None:
    # openpyxl cannot store timezone-aware datetimes
    return value.replace(tzinfo=None) if value else None


def _add_summary_sheet(
    workbook: Workbook,
    payments: Sequence[PaymentVerification],
    generated_at: datetime,
) -> None:
    sheet = workbook.create_sheet(SUMMARY_SHEET)
    statuses = Counter(payment.verification_status for payment in payments)
    methods = Counter(str(payment.payment_method) for payment in payments)
    approved_amount = sum(
        (
            payment.amount
            for payment in payments
            if payment.verification_status == VerificationStatus.APPROVED
        ),
        Decimal("0"),
    )

    sheet.append(["Payment Export Summary"])
    sheet.append(["Generated", _naive(generated_at)])
    sheet.append([])
    sheet.append(["Total Records", len(payments)])
    sheet.append(["Total Amount", float(sum((p.amount for p in payments), Decimal("0")))])
    for status in VerificationStatus:
        sheet.append([f"{status.replace('_', ' ').title()} Payments", statuses[status]])
    sheet.append(["Approved Amount", float(approved_amount)])
    sheet.append([])
    sheet.append(["Payment Method Breakdown"])
    for method, count in sorted(methods.items()):
        sheet.append([method, count])

    sheet["A1"].font = Font(bold=True, size=14)
    sheet.column_dimensions["A"].width = 28
    sheet.column_dimensions["B"].width = 20


def render_payments_xlsx(
    payments: Sequence[PaymentVerification],
    generated_at: datetime,
) -> tuple[bytes, int]:
    """Render payment verifications as an Excel workbook.

    The first sheet holds one row per payment under the same columns as
    the CSV export. A second sheet summarises totals per status and per
    payment method.

    Args:
        payments: Verifications to include, in output order
        generated_at: Timestamp shown on the summary sheet

    Returns:
        Tuple of (xlsx bytes, number of data rows)
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = RECORDS_SHEET
    sheet.append(EXPORT_COLUMNS)
    for cell in sheet[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL

    for payment in payments:
        sheet.append(
            [
                str(payment.id),
                str(payment.booking_id),
                str(payment.user_id),
                payment.month_number,
                float(payment.amount),
                str(payment.currency),
                str(payment.payment_method),
                payment.transaction_reference or "",
                payment.payment_date,
                str(payment.verification_status),
                _naive(payment.submitted_at),
                _naive(payment.verified_at),
                payment.receipt_number or "",
            ]
        )

    for row in sheet.iter_rows(min_row=2, min_col=5, max_col=5):
        row[0].number_format = "#,##0.00"

    _add_summary_sheet(workbook, payments, generated_at)

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue(), len(payments)
