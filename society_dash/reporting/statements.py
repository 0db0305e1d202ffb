"""
Unit statements - a unit's invoices and payments as one running ledger.

Invoices are debits, payments are credits; the balance after each line is
what the unit owes at that point. Lines are chronological, and on the same
date invoices come before payments.

Invoice lines carry a status recomputed from the payments linked to the
invoice; the stored status is ignored.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from society_dash.ledger.models import InvoiceType
from society_dash.ledger.store import LedgerStore

_INVOICE_LINE_TYPES = {
    InvoiceType.PENALTY: "Penalty",
    InvoiceType.INTEREST: "Interest",
}


@dataclass
class UnitLedgerEntry:
    id: str
    unit_id: str
    date: str
    type: str  # Invoice | Payment | Penalty | Interest
    description: str
    debit: float
    credit: float
    balance: float
    reference_id: str | None = None
    status: str | None = None  # invoice lines only

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "date": self.date,
            "type": self.type,
            "description": self.description,
            "debit": round(self.debit, 2),
            "credit": round(self.credit, 2),
            "balance": round(self.balance, 2),
            "reference_id": self.reference_id,
            "status": self.status,
        }


def unit_statement(
    store: LedgerStore, unit_id: str, today: date | None = None
) -> list[UnitLedgerEntry]:
    """
    Running ledger for one unit.

    An unpaid invoice is marked Overdue once its due date is before `today`;
    without `today` nothing is treated as overdue.
    """
    payments = sorted(store.get_payments(unit_id=unit_id), key=lambda p: p.date)
    paid_by_invoice: dict[str, float] = defaultdict(float)
    for payment in payments:
        if payment.against_invoice_id:
            paid_by_invoice[payment.against_invoice_id] += payment.amount
    as_of = today.isoformat() if today else None

    # (date, 0=invoice/1=payment, sequence) keeps same-day invoices first
    lines: list[tuple[tuple[str, int, int], dict]] = []
    invoices = sorted(store.get_invoices(unit_id=unit_id), key=lambda i: i.date)
    for seq, invoice in enumerate(invoices):
        description = f"{invoice.type.value} invoice due {invoice.due_date[:10]}"
        if invoice.notes:
            description = f"{description} ({invoice.notes})"
        overdue = as_of is not None and invoice.due_date[:10] < as_of
        status = invoice.derived_status(paid_by_invoice.get(invoice.id, 0.0), overdue)
        lines.append(
            (
                (invoice.date[:10], 0, seq),
                {
                    "type": _INVOICE_LINE_TYPES.get(invoice.type, "Invoice"),
                    "date": invoice.date,
                    "description": description,
                    "debit": invoice.total,
                    "credit": 0.0,
                    "reference_id": invoice.id,
                    "status": status.value,
                },
            )
        )
    for seq, payment in enumerate(payments):
        target = f" against {payment.against_invoice_id}" if payment.against_invoice_id else ""
        lines.append(
            (
                (payment.date[:10], 1, seq),
                {
                    "type": "Payment",
                    "date": payment.date,
                    "description": f"{payment.mode.value} payment{target}",
                    "debit": 0.0,
                    "credit": payment.amount,
                    "reference_id": payment.id,
                },
            )
        )

    entries = []
    balance = 0.0
    for position, (_, line) in enumerate(sorted(lines, key=lambda item: item[0]), start=1):
        balance += line["debit"] - line["credit"]
        entries.append(
            UnitLedgerEntry(
                id=f"{unit_id}-L{position:04d}",
                unit_id=unit_id,
                date=line["date"],
                type=line["type"],
                description=line["description"],
                debit=line["debit"],
                credit=line["credit"],
                balance=balance,
                reference_id=line["reference_id"],
                status=line.get("status"),
            )
        )
    return entries
