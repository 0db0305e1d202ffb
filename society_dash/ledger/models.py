"""
Ledger records - the closed, immutable universe the reports read from.

Units, Invoices, Payments, Expenses and SinkingFundEntries are created once
when the data source is loaded and never mutated afterwards. Invoice status
is carried for display only; aggregation recomputes it from payments.
"""

from dataclasses import dataclass
from enum import Enum


class Occupancy(Enum):
    OWNER = "Owner"
    TENANT = "Tenant"


class InvoiceType(Enum):
    MAINTENANCE = "Maintenance"
    SINKING_FUND = "SinkingFund"
    AMENITY = "Amenity"
    PARKING = "Parking"
    PENALTY = "Penalty"
    INTEREST = "Interest"
    OTHER = "Other"


class InvoiceStatus(Enum):
    GENERATED = "Generated"
    SENT = "Sent"
    OVERDUE = "Overdue"
    PAID = "Paid"
    PARTIALLY_PAID = "PartiallyPaid"


class PaymentMode(Enum):
    UPI = "UPI"
    TRANSFER = "Transfer"
    CHEQUE = "Cheque"
    CASH = "Cash"
    AUTO_DEBIT = "AutoDebit"


class ExpenseCategory(Enum):
    SECURITY = "Security"
    HOUSEKEEPING = "Housekeeping"
    ELECTRICITY = "Electricity"
    WATER = "Water"
    DIESEL = "Diesel"
    REPAIRS = "Repairs"
    AMC = "AMC"
    INSURANCE = "Insurance"
    SALARIES = "Salaries"
    ADMIN = "Admin"
    WASTE = "Waste"
    INTERNET = "Internet"
    LEGAL = "Legal"
    LANDSCAPING = "Landscaping"
    OTHER = "Other"


class ExpenseStatus(Enum):
    UNPAID = "Unpaid"
    PART_PAID = "PartPaid"
    PAID = "Paid"


class SinkingFundEntryType(Enum):
    CONTRIBUTION = "Contribution"
    WITHDRAWAL = "Withdrawal"
    INTEREST = "Interest"


def tower_of(unit_id: str) -> str:
    """Tower part of a unit id ("P2-017" -> "P2")."""
    return unit_id.split("-", 1)[0]


@dataclass(frozen=True)
class Unit:
    id: str
    tower: str
    floor: int
    area_sqft: float
    occupancy: Occupancy
    owner_name: str
    mobile: str
    email: str
    auto_debit: bool
    move_in_date: str
    tenant_name: str | None = None


@dataclass(frozen=True)
class Invoice:
    id: str
    unit_id: str
    date: str
    due_date: str
    type: InvoiceType
    amount: float
    tax: float
    status: InvoiceStatus = InvoiceStatus.GENERATED
    notes: str | None = None

    @property
    def total(self) -> float:
        return self.amount + self.tax

    def derived_status(self, paid: float, overdue: bool) -> InvoiceStatus:
        """Status recomputed from what has actually been paid."""
        if paid >= self.total:
            return InvoiceStatus.PAID
        if paid > 0:
            return InvoiceStatus.PARTIALLY_PAID
        if overdue:
            return InvoiceStatus.OVERDUE
        return InvoiceStatus.SENT


@dataclass(frozen=True)
class Payment:
    id: str
    unit_id: str
    date: str
    amount: float
    mode: PaymentMode
    against_invoice_id: str | None = None
    transaction_ref: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Expense:
    id: str
    date: str
    vendor: str
    category: ExpenseCategory
    amount: float
    tax: float
    status: ExpenseStatus
    tower: str | None = None
    sub_category: str | None = None
    invoice_number: str | None = None
    description: str | None = None
    payment_date: str | None = None

    @property
    def total(self) -> float:
        return self.amount + self.tax


@dataclass(frozen=True)
class SinkingFundEntry:
    id: str
    date: str
    type: SinkingFundEntryType
    amount: float
    description: str
    balance: float  # post-entry running balance
    unit_id: str | None = None
    approved_by: str | None = None

    @property
    def signed_amount(self) -> float:
        if self.type is SinkingFundEntryType.WITHDRAWAL:
            return -self.amount
        return self.amount
