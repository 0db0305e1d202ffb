"""
Build a LedgerStore from externally produced records.

The dashboard's data source hands over plain JSON documents shaped like

    {"units": [...], "invoices": [...], "payments": [...],
     "expenses": [...], "sinkingFundEntries": [...]}

with camelCase field names (snake_case is accepted too). Each record is
validated against a pydantic schema and converted to the frozen dataclasses
in models.py; a record that fails validation raises LedgerLoadError naming
the record, and duplicate ids within a kind raise InvariantViolation.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    FiniteFloat,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel, to_snake

from society_dash.contracts.invariants import check_unique_ids
from society_dash.dates import parse_date

from .models import (
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    Invoice,
    InvoiceStatus,
    InvoiceType,
    Occupancy,
    Payment,
    PaymentMode,
    SinkingFundEntry,
    SinkingFundEntryType,
    Unit,
    tower_of,
)
from .store import LedgerStore

logger = logging.getLogger(__name__)


class LedgerLoadError(ValueError):
    """Raised when an external record cannot be turned into a ledger record."""


# =============================================================================
# RECORD SCHEMAS
# =============================================================================

RequiredStr = Annotated[str, Field(min_length=1)]
Amount = FiniteFloat


class LedgerRecord(BaseModel):
    """Common settings: camelCase aliases, snake_case names also accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator(
        "amount", "tax", "balance", "area_sqft", "floor", mode="before", check_fields=False
    )
    @classmethod
    def reject_bool_numbers(cls, v):
        """JSON true/false is never a valid number."""
        if isinstance(v, bool):
            raise ValueError("expected a number, got a boolean")
        return v

    @field_validator("date", "due_date", check_fields=False)
    @classmethod
    def check_iso_date(cls, v: str) -> str:
        try:
            parse_date(v)
        except ValueError as e:
            raise ValueError(f"expected an ISO date, got {v!r}") from e
        return v


class UnitRecord(LedgerRecord):
    id: RequiredStr
    tower: str | None = None
    floor: int = 0
    area_sqft: Amount = 0.0
    occupancy: Occupancy
    owner_name: str = ""
    mobile: str = ""
    email: str = ""
    auto_debit: bool = False
    move_in_date: str = ""
    tenant_name: str | None = None

    @model_validator(mode="after")
    def default_tower(self):
        """Units without an explicit tower take it from the id prefix."""
        if not self.tower:
            self.tower = tower_of(self.id)
        return self


class InvoiceRecord(LedgerRecord):
    id: RequiredStr
    unit_id: RequiredStr
    date: RequiredStr
    due_date: RequiredStr
    type: InvoiceType
    amount: Amount
    tax: Amount | None = None
    status: InvoiceStatus = InvoiceStatus.GENERATED
    notes: str | None = None


class PaymentRecord(LedgerRecord):
    id: RequiredStr
    unit_id: RequiredStr
    date: RequiredStr
    amount: Amount
    mode: PaymentMode
    against_invoice_id: str | None = None
    transaction_ref: str | None = None
    notes: str | None = None


class ExpenseRecord(LedgerRecord):
    id: RequiredStr
    date: RequiredStr
    vendor: RequiredStr
    category: ExpenseCategory
    amount: Amount
    tax: Amount | None = None
    status: ExpenseStatus
    tower: str | None = None
    sub_category: str | None = None
    invoice_number: str | None = None
    description: str | None = None
    payment_date: str | None = None


class SinkingFundEntryRecord(LedgerRecord):
    id: RequiredStr
    date: RequiredStr
    type: SinkingFundEntryType
    amount: Amount
    description: str = ""
    balance: Amount
    unit_id: str | None = None
    approved_by: str | None = None


# =============================================================================
# CONVERSION
# =============================================================================


def _describe(error: ValidationError) -> str:
    """One line per failed field, named in snake_case."""
    parts = []
    for err in error.errors():
        field = ".".join(to_snake(p) if isinstance(p, str) else str(p) for p in err["loc"])
        if err["type"] == "missing":
            parts.append(f"{field}: missing required field")
        elif field:
            parts.append(f"{field}={err['input']!r}: {err['msg']}")
        else:
            parts.append(err["msg"])
    return "; ".join(parts)


def _validate(schema: type[LedgerRecord], raw: dict[str, Any]) -> LedgerRecord:
    try:
        return schema.model_validate(raw)
    except ValidationError as e:
        raise LedgerLoadError(_describe(e)) from e


def unit_from_record(raw: dict[str, Any]) -> Unit:
    r = _validate(UnitRecord, raw)
    return Unit(
        id=r.id,
        tower=r.tower,
        floor=r.floor,
        area_sqft=r.area_sqft,
        occupancy=r.occupancy,
        owner_name=r.owner_name,
        mobile=r.mobile,
        email=r.email,
        auto_debit=r.auto_debit,
        move_in_date=r.move_in_date,
        tenant_name=r.tenant_name,
    )


def invoice_from_record(raw: dict[str, Any]) -> Invoice:
    r = _validate(InvoiceRecord, raw)
    return Invoice(
        id=r.id,
        unit_id=r.unit_id,
        date=r.date,
        due_date=r.due_date,
        type=r.type,
        amount=r.amount,
        tax=r.tax or 0.0,
        status=r.status,
        notes=r.notes,
    )


def payment_from_record(raw: dict[str, Any]) -> Payment:
    r = _validate(PaymentRecord, raw)
    return Payment(
        id=r.id,
        unit_id=r.unit_id,
        date=r.date,
        amount=r.amount,
        mode=r.mode,
        against_invoice_id=r.against_invoice_id,
        transaction_ref=r.transaction_ref,
        notes=r.notes,
    )


def expense_from_record(raw: dict[str, Any]) -> Expense:
    r = _validate(ExpenseRecord, raw)
    return Expense(
        id=r.id,
        date=r.date,
        vendor=r.vendor,
        category=r.category,
        amount=r.amount,
        tax=r.tax or 0.0,
        status=r.status,
        tower=r.tower,
        sub_category=r.sub_category,
        invoice_number=r.invoice_number,
        description=r.description,
        payment_date=r.payment_date,
    )


def sinking_fund_entry_from_record(raw: dict[str, Any]) -> SinkingFundEntry:
    r = _validate(SinkingFundEntryRecord, raw)
    return SinkingFundEntry(
        id=r.id,
        date=r.date,
        type=r.type,
        amount=r.amount,
        description=r.description,
        balance=r.balance,
        unit_id=r.unit_id,
        approved_by=r.approved_by,
    )


_CONVERTERS = {
    "units": unit_from_record,
    "invoices": invoice_from_record,
    "payments": payment_from_record,
    "expenses": expense_from_record,
    "sinking_fund_entries": sinking_fund_entry_from_record,
}


def load_ledger(document: dict[str, Any]) -> LedgerStore:
    """Convert a ledger document into a LedgerStore."""
    doc = {to_snake(k): v for k, v in document.items()}
    converted: dict[str, list] = {}
    for kind, convert in _CONVERTERS.items():
        records = doc.get(kind) or []
        out = []
        for position, raw in enumerate(records):
            if not isinstance(raw, dict):
                raise LedgerLoadError(f"{kind}[{position}]: expected an object, got {type(raw).__name__}")
            try:
                out.append(convert(raw))
            except LedgerLoadError as e:
                raise LedgerLoadError(f"{kind}[{position}] ({raw.get('id', '?')}): {e}") from e
        check_unique_ids(out, kind)
        converted[kind] = out

    store = LedgerStore(**converted)
    logger.info(
        "Ledger loaded: %d units, %d invoices, %d payments, %d expenses, %d sinking fund entries",
        len(converted["units"]),
        len(converted["invoices"]),
        len(converted["payments"]),
        len(converted["expenses"]),
        len(converted["sinking_fund_entries"]),
    )
    return store


def load_ledger_file(path: Path | str) -> LedgerStore:
    """Load a ledger document from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ledger file not found: {path}")
    try:
        document = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise LedgerLoadError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(document, dict):
        raise LedgerLoadError(f"{path}: expected a JSON object at top level")
    return load_ledger(document)
