"""Transaction aggregate models and request payloads

External JSON uses camelCase keys (``contractDate``, ``uploadedAt``, ...);
Python code uses the snake_case attribute names. Both spellings are accepted
on input.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import enum
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TransactionStatus(str, enum.Enum):
    """Lifecycle stage of a transaction. Any stage may follow any other."""
    GATHERING_DOCS = "gathering_docs"
    HOLDING_FOR_FUNDING = "holding_for_funding"
    GATHERING_TITLE = "gathering_title"
    CLIENT_HELP_NEEDED = "client_help_needed"
    ON_HOLD = "on_hold"
    PENDING_CLOSING = "pending_closing"
    READY_TO_CLOSE = "ready_to_close"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class PropertyType(str, enum.Enum):
    """Property classification"""
    SINGLE_FAMILY = "single_family"
    MULTI_FAMILY = "multi_family"
    CONDO = "condo"
    LAND = "land"


class TransactionType(str, enum.Enum):
    """Deal structure"""
    ASSIGNMENT = "assignment"
    DOUBLE_CLOSE = "double_close"
    WHOLETAIL = "wholetail"
    CASH_DEAL = "cash_deal"


class LoanType(str, enum.Enum):
    """Financing classification"""
    CONVENTIONAL = "conventional"
    FHA = "fha"
    VA = "va"
    OTHER = "other"


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.utcnow()


def parse_contract_date(value: Any) -> date:
    """
    Parse an externally supplied contract date.

    Accepts date and datetime objects, ISO dates (``2024-01-15``) and ISO
    datetimes (``2024-01-15T10:00:00Z``). Datetimes carrying an offset are
    converted to UTC first, then truncated to their date part.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return parse_contract_date(parsed)
    raise ValueError(f"Invalid contract date: {value!r}")


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Nested entries

class DocumentRef(CamelModel):
    """Reference to an uploaded file attached to a transaction"""
    id: str
    name: str
    url: str
    uploaded_at: datetime
    uploaded_by: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


class ActivityEntry(CamelModel):
    """Comment or event in a transaction's activity feed"""
    id: str
    user: str
    user_email: str
    message: str
    timestamp: datetime
    likes: int = Field(default=0, ge=0)
    mentions: Optional[List[str]] = None
    attachments: Optional[List[str]] = None


class DocumentCreate(CamelModel):
    """Payload attaching a document. A caller-supplied id is ignored."""
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(default=None, exclude=True)
    name: str
    url: str
    uploaded_by: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)
    mime_type: Optional[str] = None

    def to_document(self, uploaded_at: Optional[datetime] = None) -> DocumentRef:
        return DocumentRef(
            id=generate_id(),
            uploaded_at=uploaded_at or utcnow(),
            **self.model_dump(),
        )


class ActivityCreate(CamelModel):
    """Payload adding an activity. A caller-supplied id is ignored."""
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(default=None, exclude=True)
    user: str
    user_email: str
    message: str
    mentions: Optional[List[str]] = None
    attachments: Optional[List[str]] = None

    def to_activity(self, timestamp: Optional[datetime] = None) -> ActivityEntry:
        return ActivityEntry(
            id=generate_id(),
            timestamp=timestamp or utcnow(),
            likes=0,
            **self.model_dump(),
        )


# Aggregate root

class TransactionDetails(CamelModel):
    """Descriptive fields shared by a stored transaction and its creation payload"""

    # Classification
    property_type: Optional[PropertyType] = None
    transaction_type: Optional[TransactionType] = None
    loan_type: Optional[LoanType] = None

    # Deal flags
    client_account: Optional[str] = None
    preliminary_search: Optional[str] = None
    joint_venture: Optional[str] = None
    dispo_with_ez: Optional[str] = Field(default=None, alias="dispoWithEZ")

    # Property
    address: str
    city: str
    state: str
    zip: Optional[str] = None

    # Sellers
    seller_name: Optional[str] = None
    seller_phone: Optional[str] = None
    seller_email: Optional[str] = None
    seller2_name: Optional[str] = None
    seller2_phone: Optional[str] = None
    seller2_email: Optional[str] = None

    # Buyer
    buyer_name: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None

    # Agents
    acquisitions_agent: Optional[str] = None
    acquisitions_agent_email: Optional[str] = None
    acquisitions_agent_phone: Optional[str] = None
    dispositions_agent: Optional[str] = None
    dispositions_agent_email: Optional[str] = None
    dispositions_agent_phone: Optional[str] = None

    # Title company
    title_name: Optional[str] = None
    title_email: Optional[str] = None
    title_phone: Optional[str] = None
    title_office_address: Optional[str] = None

    # Lender
    lender_name: Optional[str] = None
    lender_email: Optional[str] = None
    lender_office: Optional[str] = None
    lender_phone: Optional[str] = None
    lender_type: Optional[str] = None

    contract_date: date
    coordinator_name: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("contract_date", mode="before")
    @classmethod
    def validate_contract_date(cls, v: Any) -> date:
        return parse_contract_date(v)


class Transaction(TransactionDetails):
    """A real-estate deal and its full lifecycle state"""
    id: str
    status: TransactionStatus = TransactionStatus.GATHERING_DOCS
    documents: List[DocumentRef] = Field(default_factory=list)
    activities: List[ActivityEntry] = Field(default_factory=list)  # newest first

    # Maintained by the store
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TransactionCreate(TransactionDetails):
    """Creation payload. A supplied status is tolerated and ignored."""
    model_config = ConfigDict(extra="forbid")

    status: Optional[Any] = Field(default=None, exclude=True)
    documents: Optional[List[DocumentCreate]] = None
    activities: Optional[List[ActivityCreate]] = None

    def to_transaction(self) -> Transaction:
        """Build a new transaction with fresh ids and the default status"""
        now = utcnow()
        details = self.model_dump(exclude={"documents", "activities"})
        return Transaction(
            id=generate_id(),
            status=TransactionStatus.GATHERING_DOCS,
            documents=[doc.to_document(now) for doc in self.documents or []],
            activities=[activity.to_activity(now) for activity in self.activities or []],
            **details,
        )


_REQUIRED_FIELDS = ("address", "city", "state", "contract_date")


class TransactionUpdate(CamelModel):
    """
    Partial update of the descriptive fields.

    Only fields present in the payload are written. ``documents`` and
    ``activities`` are accepted and ignored; they change only through the
    dedicated activity and document operations.
    """
    model_config = ConfigDict(extra="forbid")

    property_type: Optional[PropertyType] = None
    transaction_type: Optional[TransactionType] = None
    loan_type: Optional[LoanType] = None

    client_account: Optional[str] = None
    preliminary_search: Optional[str] = None
    joint_venture: Optional[str] = None
    dispo_with_ez: Optional[str] = Field(default=None, alias="dispoWithEZ")

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    seller_name: Optional[str] = None
    seller_phone: Optional[str] = None
    seller_email: Optional[str] = None
    seller2_name: Optional[str] = None
    seller2_phone: Optional[str] = None
    seller2_email: Optional[str] = None

    buyer_name: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None

    acquisitions_agent: Optional[str] = None
    acquisitions_agent_email: Optional[str] = None
    acquisitions_agent_phone: Optional[str] = None
    dispositions_agent: Optional[str] = None
    dispositions_agent_email: Optional[str] = None
    dispositions_agent_phone: Optional[str] = None

    title_name: Optional[str] = None
    title_email: Optional[str] = None
    title_phone: Optional[str] = None
    title_office_address: Optional[str] = None

    lender_name: Optional[str] = None
    lender_email: Optional[str] = None
    lender_office: Optional[str] = None
    lender_phone: Optional[str] = None
    lender_type: Optional[str] = None

    contract_date: Optional[date] = None
    coordinator_name: Optional[str] = None
    notes: Optional[str] = None

    documents: Optional[List[Any]] = Field(default=None, exclude=True)
    activities: Optional[List[Any]] = Field(default=None, exclude=True)

    @field_validator("contract_date", mode="before")
    @classmethod
    def validate_contract_date(cls, v: Any) -> Optional[date]:
        if v is None:
            return None
        return parse_contract_date(v)

    @field_validator(*_REQUIRED_FIELDS)
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field is required and cannot be null")
        return v

    def update_fields(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller, keyed by attribute name"""
        return self.model_dump(exclude_unset=True)


class StatusUpdate(CamelModel):
    """Payload replacing a transaction's status"""
    model_config = ConfigDict(extra="forbid")

    status: TransactionStatus


class TransactionStats(CamelModel):
    """Status-count rollup over all transactions"""
    total: int
    by_status: Dict[str, int]
