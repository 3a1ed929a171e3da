"""Transaction table - one row per deal, activities and documents embedded as JSON"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, JSON, Enum, Index
from datetime import datetime
from transactions_service.database import Base
from transactions_service.schemas.transaction import (
    LoanType,
    PropertyType,
    TransactionStatus,
    TransactionType,
)


def enum_values(enum_cls):
    """Persist enum values ('gathering_docs') rather than member names"""
    return [member.value for member in enum_cls]


class TransactionRecord(Base):
    """Persisted transaction aggregate"""
    __tablename__ = "transactions"

    # Internal row key, never exposed
    pk = Column(Integer, primary_key=True, autoincrement=True)

    # External identifier (UUID4)
    id = Column(String(36), unique=True, nullable=False, index=True)

    status = Column(Enum(TransactionStatus, values_callable=enum_values), nullable=False, default=TransactionStatus.GATHERING_DOCS, index=True)

    # Classification
    property_type = Column(Enum(PropertyType, values_callable=enum_values), nullable=True)
    transaction_type = Column(Enum(TransactionType, values_callable=enum_values), nullable=True)
    loan_type = Column(Enum(LoanType, values_callable=enum_values), nullable=True)

    # Deal flags
    client_account = Column(String(255), nullable=True)
    preliminary_search = Column(String(255), nullable=True)
    joint_venture = Column(String(255), nullable=True)
    dispo_with_ez = Column(String(255), nullable=True)

    # Property
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip = Column(String(20), nullable=True)

    # Sellers
    seller_name = Column(String(255), nullable=True)
    seller_phone = Column(String(50), nullable=True)
    seller_email = Column(String(255), nullable=True)
    seller2_name = Column(String(255), nullable=True)
    seller2_phone = Column(String(50), nullable=True)
    seller2_email = Column(String(255), nullable=True)

    # Buyer
    buyer_name = Column(String(255), nullable=True)
    buyer_phone = Column(String(50), nullable=True)
    buyer_email = Column(String(255), nullable=True)

    # Agents
    acquisitions_agent = Column(String(255), nullable=True)
    acquisitions_agent_email = Column(String(255), nullable=True)
    acquisitions_agent_phone = Column(String(50), nullable=True)
    dispositions_agent = Column(String(255), nullable=True)
    dispositions_agent_email = Column(String(255), nullable=True)
    dispositions_agent_phone = Column(String(50), nullable=True)

    # Title company
    title_name = Column(String(255), nullable=True)
    title_email = Column(String(255), nullable=True)
    title_phone = Column(String(50), nullable=True)
    title_office_address = Column(String(500), nullable=True)

    # Lender
    lender_name = Column(String(255), nullable=True)
    lender_email = Column(String(255), nullable=True)
    lender_office = Column(String(255), nullable=True)
    lender_phone = Column(String(50), nullable=True)
    lender_type = Column(String(100), nullable=True)

    contract_date = Column(Date, nullable=False)
    coordinator_name = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Embedded collections
    documents = Column(JSON, nullable=False, default=list)  # upload order
    activities = Column(JSON, nullable=False, default=list)  # newest first

    # Bumped on every write; guards read-modify-write of the collections
    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_transactions_status_created", "status", "created_at"),
    )
