from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from rentify.db.base import Base


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    renter_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    rent_amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    currency = Column(String(3), nullable=False)
    security_deposit = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")

    # Acceptance records from owner and renter
    owner_accepted = Column(Boolean, nullable=False, default=False)
    owner_accepted_at = Column(DateTime(timezone=True), nullable=True)
    owner_signature_name = Column(String(255), nullable=True)
    owner_signature_ip = Column(String(64), nullable=True)
    owner_signature_user_agent = Column(String(512), nullable=True)
    renter_accepted = Column(Boolean, nullable=False, default=False)
    renter_accepted_at = Column(DateTime(timezone=True), nullable=True)
    renter_signature_name = Column(String(255), nullable=True)
    renter_signature_ip = Column(String(64), nullable=True)
    renter_signature_user_agent = Column(String(512), nullable=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    property = relationship("Property", backref="contracts")
    owner = relationship("User", foreign_keys=[owner_id])
    renter = relationship("User", foreign_keys=[renter_id])
    documents = relationship(
        "ContractDocument",
        back_populates="contract",
        order_by="ContractDocument.id",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "ContractHistoryEntry",
        back_populates="contract",
        order_by="ContractHistoryEntry.id",
        cascade="all, delete-orphan",
    )
    payment_schedule = relationship(
        "ContractInstallment",
        back_populates="contract",
        order_by="ContractInstallment.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class ContractDocument(Base):
    __tablename__ = "contract_documents"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    url = Column(String(1024), nullable=False)
    storage_key = Column(String(1024), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)

    contract = relationship("Contract", back_populates="documents")


class ContractHistoryEntry(Base):
    __tablename__ = "contract_history"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    action = Column(String(64), nullable=False)
    by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    at = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=False, default="")

    contract = relationship("Contract", back_populates="history")
    by = relationship("User")


class ContractInstallment(Base):
    __tablename__ = "contract_installments"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    due_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    status = Column(String(16), nullable=False, default="due")
    # Opaque reference to a payment held by the payment provider
    payment_ref = Column(String(255), nullable=True)

    contract = relationship("Contract", back_populates="payment_schedule")
