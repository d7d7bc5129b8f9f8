from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lockerkeep.core.entities.key_log import KeyAction, KeyMethod
from lockerkeep.core.entities.locker import LockerStatus
from lockerkeep.core.entities.locker_key import KeyStatus
from lockerkeep.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class EmployeeModel(Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    nik: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    contracts = relationship("ContractModel", back_populates="employee")
    held_keys = relationship("LockerKeyModel", back_populates="holder")


class LockerModel(Base):
    __tablename__ = "lockers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    locker_number: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    room_id: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    status: Mapped[LockerStatus] = mapped_column(Enum(LockerStatus), nullable=False, default=LockerStatus.AVAILABLE)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    keys = relationship("LockerKeyModel", back_populates="locker", cascade="all, delete-orphan")
    contracts = relationship("ContractModel", back_populates="locker")


class LockerKeyModel(Base):
    __tablename__ = "locker_keys"
    __table_args__ = (UniqueConstraint("locker_id", "key_number", name="uq_locker_keys_locker_key_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    locker_id: Mapped[str] = mapped_column(ForeignKey("lockers.id"), nullable=False, index=True)
    key_number: Mapped[int] = mapped_column(Integer, nullable=False)
    physical_key_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    label: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[KeyStatus] = mapped_column(Enum(KeyStatus), nullable=False, default=KeyStatus.AVAILABLE)
    holder_id: Mapped[str | None] = mapped_column(ForeignKey("employees.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    locker = relationship("LockerModel", back_populates="keys")
    holder = relationship("EmployeeModel", back_populates="held_keys")


class ContractModel(Base):
    __tablename__ = "contracts"
    __table_args__ = (UniqueConstraint("locker_id", "contract_seq", name="uq_contracts_locker_seq"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    employee_id: Mapped[str] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    locker_id: Mapped[str] = mapped_column(ForeignKey("lockers.id"), nullable=False, index=True)
    contract_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    employee = relationship("EmployeeModel", back_populates="contracts")
    locker = relationship("LockerModel", back_populates="contracts")


class KeyLogModel(Base):
    __tablename__ = "key_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    locker_id: Mapped[str] = mapped_column(ForeignKey("lockers.id"), nullable=False, index=True)
    locker_key_id: Mapped[str | None] = mapped_column(ForeignKey("locker_keys.id", ondelete="SET NULL"), nullable=True)
    employee_id: Mapped[str] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    action: Mapped[KeyAction] = mapped_column(Enum(KeyAction), nullable=False)
    method: Mapped[KeyMethod] = mapped_column(Enum(KeyMethod), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, index=True)
    # insertion order, breaks timestamp ties
    seq: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
