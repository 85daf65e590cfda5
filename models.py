"""
SQLAlchemy models for branch revenue and weekly bonus tracking.
Branches and employees are maintained by external workflows; this service
reads them and owns the revenue, bonus and audit tables.
"""
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text, ForeignKey, DECIMAL, Boolean, JSON,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base


class Branch(Base):
    """
    Branch (store) table.
    Every active branch takes part in the daily bonus sweep.
    """
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    manager_email = Column(String(255), comment='Recipient for bonus and revenue notifications')

    # Relationships
    employees = relationship("Employee", back_populates="branch")


class Employee(Base):
    """
    Employee information table.
    """
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    employee_code = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    branch = relationship("Branch", back_populates="employees")


class DailyRevenue(Base):
    """
    One revenue entry per branch per day.
    Stores the submitted amounts together with the matching verdict.
    """
    __tablename__ = "daily_revenues"
    __table_args__ = (
        UniqueConstraint("branch_id", "revenue_date", name="uq_daily_revenue_branch_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    revenue_date = Column(Date, nullable=False, index=True)

    # Amounts
    cash = Column(DECIMAL(12, 2), nullable=False, default=0)
    network = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False, comment='cash + network')
    balance = Column(DECIMAL(12, 2), nullable=False, comment='employee_total - cash, must equal network')
    employee_total = Column(DECIMAL(12, 2), nullable=False, comment='Sum of employee contributions')

    # Matching
    is_matched = Column(Boolean, nullable=False, default=True)
    unmatch_reason = Column(Text, comment='Human explanation, required when not matched')
    mismatch_details = Column(JSON, comment='Violated accounting rules at entry time')

    # Metadata
    created_by = Column(Integer)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    branch = relationship("Branch")
    employee_revenues = relationship(
        "EmployeeRevenue", back_populates="daily_revenue", cascade="all, delete-orphan"
    )


class EmployeeRevenue(Base):
    """
    An employee's contribution to a daily revenue entry.
    """
    __tablename__ = "employee_revenues"

    id = Column(Integer, primary_key=True, index=True)
    daily_revenue_id = Column(Integer, ForeignKey("daily_revenues.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    cash = Column(DECIMAL(12, 2), nullable=False, default=0)
    network = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False)

    # Relationships
    daily_revenue = relationship("DailyRevenue", back_populates="employee_revenues")
    employee = relationship("Employee")


class WeeklyBonus(Base):
    """
    Weekly bonus record for one (branch, year, month, week) bucket.
    Recomputed by every sync while pending; frozen once requested.
    """
    __tablename__ = "weekly_bonuses"
    __table_args__ = (
        UniqueConstraint(
            "branch_id", "year", "month", "week_number", name="uq_weekly_bonus_bucket"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)

    # Totals
    total_revenue = Column(DECIMAL(12, 2), nullable=False, default=0)
    total_amount = Column(DECIMAL(12, 2), nullable=False, default=0, comment='Sum of bonus amounts')
    employee_count = Column(Integer, nullable=False, default=0)
    eligible_count = Column(Integer, nullable=False, default=0)

    # Lifecycle
    status = Column(String(20), nullable=False, default='pending', index=True)
    requested_at = Column(DateTime)
    requested_by = Column(Integer)
    approved_at = Column(DateTime)
    approved_by = Column(Integer)
    rejected_at = Column(DateTime)
    rejected_by = Column(Integer)
    rejection_reason = Column(Text)

    # Metadata
    last_synced_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    branch = relationship("Branch")
    details = relationship(
        "BonusDetail",
        back_populates="weekly_bonus",
        cascade="all, delete-orphan",
        order_by="BonusDetail.employee_id",
    )


class BonusDetail(Base):
    """
    Per-employee bonus line of a weekly bonus record.
    """
    __tablename__ = "bonus_details"
    __table_args__ = (
        UniqueConstraint("weekly_bonus_id", "employee_id", name="uq_bonus_detail_employee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    weekly_bonus_id = Column(Integer, ForeignKey("weekly_bonuses.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    weekly_revenue = Column(DECIMAL(12, 2), nullable=False, default=0)
    bonus_tier = Column(String(20), nullable=False, default='none')
    bonus_amount = Column(DECIMAL(12, 2), nullable=False, default=0)
    is_eligible = Column(Boolean, nullable=False, default=False)

    # Relationships
    weekly_bonus = relationship("WeeklyBonus", back_populates="details")
    employee = relationship("Employee")


class BonusAuditLog(Base):
    """
    Append-only audit trail of weekly bonus transitions.
    Rows are never updated or deleted.
    """
    __tablename__ = "bonus_audit_log"
    __table_args__ = (
        Index("ix_bonus_audit_bonus_time", "weekly_bonus_id", "performed_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    weekly_bonus_id = Column(Integer, nullable=False)
    action = Column(String(30), nullable=False)
    performed_by = Column(Integer, comment='Actor user id, NULL for the scheduled sweep')
    details = Column(JSON)
    performed_at = Column(DateTime, nullable=False, default=func.now())


class EmployeeRequest(Base):
    """
    Employee requests (advance, leave, permission, ...).
    The payload column holds the validated, type-specific fields.
    """
    __tablename__ = "employee_requests"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    request_type = Column(String(30), nullable=False)
    payload = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    admin_response = Column(Text)
    responded_by = Column(Integer)
    responded_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    branch = relationship("Branch")
    employee = relationship("Employee")
