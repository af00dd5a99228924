from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Company(Base):
    """Tenant account - every other row is scoped by company_id"""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(100), nullable=True)
    color = Column(String(7), nullable=True)  # Hex color for resource views (e.g., #3B82F6)
    status = Column(String(50), default="active", nullable=False)  # active, inactive
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class CleaningPlan(Base):
    """Checklist plan whose tasks are cloned onto jobs"""

    __tablename__ = "cleaning_plans"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    tasks = relationship("PlanTask", back_populates="plan", order_by="PlanTask.order")


class PlanTask(Base):
    __tablename__ = "plan_tasks"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("cleaning_plans.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, default=0)

    plan = relationship("CleaningPlan", back_populates="tasks")


class Job(Base):
    """
    A recurrence template (recurrence != "none", parent_job_id is NULL) or a
    generated occurrence (recurrence == "none", parent_job_id set). One-off
    jobs look like templates without a recurrence rule.
    """

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Customer & Assignment
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    assigned_to = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)

    # Location
    location = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(50), nullable=True)
    access_instructions = Column(Text, nullable=True)
    parking_instructions = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)

    # Scheduling
    scheduled_for = Column(DateTime, nullable=True, index=True)
    scheduled_end = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, default=60)

    # Recurrence: none, daily, weekly, biweekly, monthly
    recurrence = Column(String(50), default="none", nullable=False)
    recurrence_end_date = Column(DateTime, nullable=True)
    parent_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, index=True)

    # Status workflow: pending → scheduled → in-progress → completed (or cancelled)
    status = Column(String(50), default="scheduled", nullable=False, index=True)
    priority = Column(String(50), default="normal")

    # Employee must confirm the assignment; cleared whenever the assignee changes
    employee_accepted = Column(SmallInteger, default=0, nullable=False)
    employee_accepted_at = Column(DateTime, nullable=True)

    # Pricing
    estimated_price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(10), default="GBP")

    internal_notes = Column(Text, nullable=True)
    plan_id = Column(Integer, ForeignKey("cleaning_plans.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
    assignee = relationship("Employee")
    parent = relationship("Job", remote_side=[id], back_populates="occurrences")
    occurrences = relationship("Job", back_populates="parent")
    tasks = relationship("JobTask", back_populates="job", order_by="JobTask.order")


class JobTask(Base):
    """Checklist item cloned from a plan task"""

    __tablename__ = "job_tasks"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(50), default="pending", nullable=False)
    order = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())

    job = relationship("Job", back_populates="tasks")


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # vacation, sick, personal, unpaid, other
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(50), default="pending", nullable=False)  # pending, approved, denied, cancelled
    created_at = Column(DateTime, server_default=func.now())

    employee = relationship("Employee")


class ShiftSwapRequest(Base):
    __tablename__ = "shift_swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    from_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    to_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    from_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    to_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    requested_by_role = Column(String(20), default="company", nullable=False)  # company, employee
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, approved, rejected
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    from_employee = relationship("Employee", foreign_keys=[from_employee_id])
    to_employee = relationship("Employee", foreign_keys=[to_employee_id])
    from_job = relationship("Job", foreign_keys=[from_job_id])
    to_job = relationship("Job", foreign_keys=[to_job_id])


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    invoice_number = Column(String(100), nullable=False)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(10), default="GBP", nullable=False)
    status = Column(String(50), default="draft", nullable=False, index=True)  # draft, sent, paid, overdue, cancelled
    issued_at = Column(DateTime, nullable=True)
    due_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer")
    company = relationship("Company")


class EventLog(Base):
    """Append-only audit trail"""

    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    event_type = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=True)  # job, shift_swap, invoice
    entity_id = Column(String(50), nullable=True)  # id, or "multiple" for batch events
    user_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    event_metadata = Column("metadata", Text, nullable=True)  # JSON string
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (Index("event_logs_entity_idx", "entity_type", "entity_id"),)
