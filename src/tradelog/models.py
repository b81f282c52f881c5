#!/usr/bin/env python3
"""models.py: models a trade-order ledger (customers and their orders)"""

import datetime
from typing import List

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy import select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


# new/old customer flag values
CUSTOMER_NEW = "New"
CUSTOMER_EXISTING = "Existing"
CUSTOMER_FLAGS = [CUSTOMER_NEW, CUSTOMER_EXISTING]


class Customer(Base):
    """Buying company, keyed by its name"""

    __tablename__ = "customer"

    company_name: Mapped[str] = mapped_column(String, primary_key=True)
    business_opportunity: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )
    orders: Mapped[List["Order"]] = relationship(
        "Order", back_populates="customer", cascade="all, delete-orphan"
    )

    @classmethod
    def by_name(cls, session, company_name):
        """query table by company name"""
        stmt = select(cls).where(cls.company_name == company_name)
        return session.execute(stmt).scalar_one_or_none()

    def __repr__(self):
        return f"<Customer(company_name='{self.company_name}')>"


class Order(Base):
    """Closed trade order filed against a customer"""

    __tablename__ = "orders"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_date: Mapped[datetime.date] = mapped_column(Date, index=True)
    company_name: Mapped[str] = mapped_column(
        ForeignKey("customer.company_name", ondelete="CASCADE"), index=True
    )
    customer: Mapped["Customer"] = relationship("Customer", back_populates="orders")
    # list of {"name", "email", "phone"} dicts
    contact_info: Mapped[list] = mapped_column(JSON, default=list)
    lead_number: Mapped[str] = mapped_column(String)
    closed_product: Mapped[str] = mapped_column(String, index=True)

    new_or_old: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_level: Mapped[str | None] = mapped_column(String, nullable=True)
    country: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    continent: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    source: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_nature: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_background_check: Mapped[str | None] = mapped_column(
        String, nullable=True
    )
    purchase_order_number: Mapped[str | None] = mapped_column(String, nullable=True)

    payment_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    invoice_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    payment_amount: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    @property
    def primary_contact(self) -> dict:
        """First contact on the order, or an empty dict"""
        if self.contact_info:
            return self.contact_info[0]
        return {}

    def __repr__(self):
        return f"<Order(lead_number='{self.lead_number}', company='{self.company_name}')>"
