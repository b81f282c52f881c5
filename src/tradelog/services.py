#!/usr/bin/env python3
"""
Persistence service layer for tradelog.

The gateway writes through a caller-owned session: its methods flush but
never commit, so that a whole import batch can be committed (or rolled
back) in one atomic scope.
"""

import datetime
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Customer, Order
from .validators import parse_amount

logger = logging.getLogger("tradelog")

T = TypeVar("T")


class ServiceError(Exception):
    """Base exception for service layer errors"""

    pass


class DuplicateError(ServiceError):
    """Raised when attempting to create a duplicate entity"""

    pass


class NotFoundError(ServiceError):
    """Raised when an entity is not found"""

    pass


class ImportFileError(ServiceError):
    """Raised when an uploaded spreadsheet cannot be read"""

    pass


class BatchPersistenceError(ServiceError):
    """Raised when an atomic batch write fails as a whole"""

    pass


def _to_date(value: Optional[str]) -> Optional[datetime.date]:
    if not value:
        return None
    return datetime.date.fromisoformat(value)


class OrderGateway:
    """Customer and order persistence bound to one session"""

    def __init__(self, session: Session):
        self.session = session

    # -- customers ------------------------------------------------------------

    def customer_exists(self, company_name: str) -> bool:
        """Check whether a customer with this company name exists"""
        stmt = select(func.count()).select_from(Customer).where(
            Customer.company_name == company_name
        )
        return self.session.execute(stmt).scalar_one() > 0

    def get_customer(self, company_name: str) -> Optional[Customer]:
        """Get a customer by company name"""
        return Customer.by_name(self.session, company_name)

    def create_customer(self, company_name: str, opportunity: str = "") -> Customer:
        """
        Create a customer.

        Args:
            company_name: Natural key of the customer
            opportunity: Business opportunity notes

        Returns:
            Created Customer instance

        Raises:
            DuplicateError: If the company name is already taken
        """
        if self.customer_exists(company_name):
            raise DuplicateError(f"Customer '{company_name}' already exists")
        customer = Customer(
            company_name=company_name, business_opportunity=opportunity or None
        )
        self.session.add(customer)
        try:
            self.session.flush()
        except IntegrityError as e:
            # rollback belongs to the enclosing scope
            raise DuplicateError(f"Customer '{company_name}' already exists") from e
        logger.debug(f"Created customer: {company_name}")
        return customer

    def update_customer_opportunity(self, company_name: str, text: str) -> Customer:
        """
        Replace a customer's business opportunity notes.

        Raises:
            NotFoundError: If the customer does not exist
        """
        customer = self.get_customer(company_name)
        if customer is None:
            raise NotFoundError(f"Customer '{company_name}' not found")
        customer.business_opportunity = text or None
        self.session.flush()
        return customer

    # -- orders ---------------------------------------------------------------

    def insert_order(self, candidate) -> int:
        """
        Insert an order built from a validated candidate.

        Args:
            candidate: OrderCandidate that passed validation

        Returns:
            ID of the new order

        Raises:
            ServiceError: If the database rejects the row
        """
        order = Order(
            order_date=_to_date(candidate.order_date),
            company_name=candidate.company_name,
            contact_info=[c.model_dump() for c in candidate.contact_info],
            lead_number=candidate.lead_number,
            closed_product=candidate.closed_product,
            new_or_old=candidate.new_or_old,
            country=candidate.country,
            continent=candidate.continent,
            source=candidate.source,
            customer_nature=candidate.customer_nature,
            customer_background_check=candidate.customer_background_check,
            purchase_order_number=candidate.purchase_order_number,
            payment_date=_to_date(candidate.payment_date),
            invoice_amount=parse_amount(candidate.invoice_amount),
            payment_amount=parse_amount(candidate.payment_amount),
        )
        self.session.add(order)
        try:
            self.session.flush()
        except SQLAlchemyError as e:
            raise ServiceError(f"Failed to insert order '{candidate.lead_number}': {e}") from e
        return order.id

    def list_orders(self) -> List[Order]:
        """Get every order, most recent record date first"""
        stmt = select(Order).order_by(Order.order_date.desc(), Order.id.desc())
        return list(self.session.execute(stmt).scalars().all())

    # -- transaction scopes ---------------------------------------------------

    def run_atomically(self, work: Callable[[], T]) -> T:
        """
        Run work inside one transaction: commit on success, roll back on error.

        Raises:
            BatchPersistenceError: If the database fails the transaction
        """
        try:
            result = work()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Atomic write rolled back: {e}")
            raise BatchPersistenceError(f"Batch write failed: {e}") from e
        except Exception:
            self.session.rollback()
            raise
        return result

    @contextmanager
    def row_scope(self) -> Iterator[None]:
        """Savepoint for one row; a failure undoes only that row's writes"""
        with self.session.begin_nested():
            yield
