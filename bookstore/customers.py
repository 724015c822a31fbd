"""Customers collection state machine."""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from bookstore.errors import ApiError
from bookstore.models import Customer
from bookstore.services import CustomersService
from bookstore.store import SetFormErrors, SetLoading, Store, reduce_status
from bookstore.validation import validate_customer_form

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomersState:
    customers: Tuple[Customer, ...] = ()
    selected_customer: Optional[Customer] = None
    is_loading: bool = False
    error: Optional[ApiError] = None
    form_errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SetCustomers:
    customers: Tuple[Customer, ...]


@dataclass(frozen=True)
class AddCustomer:
    customer: Customer


@dataclass(frozen=True)
class UpdateCustomer:
    customer: Customer


@dataclass(frozen=True)
class DeleteCustomer:
    customer_id: int


@dataclass(frozen=True)
class SetSelectedCustomer:
    customer: Optional[Customer]


def customers_reducer(state: CustomersState, action) -> CustomersState:
    status = reduce_status(state, action)
    if status is not None:
        return status

    if isinstance(action, SetCustomers):
        return replace(
            state,
            customers=tuple(action.customers),
            is_loading=False,
            error=None
        )

    if isinstance(action, AddCustomer):
        return replace(state, customers=(action.customer,) + state.customers)

    if isinstance(action, UpdateCustomer):
        return replace(
            state,
            customers=tuple(
                action.customer if customer.id == action.customer.id else customer
                for customer in state.customers
            ),
            selected_customer=action.customer
        )

    if isinstance(action, DeleteCustomer):
        selected = state.selected_customer
        if selected is not None and selected.id == action.customer_id:
            selected = None
        return replace(
            state,
            customers=tuple(
                customer for customer in state.customers
                if customer.id != action.customer_id
            ),
            selected_customer=selected
        )

    if isinstance(action, SetSelectedCustomer):
        return replace(state, selected_customer=action.customer)

    return state


def filter_customers(customers, query: str) -> List[Customer]:
    """Case-insensitive match on name or email."""
    query = query.lower()
    return [
        customer for customer in customers
        if query in customer.name.lower()
        or (customer.email and query in customer.email.lower())
    ]


def with_email_count(customers) -> int:
    return sum(1 for customer in customers if customer.email)


class CustomersStore(Store):
    """Local mirror of /api/customers."""

    def __init__(self, service: CustomersService):
        super().__init__(customers_reducer, CustomersState())
        self.service = service

    def load(self) -> bool:
        self.dispatch(SetLoading(True))
        try:
            customers = self.service.get_all()
        except ApiError as e:
            self.fail("Load customers", e)
            return False

        self.dispatch(SetCustomers(tuple(customers)))
        return True

    def load_one(self, customer_id: int) -> bool:
        self.dispatch(SetLoading(True))
        try:
            customer = self.service.get_by_id(customer_id)
        except ApiError as e:
            self.fail(f"Load customer {customer_id}", e)
            return False

        self.dispatch(SetSelectedCustomer(customer))
        self.dispatch(SetLoading(False))
        return True

    def _validate(self, customer: Customer) -> bool:
        errors = validate_customer_form(customer.name, customer.email)
        self.dispatch(SetFormErrors(errors))
        if errors:
            logger.info(f"Customer form rejected: {', '.join(sorted(errors))}")
        return not errors

    def create(self, customer: Customer) -> bool:
        if not self._validate(customer):
            return False

        self.dispatch(SetLoading(True))
        try:
            created = self.service.create(customer)
        except ApiError as e:
            self.fail("Create customer", e)
            return False

        self.dispatch(AddCustomer(created))
        self.dispatch(SetLoading(False))
        return True

    def update(self, customer_id: int, customer: Customer) -> bool:
        if not self._validate(customer):
            return False

        self.dispatch(SetLoading(True))
        try:
            updated = self.service.update(customer_id, customer)
        except ApiError as e:
            self.fail(f"Update customer {customer_id}", e)
            return False

        self.dispatch(UpdateCustomer(updated))
        self.dispatch(SetLoading(False))
        return True

    def delete(self, customer_id: int) -> bool:
        self.dispatch(SetLoading(True))
        try:
            self.service.delete(customer_id)
        except ApiError as e:
            self.fail(f"Delete customer {customer_id}", e)
            return False

        self.dispatch(DeleteCustomer(customer_id))
        self.dispatch(SetLoading(False))
        return True

    def set_selected(self, customer: Optional[Customer]):
        self.dispatch(SetSelectedCustomer(customer))

    def search(self, query: str) -> List[Customer]:
        return filter_customers(self.state.customers, query)
