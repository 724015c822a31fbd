"""Request builders for the books, customers and orders endpoints."""
from typing import List, Optional

from bookstore.client import ApiClient
from bookstore.config import BOOKS_ENDPOINT, CUSTOMERS_ENDPOINT, ORDERS_ENDPOINT
from bookstore.errors import ApiError
from bookstore.models import Book, BookPage, Customer, Order, OrderRequest, PaginationParams
from bookstore.parse import (
    book_payload,
    customer_payload,
    order_request_payload,
    parse_book,
    parse_book_page,
    parse_customer,
    parse_customers,
    parse_order,
)


def _require(entity, what: str):
    if entity is None:
        raise ApiError(f"Malformed {what} in response", 500)
    return entity


class BooksService:
    """CRUD over /api/books. Every call is one round trip."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_all(self, params: Optional[PaginationParams] = None) -> BookPage:
        query = params.to_query() if params else None
        return parse_book_page(self.client.get(BOOKS_ENDPOINT, query) or {})

    def get_by_id(self, book_id: int) -> Book:
        response = self.client.get(f"{BOOKS_ENDPOINT}/{book_id}")
        return _require(parse_book(response), "book")

    def create(self, book: Book) -> Book:
        response = self.client.post(BOOKS_ENDPOINT, book_payload(book))
        return _require(parse_book(response), "book")

    def update(self, book_id: int, book: Book) -> Book:
        response = self.client.put(f"{BOOKS_ENDPOINT}/{book_id}", book_payload(book))
        return _require(parse_book(response), "book")

    def delete(self, book_id: int):
        self.client.delete(f"{BOOKS_ENDPOINT}/{book_id}")


class CustomersService:
    """CRUD over /api/customers. The list endpoint is not paginated."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_all(self) -> List[Customer]:
        response = self.client.get(CUSTOMERS_ENDPOINT)
        if response is not None and not isinstance(response, list):
            raise ApiError("Malformed customer list in response", 500)
        return parse_customers(response)

    def get_by_id(self, customer_id: int) -> Customer:
        response = self.client.get(f"{CUSTOMERS_ENDPOINT}/{customer_id}")
        return _require(parse_customer(response), "customer")

    def create(self, customer: Customer) -> Customer:
        response = self.client.post(CUSTOMERS_ENDPOINT, customer_payload(customer))
        return _require(parse_customer(response), "customer")

    def update(self, customer_id: int, customer: Customer) -> Customer:
        response = self.client.put(
            f"{CUSTOMERS_ENDPOINT}/{customer_id}", customer_payload(customer)
        )
        return _require(parse_customer(response), "customer")

    def delete(self, customer_id: int):
        self.client.delete(f"{CUSTOMERS_ENDPOINT}/{customer_id}")


class OrdersService:
    """Checkout against /api/orders."""

    def __init__(self, client: ApiClient):
        self.client = client

    def place_order(self, request: OrderRequest) -> Order:
        response = self.client.post(ORDERS_ENDPOINT, order_request_payload(request))
        try:
            return parse_order(response or {})
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiError(f"Malformed order in response: {e}", 500)
