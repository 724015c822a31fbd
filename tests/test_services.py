"""Tests for the resource services' request shapes."""
import pytest

from bookstore.errors import ApiError
from bookstore.models import Book, Customer, OrderRequest, OrderRequestItem, PaginationParams
from bookstore.services import BooksService, CustomersService, OrdersService


class RecordingClient:
    """Returns canned responses keyed by (method, path) and records calls."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def _respond(self, method, path, payload=None):
        self.calls.append((method, path, payload))
        return self.responses.get((method, path))

    def get(self, path, params=None):
        return self._respond("GET", path, params)

    def post(self, path, data=None):
        return self._respond("POST", path, data)

    def put(self, path, data=None):
        return self._respond("PUT", path, data)

    def delete(self, path):
        return self._respond("DELETE", path)


def test_books_list_sends_pagination():
    client = RecordingClient({("GET", "/api/books"): {
        "content": [{"id": 1, "title": "A", "author": "X"}],
        "totalPages": 1, "totalElements": 1, "number": 0, "size": 10
    }})
    
    page = BooksService(client).get_all(PaginationParams(page=0, size=10))
    
    assert client.calls == [("GET", "/api/books", {"page": 0, "size": 10})]
    assert page.content[0].title == "A"


def test_books_crud_paths():
    book = {"id": 3, "title": "A", "author": "X", "price": 5.0}
    client = RecordingClient({
        ("GET", "/api/books/3"): book,
        ("POST", "/api/books"): book,
        ("PUT", "/api/books/3"): book,
    })
    service = BooksService(client)
    
    assert service.get_by_id(3).id == 3
    assert service.create(Book(title="A", author="X", price=5.0)).id == 3
    assert service.update(3, Book(title="A", author="X", price=5.0)).price == 5.0
    service.delete(3)
    
    assert [(m, p) for m, p, _ in client.calls] == [
        ("GET", "/api/books/3"),
        ("POST", "/api/books"),
        ("PUT", "/api/books/3"),
        ("DELETE", "/api/books/3"),
    ]
    assert client.calls[1][2] == {"title": "A", "author": "X", "price": 5.0}


def test_customers_list_is_plain_array():
    client = RecordingClient({("GET", "/api/customers"): [{"id": 1, "name": "X"}]})
    
    customers = CustomersService(client).get_all()
    
    assert customers == [Customer(id=1, name="X")]


def test_customer_writes():
    client = RecordingClient({
        ("POST", "/api/customers"): {"id": 2, "name": "Y", "email": "y@e.io"},
        ("PUT", "/api/customers/2"): {"id": 2, "name": "Z"},
    })
    service = CustomersService(client)
    
    assert service.create(Customer(name="Y", email="y@e.io")).id == 2
    assert service.update(2, Customer(name="Z")).name == "Z"
    service.delete(2)
    
    assert client.calls[-1] == ("DELETE", "/api/customers/2", None)


def test_malformed_entity_raises():
    with pytest.raises(ApiError):
        BooksService(RecordingClient()).get_by_id(1)


def test_place_order():
    client = RecordingClient({("POST", "/api/orders"): {
        "orderId": 5, "orderDate": "2024-05-01", "customerId": 7, "customerName": "X",
        "items": [{"bookId": 1, "title": "A", "quantity": 2, "priceAtPurchase": 10}],
        "totalAmount": 20
    }})
    request = OrderRequest(customer_id=7, items=(OrderRequestItem(book_id=1, quantity=2),))
    
    order = OrdersService(client).place_order(request)
    
    assert client.calls[0][2] == {"customerId": 7, "items": [{"bookId": 1, "quantity": 2}]}
    assert order.total_amount == 20


def test_customers_list_must_be_array():
    client = RecordingClient({("GET", "/api/customers"): {"content": []}})
    
    with pytest.raises(ApiError):
        CustomersService(client).get_all()


def test_malformed_order_raises_api_error():
    client = RecordingClient({("POST", "/api/orders"): {"orderId": 1, "customerId": 7, "items": [None]}})
    request = OrderRequest(customer_id=7, items=(OrderRequestItem(book_id=1, quantity=1),))
    
    with pytest.raises(ApiError) as exc:
        OrdersService(client).place_order(request)
    
    assert exc.value.status == 500
