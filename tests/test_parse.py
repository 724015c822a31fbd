"""Tests for parsing functions."""
import pytest

from bookstore.errors import ApiError
from bookstore.models import Book, Customer, OrderRequest, OrderRequestItem
from bookstore.parse import (
    book_payload,
    customer_payload,
    order_request_payload,
    parse_book,
    parse_book_page,
    parse_books,
    parse_customers,
    parse_order,
)


def test_parse_book_complete():
    """Test parsing a book with all fields present."""
    item = {
        "id": 1,
        "title": "Python Crash Course",
        "author": "Eric Matthes",
        "price": 39.99,
        "stock": 5
    }
    
    book = parse_book(item)
    
    assert book is not None
    assert book.id == 1
    assert book.title == "Python Crash Course"
    assert book.author == "Eric Matthes"
    assert book.price == 39.99
    assert book.stock == 5
    assert book.in_stock


def test_parse_book_missing_fields():
    """Test parsing a book with missing optional fields."""
    book = parse_book({"id": 2, "title": "Mystery Book", "author": "Anon"})
    
    assert book is not None
    assert book.price is None
    assert book.stock is None
    assert not book.in_stock


def test_parse_books_skips_malformed():
    """Non-object items are dropped."""
    books = parse_books([{"id": 1, "title": "A", "author": "X"}, "garbage", None])
    
    assert [book.id for book in books] == [1]


def test_parse_book_page():
    """Test parsing the paginated envelope."""
    response = {
        "content": [
            {"id": i, "title": f"Book {i}", "author": "A"} for i in range(10)
        ],
        "totalPages": 3,
        "totalElements": 25,
        "number": 0,
        "size": 10,
        "numberOfElements": 10,
        "pageable": {"offset": 0, "pageNumber": 0, "pageSize": 10, "paged": True,
                     "unpaged": False, "sort": {"empty": True, "sorted": False, "unsorted": True}},
        "sort": {"empty": True, "sorted": False, "unsorted": True},
        "first": True,
        "last": False,
        "empty": False
    }
    
    page = parse_book_page(response)
    
    assert page.total_pages == 3
    assert page.total_elements == 25
    assert len(page.content) <= 10
    assert page.pageable.page_size == 10
    assert page.first and not page.last


def test_parse_customers():
    customers = parse_customers([{"id": 1, "name": "X"}, {"id": 2, "name": "Y", "email": "y@e.io"}])
    
    assert customers[0].email is None
    assert customers[1].email == "y@e.io"


def test_parse_order():
    order = parse_order({
        "orderId": 9,
        "orderDate": "2024-05-01T10:00:00",
        "customerId": 7,
        "customerName": "X",
        "items": [{"bookId": 1, "title": "A", "quantity": 2, "priceAtPurchase": 10}],
        "totalAmount": 20
    })
    
    assert order.order_id == 9
    assert order.items[0].price_at_purchase == 10
    assert order.total_amount == 20


def test_null_text_fields_become_empty():
    """Explicit nulls from the server are normalized to empty strings."""
    book = parse_book({"id": 1, "title": None, "author": None})
    customers = parse_customers([{"id": 2, "name": None}])
    
    assert (book.title, book.author) == ("", "")
    assert customers[0].name == ""


def test_parse_book_page_rejects_non_object():
    with pytest.raises(ApiError):
        parse_book_page([{"id": 1}])


def test_payloads_omit_unset_fields():
    """Optional fields and the id never go on the wire when unset."""
    assert book_payload(Book(id=5, title="A", author="B")) == {"title": "A", "author": "B"}
    assert customer_payload(Customer(name="X")) == {"name": "X"}
    assert order_request_payload(
        OrderRequest(customer_id=7, items=(OrderRequestItem(book_id=1, quantity=2),))
    ) == {"customerId": 7, "items": [{"bookId": 1, "quantity": 2}]}


if __name__ == "__main__":
    # Run tests
    test_parse_book_complete()
    test_parse_book_missing_fields()
    test_parse_books_skips_malformed()
    test_parse_book_page()
    test_parse_customers()
    test_parse_order()
    test_null_text_fields_become_empty()
    test_payloads_omit_unset_fields()
    print("✅ All tests passed!")
