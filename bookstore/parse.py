"""Parse and normalize bookstore API responses."""
import logging
from typing import Dict, Any, List, Optional

from bookstore.errors import ApiError
from bookstore.models import (
    Book,
    BookPage,
    Customer,
    Order,
    OrderItem,
    OrderRequest,
    Pageable,
    SortInfo,
)

logger = logging.getLogger(__name__)


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book from the books endpoint.

    Args:
        item: Book JSON object

    Returns:
        Book object or None if parsing fails
    """
    try:
        return Book(
            id=item.get("id"),
            title=item.get("title") or "",
            author=item.get("author") or "",
            price=item.get("price"),
            stock=item.get("stock")
        )
    except AttributeError as e:
        logger.warning(f"Failed to parse book: {e}")
        return None


def parse_books(items: List[Dict[str, Any]]) -> List[Book]:
    """Parse a list of books, skipping malformed entries."""
    books = []

    for item in items or []:
        book = parse_book(item)
        if book:
            books.append(book)

    return books


def parse_sort(data: Optional[Dict[str, Any]]) -> SortInfo:
    data = data or {}
    return SortInfo(
        empty=data.get("empty", True),
        sorted=data.get("sorted", False),
        unsorted=data.get("unsorted", True)
    )


def parse_pageable(data: Optional[Dict[str, Any]]) -> Pageable:
    data = data or {}
    return Pageable(
        offset=data.get("offset", 0),
        page_number=data.get("pageNumber", 0),
        page_size=data.get("pageSize", 0),
        paged=data.get("paged", True),
        unpaged=data.get("unpaged", False),
        sort=parse_sort(data.get("sort"))
    )


def parse_book_page(response_json: Dict[str, Any]) -> BookPage:
    """
    Parse the paginated envelope of GET /api/books.

    Args:
        response_json: Complete API response JSON

    Returns:
        BookPage (empty content if no books found)

    Raises:
        ApiError: when the body is not a JSON object
    """
    if not isinstance(response_json, dict):
        raise ApiError("Malformed book page in response", 500)

    content = parse_books(response_json.get("content") or [])

    return BookPage(
        content=content,
        total_pages=response_json.get("totalPages") or 0,
        total_elements=response_json.get("totalElements") or 0,
        number=response_json.get("number") or 0,
        size=response_json.get("size", len(content)),
        number_of_elements=response_json.get("numberOfElements", len(content)),
        pageable=parse_pageable(response_json.get("pageable")),
        sort=parse_sort(response_json.get("sort")),
        first=response_json.get("first", True),
        last=response_json.get("last", True),
        empty=response_json.get("empty", not content)
    )


def parse_customer(item: Dict[str, Any]) -> Optional[Customer]:
    """Parse a single customer, or None if the item is not an object."""
    try:
        return Customer(
            id=item.get("id"),
            name=item.get("name") or "",
            email=item.get("email")
        )
    except AttributeError as e:
        logger.warning(f"Failed to parse customer: {e}")
        return None


def parse_customers(items: List[Dict[str, Any]]) -> List[Customer]:
    """Parse the plain customer array, skipping malformed entries."""
    customers = []

    for item in items or []:
        customer = parse_customer(item)
        if customer:
            customers.append(customer)

    return customers


def parse_order(response_json: Dict[str, Any]) -> Order:
    """Parse the order returned by POST /api/orders."""
    items = tuple(
        OrderItem(
            book_id=item["bookId"],
            title=item.get("title") or "",
            quantity=item["quantity"],
            price_at_purchase=item.get("priceAtPurchase", 0)
        )
        for item in response_json.get("items") or []
    )

    return Order(
        order_id=response_json["orderId"],
        order_date=response_json.get("orderDate", ""),
        customer_id=response_json["customerId"],
        customer_name=response_json.get("customerName") or "",
        items=items,
        total_amount=response_json.get("totalAmount", 0)
    )


def book_payload(book: Book) -> Dict[str, Any]:
    """Request body for creating or updating a book. The id never goes in the body."""
    payload = {"title": book.title, "author": book.author}

    if book.price is not None:
        payload["price"] = book.price
    if book.stock is not None:
        payload["stock"] = book.stock

    return payload


def customer_payload(customer: Customer) -> Dict[str, Any]:
    payload = {"name": customer.name}

    if customer.email:
        payload["email"] = customer.email

    return payload


def order_request_payload(request: OrderRequest) -> Dict[str, Any]:
    return {
        "customerId": request.customer_id,
        "items": [
            {"bookId": item.book_id, "quantity": item.quantity}
            for item in request.items
        ]
    }
