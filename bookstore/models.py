"""Data models for the bookstore API."""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple


@dataclass
class Book:
    """A book as exposed by the books endpoint."""
    title: str
    author: str
    id: Optional[int] = None
    price: Optional[float] = None
    stock: Optional[int] = None

    @property
    def in_stock(self) -> bool:
        """True when at least one copy is available."""
        return (self.stock or 0) > 0


@dataclass
class Customer:
    """A customer as exposed by the customers endpoint."""
    name: str
    id: Optional[int] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class CartLine:
    """One book in the cart plus how many copies."""
    id: Optional[int]
    title: str
    author: str
    quantity: int
    price: Optional[float] = None
    stock: Optional[int] = None

    @classmethod
    def from_book(cls, book: Book, quantity: int = 1) -> "CartLine":
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            quantity=quantity,
            price=book.price,
            stock=book.stock
        )

    @property
    def subtotal(self) -> float:
        return (self.price or 0) * self.quantity


def calculate_totals(items: Tuple[CartLine, ...]) -> Tuple[int, float]:
    """Return (total_items, total_amount) for a sequence of cart lines."""
    total_items = sum(item.quantity for item in items)
    total_amount = sum(item.subtotal for item in items)
    return total_items, total_amount


@dataclass(frozen=True)
class Cart:
    """
    Ordered cart lines with derived totals.

    Build carts through ``Cart.of`` so the totals always match the lines.
    """
    items: Tuple[CartLine, ...] = ()
    total_items: int = 0
    total_amount: float = 0

    @classmethod
    def of(cls, items) -> "Cart":
        items = tuple(items)
        total_items, total_amount = calculate_totals(items)
        return cls(items=items, total_items=total_items, total_amount=total_amount)

    def find(self, book_id: Optional[int]) -> Optional[CartLine]:
        for item in self.items:
            if item.id == book_id:
                return item
        return None

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class OrderRequestItem:
    book_id: int
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    """Body of POST /api/orders."""
    customer_id: int
    items: Tuple[OrderRequestItem, ...]


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a purchased line, priced at purchase time."""
    book_id: int
    title: str
    quantity: int
    price_at_purchase: float


@dataclass(frozen=True)
class Order:
    """Server-generated order returned by checkout."""
    order_id: int
    order_date: str
    customer_id: int
    customer_name: str
    items: Tuple[OrderItem, ...]
    total_amount: float


@dataclass
class SortInfo:
    empty: bool = True
    sorted: bool = False
    unsorted: bool = True


@dataclass
class Pageable:
    offset: int = 0
    page_number: int = 0
    page_size: int = 0
    paged: bool = True
    unpaged: bool = False
    sort: SortInfo = field(default_factory=SortInfo)


@dataclass
class BookPage:
    """Paginated envelope returned by GET /api/books."""
    content: List[Book]
    total_pages: int
    total_elements: int
    number: int
    size: int
    number_of_elements: int = 0
    pageable: Pageable = field(default_factory=Pageable)
    sort: SortInfo = field(default_factory=SortInfo)
    first: bool = True
    last: bool = True
    empty: bool = True


@dataclass
class PaginationParams:
    page: Optional[int] = None
    size: Optional[int] = None

    def to_query(self) -> dict:
        """Query parameters with unset values dropped."""
        params = {}
        if self.page is not None:
            params["page"] = self.page
        if self.size is not None:
            params["size"] = self.size
        return params
