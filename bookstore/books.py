"""Books collection state machine."""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from bookstore.errors import ApiError
from bookstore.models import Book, BookPage, PaginationParams
from bookstore.services import BooksService
from bookstore.store import SetFormErrors, SetLoading, Store, reduce_status
from bookstore.validation import validate_book_form

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BooksState:
    books: Tuple[Book, ...] = ()
    total_pages: int = 0
    total_elements: int = 0
    current_page: int = 0
    page_size: int = 10
    selected_book: Optional[Book] = None
    is_loading: bool = False
    error: Optional[ApiError] = None
    form_errors: Dict[str, str] = field(default_factory=dict)


# Actions

@dataclass(frozen=True)
class SetBooks:
    page: BookPage


@dataclass(frozen=True)
class AddBook:
    book: Book


@dataclass(frozen=True)
class UpdateBook:
    book: Book


@dataclass(frozen=True)
class DeleteBook:
    book_id: int


@dataclass(frozen=True)
class SetSelectedBook:
    book: Optional[Book]


@dataclass(frozen=True)
class SetPage:
    page: int


def books_reducer(state: BooksState, action) -> BooksState:
    status = reduce_status(state, action)
    if status is not None:
        return status

    if isinstance(action, SetBooks):
        page = action.page
        return replace(
            state,
            books=tuple(page.content),
            total_pages=page.total_pages,
            total_elements=page.total_elements,
            current_page=page.number,
            page_size=page.size,
            is_loading=False,
            error=None
        )

    if isinstance(action, AddBook):
        return replace(
            state,
            books=(action.book,) + state.books,
            total_elements=state.total_elements + 1
        )

    if isinstance(action, UpdateBook):
        return replace(
            state,
            books=tuple(
                action.book if book.id == action.book.id else book
                for book in state.books
            ),
            selected_book=action.book
        )

    if isinstance(action, DeleteBook):
        selected = state.selected_book
        if selected is not None and selected.id == action.book_id:
            selected = None
        return replace(
            state,
            books=tuple(book for book in state.books if book.id != action.book_id),
            total_elements=state.total_elements - 1,
            selected_book=selected
        )

    if isinstance(action, SetSelectedBook):
        return replace(state, selected_book=action.book)

    if isinstance(action, SetPage):
        return replace(state, current_page=action.page)

    return state


def filter_books(books, query: str) -> List[Book]:
    """Case-insensitive match on title or author."""
    query = query.lower()
    return [
        book for book in books
        if query in book.title.lower() or query in book.author.lower()
    ]


def in_stock_count(books) -> int:
    return sum(1 for book in books if book.in_stock)


class BooksStore(Store):
    """Local mirror of /api/books, merged optimistically after each write."""

    def __init__(self, service: BooksService, page_size: int = 10):
        super().__init__(books_reducer, BooksState(page_size=page_size))
        self.service = service

    def load(self, params: Optional[PaginationParams] = None) -> bool:
        """Fetch a page; page and size default to the current ones."""
        params = params or PaginationParams()
        query = PaginationParams(
            page=self.state.current_page if params.page is None else params.page,
            size=self.state.page_size if params.size is None else params.size
        )

        self.dispatch(SetLoading(True))
        try:
            page = self.service.get_all(query)
        except ApiError as e:
            self.fail("Load books", e)
            return False

        self.dispatch(SetBooks(page))
        return True

    def load_one(self, book_id: int) -> bool:
        self.dispatch(SetLoading(True))
        try:
            book = self.service.get_by_id(book_id)
        except ApiError as e:
            self.fail(f"Load book {book_id}", e)
            return False

        self.dispatch(SetSelectedBook(book))
        self.dispatch(SetLoading(False))
        return True

    def _validate(self, book: Book) -> bool:
        errors = validate_book_form(book.title, book.author, book.price, book.stock)
        self.dispatch(SetFormErrors(errors))
        if errors:
            logger.info(f"Book form rejected: {', '.join(sorted(errors))}")
        return not errors

    def create(self, book: Book) -> bool:
        """Validate, submit, and prepend the server's copy (with its id)."""
        if not self._validate(book):
            return False

        self.dispatch(SetLoading(True))
        try:
            created = self.service.create(book)
        except ApiError as e:
            self.fail("Create book", e)
            return False

        self.dispatch(AddBook(created))
        self.dispatch(SetLoading(False))
        return True

    def update(self, book_id: int, book: Book) -> bool:
        if not self._validate(book):
            return False

        self.dispatch(SetLoading(True))
        try:
            updated = self.service.update(book_id, book)
        except ApiError as e:
            self.fail(f"Update book {book_id}", e)
            return False

        self.dispatch(UpdateBook(updated))
        self.dispatch(SetLoading(False))
        return True

    def delete(self, book_id: int) -> bool:
        self.dispatch(SetLoading(True))
        try:
            self.service.delete(book_id)
        except ApiError as e:
            self.fail(f"Delete book {book_id}", e)
            return False

        self.dispatch(DeleteBook(book_id))
        self.dispatch(SetLoading(False))
        return True

    def set_selected(self, book: Optional[Book]):
        self.dispatch(SetSelectedBook(book))

    def set_page(self, page: int):
        self.dispatch(SetPage(page))

    def search(self, query: str) -> List[Book]:
        return filter_books(self.state.books, query)
