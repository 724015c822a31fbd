"""Tests for the books collection state machine."""
from bookstore.books import BooksState, BooksStore, DeleteBook, books_reducer, filter_books
from bookstore.client import ApiClient
from bookstore.errors import ApiError
from bookstore.models import Book, PaginationParams
from bookstore.services import BooksService
from tests.fakes import FakeBooksService, FakeResponse, FakeSession


def sample_books(n):
    return [Book(id=i, title=f"Book {i}", author="Author", price=1.0, stock=i % 2) for i in range(1, n + 1)]


def loaded_store(n=3):
    service = FakeBooksService(sample_books(n))
    store = BooksStore(service)
    store.load()
    return service, store


def test_load_replaces_list_and_page_metadata():
    service = FakeBooksService(sample_books(25), total_pages=3)
    store = BooksStore(service)
    
    assert store.load(PaginationParams(page=0, size=10))
    
    state = store.state
    assert state.total_pages == 3
    assert state.total_elements == 25
    assert len(state.books) <= 10
    assert state.current_page == 0
    assert not state.is_loading
    assert state.error is None


def test_load_defaults_to_current_page_and_size():
    service = FakeBooksService(sample_books(3))
    store = BooksStore(service, page_size=20)
    store.set_page(2)
    
    store.load()
    
    params = service.calls[0][1]
    assert (params.page, params.size) == (2, 20)


def test_load_failure_keeps_previous_list():
    service, store = loaded_store()
    service.error = ApiError("down", 503)
    
    assert not store.load()
    
    assert len(store.state.books) == 3
    assert store.state.error.message == "down"
    assert not store.state.is_loading


def test_load_one_selects_without_touching_list():
    _, store = loaded_store()
    before = store.state.books
    
    assert store.load_one(2)
    
    assert store.state.selected_book.id == 2
    assert store.state.books == before


def test_loading_flag_during_call():
    service, store = loaded_store()
    seen = []
    store.subscribe(lambda state: seen.append(state.is_loading))
    
    store.delete(1)
    
    assert seen[0] is True
    assert store.state.is_loading is False


def test_create_prepends_server_copy():
    service, store = loaded_store()
    
    assert store.create(Book(title="New", author="Someone", price=3.5))
    
    first = store.state.books[0]
    assert first.id == 101
    assert first.title == "New"
    assert store.state.total_elements == 4
    assert len(service.calls) == 2


def test_create_invalid_never_calls_service():
    service, store = loaded_store()
    
    assert not store.create(Book(title="", author="", price=-1))
    
    assert set(store.state.form_errors) == {"title", "author", "price"}
    assert [call[0] for call in service.calls] == ["get_all"]


def test_create_failure_leaves_list_unchanged():
    service, store = loaded_store()
    before = store.state.books
    service.error = ApiError("nope", 400)
    
    assert not store.create(Book(title="X", author="Y"))
    
    assert store.state.books == before
    assert store.state.total_elements == 3
    assert store.state.error.status == 400


def test_update_replaces_and_selects():
    _, store = loaded_store()
    
    assert store.update(2, Book(title="Renamed", author="Author"))
    
    assert store.state.books[1].title == "Renamed"
    assert store.state.selected_book.title == "Renamed"


def test_delete_removes_and_clears_selection():
    _, store = loaded_store()
    store.load_one(2)
    
    assert store.delete(2)
    
    assert [book.id for book in store.state.books] == [1, 3]
    assert store.state.total_elements == 2
    assert store.state.selected_book is None


def test_delete_other_keeps_selection():
    state = BooksState(books=tuple(sample_books(3)), selected_book=sample_books(3)[0], total_elements=3)
    
    state = books_reducer(state, DeleteBook(3))
    
    assert state.selected_book.id == 1


def test_search_matches_title_or_author():
    books = [Book(id=1, title="Dune", author="Herbert"), Book(id=2, title="Emma", author="Austen")]
    
    assert [b.id for b in filter_books(books, "dUNE")] == [1]
    assert [b.id for b in filter_books(books, "austen")] == [2]
    assert filter_books(books, "zzz") == []


def test_load_with_non_object_body_records_error():
    """A 2xx body that is not a page envelope fails the load as data."""
    session = FakeSession(FakeResponse(200, [{"id": 1}]))
    store = BooksStore(BooksService(ApiClient("http://api.test", session=session)))
    
    assert not store.load()
    
    assert store.state.error.status == 500
    assert store.state.books == ()
    assert not store.state.is_loading


def test_search_tolerates_null_fields():
    session = FakeSession(FakeResponse(200, {
        "content": [{"id": 1, "title": None, "author": "X"}],
        "totalPages": 1, "totalElements": 1, "number": 0, "size": 10
    }))
    store = BooksStore(BooksService(ApiClient("http://api.test", session=session)))
    store.load()
    
    assert [book.id for book in store.search("x")] == [1]
