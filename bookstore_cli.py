#!/usr/bin/env python3
"""Bookstore CLI - storefront and admin front end for the bookstore API."""
import argparse
import asyncio
import csv
import json
import sys
import logging
from dataclasses import asdict
from typing import Dict, List

from tabulate import tabulate

from bookstore.async_client import AsyncApiClient
from bookstore.books import BooksStore, in_stock_count
from bookstore.cart import CartStore
from bookstore.client import ApiClient
from bookstore.config import Config
from bookstore.credentials import CredentialStore
from bookstore.customers import CustomersStore, with_email_count
from bookstore.errors import ApiError
from bookstore.models import Book, Cart, Customer, Order, PaginationParams
from bookstore.services import BooksService, CustomersService, OrdersService
from bookstore.validation import validate_positive_number

logger = logging.getLogger(__name__)


def notify_success(message: str):
    print(f"✅ {message}")


def notify_error(message: str):
    print(f"❌ {message}", file=sys.stderr)


def login_required(login_url: str):
    notify_error(f"Session expired. Log in again ({login_url}): bookstore login --token TOKEN")


def build_client(config: Config) -> ApiClient:
    return ApiClient(
        config.API_BASE_URL,
        timeout=config.timeout_seconds,
        retry_attempts=config.API_RETRY_ATTEMPTS,
        credentials=CredentialStore(config.AUTH_TOKEN_PATH),
        on_unauthorized=login_required,
        login_url=config.LOGIN_URL
    )


def report_failure(store, action: str):
    """Print the store's recorded failure as a notification."""
    state = store.state
    form_errors = getattr(state, "form_errors", None)
    if form_errors:
        for field_name, message in form_errors.items():
            notify_error(f"{field_name}: {message}")
    elif state.error is not None:
        notify_error(f"Failed to {action}: {state.error.message} ({state.error.status})")


def format_price(value) -> str:
    return f"{value:.2f}" if value is not None else "N/A"


def display_books(books: List[Book], format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Price", "Stock"]
        rows = [
            [
                book.id,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                format_price(book.price),
                book.stock if book.stock is not None else "N/A"
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))
        print(f"{len(books)} books, {in_stock_count(books)} in stock")

    elif format_type == "json":
        print(json.dumps([asdict(book) for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


def display_customers(customers: List[Customer], format_type: str):
    if format_type == "table":
        rows = [[c.id, c.name, c.email or ""] for c in customers]
        print("\n" + tabulate(rows, headers=["ID", "Name", "Email"], tablefmt="grid"))
        print(f"{len(customers)} customers, {with_email_count(customers)} with email")

    elif format_type == "json":
        print(json.dumps([asdict(c) for c in customers], indent=2))

    elif format_type == "compact":
        for i, customer in enumerate(customers, 1):
            print(f"{i}. {customer.name} <{customer.email or '-'}>")


def display_cart(cart: Cart):
    rows = [
        [item.id, item.title, item.quantity, format_price(item.price), format_price(item.subtotal)]
        for item in cart.items
    ]
    print("\n" + tabulate(rows, headers=["Book", "Title", "Qty", "Price", "Subtotal"], tablefmt="grid"))
    print(f"{cart.total_items} items, total {cart.total_amount:.2f}")


def display_order(order: Order):
    print(f"\nOrder #{order.order_id} for {order.customer_name} ({order.order_date})")
    rows = [
        [item.book_id, item.title, item.quantity, format_price(item.price_at_purchase)]
        for item in order.items
    ]
    print(tabulate(rows, headers=["Book", "Title", "Qty", "Price"], tablefmt="grid"))
    print(f"Total: {order.total_amount:.2f}")


def parse_quantities(pairs: List[str]) -> Dict[int, int]:
    """Parse BOOK_ID=QUANTITY pairs from the command line."""
    quantities = {}

    for pair in pairs or []:
        book_id, sep, quantity = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected BOOK_ID=QUANTITY, got {pair!r}")
        quantity = int(quantity)
        if not validate_positive_number(quantity):
            raise ValueError(f"Quantity for book {book_id} must be positive")
        quantities[int(book_id)] = quantity

    return quantities


def books_command(args, config: Config):
    """Dispatch the books sub-commands."""
    with build_client(config) as client:
        store = BooksStore(BooksService(client), page_size=config.DEFAULT_PAGE_SIZE)

        if args.action == "list":
            if not store.load(PaginationParams(page=args.page, size=args.size)):
                report_failure(store, "load books")
                return 1
            books = store.search(args.search) if args.search else list(store.state.books)
            display_books(books, args.format)
            state = store.state
            print(f"Page {state.current_page + 1}/{max(state.total_pages, 1)} "
                  f"({state.total_elements} books total)")

        elif args.action == "show":
            if not store.load_one(args.id):
                report_failure(store, "load book")
                return 1
            display_books([store.state.selected_book], args.format)

        elif args.action == "add":
            book = Book(title=args.title, author=args.author, price=args.price, stock=args.stock)
            if not store.create(book):
                report_failure(store, "create book")
                return 1
            notify_success(f"Book created successfully! (id {store.state.books[0].id})")

        elif args.action == "update":
            book = Book(title=args.title, author=args.author, price=args.price, stock=args.stock)
            if not store.update(args.id, book):
                report_failure(store, "update book")
                return 1
            notify_success("Book updated successfully!")

        elif args.action == "delete":
            if not store.delete(args.id):
                report_failure(store, "delete book")
                return 1
            notify_success("Book deleted successfully!")

    return 0


async def fetch_catalog_async(config: Config, page_size: int) -> List[Book]:
    async with AsyncApiClient(
        config.API_BASE_URL,
        timeout=config.timeout_seconds,
        credentials=CredentialStore(config.AUTH_TOKEN_PATH),
        max_concurrent=config.ASYNC_MAX_CONCURRENT,
        on_unauthorized=login_required,
        login_url=config.LOGIN_URL
    ) as client:
        return await client.fetch_all_books(page_size)


def fetch_catalog_sync(config: Config, page_size: int) -> List[Book]:
    """Walk the catalog page by page through the books store."""
    books = []

    with build_client(config) as client:
        store = BooksStore(BooksService(client), page_size=page_size)
        page = 0
        while True:
            if not store.load(PaginationParams(page=page, size=page_size)):
                report_failure(store, f"load page {page}")
                raise SystemExit(1)
            books.extend(store.state.books)
            page += 1
            if page >= store.state.total_pages:
                break

    return books


def export_books(args, config: Config):
    """Export the whole catalog."""
    if args.use_async:
        try:
            books = asyncio.run(fetch_catalog_async(config, args.size))
        except ApiError as e:
            notify_error(f"Failed to export books: {e.message} ({e.status})")
            return 1
    else:
        books = fetch_catalog_sync(config, args.size)

    if args.format == "json":
        data = [asdict(book) for book in books]

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(data, f, indent=2)
            logger.info(f"✅ Exported {len(books)} books to {args.output}")
        else:
            print(json.dumps(data, indent=2))

    elif args.format == "csv":
        output_file = args.output or "books_export.csv"
        with open(output_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(["ID", "Title", "Author", "Price", "Stock"])

            for book in books:
                writer.writerow([
                    book.id,
                    book.title,
                    book.author,
                    book.price if book.price is not None else "",
                    book.stock if book.stock is not None else ""
                ])

        logger.info(f"✅ Exported {len(books)} books to {output_file}")

    return 0


def customers_command(args, config: Config):
    """Dispatch the customers sub-commands."""
    with build_client(config) as client:
        store = CustomersStore(CustomersService(client))

        if args.action == "list":
            if not store.load():
                report_failure(store, "load customers")
                return 1
            customers = store.search(args.search) if args.search else list(store.state.customers)
            display_customers(customers, args.format)

        elif args.action == "show":
            if not store.load_one(args.id):
                report_failure(store, "load customer")
                return 1
            display_customers([store.state.selected_customer], args.format)

        elif args.action == "add":
            if not store.create(Customer(name=args.name, email=args.email)):
                report_failure(store, "create customer")
                return 1
            notify_success(f"Customer created successfully! (id {store.state.customers[0].id})")

        elif args.action == "update":
            if not store.update(args.id, Customer(name=args.name, email=args.email)):
                report_failure(store, "update customer")
                return 1
            notify_success("Customer updated successfully!")

        elif args.action == "delete":
            if not store.delete(args.id):
                report_failure(store, "delete customer")
                return 1
            notify_success("Customer deleted successfully!")

    return 0


def checkout(args, config: Config):
    """Fill an in-process cart from the command line and place the order."""
    try:
        quantities = parse_quantities(args.quantity)
    except ValueError as e:
        notify_error(str(e))
        return 1

    with build_client(config) as client:
        books = BooksStore(BooksService(client))
        cart = CartStore(OrdersService(client))

        for book_id in args.book:
            if not books.load_one(book_id):
                report_failure(books, f"load book {book_id}")
                return 1
            cart.add_to_cart(books.state.selected_book)
            notify_success(f'Added "{books.state.selected_book.title}" to cart!')

        for book_id, quantity in quantities.items():
            cart.update_quantity(book_id, quantity)

        if cart.cart.is_empty:
            notify_error("Your cart is empty")
            return 1

        display_cart(cart.cart)

        order = cart.place_order(args.customer)
        if order is None:
            report_failure(cart, "place order")
            return 1

        notify_success("Order placed successfully!")
        display_order(order)

    return 0


def login(args, config: Config):
    CredentialStore(config.AUTH_TOKEN_PATH).set_token(args.token)
    notify_success("Logged in")
    return 0


def logout(args, config: Config):
    CredentialStore(config.AUTH_TOKEN_PATH).clear()
    notify_success("Logged out")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bookstore - storefront and admin CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Browse the catalog
  %(prog)s books list --page 0 --size 10 --search tolkien

  # Manage customers
  %(prog)s customers add --name "Ada Lovelace" --email ada@example.com

  # Buy two copies of book 1 and one of book 2
  %(prog)s checkout --customer 7 --book 1 --book 2 --quantity 1=2

  # Export the whole catalog with parallel page fetches
  %(prog)s books export --format csv --output books.csv --async
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Books commands
    books_parser = subparsers.add_parser("books", help="Manage books")
    books_sub = books_parser.add_subparsers(dest="action", required=True)

    list_parser = books_sub.add_parser("list", help="List a page of books")
    list_parser.add_argument("--page", type=int, help="Page number, 0-based")
    list_parser.add_argument("--size", type=int, help="Page size (default: 10)")
    list_parser.add_argument("--search", help="Filter by title or author")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    show_parser = books_sub.add_parser("show", help="Show one book")
    show_parser.add_argument("id", type=int)
    show_parser.add_argument("--format", choices=["table", "json", "compact"], default="table")

    for name in ("add", "update"):
        edit_parser = books_sub.add_parser(name, help=f"{name.capitalize()} a book")
        if name == "update":
            edit_parser.add_argument("id", type=int)
        edit_parser.add_argument("--title", required=True)
        edit_parser.add_argument("--author", required=True)
        edit_parser.add_argument("--price", type=float)
        edit_parser.add_argument("--stock", type=int)

    delete_parser = books_sub.add_parser("delete", help="Delete a book")
    delete_parser.add_argument("id", type=int)

    export_parser = books_sub.add_parser("export", help="Export the whole catalog")
    export_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout for JSON)")
    export_parser.add_argument("--size", type=int, default=50, help="Page size for fetching (default: 50)")
    export_parser.add_argument("--async", dest="use_async", action="store_true", help="Fetch pages in parallel")

    # Customers commands
    customers_parser = subparsers.add_parser("customers", help="Manage customers")
    customers_sub = customers_parser.add_subparsers(dest="action", required=True)

    list_parser = customers_sub.add_parser("list", help="List customers")
    list_parser.add_argument("--search", help="Filter by name or email")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table")

    show_parser = customers_sub.add_parser("show", help="Show one customer")
    show_parser.add_argument("id", type=int)
    show_parser.add_argument("--format", choices=["table", "json", "compact"], default="table")

    for name in ("add", "update"):
        edit_parser = customers_sub.add_parser(name, help=f"{name.capitalize()} a customer")
        if name == "update":
            edit_parser.add_argument("id", type=int)
        edit_parser.add_argument("--name", required=True)
        edit_parser.add_argument("--email")

    delete_parser = customers_sub.add_parser("delete", help="Delete a customer")
    delete_parser.add_argument("id", type=int)

    # Checkout command
    checkout_parser = subparsers.add_parser("checkout", help="Place an order")
    checkout_parser.add_argument("--customer", type=int, required=True, help="Customer ID")
    checkout_parser.add_argument("--book", type=int, action="append", required=True,
                                 help="Book ID to add (repeat to add more copies)")
    checkout_parser.add_argument("--quantity", action="append", metavar="BOOK_ID=N",
                                 help="Set a line's quantity")

    # Auth commands
    login_parser = subparsers.add_parser("login", help="Store an API token")
    login_parser.add_argument("--token", required=True)
    subparsers.add_parser("logout", help="Forget the stored API token")

    return parser


def main():
    """Main CLI entry point."""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    try:
        if args.command == "books":
            if args.action == "export":
                status = export_books(args, config)
            else:
                status = books_command(args, config)

        elif args.command == "customers":
            status = customers_command(args, config)

        elif args.command == "checkout":
            status = checkout(args, config)

        elif args.command == "login":
            status = login(args, config)

        else:
            status = logout(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
