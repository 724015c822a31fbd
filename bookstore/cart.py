"""Shopping cart state machine and checkout."""
import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional

from bookstore.errors import ApiError
from bookstore.models import Book, Cart, CartLine, Order, OrderRequest, OrderRequestItem
from bookstore.services import OrdersService
from bookstore.store import SetError, SetLoading, Store

logger = logging.getLogger(__name__)


class CheckoutStatus(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CartState:
    cart: Cart = Cart()
    is_loading: bool = False
    error: Optional[ApiError] = None
    last_order: Optional[Order] = None
    checkout_status: CheckoutStatus = CheckoutStatus.IDLE


# Actions

@dataclass(frozen=True)
class AddToCart:
    book: Book


@dataclass(frozen=True)
class RemoveFromCart:
    book_id: int


@dataclass(frozen=True)
class UpdateQuantity:
    book_id: int
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class ResetCheckout:
    pass


@dataclass(frozen=True)
class BeginCheckout:
    pass


@dataclass(frozen=True)
class SetLastOrder:
    order: Order


def _without(cart: Cart, book_id) -> Cart:
    return Cart.of(item for item in cart.items if item.id != book_id)


def _with_cart(state: CartState, cart: Cart) -> CartState:
    """Editing the lines starts a new checkout attempt."""
    return replace(state, cart=cart, checkout_status=CheckoutStatus.IDLE)


def cart_reducer(state: CartState, action) -> CartState:
    """Pure transition function; totals are recomputed on every line change."""
    cart = state.cart

    if isinstance(action, AddToCart):
        book = action.book
        if cart.find(book.id) is not None:
            items = [
                replace(item, quantity=item.quantity + 1) if item.id == book.id else item
                for item in cart.items
            ]
        else:
            items = list(cart.items) + [CartLine.from_book(book)]
        return _with_cart(state, Cart.of(items))

    if isinstance(action, RemoveFromCart):
        return _with_cart(state, _without(cart, action.book_id))

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return _with_cart(state, _without(cart, action.book_id))
        items = [
            replace(item, quantity=action.quantity) if item.id == action.book_id else item
            for item in cart.items
        ]
        return _with_cart(state, Cart.of(items))

    if isinstance(action, ClearCart):
        return replace(state, cart=Cart())

    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.is_loading)

    if isinstance(action, ResetCheckout):
        return replace(state, error=None, checkout_status=CheckoutStatus.IDLE)

    if isinstance(action, BeginCheckout):
        return replace(
            state,
            is_loading=True,
            checkout_status=CheckoutStatus.SUBMITTING
        )

    if isinstance(action, SetError):
        return replace(
            state,
            error=action.error,
            is_loading=False,
            checkout_status=CheckoutStatus.FAILED
        )

    if isinstance(action, SetLastOrder):
        return replace(
            state,
            last_order=action.order,
            is_loading=False,
            checkout_status=CheckoutStatus.SUCCEEDED
        )

    return state


class CartStore(Store):
    """Process-lifetime cart; nothing is persisted."""

    def __init__(self, orders: OrdersService):
        super().__init__(cart_reducer, CartState())
        self.orders = orders

    @property
    def cart(self) -> Cart:
        return self.state.cart

    def add_to_cart(self, book: Book):
        self.dispatch(AddToCart(book))

    def remove_from_cart(self, book_id: int):
        self.dispatch(RemoveFromCart(book_id))

    def update_quantity(self, book_id: int, quantity: int):
        self.dispatch(UpdateQuantity(book_id, quantity))

    def clear_cart(self):
        self.dispatch(ClearCart())

    def place_order(self, customer_id: int) -> Optional[Order]:
        """
        Submit the current lines as an order.

        On success the cart is emptied and the order recorded. On failure the
        lines stay in place for a retry and the error is recorded. Callers
        must not start a second checkout while one is in flight.

        Returns:
            The server's order, or None if the submission failed
        """
        self.dispatch(ResetCheckout())
        self.dispatch(BeginCheckout())

        request = OrderRequest(
            customer_id=customer_id,
            items=tuple(
                OrderRequestItem(book_id=item.id, quantity=item.quantity)
                for item in self.cart.items
            )
        )
        logger.info(f"Placing order for customer {customer_id} ({len(request.items)} lines)")

        try:
            order = self.orders.place_order(request)
        except ApiError as e:
            self.fail("Place order", e)
            return None

        self.dispatch(SetLastOrder(order))
        self.dispatch(ClearCart())
        logger.info(f"Order {order.order_id} placed, total {order.total_amount}")
        return order
