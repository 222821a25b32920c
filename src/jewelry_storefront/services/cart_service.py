import logging

from jewelry_storefront.core.exceptions import (
    BusinessLogicError,
    NotFoundError,
    ValidationError,
)
from jewelry_storefront.models.cart import Cart, CartLine
from jewelry_storefront.models.product import Product
from jewelry_storefront.models.user import SessionIdentity
from jewelry_storefront.repositories.product_repository import ProductRepository
from jewelry_storefront.schemas.cart_schemas import AddToCartRequest, UpdateCartLineRequest

logger = logging.getLogger(__name__)


class CartService:
    """
    Shopping cart rules.

    The cart itself lives in the visitor's session; this service mutates the
    Cart it is handed and the caller persists it.

    Business Rules:
    - Approved B2B viewers must buy at least each product's wholesale minimum
    - Everyone else must buy at least 1
    - The unit price is fixed when a line is first added and holds while
      the same channel (retail or wholesale) keeps adding to it
    - Out-of-stock products cannot be added
    """

    def __init__(self, product_repository: ProductRepository, max_quantity_per_line: int = 999):
        self.product_repo = product_repository
        self.max_quantity_per_line = max_quantity_per_line

    def add_item(self, cart: Cart, request: AddToCartRequest, identity: SessionIdentity) -> CartLine:
        """Add a product, or add to the quantity of its existing line"""
        product = self.product_repo.get_by_id(request.product_id)
        wholesale = identity.is_b2b

        if not product.in_stock:
            raise BusinessLogicError("This product is out of stock", rule="out_of_stock")

        self._check_minimum(request.quantity, wholesale, product.min_quantity_b2b)

        line = cart.get_line(product.id)
        total_quantity = request.quantity + (line.quantity if line else 0)
        if total_quantity > self.max_quantity_per_line:
            raise BusinessLogicError(
                f"Cannot add more than {self.max_quantity_per_line} of the same item",
                rule="max_line_quantity_exceeded",
            )

        if line:
            if line.is_wholesale != wholesale:
                # A line only keeps its price while the same channel adds to it
                self._reprice(line, product, wholesale)
            line.quantity = total_quantity
            logger.info(f"Cart line {line.line_id} increased to {line.quantity}")
            return line

        line = CartLine(
            product_id=product.id,
            name=product.name,
            unit_price_cents=product.price_for(wholesale),
            quantity=request.quantity,
            is_wholesale=wholesale,
            sku=product.sku,
            image_url=product.image_url,
            description=product.description,
            category_name=product.category_name,
        )
        cart.add_line(line)
        logger.info(
            f"Added product {product.id} x{request.quantity} at {line.unit_price_cents}c "
            f"({'wholesale' if wholesale else 'retail'})"
        )
        return line

    def update_item(self, cart: Cart, line_id: int, request: UpdateCartLineRequest, identity: SessionIdentity):
        """
        Set a line's quantity. Quantity 0 removes the line and returns None.

        A viewer on the other channel than the line's takes the line over at
        their own price, so a retail visitor never edits wholesale units.
        """
        line = cart.get_line(line_id)
        if line is None:
            raise NotFoundError("Cart line", str(line_id))

        if request.quantity == 0:
            self.remove_item(cart, line_id)
            return None

        if request.quantity > self.max_quantity_per_line:
            raise ValidationError(f"Quantity cannot exceed {self.max_quantity_per_line}")

        wholesale = identity.is_b2b
        if line.is_wholesale != wholesale:
            product = self.product_repo.get_by_id(line.product_id)
            self._check_minimum(request.quantity, wholesale, product.min_quantity_b2b)
            self._reprice(line, product, wholesale)
        else:
            minimum = self._current_minimum(line) if wholesale else 1
            self._check_minimum(request.quantity, wholesale, minimum)

        line.quantity = request.quantity
        logger.info(f"Cart line {line_id} set to {request.quantity}")
        return line

    def remove_item(self, cart: Cart, line_id: int) -> None:
        if not cart.remove_line(line_id):
            raise NotFoundError("Cart line", str(line_id))
        logger.info(f"Removed cart line {line_id}")

    def clear(self, cart: Cart) -> None:
        cart.clear()

    @staticmethod
    def total(cart: Cart) -> int:
        return cart.total_cents

    # Private helpers
    def _check_minimum(self, quantity: int, wholesale: bool, wholesale_minimum: int) -> None:
        if wholesale and quantity < wholesale_minimum:
            logger.warning(f"Rejected wholesale quantity {quantity} below minimum {wholesale_minimum}")
            raise BusinessLogicError(
                f"Minimum quantity for B2B customers is {wholesale_minimum}",
                rule="b2b_minimum_quantity",
            )
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

    @staticmethod
    def _reprice(line: CartLine, product: Product, wholesale: bool) -> None:
        line.unit_price_cents = product.price_for(wholesale)
        line.is_wholesale = wholesale
        logger.info(
            f"Cart line {line.line_id} repriced to {line.unit_price_cents}c "
            f"({'wholesale' if wholesale else 'retail'})"
        )

    def _current_minimum(self, line: CartLine) -> int:
        try:
            return self.product_repo.get_by_id(line.product_id).min_quantity_b2b
        except NotFoundError:
            # Product deleted since it was added; only the basic rule applies
            return 1
