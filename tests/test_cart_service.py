import pytest

from jewelry_storefront.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from jewelry_storefront.models.cart import Cart, CartLine
from jewelry_storefront.schemas import AddToCartRequest, UpdateCartLineRequest
from jewelry_storefront.services.cart_service import CartService


@pytest.fixture
def service(product_repo):
    return CartService(product_repo, max_quantity_per_line=999)


def add(service, cart, product, identity, quantity=1):
    return service.add_item(cart, AddToCartRequest(product_id=product.id, quantity=quantity), identity)


class TestCartTotals:
    def test_total_is_sum_of_price_times_quantity(self):
        cart = Cart(lines=[
            CartLine(product_id=1, name="Ring", unit_price_cents=12550, quantity=3),
            CartLine(product_id=2, name="Chain", unit_price_cents=4999, quantity=2),
            CartLine(product_id=3, name="Stud", unit_price_cents=1, quantity=7),
        ])
        assert cart.total() == 12550 * 3 + 4999 * 2 + 1 * 7
        assert cart.total_quantity == 12
        assert cart.total_items == 3

    def test_empty_cart_totals_zero(self):
        assert Cart().total() == 0
        assert Cart().is_empty
        assert Cart().to_dict()["total_dollars"] == "0.00"

    def test_total_dollars_keeps_two_places(self):
        cart = Cart(lines=[CartLine(product_id=1, name="Pearl", unit_price_cents=32000, quantity=1)])
        assert cart.to_dict()["total_dollars"] == "320.00"


class TestAddItem:
    def test_retail_viewer_gets_retail_price(self, service, catalog, anonymous):
        cart = Cart()
        line = add(service, cart, catalog["pearl"], anonymous)
        assert line.unit_price_cents == 45000
        assert not line.is_wholesale
        assert cart.total() == 45000

    def test_out_of_stock_is_rejected(self, service, catalog, anonymous):
        cart = Cart()
        with pytest.raises(BusinessLogicError) as exc:
            add(service, cart, catalog["sold_out"], anonymous)
        assert exc.value.message == "This product is out of stock"
        assert cart.is_empty

    def test_unknown_product_is_not_found(self, service, catalog, anonymous):
        with pytest.raises(NotFoundError):
            service.add_item(Cart(), AddToCartRequest(product_id=9999, quantity=1), anonymous)

    def test_retail_quantity_below_one_is_rejected(self, service, catalog, anonymous):
        with pytest.raises(ValidationError) as exc:
            add(service, Cart(), catalog["pearl"], anonymous, quantity=0)
        assert exc.value.message == "Quantity must be at least 1"

    def test_b2b_below_minimum_names_the_minimum(self, service, catalog, b2b_identity):
        cart = Cart()
        with pytest.raises(BusinessLogicError) as exc:
            add(service, cart, catalog["pearl"], b2b_identity, quantity=3)
        assert exc.value.message == "Minimum quantity for B2B customers is 5"
        assert cart.is_empty

    def test_b2b_at_minimum_gets_wholesale_price(self, service, catalog, b2b_identity):
        cart = Cart()
        line = add(service, cart, catalog["pearl"], b2b_identity, quantity=5)
        assert line.is_wholesale
        assert line.unit_price_cents == 32000
        assert cart.total() == 32000 * 5

    def test_adding_again_merges_and_keeps_original_price(self, service, catalog, product_repo, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous, quantity=1)
        product_repo.update_product(catalog["pearl"].id, {"b2c_price_cents": 99900})
        add(service, cart, catalog["pearl"], anonymous, quantity=2)

        assert cart.total_items == 1
        line = cart.get_line(catalog["pearl"].id)
        assert line.quantity == 3
        assert line.unit_price_cents == 45000

    def test_line_quantity_is_capped(self, product_repo, catalog, anonymous):
        service = CartService(product_repo, max_quantity_per_line=10)
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous, quantity=8)
        with pytest.raises(BusinessLogicError):
            add(service, cart, catalog["pearl"], anonymous, quantity=3)
        assert cart.get_line(catalog["pearl"].id).quantity == 8


class TestUpdateItem:
    def test_zero_removes_the_line(self, service, catalog, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous, quantity=2)
        result = service.update_item(cart, catalog["pearl"].id, UpdateCartLineRequest(quantity=0), anonymous)
        assert result is None
        assert cart.is_empty

    def test_sets_new_quantity(self, service, catalog, anonymous):
        cart = Cart()
        add(service, cart, catalog["ring"], anonymous)
        service.update_item(cart, catalog["ring"].id, UpdateCartLineRequest(quantity=4), anonymous)
        assert cart.total() == 250000 * 4

    def test_b2b_cannot_drop_below_minimum(self, service, catalog, b2b_identity):
        cart = Cart()
        add(service, cart, catalog["pearl"], b2b_identity, quantity=5)
        with pytest.raises(BusinessLogicError) as exc:
            service.update_item(cart, catalog["pearl"].id, UpdateCartLineRequest(quantity=4), b2b_identity)
        assert "5" in exc.value.message
        assert cart.get_line(catalog["pearl"].id).quantity == 5

    def test_unknown_line_is_not_found(self, service, anonymous):
        with pytest.raises(NotFoundError):
            service.update_item(Cart(), 42, UpdateCartLineRequest(quantity=1), anonymous)

    def test_over_maximum_is_rejected(self, service, catalog, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous)
        with pytest.raises(ValidationError):
            service.update_item(cart, catalog["pearl"].id, UpdateCartLineRequest(quantity=1000), anonymous)


class TestRemoveAndClear:
    def test_remove_unknown_line(self, service):
        with pytest.raises(NotFoundError):
            service.remove_item(Cart(), 7)

    def test_clear_empties_cart(self, service, catalog, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous)
        add(service, cart, catalog["ring"], anonymous)
        service.clear(cart)
        assert cart.is_empty
        assert service.total(cart) == 0


class TestChannelSwitch:
    def test_retail_add_to_wholesale_line_takes_retail_price(self, service, catalog, b2b_identity, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], b2b_identity, quantity=5)
        line = add(service, cart, catalog["pearl"], anonymous, quantity=10)

        assert line.quantity == 15
        assert not line.is_wholesale
        assert line.unit_price_cents == 45000
        assert cart.total() == 45000 * 15

    def test_wholesale_add_to_retail_line_takes_wholesale_price(self, service, catalog, b2b_identity, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous, quantity=1)
        line = add(service, cart, catalog["pearl"], b2b_identity, quantity=5)

        assert line.quantity == 6
        assert line.is_wholesale
        assert line.unit_price_cents == 32000

    def test_retail_update_of_wholesale_line_reprices(self, service, catalog, b2b_identity, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], b2b_identity, quantity=5)
        line = service.update_item(cart, catalog["pearl"].id, UpdateCartLineRequest(quantity=1), anonymous)

        assert line.quantity == 1
        assert not line.is_wholesale
        assert line.unit_price_cents == 45000

    def test_wholesale_update_of_retail_line_applies_minimum(self, service, catalog, b2b_identity, anonymous):
        cart = Cart()
        add(service, cart, catalog["pearl"], anonymous, quantity=2)
        with pytest.raises(BusinessLogicError):
            service.update_item(cart, catalog["pearl"].id, UpdateCartLineRequest(quantity=3), b2b_identity)

        line = cart.get_line(catalog["pearl"].id)
        assert line.quantity == 2
        assert line.unit_price_cents == 45000
