import re
from urllib.parse import unquote

import pytest

from conftest import CHECKOUT_FORM, login_as, make_product
from jewelry_storefront.core.config import StoreConfig
from jewelry_storefront.core.exceptions import BusinessLogicError
from jewelry_storefront.core.session import CART_KEY
from jewelry_storefront.models.cart import Cart
from jewelry_storefront.schemas import AddToCartRequest, CheckoutRequest
from jewelry_storefront.services.cart_service import CartService
from jewelry_storefront.services.checkout_service import CheckoutService


@pytest.fixture
def service(order_repo):
    return CheckoutService(order_repo, StoreConfig(seller_whatsapp="+1 555 010 2030"))


def checkout_request(**overrides):
    return CheckoutRequest(**{**CHECKOUT_FORM, **overrides})


class TestCheckoutService:
    def test_empty_cart_is_rejected(self, service, anonymous):
        with pytest.raises(BusinessLogicError) as exc:
            service.checkout(Cart(), checkout_request(), anonymous)
        assert exc.value.message == "Your cart is empty"

    def test_records_order_and_clears_cart(self, service, product_repo, catalog, anonymous, order_repo):
        cart = Cart()
        CartService(product_repo).add_item(cart, AddToCartRequest(product_id=catalog["ring"].id, quantity=2), anonymous)

        result = service.checkout(cart, checkout_request(notes="Gift wrap please"), anonymous)

        assert cart.is_empty
        assert re.fullmatch(r"ORD-\d{8}-[A-Z0-9]{6}", result.order.order_number)
        stored = order_repo.get_by_number(result.order.order_number)
        assert stored.total_cents == 500000
        assert stored.channel == "b2c"
        assert stored.status == "pending"
        assert [(item.product_name, item.quantity, item.unit_price_cents) for item in stored.items] == [
            ("Diamond Solitaire Ring", 2, 250000)
        ]
        assert result.whatsapp_url.startswith("https://wa.me/15550102030?text=")
        assert "Gift wrap please" in result.message

    def test_b2b_order_carries_company(self, service, product_repo, catalog, b2b_identity):
        cart = Cart()
        CartService(product_repo).add_item(cart, AddToCartRequest(product_id=catalog["pearl"].id, quantity=5), b2b_identity)

        result = service.checkout(cart, checkout_request(), b2b_identity)

        assert result.order.channel == "b2b"
        assert result.order.company_name == "Boutique Ltd"
        assert result.order.user_id == b2b_identity.user_id
        assert "🏢 *B2B Customer:* Boutique Ltd" in result.message

    def test_order_numbers_are_distinct(self):
        numbers = {CheckoutService.generate_order_number() for _ in range(50)}
        assert len(numbers) == 50

    def test_invoice_context(self, service, product_repo, catalog, anonymous):
        cart = Cart()
        CartService(product_repo).add_item(cart, AddToCartRequest(product_id=catalog["pearl"].id), anonymous)
        order = service.checkout(cart, checkout_request(), anonymous).order

        context = service.invoice_context(order)
        assert context["customer_type"] == "B2C Retail"
        assert re.fullmatch(r"\d{2}/\d{2}/\d{4}", context["order_date"])


class TestCheckoutEndToEnd:
    def test_b2c_visitor_checks_out_one_hundred_dollar_item(self, client, product_repo, order_repo):
        product = make_product(product_repo, name="P", b2c_price_cents=10000)

        response = client.post("/cart/items", data={"product_id": product.id, "quantity": 1})
        assert response.status_code == 302

        response = client.post("/checkout", data=CHECKOUT_FORM)
        assert response.status_code == 302
        order_number = response.headers["Location"].rsplit("/", 1)[-1]

        order = order_repo.get_by_number(order_number)
        assert order.total_cents == 10000

        with client.session_transaction() as sess:
            assert CART_KEY not in sess

        page = client.get(f"/order-success/{order_number}")
        assert page.status_code == 200
        link = re.search(r'id="whatsapp-link" href="([^"]+)"', page.get_data(as_text=True)).group(1)
        message = unquote(link.replace("&amp;", "&").split("?text=", 1)[1])
        assert "P" in message
        assert "$100.00" in message
        assert order_number in message
        assert f"📄 *Invoice:* http://localhost/orders/{order_number}/invoice" in message

    def test_checkout_page_redirects_when_cart_empty(self, client):
        response = client.get("/checkout")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/cart")

    def test_invalid_form_keeps_cart(self, client, catalog):
        client.post("/cart/items", data={"product_id": catalog["pearl"].id, "quantity": 1})
        response = client.post("/checkout", data={**CHECKOUT_FORM, "email": "not-an-email"})
        assert response.status_code == 200
        with client.session_transaction() as sess:
            assert sess[CART_KEY]["lines"]

    def test_invoice_hidden_from_other_sessions(self, app, client, catalog):
        client.post("/cart/items", data={"product_id": catalog["pearl"].id, "quantity": 1})
        order_number = client.post("/checkout", data=CHECKOUT_FORM).headers["Location"].rsplit("/", 1)[-1]

        invoice = client.get(f"/orders/{order_number}/invoice")
        assert invoice.status_code == 200
        assert "INVOICE" in invoice.get_data(as_text=True)

        stranger = app.test_client()
        assert stranger.get(f"/orders/{order_number}/invoice").status_code == 404

    def test_admin_can_view_any_invoice(self, app, client, catalog, admin_user):
        client.post("/cart/items", data={"product_id": catalog["pearl"].id, "quantity": 1})
        order_number = client.post("/checkout", data=CHECKOUT_FORM).headers["Location"].rsplit("/", 1)[-1]

        admin = app.test_client()
        login_as(admin, admin_user)
        assert admin.get(f"/orders/{order_number}/invoice").status_code == 200
