import pytest
from werkzeug.security import generate_password_hash

from jewelry_storefront import create_app
from jewelry_storefront.core.dependencies import EXTENSION_KEY
from jewelry_storefront.core.session import USER_KEY
from jewelry_storefront.db import Database
from jewelry_storefront.models.user import Role, SessionIdentity
from jewelry_storefront.repositories import (
    ApplicationRepository,
    CategoryRepository,
    OrderRepository,
    ProductRepository,
    UserRepository,
)

SELLER_WHATSAPP = "+1 (555) 010-2030"
PASSWORD = "correct-horse-9"


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "ENVIRONMENT": "testing",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'store.db'}",
        "STORAGE_ROOT": str(tmp_path / "storage"),
        "SECRET_KEY": "test-secret",
        "SELLER_WHATSAPP": SELLER_WHATSAPP,
        "STORE_NAME": "Test Jewelers",
        "PROFILE_LOAD_TIMEOUT_SECONDS": "2",
        "LOG_LEVEL": "WARNING",
        # Form tokens are exercised in test_csrf.py
        "CSRF_ENABLED": "false",
    })
    database = app.extensions[EXTENSION_KEY].get(Database)
    database.create_all()
    yield app
    app.extensions[EXTENSION_KEY].close()
    database.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def container(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def product_repo(container):
    return container.get(ProductRepository)


@pytest.fixture
def category_repo(container):
    return container.get(CategoryRepository)


@pytest.fixture
def user_repo(container):
    return container.get(UserRepository)


@pytest.fixture
def order_repo(container):
    return container.get(OrderRepository)


@pytest.fixture
def application_repo(container):
    return container.get(ApplicationRepository)


def make_product(product_repo, **overrides):
    values = {
        "name": "P",
        "description": "Test piece",
        "category_id": None,
        "b2c_price_cents": 10000,
        "b2b_price_cents": 7000,
        "min_quantity_b2b": 5,
        "in_stock": True,
        "image_url": None,
        "sku": None,
        "material": None,
    }
    values.update(overrides)
    return product_repo.create_product(values)


@pytest.fixture
def catalog(category_repo, product_repo):
    """Two categories and three products; one out of stock"""
    rings = category_repo.create_category(name="Rings", description="Rings")
    necklaces = category_repo.create_category(name="Necklaces", description="Necklaces")
    return {
        "rings": rings,
        "necklaces": necklaces,
        "ring": make_product(
            product_repo, name="Diamond Solitaire Ring", description="Classic solitaire",
            category_id=rings.id, b2c_price_cents=250000, b2b_price_cents=180000,
            min_quantity_b2b=2, sku="RNG-DIA-001",
        ),
        "pearl": make_product(
            product_repo, name="Pearl Necklace", description="Freshwater pearls",
            category_id=necklaces.id, b2c_price_cents=45000, b2b_price_cents=32000,
            min_quantity_b2b=5, sku="NCK-PRL-001",
        ),
        "sold_out": make_product(
            product_repo, name="Sapphire Pendant", description="Blue sapphire",
            category_id=necklaces.id, b2c_price_cents=80000, b2b_price_cents=58000,
            min_quantity_b2b=4, in_stock=False,
        ),
    }


@pytest.fixture
def admin_user(user_repo):
    return user_repo.create_user(
        email="owner@example.com",
        password_hash=generate_password_hash(PASSWORD),
        role=Role.ADMIN.value,
        is_approved=True,
        full_name="Store Owner",
    )


@pytest.fixture
def b2b_user(user_repo):
    return user_repo.create_user(
        email="buyer@boutique.example",
        password_hash=generate_password_hash(PASSWORD),
        role=Role.B2B.value,
        is_approved=True,
        full_name="Bea Buyer",
        company_name="Boutique Ltd",
    )


@pytest.fixture
def customer_user(user_repo):
    return user_repo.create_user(
        email="shopper@example.com",
        password_hash=generate_password_hash(PASSWORD),
        full_name="Sam Shopper",
    )


@pytest.fixture
def anonymous():
    return SessionIdentity.anonymous()


@pytest.fixture
def admin_identity(admin_user):
    return SessionIdentity(profile=admin_user)


@pytest.fixture
def b2b_identity(b2b_user):
    return SessionIdentity(profile=b2b_user)


def login_as(client, profile):
    """Put a signed-in user id straight into the session cookie"""
    with client.session_transaction() as sess:
        sess[USER_KEY] = profile.id


CHECKOUT_FORM = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "phone": "555-123-4567",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "notes": "",
}
