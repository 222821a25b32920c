import io
import os

import pytest

from conftest import CHECKOUT_FORM, login_as
from jewelry_storefront.core.exceptions import ConflictError, ForbiddenError
from jewelry_storefront.schemas import CategoryCreateRequest, ProductCreateRequest
from jewelry_storefront.services.product_service import ProductService
from jewelry_storefront.services.storage_service import StorageBuckets, StorageService

PRODUCT_FORM = {
    "name": "Ruby Stud Earrings",
    "description": "Lab-grown rubies",
    "b2c_price": "149.99",
    "b2b_price": "99.50",
    "min_quantity_b2b": "6",
    "sku": "ear-rby-001",
    "material": "Sterling Silver",
    "in_stock": "on",
}


@pytest.fixture
def admin_client(client, admin_user):
    login_as(client, admin_user)
    return client


@pytest.fixture
def products(product_repo, category_repo):
    return ProductService(product_repo, category_repo)


@pytest.fixture
def storage(container):
    return container.get(StorageService)


def stored_files(storage):
    found = []
    for directory, _, files in os.walk(storage.root):
        found.extend(os.path.join(directory, name) for name in files)
    return found


def stored_path(storage, bucket, url):
    return os.path.join(storage.bucket_directory(bucket), storage.path_from_public_url(bucket, url))


def png(name="ruby.png"):
    return (io.BytesIO(b"\x89PNG fake"), name, "image/png")


class TestProductServiceWrites:
    def test_non_admin_cannot_create(self, products, b2b_identity):
        request = ProductCreateRequest(name="X", b2c_price="10", b2b_price="8")
        with pytest.raises(ForbiddenError):
            products.create_product(b2b_identity, request)

    def test_create_converts_dollars_to_cents(self, products, admin_identity):
        product = products.create_product(
            admin_identity, ProductCreateRequest(name="X", b2c_price="10.01", b2b_price="8.10", sku="abc")
        )
        assert product.b2c_price_cents == 1001
        assert product.b2b_price_cents == 810
        assert product.sku == "ABC"

    def test_duplicate_category_name_conflicts(self, products, admin_identity, catalog):
        with pytest.raises(ConflictError):
            products.create_category(admin_identity, CategoryCreateRequest(name="rings"))

    def test_category_with_products_cannot_be_deleted(self, products, admin_identity, catalog):
        with pytest.raises(ConflictError) as exc:
            products.delete_category(admin_identity, catalog["necklaces"].id)
        assert "2 product(s)" in exc.value.message

    def test_empty_category_can_be_deleted(self, products, admin_identity):
        category = products.create_category(admin_identity, CategoryCreateRequest(name="Anklets"))
        products.delete_category(admin_identity, category.id)
        assert [c.name for c in products.list_categories()] == []


class TestAdminDashboard:
    @pytest.mark.parametrize("tab", ["overview", "products", "categories", "resellers", "orders"])
    def test_tabs_render(self, admin_client, catalog, tab):
        response = admin_client.get(f"/admin-dashboard?tab={tab}")
        assert response.status_code == 200

    def test_overview_counts(self, admin_client, catalog):
        body = admin_client.get("/admin-dashboard").get_data(as_text=True)
        assert "Pending applications" in body

    def test_unknown_tab_falls_back_to_overview(self, admin_client):
        assert "Revenue" in admin_client.get("/admin-dashboard?tab=nope").get_data(as_text=True)

    def test_products_tab_searches_by_name(self, admin_client, catalog):
        body = admin_client.get("/admin-dashboard?tab=products&q=pearl").get_data(as_text=True)
        assert "Pearl Necklace" in body
        assert "Diamond Solitaire Ring" not in body
        assert 'value="pearl"' in body

    def test_products_tab_searches_by_category(self, admin_client, catalog):
        body = admin_client.get("/admin-dashboard?tab=products&q=Rings").get_data(as_text=True)
        assert "Diamond Solitaire Ring" in body
        assert "Pearl Necklace" not in body

    def test_products_tab_search_without_matches(self, admin_client, catalog):
        body = admin_client.get("/admin-dashboard?tab=products&q=tiara").get_data(as_text=True)
        assert "No products match your search." in body


class TestAdminProducts:
    def test_create_product_with_image(self, admin_client, product_repo, catalog):
        data = {
            **PRODUCT_FORM,
            "category_id": str(catalog["rings"].id),
            "image": (io.BytesIO(b"\x89PNG fake"), "ruby.png", "image/png"),
        }
        response = admin_client.post("/admin/products/new", data=data, content_type="multipart/form-data")
        assert response.status_code == 302

        created = [p for p in product_repo.list_products() if p.name == "Ruby Stud Earrings"][0]
        assert created.b2c_price_cents == 14999
        assert created.b2b_price_cents == 9950
        assert created.min_quantity_b2b == 6
        assert created.sku == "EAR-RBY-001"
        assert created.in_stock
        assert created.image_url.startswith("/media/product-images/")
        assert admin_client.get(created.image_url).status_code == 200

    def test_invalid_price_rerenders(self, admin_client, product_repo):
        response = admin_client.post("/admin/products/new", data={**PRODUCT_FORM, "b2c_price": "-5"})
        assert response.status_code == 400
        assert product_repo.count() == 0

    def test_edit_keeps_existing_image_and_unchecks_stock(self, admin_client, product_repo, catalog):
        ring = catalog["ring"]
        product_repo.update_product(ring.id, {"image_url": "/media/product-images/2024/1/ring.png"})
        form = {
            "name": ring.name,
            "description": ring.description,
            "b2c_price": "2600.00",
            "b2b_price": "1900.00",
            "min_quantity_b2b": "2",
        }
        response = admin_client.post(f"/admin/products/{ring.id}/edit", data=form)
        assert response.status_code == 302

        updated = product_repo.get_by_id(ring.id)
        assert updated.b2c_price_cents == 260000
        assert updated.image_url == "/media/product-images/2024/1/ring.png"
        assert not updated.in_stock

    def test_edit_form_renders(self, admin_client, catalog):
        response = admin_client.get(f"/admin/products/{catalog['ring'].id}/edit")
        assert response.status_code == 200
        assert "2500.00" in response.get_data(as_text=True)

    def test_delete_product(self, admin_client, product_repo, catalog):
        admin_client.post(f"/admin/products/{catalog['ring'].id}/delete")
        assert not product_repo.exists(catalog["ring"].id)

    def test_non_admin_post_is_redirected(self, client, product_repo, b2b_user):
        login_as(client, b2b_user)
        response = client.post("/admin/products/new", data=PRODUCT_FORM)
        assert response.status_code == 302
        assert product_repo.count() == 0


class TestAdminCategoriesAndOrders:
    def test_create_and_delete_category(self, admin_client, category_repo):
        admin_client.post("/admin/categories", data={"name": "Anklets", "description": "Ankle chains"})
        category = category_repo.get_by_name("anklets")
        assert category is not None

        admin_client.post(f"/admin/categories/{category.id}/delete")
        assert category_repo.get_by_name("Anklets") is None

    def test_delete_category_in_use_flashes(self, admin_client, category_repo, catalog):
        response = admin_client.post(f"/admin/categories/{catalog['rings'].id}/delete", follow_redirects=True)
        assert "Cannot delete a category that still has 1 product(s)" in response.get_data(as_text=True)
        assert category_repo.exists(catalog["rings"].id)

    def test_update_order_status(self, app, admin_client, catalog, order_repo):
        shopper = app.test_client()
        shopper.post("/cart/items", data={"product_id": catalog["pearl"].id, "quantity": 1})
        order_number = shopper.post("/checkout", data=CHECKOUT_FORM).headers["Location"].rsplit("/", 1)[-1]
        order = order_repo.get_by_number(order_number)

        admin_client.post(f"/admin/orders/{order.id}/status", data={"status": "shipped"})
        assert order_repo.get_by_id(order.id).status == "shipped"

        admin_client.post(f"/admin/orders/{order.id}/status", data={"status": "teleported"})
        assert order_repo.get_by_id(order.id).status == "shipped"


class TestAdminImages:
    def test_rejected_form_stores_no_image(self, admin_client, storage, product_repo):
        data = {**PRODUCT_FORM, "b2c_price": "-1", "image": png()}
        response = admin_client.post("/admin/products/new", data=data, content_type="multipart/form-data")

        assert response.status_code == 400
        assert product_repo.count() == 0
        assert stored_files(storage) == []

    def test_failed_write_removes_uploaded_image(self, admin_client, storage, product_repo):
        data = {**PRODUCT_FORM, "category_id": "999", "image": png()}
        response = admin_client.post("/admin/products/new", data=data, content_type="multipart/form-data")

        assert response.status_code == 404
        assert stored_files(storage) == []

    def test_replacing_image_removes_the_old_one(self, admin_client, storage, product_repo):
        admin_client.post(
            "/admin/products/new", data={**PRODUCT_FORM, "image": png("first.png")},
            content_type="multipart/form-data",
        )
        product = product_repo.list_products()[0]
        old_file = stored_path(storage, StorageBuckets.PRODUCT_IMAGES, product.image_url)
        assert os.path.isfile(old_file)

        form = {**PRODUCT_FORM, "image": png("second.png")}
        response = admin_client.post(
            f"/admin/products/{product.id}/edit", data=form, content_type="multipart/form-data"
        )
        assert response.status_code == 302

        updated = product_repo.get_by_id(product.id)
        assert updated.image_url != product.image_url
        assert not os.path.exists(old_file)
        assert os.path.isfile(stored_path(storage, StorageBuckets.PRODUCT_IMAGES, updated.image_url))

    def test_deleting_product_removes_its_image(self, admin_client, storage, product_repo):
        admin_client.post(
            "/admin/products/new", data={**PRODUCT_FORM, "image": png()}, content_type="multipart/form-data"
        )
        product = product_repo.list_products()[0]
        assert len(stored_files(storage)) == 1

        admin_client.post(f"/admin/products/{product.id}/delete")

        assert not product_repo.exists(product.id)
        assert stored_files(storage) == []

    def test_deleting_product_with_external_image(self, admin_client, product_repo, catalog):
        product_repo.update_product(catalog["ring"].id, {"image_url": "https://cdn.example/ring.png"})
        response = admin_client.post(f"/admin/products/{catalog['ring'].id}/delete", follow_redirects=True)

        assert "Product deleted." in response.get_data(as_text=True)
        assert not product_repo.exists(catalog["ring"].id)

    def test_deleting_category_removes_its_image(self, admin_client, storage, category_repo):
        admin_client.post(
            "/admin/categories", data={"name": "Anklets", "image": png("anklet.png")},
            content_type="multipart/form-data",
        )
        category = category_repo.get_by_name("Anklets")
        assert category.image_url.startswith("/media/category-images/")
        assert "/cat-" in category.image_url

        admin_client.post(f"/admin/categories/{category.id}/delete")

        assert category_repo.get_by_name("Anklets") is None
        assert stored_files(storage) == []

    def test_rejected_category_stores_no_image(self, admin_client, storage, catalog):
        response = admin_client.post(
            "/admin/categories", data={"name": "Rings", "image": png()}, content_type="multipart/form-data",
            follow_redirects=True,
        )

        assert "already exists" in response.get_data(as_text=True)
        assert stored_files(storage) == []
