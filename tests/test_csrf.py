import re

import pytest

from conftest import login_as
from jewelry_storefront.core.session import CSRF_KEY
from jewelry_storefront.schemas import ResellerApplicationRequest, parse_request
from jewelry_storefront.services.reseller_service import ResellerService
from test_reseller import APPLICATION_FORM

TOKEN_FIELD = re.compile(r'name="csrf_token" value="([0-9a-f]+)"')


@pytest.fixture
def guarded_client(app):
    app.config["CSRF_ENABLED"] = True
    return app.test_client()


@pytest.fixture
def pending_application(container):
    request = parse_request(ResellerApplicationRequest, APPLICATION_FORM)
    return container.get(ResellerService).submit_application(request)


def set_token(client, token="known-token"):
    with client.session_transaction() as sess:
        sess[CSRF_KEY] = token
    return token


class TestFormTokens:
    def test_session_cookie_is_same_site(self, app):
        assert app.config["SESSION_COOKIE_SAMESITE"] == "Lax"
        assert app.config["SESSION_COOKIE_HTTPONLY"] is True

    def test_admin_post_without_token_is_rejected(self, guarded_client, admin_user, pending_application,
                                                  application_repo):
        login_as(guarded_client, admin_user)
        response = guarded_client.post(f"/admin/applications/{pending_application.id}/approve")

        assert response.status_code == 403
        assert application_repo.get_by_id(pending_application.id).status == "pending"

    def test_admin_post_with_wrong_token_is_rejected(self, guarded_client, admin_user, pending_application,
                                                     application_repo):
        login_as(guarded_client, admin_user)
        set_token(guarded_client)
        response = guarded_client.post(
            f"/admin/applications/{pending_application.id}/approve", data={"csrf_token": "forged"}
        )

        assert response.status_code == 403
        assert application_repo.get_by_id(pending_application.id).status == "pending"

    def test_token_from_rendered_page_is_accepted(self, guarded_client, admin_user, pending_application,
                                                  application_repo):
        login_as(guarded_client, admin_user)
        page = guarded_client.get("/admin-dashboard?tab=resellers").get_data(as_text=True)
        token = TOKEN_FIELD.search(page).group(1)

        response = guarded_client.post(
            f"/admin/applications/{pending_application.id}/approve", data={"csrf_token": token}
        )

        assert response.status_code == 302
        assert application_repo.get_by_id(pending_application.id).status == "approved"

    def test_reads_need_no_token(self, guarded_client, catalog):
        assert guarded_client.get("/products").status_code == 200
        assert guarded_client.get("/api/v1/cart").status_code == 200

    def test_storefront_forms_carry_the_token(self, guarded_client, catalog):
        page = guarded_client.get("/products").get_data(as_text=True)
        assert TOKEN_FIELD.search(page) is not None


class TestApiTokens:
    def test_cart_write_without_header_is_forbidden(self, guarded_client, catalog):
        response = guarded_client.post("/api/v1/cart/items", json={"product_id": catalog["pearl"].id})

        assert response.status_code == 403
        assert response.get_json()["error"]["code"] == "FORBIDDEN"

    def test_cart_write_with_header_succeeds(self, guarded_client, catalog):
        token = set_token(guarded_client)
        response = guarded_client.post(
            "/api/v1/cart/items",
            json={"product_id": catalog["pearl"].id},
            headers={"X-CSRF-Token": token},
        )

        assert response.status_code == 201
