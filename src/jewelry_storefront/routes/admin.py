import logging

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException, NotFoundError
from jewelry_storefront.models.application import ApplicationStatus
from jewelry_storefront.models.order import OrderStatus
from jewelry_storefront.models.user import Role
from jewelry_storefront.schemas import (
    CategoryCreateRequest,
    ProductCreateRequest,
    ProductListRequest,
    ProductUpdateRequest,
    parse_request,
)
from jewelry_storefront.services.dashboard_service import DashboardService
from jewelry_storefront.services.order_service import OrderService
from jewelry_storefront.services.product_service import ProductService
from jewelry_storefront.services.reseller_service import ResellerService
from jewelry_storefront.services.storage_service import StorageBuckets, StorageService
from jewelry_storefront.routes.utils import current_identity, flash_error, role_required

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)

DASHBOARD_TABS = ("overview", "products", "categories", "resellers", "orders")


def _tab_url(tab: str) -> str:
    return url_for("admin.dashboard", tab=tab)


@admin_bp.route("/admin-dashboard", methods=["GET"])
@role_required(Role.ADMIN.value)
def dashboard():
    identity = current_identity()
    tab = request.args.get("tab", "overview")
    if tab not in DASHBOARD_TABS:
        tab = "overview"

    context = {"tab": tab, "tabs": DASHBOARD_TABS}
    if tab == "overview":
        context["overview"] = get_service(DashboardService).admin_overview(identity)
    elif tab == "products":
        search = request.args.get("q", "").strip()
        try:
            context["products"] = get_service(ProductService).list_products(
                parse_request(ProductListRequest, {"search": search})
            )
        except BaseAPIException as e:
            flash_error(e)
            context["products"] = get_service(ProductService).list_products()
        context["search"] = search
    elif tab == "categories":
        context["categories"] = get_service(ProductService).list_categories()
    elif tab == "resellers":
        status = request.args.get("status") or None
        try:
            context["applications"] = get_service(ResellerService).list_applications(status)
        except BaseAPIException as e:
            flash_error(e)
            context["applications"] = get_service(ResellerService).list_applications()
        context["status_filter"] = status
        context["statuses"] = ApplicationStatus.values()
    elif tab == "orders":
        context["orders"] = get_service(OrderService).list_orders(identity)
        context["order_statuses"] = OrderStatus.values()

    return render_template("admin/dashboard.html", **context)


# Products

def _product_form_data() -> dict:
    data = request.form.to_dict()
    # Unchecked checkboxes are not posted
    data["in_stock"] = "in_stock" in request.form
    return data


def _upload_form_image(bucket: str, prefix: str = "img-"):
    """Store the posted image, if any; called only once the form has validated"""
    file = request.files.get("image")
    if not file or not file.filename:
        return None
    return get_service(StorageService).upload(bucket, file, StorageService.generate_path(file.filename, prefix))


def _render_product_form(product=None, form=None, status: int = 200):
    return render_template(
        "admin/product_form.html",
        product=product,
        form=form or {},
        categories=get_service(ProductService).list_categories(),
    ), status


@admin_bp.route("/admin/products/new", methods=["GET", "POST"])
@role_required(Role.ADMIN.value)
def create_product():
    if request.method == "GET":
        return _render_product_form()

    data = _product_form_data()
    storage = get_service(StorageService)
    uploaded = None
    try:
        product_request = parse_request(ProductCreateRequest, data)
        uploaded = _upload_form_image(StorageBuckets.PRODUCT_IMAGES)
        if uploaded:
            product_request = product_request.model_copy(update={"image_url": uploaded.public_url})
        product = get_service(ProductService).create_product(current_identity(), product_request)
    except BaseAPIException as e:
        if uploaded:
            storage.discard(uploaded.bucket, uploaded.public_url)
        flash_error(e)
        return _render_product_form(form=data, status=e.status_code)

    flash(f"Product \"{product.name}\" created.", "success")
    return redirect(_tab_url("products"))


@admin_bp.route("/admin/products/<int:product_id>/edit", methods=["GET", "POST"])
@role_required(Role.ADMIN.value)
def edit_product(product_id: int):
    service = get_service(ProductService)
    try:
        product = service.get_product(product_id)
    except NotFoundError:
        abort(404, f"Product {product_id} not found.")

    if request.method == "GET":
        return _render_product_form(product=product)

    data = _product_form_data()
    if not data.get("image_url"):
        # Keep the current image unless a new one is provided
        data["image_url"] = product.image_url
    previous_image = product.image_url
    storage = get_service(StorageService)
    uploaded = None
    try:
        update_request = parse_request(ProductUpdateRequest, data)
        uploaded = _upload_form_image(StorageBuckets.PRODUCT_IMAGES)
        if uploaded:
            update_request = update_request.model_copy(update={"image_url": uploaded.public_url})
        product = service.update_product(current_identity(), product_id, update_request)
    except BaseAPIException as e:
        if uploaded:
            storage.discard(uploaded.bucket, uploaded.public_url)
        flash_error(e)
        return _render_product_form(product=product, form=data, status=e.status_code)

    if product.image_url != previous_image:
        storage.discard(StorageBuckets.PRODUCT_IMAGES, previous_image)

    flash(f"Product \"{product.name}\" updated.", "success")
    return redirect(_tab_url("products"))


@admin_bp.route("/admin/products/<int:product_id>/delete", methods=["POST"])
@role_required(Role.ADMIN.value)
def delete_product(product_id: int):
    service = get_service(ProductService)
    try:
        product = service.get_product(product_id)
        service.delete_product(current_identity(), product_id)
    except BaseAPIException as e:
        flash_error(e)
    else:
        get_service(StorageService).discard(StorageBuckets.PRODUCT_IMAGES, product.image_url)
        flash("Product deleted.", "success")
    return redirect(_tab_url("products"))


# Categories

@admin_bp.route("/admin/categories", methods=["POST"])
@role_required(Role.ADMIN.value)
def create_category():
    data = request.form.to_dict()
    storage = get_service(StorageService)
    uploaded = None
    try:
        category_request = parse_request(CategoryCreateRequest, data)
        uploaded = _upload_form_image(StorageBuckets.CATEGORY_IMAGES, prefix="cat-")
        if uploaded:
            category_request = category_request.model_copy(update={"image_url": uploaded.public_url})
        category = get_service(ProductService).create_category(current_identity(), category_request)
    except BaseAPIException as e:
        if uploaded:
            storage.discard(uploaded.bucket, uploaded.public_url)
        flash_error(e)
    else:
        flash(f"Category \"{category.name}\" created.", "success")
    return redirect(_tab_url("categories"))


@admin_bp.route("/admin/categories/<int:category_id>/delete", methods=["POST"])
@role_required(Role.ADMIN.value)
def delete_category(category_id: int):
    service = get_service(ProductService)
    try:
        category = service.get_category(category_id)
        service.delete_category(current_identity(), category_id)
    except BaseAPIException as e:
        flash_error(e)
    else:
        get_service(StorageService).discard(StorageBuckets.CATEGORY_IMAGES, category.image_url)
        flash("Category deleted.", "success")
    return redirect(_tab_url("categories"))


# Reseller applications

@admin_bp.route("/admin/applications/<int:application_id>/approve", methods=["POST"])
@role_required(Role.ADMIN.value)
def approve_application(application_id: int):
    try:
        application = get_service(ResellerService).approve(current_identity(), application_id)
    except BaseAPIException as e:
        flash_error(e)
    else:
        flash(f"Approved {application.company_name}.", "success")
    return redirect(_tab_url("resellers"))


@admin_bp.route("/admin/applications/<int:application_id>/reject", methods=["POST"])
@role_required(Role.ADMIN.value)
def reject_application(application_id: int):
    try:
        application = get_service(ResellerService).reject(current_identity(), application_id)
    except BaseAPIException as e:
        flash_error(e)
    else:
        flash(f"Rejected {application.company_name}.", "info")
    return redirect(_tab_url("resellers"))


# Orders

@admin_bp.route("/admin/orders/<int:order_id>/status", methods=["POST"])
@role_required(Role.ADMIN.value)
def update_order_status(order_id: int):
    try:
        order = get_service(OrderService).update_status(
            current_identity(), order_id, request.form.get("status", "")
        )
    except BaseAPIException as e:
        flash_error(e)
    else:
        flash(f"Order {order.order_number} is now {order.status}.", "success")
    return redirect(_tab_url("orders"))
