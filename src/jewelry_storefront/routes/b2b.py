from flask import Blueprint, render_template

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.models.user import Role
from jewelry_storefront.schemas import ProductListRequest
from jewelry_storefront.services.dashboard_service import DashboardService
from jewelry_storefront.services.product_service import ProductService
from jewelry_storefront.routes.utils import current_identity, role_required

b2b_bp = Blueprint("b2b", __name__)


@b2b_bp.route("/b2b-dashboard", methods=["GET"])
@role_required(Role.B2B.value)
def dashboard():
    identity = current_identity()
    summary = get_service(DashboardService).b2b_summary(identity)
    products = get_service(ProductService).list_products(ProductListRequest(in_stock=True))
    return render_template("b2b_dashboard.html", summary=summary, products=products)
