import logging

from flask import Blueprint, render_template, request

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import BaseAPIException
from jewelry_storefront.schemas import ResellerApplicationRequest, parse_request
from jewelry_storefront.schemas.reseller_schemas import (
    BUSINESS_TYPES,
    MONTHLY_VOLUMES,
    YEARS_IN_BUSINESS,
)
from jewelry_storefront.services.reseller_service import ResellerService
from jewelry_storefront.routes.utils import flash_error

logger = logging.getLogger(__name__)

reseller_bp = Blueprint("reseller", __name__)

# Never echo credentials back into the form
_SECRET_FIELDS = ("password", "confirm_password")


def _render_form(form: dict, status: int = 200):
    return render_template(
        "reseller_application.html",
        form=form,
        business_types=BUSINESS_TYPES,
        years_in_business=YEARS_IN_BUSINESS,
        monthly_volumes=MONTHLY_VOLUMES,
    ), status


@reseller_bp.route("/reseller-application", methods=["GET", "POST"])
def application():
    if request.method == "GET":
        return _render_form({})

    form = {key: value for key, value in request.form.items() if key not in _SECRET_FIELDS}
    try:
        application_request = parse_request(ResellerApplicationRequest, request.form)
        submitted = get_service(ResellerService).submit_application(application_request)
    except BaseAPIException as e:
        flash_error(e)
        return _render_form(form, e.status_code)

    return render_template("reseller_submitted.html", application=submitted)
