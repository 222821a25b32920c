from flask import Blueprint, abort, send_from_directory

from jewelry_storefront.core.dependencies import get_service
from jewelry_storefront.core.exceptions import NotFoundError
from jewelry_storefront.services.storage_service import StorageService

media_bp = Blueprint("media", __name__)


@media_bp.route("/media/<bucket>/<path:path>", methods=["GET"])
def serve(bucket: str, path: str):
    """Public read of a stored object"""
    try:
        directory = get_service(StorageService).bucket_directory(bucket)
    except NotFoundError:
        abort(404)
    return send_from_directory(directory, path)
