import atexit
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from flask import Flask, g, jsonify, render_template, request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from jewelry_storefront.cli import register_commands
from jewelry_storefront.core.config import Config
from jewelry_storefront.core.dependencies import EXTENSION_KEY, DependencyContainer
from jewelry_storefront.core.exceptions import BaseAPIException, ForbiddenError
from jewelry_storefront.core.session import (
    SessionCartStore,
    csrf_token_is_valid,
    generate_csrf_token,
    get_session_user_id,
)
from jewelry_storefront.db import Database
from jewelry_storefront.repositories import (
    ApplicationRepository,
    CategoryRepository,
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from jewelry_storefront.routes import (
    admin_bp,
    api_bp,
    auth_bp,
    b2b_bp,
    media_bp,
    reseller_bp,
    storefront_bp,
)
from jewelry_storefront.services import (
    AuthService,
    CartService,
    CheckoutService,
    DashboardService,
    OrderService,
    ProductService,
    ResellerService,
    StorageService,
)
from jewelry_storefront.utils.date_utils import DateUtils
from jewelry_storefront.utils.formatting_utils import FormattingUtils

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

logger = logging.getLogger(__name__)


def build_container(config: Config, database: Database) -> DependencyContainer:
    """Wire repositories and services for one application instance"""
    container = DependencyContainer()
    container.register_singleton(Database, database)

    container.register_factory(ProductRepository, lambda: ProductRepository(database))
    container.register_factory(CategoryRepository, lambda: CategoryRepository(database))
    container.register_factory(UserRepository, lambda: UserRepository(database))
    container.register_factory(OrderRepository, lambda: OrderRepository(database))
    container.register_factory(ApplicationRepository, lambda: ApplicationRepository(database))

    container.register_factory(AuthService, lambda: AuthService(
        container.get(UserRepository),
        profile_load_timeout=config.security.profile_load_timeout_seconds,
        min_password_length=config.security.min_password_length,
    ))
    container.register_factory(ProductService, lambda: ProductService(
        container.get(ProductRepository), container.get(CategoryRepository)
    ))
    container.register_factory(CartService, lambda: CartService(
        container.get(ProductRepository), max_quantity_per_line=config.store.max_quantity_per_line
    ))
    container.register_factory(CheckoutService, lambda: CheckoutService(
        container.get(OrderRepository), config.store
    ))
    container.register_factory(OrderService, lambda: OrderService(container.get(OrderRepository)))
    container.register_factory(ResellerService, lambda: ResellerService(
        container.get(ApplicationRepository), container.get(AuthService)
    ))
    container.register_factory(StorageService, lambda: StorageService(config.storage))
    container.register_factory(DashboardService, lambda: DashboardService(
        container.get(ProductRepository),
        container.get(CategoryRepository),
        container.get(OrderRepository),
        container.get(ApplicationRepository),
    ))
    return container


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Application factory.

    ``overrides`` take precedence over environment variables, which lets
    tests run against a throwaway database and storage directory.
    """
    config = Config(overrides)
    config.validate()

    logging.basicConfig(level=config.app.log_level.upper(), format=LOG_FORMAT)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.security.secret_key,
        MAX_CONTENT_LENGTH=config.storage.max_upload_bytes + 1024 * 1024,
        TESTING=config.is_testing,
        DEBUG=config.app.debug,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        CSRF_ENABLED=config.security.csrf_enabled,
    )

    database = Database(config.database)
    container = build_container(config, database)
    app.extensions[EXTENSION_KEY] = container
    atexit.register(container.close)

    # ------------------------------------------------------------------ #
    # Blueprints                                                          #
    # ------------------------------------------------------------------ #
    app.register_blueprint(storefront_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(reseller_bp)
    app.register_blueprint(b2b_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(media_bp)
    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # ------------------------------------------------------------------ #
    # Per-request identity and template helpers                           #
    # ------------------------------------------------------------------ #
    @app.before_request
    def load_identity():
        # Reloaded every request so approvals apply without signing in again
        auth = app.extensions[EXTENSION_KEY].get(AuthService)
        g.identity = auth.identity_for(get_session_user_id())

    @app.before_request
    def check_csrf():
        # Token checked for every state-changing request, forms and API alike
        if not app.config["CSRF_ENABLED"] or request.method not in UNSAFE_METHODS:
            return None
        if not csrf_token_is_valid():
            logger.warning(f"Rejected {request.method} {request.path} without a valid form token")
            raise ForbiddenError("Your session has expired. Please reload the page and try again.")
        return None

    @app.context_processor
    def inject_globals():
        identity = getattr(g, "identity", None)
        return {
            "identity": identity,
            "cart_count": SessionCartStore().load().total_quantity,
            "store_name": config.store.name,
            "currency": config.store.currency,
        }

    app.jinja_env.globals["csrf_token"] = generate_csrf_token

    @app.template_filter("money")
    def money_filter(amount_cents):
        return FormattingUtils.format_money(amount_cents or 0, config.store.currency)

    @app.template_filter("local_date")
    def local_date_filter(value):
        return DateUtils.format_date(value, config.store.timezone) if value else ""

    @app.template_filter("local_datetime")
    def local_datetime_filter(value):
        return DateUtils.format_datetime(value, config.store.timezone) if value else ""

    # ------------------------------------------------------------------ #
    # Error handlers                                                      #
    # ------------------------------------------------------------------ #
    def _wants_json() -> bool:
        return request.path.startswith("/api/") or request.path == "/health"

    @app.errorhandler(BaseAPIException)
    def handle_api_exception(error: BaseAPIException):
        if error.status_code >= 500:
            logger.error(f"{error.error_code}: {error.internal_message}\n{error.traceback or ''}")
        if _wants_json():
            return jsonify(error.to_dict()), error.status_code
        return render_template("error.html", status=error.status_code, message=error.message), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        if _wants_json():
            return jsonify({
                "success": False,
                "error": {"code": error.name.upper().replace(" ", "_"), "message": str(error.description)},
            }), error.code
        return render_template("error.html", status=error.code, message=error.description), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {error}")
        message = "An internal server error occurred."
        if _wants_json():
            return jsonify({"success": False, "error": {"code": "INTERNAL_ERROR", "message": message}}), 500
        return render_template("error.html", status=500, message=message), 500

    # ------------------------------------------------------------------ #
    # Health check                                                        #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness check. Returns 503 if DB is unreachable."""
        try:
            with database.get_connection() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            return jsonify({"status": "error", "database": "unreachable"}), 503
        return jsonify({
            "status": "ok",
            "database": "reachable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    register_commands(app)

    logger.info(f"Application created ({config.environment})")
    return app
