from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from erp_console.config import ClientSettings, Config
from erp_console.context import EXTENSION_KEY, build_context, current_context
from erp_console.observability import configure_json_logging, ensure_request_id, metrics_snapshot
from erp_console.ui_strings import frontend_bundle


def create_app(config_class=Config, *, transport=None, storage=None, navigator=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_json_logging(app)

    settings = ClientSettings.from_mapping(app.config)
    app.extensions[EXTENSION_KEY] = build_context(
        settings,
        transport=transport,
        storage=storage,
        navigator=navigator,
    )

    _register_error_handlers(app)
    _register_blueprints(app)
    _register_health(app)
    _register_cli(app)
    return app


def _register_blueprints(app: Flask) -> None:
    from erp_console.contexts.auth.interfaces.http import auth_bp
    from erp_console.contexts.dashboard.interfaces.http import dashboard_bp
    from erp_console.contexts.purchase.interfaces.http import purchase_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(purchase_bp)
    app.register_blueprint(dashboard_bp)


def _register_cli(app: Flask) -> None:
    from erp_console.contexts.auth.interfaces.cli import register_session_cli

    register_session_cli(app)


def _register_error_handlers(app: Flask) -> None:
    from erp_console.errors import AppError, SystemError

    @app.before_request
    def _ensure_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _append_request_id(response):
        response.headers["X-Request-Id"] = ensure_request_id()
        return response

    def _log_error(error: AppError, request_id: str) -> None:
        log_method = app.logger.error if error.critical else app.logger.warning
        log_method(
            "application_error",
            extra={
                "request_id": request_id,
                "error_code": error.code,
                "http_status": error.http_status,
                "message_key": error.message_key,
                "details": error.details,
                "request_path": request.path,
                "http_method": request.method,
            },
            exc_info=error.critical,
        )

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        request_id = ensure_request_id()
        _log_error(exc, request_id)
        return jsonify(exc.to_response_payload(request_id)), exc.http_status

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc

        request_id = ensure_request_id()
        mapped = SystemError(
            code="unexpected_error",
            message_key="unexpected_error",
            http_status=500,
            critical=True,
            details=str(exc),
        )
        app.logger.exception(
            "unexpected_exception",
            extra={
                "request_id": request_id,
                "error_code": mapped.code,
                "request_path": request.path,
                "http_method": request.method,
            },
        )
        return jsonify(mapped.to_response_payload(request_id)), mapped.http_status


def _register_health(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        context = current_context()
        return jsonify(
            {
                "status": "ok",
                "api_url": context.settings.base_url,
                "session": {"isAuthenticated": context.session_store.is_authenticated},
                "metrics": metrics_snapshot(),
            }
        )

    @app.route("/ui-strings", methods=["GET"])
    def ui_strings():
        return jsonify(frontend_bundle())
