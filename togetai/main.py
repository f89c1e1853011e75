import logging
from typing import Optional

from litestar import Litestar, Request
from litestar.datastructures import State
from litestar.di import Provide
from litestar.exceptions import HTTPException
from litestar.response import Response
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR

from togetai.config import Settings, load_settings
from togetai.exceptions import SubmissionError
from togetai.notifier import Notifier
from togetai.routes import ROUTES
from togetai.store import RecordStore, build_store
from togetai.utils.logging import configure_logging, error_log, log_request_error

logger = logging.getLogger("Togetai")


# --- Dependencies

def provide_store(state: State) -> RecordStore:
    return state.store


def provide_notifier(state: State) -> Notifier:
    return state.notifier


# --- Exception handlers
def handle_submission_error(request: Request, exc: SubmissionError) -> Response:
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        error_log(f"Request failed: {exc.message}", exc=exc, context={"path": request.url.path})
    return Response(
        content={"success": False, "message": exc.message},
        status_code=exc.status_code,
        media_type="application/json",
    )


def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    """Framework errors (bad JSON, unknown route, guard failures) in the common shape."""
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        log_request_error(request, exc)
    return Response(
        content={"success": False, "message": exc.detail},
        status_code=exc.status_code,
        media_type="application/json",
        headers=exc.headers,
    )


def log_exceptions(request: Request, exc: Exception) -> Response:
    log_request_error(request, exc, message="Unhandled exception occurred")
    return Response(
        content={"success": False, "message": "Internal server error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json",
    )


# --- App init
def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    notifier: Optional[Notifier] = None,
) -> Litestar:
    """Build the application; store and notifier default to what settings describe."""
    settings = settings or load_settings()
    store = store or build_store(settings)
    notifier = notifier or Notifier(settings.resend_api_key, sender=settings.email_from)

    async def initialize_store() -> None:
        logger.info(f"Starting app in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")
        logger.info(f"Record store: {store.backend_name}")
        await store.initialize()
        notifier.check_connection()
        if not settings.admin_token:
            logger.warning("ADMIN_TOKEN is not set, admin endpoints are not access controlled")

    async def close_store() -> None:
        await store.close()

    return Litestar(
        route_handlers=ROUTES,
        debug=settings.debug,
        state=State({"settings": settings, "store": store, "notifier": notifier}),
        dependencies={
            "store": Provide(provide_store, sync_to_thread=False),
            "notifier": Provide(provide_notifier, sync_to_thread=False),
        },
        on_startup=[initialize_store],
        on_shutdown=[close_store],
        exception_handlers={
            SubmissionError: handle_submission_error,
            HTTPException: handle_http_exception,
            Exception: log_exceptions,
        },
    )


_settings = load_settings()
configure_logging(_settings.debug)
app = create_app(_settings)
