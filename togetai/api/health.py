"""Health check endpoint."""

from datetime import datetime, timezone

from litestar import get
from litestar.params import Dependency

from togetai.notifier import Notifier
from togetai.store import RecordStore


@get(["/api/health", "/health"], sync_to_thread=False)
def health(
    store: RecordStore = Dependency(skip_validation=True),
    notifier: Notifier = Dependency(skip_validation=True),
) -> dict:
    """Liveness plus which store and email features are active."""
    return {
        "success": True,
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "Togetai Feedback API",
        "store": store.backend_name,
        "email_configured": notifier.configured,
    }


routes = [health]
