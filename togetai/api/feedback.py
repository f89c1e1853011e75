"""Public submission endpoints."""

import logging
from typing import Any, Optional

from litestar import Controller, Request, post
from litestar.background_tasks import BackgroundTask
from litestar.params import Dependency
from litestar.response import Response
from litestar.status_codes import HTTP_200_OK

from togetai.models import FeedbackEntry
from togetai.notifier import Notifier
from togetai.store import RecordStore
from togetai.submissions import EarlyAccessSubmission, FeedbackSubmission, SubmissionBase, submit_entry

logger = logging.getLogger("Togetai.feedback")


def client_ip(request: Request) -> Optional[str]:
    """Originating address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def notify_submitter(notifier: Notifier, entry: FeedbackEntry) -> None:
    """Background task: send the confirmation email, only logging the outcome."""
    sent = await notifier.send_confirmation(
        entry.email,
        {"name": entry.name, "source": entry.source.value},
    )
    if not sent:
        logger.info(f"Entry {entry.id} stored without a confirmation email")


class SubmissionController(Controller):
    """API endpoints for the feedback and early-access forms."""

    path = "/"
    tags = ["feedback"]

    async def _accept(
        self,
        schema: type[SubmissionBase],
        request: Request,
        data: Any,
        store: RecordStore,
        notifier: Notifier,
        message: str,
    ) -> Response:
        entry = await submit_entry(
            store,
            schema,
            data,
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        # The email goes out after the response is sent; its result never changes it
        return Response(
            content={
                "success": True,
                "message": message,
                "id": entry.id,
                "entry": entry.to_json(),
            },
            status_code=HTTP_200_OK,
            background=BackgroundTask(notify_submitter, notifier, entry),
        )

    @post(["/api/submit-feedback", "/submit-feedback"], status_code=HTTP_200_OK)
    async def submit_feedback(
        self,
        request: Request,
        data: Any,
        store: RecordStore = Dependency(skip_validation=True),
        notifier: Notifier = Dependency(skip_validation=True),
    ) -> Response:
        """Submit the creator feedback form."""
        return await self._accept(
            FeedbackSubmission, request, data, store, notifier,
            message="Feedback submitted successfully",
        )

    @post("/api/early-access", status_code=HTTP_200_OK)
    async def request_early_access(
        self,
        request: Request,
        data: Any,
        store: RecordStore = Dependency(skip_validation=True),
        notifier: Notifier = Dependency(skip_validation=True),
    ) -> Response:
        """Submit the early-access signup form."""
        return await self._accept(
            EarlyAccessSubmission, request, data, store, notifier,
            message="You're on the early access list!",
        )
