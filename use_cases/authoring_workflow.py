"""Create-event wizard: a fixed step sequencer over one DraftEvent and its two-phase submission."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional, Sequence

from infrastructure.api.errors import ClientError, UploadFailedError, ValidationError
from infrastructure.api.gateway import RemoteServiceGateway, resource_id
from use_cases.draft_models import (
    DraftEvent,
    FieldErrors,
    PendingMedia,
    build_event_payload,
    validate_basic_info,
    validate_draft,
    validate_location_and_date,
    validate_media,
    validate_tickets,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowStep:
    key: str
    label: str
    # Gate checked when leaving the step; None means always passable.
    validator: Optional[Callable[[DraftEvent], FieldErrors]] = None


STEPS = (
    WorkflowStep("basic-info", "Basic Information", validate_basic_info),
    WorkflowStep("location-and-date", "Location & Date", validate_location_and_date),
    WorkflowStep("tickets-and-pricing", "Tickets & Pricing", validate_tickets),
    WorkflowStep("media", "Images & Media", validate_media),
    WorkflowStep("review", "Review"),
)


@dataclass
class WorkflowState:
    active_step_index: int = 0
    step_count: int = len(STEPS)
    last_error: Optional[ClientError] = None

    @property
    def is_terminal(self) -> bool:
        return self.active_step_index == self.step_count - 1

    @property
    def field_errors(self) -> FieldErrors:
        return dict(self.last_error.details) if self.last_error is not None else {}


SubmissionStatus = Literal["CREATED", "FAILED", "REJECTED"]


@dataclass(frozen=True)
class SubmissionResult:
    """Result contract for submit(); REJECTED means nothing was attempted."""

    status: SubmissionStatus
    reason: str
    event_id: Optional[str] = None
    error: Optional[ClientError] = None
    media_refs: List[str] = field(default_factory=list)


class AuthoringWorkflow:
    """
    Owns one DraftEvent for the duration of an authoring session.

    Submission runs two named phases: media resolution (every pending upload
    started together, all must settle and succeed) then resource creation.
    Any submission failure sets `state.last_error` and resets the wizard to
    step 0 while keeping the draft. Media uploaded before a creation failure
    stay orphaned on the server; no compensating delete is attempted.
    """

    def __init__(self, gateway: RemoteServiceGateway, draft: Optional[DraftEvent] = None,
                 upload_workers: Optional[int] = None):
        self._gateway = gateway
        self._draft: Optional[DraftEvent] = draft if draft is not None else DraftEvent()
        # None starts every pending upload at once
        self._upload_workers = upload_workers
        self._submitting = False
        self.state = WorkflowState()
        self.created_event_id: Optional[str] = None

    @property
    def draft(self) -> Optional[DraftEvent]:
        return self._draft

    @property
    def steps(self) -> Sequence[WorkflowStep]:
        return STEPS

    @property
    def active_step(self) -> WorkflowStep:
        return STEPS[self.state.active_step_index]

    @property
    def is_complete(self) -> bool:
        return self.created_event_id is not None

    def _require_draft(self) -> DraftEvent:
        if self._draft is None:
            raise RuntimeError("Workflow already submitted; its draft was discarded")
        return self._draft

    # --- navigation ---

    def go_next(self) -> bool:
        draft = self._require_draft()
        if self.state.is_terminal:
            return False

        step = self.active_step
        errors = step.validator(draft) if step.validator else {}
        if errors:
            self.state.last_error = ValidationError(f"Please complete {step.label}", details=errors)
            log.debug(f"Step {step.key} blocked: {sorted(errors)}")
            return False

        self.state.active_step_index += 1
        self.state.last_error = None
        return True

    def go_back(self) -> bool:
        self.state.last_error = None
        if self.state.active_step_index == 0:
            return False
        self.state.active_step_index -= 1
        return True

    # --- submission ---

    def submit(self) -> SubmissionResult:
        if self._draft is None:
            return SubmissionResult(status="REJECTED", reason="already_submitted")
        if not self.state.is_terminal:
            return SubmissionResult(status="REJECTED", reason="not_on_review_step")
        if self._submitting:
            return SubmissionResult(status="REJECTED", reason="submission_in_progress")

        self._submitting = True
        try:
            return self._run_submission(self._draft)
        finally:
            self._submitting = False

    def _run_submission(self, draft: DraftEvent) -> SubmissionResult:
        self.state.last_error = None

        errors = validate_draft(draft)
        if errors:
            return self._fail(ValidationError("The event draft is incomplete", details=errors), "invalid_draft")

        log.info(f"Submitting event draft {draft.title!r}: phase 1, {len(draft.pending_media)} upload(s)")
        try:
            media_refs = self._resolve_media(draft.pending_media)
        except UploadFailedError as e:
            return self._fail(e, "upload_failed")

        log.info(f"Submitting event draft {draft.title!r}: phase 2, creating event")
        try:
            body = self._gateway.create_event(build_event_payload(draft, media_refs))
        except ClientError as e:
            if media_refs:
                log.warning(f"⚠️ Event creation failed; {len(media_refs)} uploaded media left orphaned")
            return self._fail(e, "creation_failed", media_refs)

        self.created_event_id = resource_id(body)
        self._draft = None
        log.info(f"✅ Event {self.created_event_id} created")
        return SubmissionResult(
            status="CREATED",
            reason="created",
            event_id=self.created_event_id,
            media_refs=media_refs,
        )

    def _fail(self, error: ClientError, reason: str, media_refs: Optional[List[str]] = None) -> SubmissionResult:
        self.state.last_error = error
        self.state.active_step_index = 0
        log.warning(f"⚠️ Event submission failed ({reason}, {error.kind}): {error}")
        return SubmissionResult(status="FAILED", reason=reason, error=error, media_refs=list(media_refs or []))

    def _resolve_media(self, media: Sequence[PendingMedia]) -> List[str]:
        """Upload all pending media concurrently; returns remote refs in draft order."""
        if not media:
            return []

        workers = len(media) if self._upload_workers is None else max(1, min(self._upload_workers, len(media)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="media-upload") as pool:
            futures = [
                pool.submit(self._gateway.upload_media, item.filename, item.content, item.content_type)
                for item in media
            ]
            wait(futures)

        failures = [(item, f.exception()) for item, f in zip(media, futures) if f.exception() is not None]
        if failures:
            item, first = failures[0]
            if not isinstance(first, ClientError):
                log.error(f"❌ Unexpected error uploading {item.filename}", exc_info=first)
            raise UploadFailedError(
                f"{len(failures)} of {len(media)} uploads failed ({item.filename}): {first}",
                status_code=getattr(first, "status_code", None),
            ) from first

        return [f.result() for f in futures]
