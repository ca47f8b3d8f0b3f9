"""
Intake runner: orchestrates normalization, eligibility, duplicate and capacity
checks, persistence and scoring.

Bulk uploads are processed strictly row by row; BatchState counters are only
correct under sequential mutation.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from intake.aggregate import BatchSummary, STATUS_DUPLICATE, STATUS_ERROR, STATUS_INSERTED
from intake.capacity import admit, record_admission, release
from intake.config import get_settings
from intake.csv_parser import parse_csv_line, split_csv_lines
from intake.dedupe import check_duplicate, remember
from intake.errors import ErrorKind, PreflightError, RowError
from intake.normalize import build_header_index, normalize_csv_row, normalize_form
from intake.schema import NormalizedApplication, RowOutcome, ScholarshipRule, SuitabilityResult
from intake.scoring import score_application
from intake.state import BatchState
from intake.storage import get_store
from intake.validate import check_eligibility, coerce_application, parse_scholarship_id
from utils.email_notification import notify_suitability_async

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ["full_name", "email_address", "date_of_birth", "scholarship_id"]

NO_DATA_ROWS_MESSAGE = "CSV must include a header and at least one data row"


@dataclass
class PreparedUpload:
    header_index: Dict[str, int]
    data_lines: List[Tuple[int, str]]
    scholarship_override: Optional[int] = None


@dataclass
class AdmissionResult:
    application: Optional[NormalizedApplication] = None
    rule: Optional[ScholarshipRule] = None
    error: Optional[RowError] = None
    application_id: Optional[int] = None
    suitability: Optional[SuitabilityResult] = None


@dataclass
class SubmissionResult:
    application_id: int
    application: NormalizedApplication
    rule: ScholarshipRule
    suitability: SuitabilityResult
    notification_sent: bool = False

    def to_response(self) -> dict:
        return {
            "id": self.application_id,
            "suitability_percent": self.suitability.score,
            "suitability_breakdown": self.suitability.breakdown_payload(),
        }


class SubmissionRejected(Exception):
    """A single submission failed a row-level check."""

    def __init__(self, error: RowError):
        super().__init__(error.message)
        self.error = error


def parse_scholarship_override(value: Any) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    scholarship_id = parse_scholarship_id(value)
    if scholarship_id is None:
        raise PreflightError(f"Invalid scholarship_id: {value}")
    return scholarship_id


def prepare_upload(file_bytes: Optional[bytes], scholarship_override: Any = None) -> PreparedUpload:
    """Pre-flight checks for a bulk upload. Raises PreflightError (HTTP 400)."""
    if file_bytes is None:
        raise PreflightError("No file uploaded")

    override = parse_scholarship_override(scholarship_override)

    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise PreflightError("Unable to read CSV file; expected UTF-8 text")

    lines = split_csv_lines(text)
    if len(lines) < 2:
        raise PreflightError(NO_DATA_ROWS_MESSAGE)

    header_index = build_header_index(parse_csv_line(lines[0][1]))
    required = [h for h in REQUIRED_HEADERS if not (h == "scholarship_id" and override is not None)]
    missing = [h for h in required if h not in header_index]
    if missing:
        raise PreflightError(f"CSV is missing required column(s): {', '.join(missing)}")

    return PreparedUpload(header_index=header_index, data_lines=lines[1:], scholarship_override=override)


def admit_application(
    fields: Dict[str, Any],
    state: BatchState,
    store: Any,
    today: Optional[date] = None,
    score: bool = False,
) -> AdmissionResult:
    """
    Run one normalized row through validation, duplicate detection and capacity
    admission, then persist it. Short-circuits on the first failure.
    """
    application, error = coerce_application(fields)
    if error:
        return AdmissionResult(error=error)

    rule = state.get_rule(application.scholarship_id, store)
    error = check_eligibility(application, rule, today)
    if error:
        return AdmissionResult(application=application, rule=rule, error=error)

    error = check_duplicate(application, state, store)
    if error:
        return AdmissionResult(application=application, rule=rule, error=error)

    error = admit(rule, state, store)
    if error:
        return AdmissionResult(application=application, rule=rule, error=error)

    record = application.to_record()
    suitability = None
    if score:
        suitability = score_application(application, rule)
        record["suitability_percent"] = suitability.score
        record["suitability_breakdown"] = suitability.breakdown_payload()

    try:
        application_id = store.insert_application(record)
    except Exception as e:
        logger.error(f"❌ Insert failed for scholarship {rule.id}: {e}", exc_info=True)
        release(rule, store)
        return AdmissionResult(
            application=application,
            rule=rule,
            error=RowError(ErrorKind.DB_INSERT_FAILURE, f"Database insert failed: {e}"),
        )

    remember(application, state)
    record_admission(rule, state)
    return AdmissionResult(
        application=application,
        rule=rule,
        application_id=application_id,
        suitability=suitability,
    )


def _outcome_for(row_number: int, fields: Mapping[str, Any], result: AdmissionResult) -> RowOutcome:
    email = result.application.email_address if result.application else fields.get("email_address")
    scholarship_id = (
        result.application.scholarship_id
        if result.application
        else parse_scholarship_id(fields.get("scholarship_id"))
    )
    if result.error is None:
        return RowOutcome(
            row=row_number,
            status=STATUS_INSERTED,
            email=email,
            scholarship_id=scholarship_id,
            application_id=result.application_id,
        )
    if result.error.is_duplicate:
        return RowOutcome(
            row=row_number,
            status=STATUS_DUPLICATE,
            email=email,
            scholarship_id=scholarship_id,
            kind=result.error.kind,
        )
    return RowOutcome(
        row=row_number,
        status=STATUS_ERROR,
        message=result.error.message,
        email=email,
        scholarship_id=scholarship_id,
        kind=result.error.kind,
    )


def process_row(
    row_number: int,
    line: str,
    prepared: PreparedUpload,
    state: BatchState,
    store: Any,
    today: Optional[date] = None,
) -> RowOutcome:
    """Process one data line. Always returns exactly one RowOutcome."""
    fields: Dict[str, Any] = {}
    try:
        fields = normalize_csv_row(parse_csv_line(line), prepared.header_index, prepared.scholarship_override)
        result = admit_application(fields, state, store, today)
    except Exception as e:
        logger.error(f"❌ Row {row_number} failed unexpectedly: {e}", exc_info=True)
        return RowOutcome(
            row=row_number,
            status=STATUS_ERROR,
            message=f"Unknown error: {e}",
            email=fields.get("email_address"),
            scholarship_id=parse_scholarship_id(fields.get("scholarship_id")),
            kind=ErrorKind.DB_INSERT_FAILURE,
        )

    if result.error:
        logger.info(f"Row {row_number} rejected: {result.error.kind.value} ({result.error.message})")
    return _outcome_for(row_number, fields, result)


def process_csv_upload(
    file_bytes: Optional[bytes],
    scholarship_override: Any = None,
    store: Any = None,
    today: Optional[date] = None,
) -> BatchSummary:
    """
    Process an administrator CSV upload.

    Raises PreflightError before any row is touched if the upload is unusable.
    Afterwards every data row yields exactly one outcome; admission is row by
    row, not all-or-nothing.
    """
    prepared = prepare_upload(file_bytes, scholarship_override)
    store = store if store is not None else get_store()
    state = BatchState()
    summary = BatchSummary()

    logger.info(f"📄 Processing bulk upload: {len(prepared.data_lines)} data row(s)")
    for row_number, line in prepared.data_lines:
        summary.record(process_row(row_number, line, prepared, state, store, today))

    logger.info(
        f"✅ Bulk upload finished: inserted={summary.inserted} "
        f"duplicates={summary.duplicates} errors={summary.errors}"
    )
    return summary


def submit_application(
    form: Mapping[str, Any],
    store: Any = None,
    today: Optional[date] = None,
    notify: Optional[bool] = None,
) -> SubmissionResult:
    """
    Single (web form) submission: lenient normalization, the same admission
    pipeline as bulk rows, suitability scoring, and a fire-and-forget email.

    Raises SubmissionRejected if any check fails.
    """
    settings = get_settings()
    store = store if store is not None else get_store()
    fields = normalize_form(form, allow_inference=settings.lenient_field_inference)

    result = admit_application(fields, BatchState(), store, today, score=True)
    if result.error:
        logger.info(f"Submission rejected: {result.error.kind.value} ({result.error.message})")
        raise SubmissionRejected(result.error)

    submission = SubmissionResult(
        application_id=result.application_id,
        application=result.application,
        rule=result.rule,
        suitability=result.suitability,
    )
    logger.info(
        f"✅ Application {submission.application_id} stored for scholarship {submission.rule.id} "
        f"(suitability={submission.suitability.score}%)"
    )

    should_notify = settings.suitability_email_enabled if notify is None else notify
    if should_notify:
        submission.notification_sent = _notify(submission)
    return submission


def _notify(submission: SubmissionResult) -> bool:
    """Start the suitability email. Failures are logged, never raised."""
    try:
        notify_suitability_async(
            user_email=submission.application.email_address,
            full_name=submission.application.full_name,
            scholarship_name=submission.rule.name or f"Scholarship #{submission.rule.id}",
            suitability_percent=submission.suitability.score,
            breakdown=submission.suitability.breakdown_payload(),
            application_id=submission.application_id,
        )
        return True
    except Exception as e:
        logger.warning(f"Could not start suitability email: {e}")
        return False
