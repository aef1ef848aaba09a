"""Lambda entry point: SNS → parse submission → finalize → audit.

Uses AWS Lambda Powertools for handler-level structured logging and tracing.
The handler never raises: every failure is logged and the invocation ends.
"""

import asyncio

from aws_lambda_powertools import Logger, Tracer

from ..config import get_settings
from ..errors import EnvelopeError
from ..logging import configure_logging
from ..pipeline.pipeline import PipelineResult, PipelineStage, SubmissionPipeline
from .envelope import parse_sns_event

# Module-level singletons, reused across warm Lambda invocations
logger = Logger(service="submission-finalizer")
tracer = Tracer(service="submission-finalizer")

_pipeline: SubmissionPipeline | None = None


def _get_pipeline() -> SubmissionPipeline:
    """Lazy-init pipeline singleton."""
    global _pipeline
    if _pipeline is None:
        settings = get_settings()
        configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)
        _pipeline = SubmissionPipeline.from_settings(settings)
    return _pipeline


@tracer.capture_method
def finalize_submission(event: dict) -> PipelineResult:
    """Parse the event and run the pipeline to completion."""
    request = parse_sns_event(event)
    tracer.put_annotation(key="submission_id", value=request.submission_id)
    return asyncio.run(_get_pipeline().finalize(request))


@logger.inject_lambda_context(log_event=False)
@tracer.capture_lambda_handler
def lambda_handler(event: dict, context) -> dict:
    """Lambda entry point: finalizes one submission, never raises."""
    try:
        result = finalize_submission(event)
    except EnvelopeError as e:
        logger.error(
            "envelope.invalid",
            extra={"error": e.message, "error_context": e.context},
        )
        return {"status": PipelineStage.ABORTED.value, "submission_id": None}
    except Exception:
        logger.exception("pipeline.aborted")
        return {"status": PipelineStage.ABORTED.value, "submission_id": None}

    logger.info("invocation.complete", extra=result.to_dict())
    return {
        "status": result.stage.value,
        "submission_id": result.submission_id,
        "submission_status": result.submission_status,
        "storage_status": result.storage_status,
        "notification_status": result.notification_status,
        "audit_status": result.audit_status,
    }
