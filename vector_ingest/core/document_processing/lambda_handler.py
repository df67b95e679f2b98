"""
Lambda handler for SQS-triggered embedding runs.

S3 ObjectCreated notifications are queued to SQS; each SQS record carries
one S3 event. Every referenced object is run through the embedding pipeline
(read → split → embed in batches → persist). A failing record never stops
the rest of the batch.

Environment variables: see EmbeddingPipelineSettings (EMBED_PIPELINE_*)

Dependencies: models.s3_event, entrypoint, python-dotenv
System role: Lambda entry point for event-driven ingestion
"""

import json
import logging
from typing import Any, Dict, List

from dotenv import load_dotenv

load_dotenv()

from vector_ingest.core.exceptions import VectorIngestException  # noqa: E402
from vector_ingest.observability import configure_logging, log_with_context  # noqa: E402

from .configs import get_pipeline_settings  # noqa: E402
from .entrypoint import EmbeddingPipeline  # noqa: E402
from .models import ObjectEvent  # noqa: E402

logger = logging.getLogger(__name__)


class MessageParseError(Exception):
    """Raised when an SQS message cannot be parsed into object events."""


def parse_sqs_record(record: Dict[str, Any]) -> List[ObjectEvent]:
    """
    Parse the S3 events wrapped in one SQS record.

    Args:
        record: Single SQS record from event['Records']

    Returns:
        List[ObjectEvent]: Objects referenced by the record (folders skipped)

    Raises:
        MessageParseError: Invalid JSON or S3 event format
    """
    message_body = record.get("body")
    if not message_body:
        raise MessageParseError("Empty message body")

    try:
        s3_event = json.loads(message_body)
    except json.JSONDecodeError as e:
        logger.error("%s:parse_sqs_record - JSONDecodeError: %s", __name__, e)
        raise MessageParseError(f"Invalid JSON in message body: {e}") from e

    if not isinstance(s3_event, dict):
        raise MessageParseError("Message body is not a JSON object")

    # Sent once when the bucket notification is configured; references no object
    if s3_event.get("Event") == "s3:TestEvent":
        logger.info("%s:parse_sqs_record - Ignoring S3 test notification", __name__)
        return []

    # A bare S3 record (no Records wrapper) is accepted as a single record
    s3_records = s3_event.get("Records", [s3_event])
    if not s3_records:
        raise MessageParseError("No S3 records in event")

    try:
        events = [ObjectEvent.from_s3_record(s3_record) for s3_record in s3_records]
    except ValueError as e:
        logger.error("%s:parse_sqs_record - ValueError: %s", __name__, e)
        raise MessageParseError(f"Invalid S3 event format: {e}") from e

    return [event for event in events if not event.is_folder]


def _get_pipeline() -> EmbeddingPipeline:
    """Create the pipeline once per Lambda container, applying the configured log level."""
    if not hasattr(handler, "_pipeline"):
        settings = get_pipeline_settings()
        configure_logging(settings.log_level)
        handler._pipeline = EmbeddingPipeline(settings)
    return handler._pipeline


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for SQS embedding events.

    Args:
        event: SQS event with Records array
        context: Lambda context object

    Returns:
        Dict with statusCode (200 all succeeded, 206 partial) and results array
    """
    pipeline = _get_pipeline()
    records = event.get("Records", [])
    logger.info("%s:handler - Received SQS event", __name__, extra={"record_count": len(records)})

    results: List[Dict[str, Any]] = []
    failed_count = 0

    for record in records:
        message_id = record.get("messageId")
        try:
            object_events = parse_sqs_record(record)
        except MessageParseError as e:
            logger.warning("%s:handler - MessageParseError: %s", __name__, e)
            failed_count += 1
            results.append(
                {
                    "messageId": message_id,
                    "status": "failed",
                    "error": "Invalid message format",
                    "details": str(e),
                }
            )
            continue

        for object_event in object_events:
            try:
                document_result = pipeline.process_document(object_event.to_document())
            except VectorIngestException as e:
                logger.error(
                    "%s:handler - %s: %s",
                    __name__,
                    type(e).__name__,
                    e,
                    extra={"document_key": object_event.key},
                )
                failed_count += 1
                results.append(
                    {
                        "messageId": message_id,
                        "status": "failed",
                        "document_key": object_event.key,
                        "error": type(e).__name__,
                        "details": str(e),
                    }
                )
                continue
            except Exception as e:
                logger.exception(
                    "%s:handler - Unexpected %s",
                    __name__,
                    type(e).__name__,
                    extra={"document_key": object_event.key},
                )
                failed_count += 1
                results.append(
                    {
                        "messageId": message_id,
                        "status": "failed",
                        "document_key": object_event.key,
                        "error": "Unexpected error",
                        "details": str(e),
                    }
                )
                continue

            results.append(
                {
                    "messageId": message_id,
                    "status": "success",
                    "document_key": document_result.document_key,
                    "chunk_count": document_result.chunk_count,
                    "batch_count": document_result.batch_count,
                    "processing_time_ms": document_result.processing_time_ms,
                }
            )

    status_code = 200 if failed_count == 0 else 206
    log_with_context(
        logger,
        logging.INFO,
        f"{__name__}:handler - Processing complete",
        success_count=len(results) - failed_count,
        failed_count=failed_count,
        failed_keys=[r["document_key"] for r in results if r["status"] == "failed" and "document_key" in r],
    )

    return {
        "statusCode": status_code,
        "body": json.dumps(
            {
                "processed": len(results),
                "failed": failed_count,
                "results": results,
            }
        ),
    }
