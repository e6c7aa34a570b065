"""Constants for press release routes."""

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_SIMILAR_LIMIT = 20

PRESS_RELEASE_NOT_FOUND_DETAIL = "Press release not found"
ORGANIZATION_NOT_FOUND_DETAIL = "Organization not found"
QUOTA_EXCEEDED_DETAIL = "Press release quota exceeded for current plan"
GENERATION_FAILED_DETAIL = "Press release generation failed"
OPTIMIZATION_FAILED_DETAIL = "Press release has no content to optimize"
INVALID_DATE_RANGE_DETAIL = "start_date must be on or before end_date"

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
