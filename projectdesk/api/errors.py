"""Translate flow results and missing fields into HTTP errors."""

from fastapi import HTTPException
from pydantic import BaseModel

from projectdesk.domain.results import FailureReason, ServiceResult

STATUS_BY_REASON: dict[FailureReason, int] = {
    FailureReason.MISSING_CODE: 400,
    FailureReason.EXCHANGE_ERROR: 400,
    FailureReason.VALIDATION_ERROR: 400,
    FailureReason.USER_NOT_FOUND: 400,
    FailureReason.NOT_FOUND: 404,
    FailureReason.FORBIDDEN: 403,
    FailureReason.STORE_UNAVAILABLE: 503,
}


def raise_for_failure(result: ServiceResult) -> None:
    """Raise HTTPException for a failed result; do nothing on success."""
    if result.ok:
        return
    raise HTTPException(
        status_code=STATUS_BY_REASON[result.reason],
        detail={
            "error": result.reason.value,
            "message": result.message,
            "details": result.details,
        },
    )


def require_fields(body: BaseModel, *names: str, error: str = "missing_fields") -> None:
    """Raise 400 listing every field in ``names`` that is absent or blank.

    Names are attribute names; the response lists the camelCase wire names.
    """
    fields = type(body).model_fields
    missing = []
    for name in names:
        value = getattr(body, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(fields[name].alias or name)
    if missing:
        raise HTTPException(
            status_code=400,
            detail={
                "error": error,
                "message": f"missing required fields: {', '.join(missing)}",
                "missingFields": missing,
            },
        )
