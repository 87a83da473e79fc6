from typing import Any, Dict, List, Sequence

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# Request parameter sources FastAPI puts at the head of an error location
_LOCATION_ROOTS = ("body", "query", "path", "header", "cookie")


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    code: str


def error_field(error: Dict[str, Any]) -> str:
    """Dotted field path for a pydantic error, relative to the request body."""
    loc = list(error.get("loc") or ())
    root = "body"
    if loc and loc[0] in _LOCATION_ROOTS:
        root = loc.pop(0)
    if error.get("type") == "json_invalid":
        # loc carries the byte offset of the decode failure, not a field
        return root
    return ".".join(str(part) for part in loc) or root


def to_details(errors: Sequence[Dict[str, Any]]) -> List[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=error_field(error),
            message=error.get("msg", "Invalid value"),
            code=error.get("type", "invalid"),
        )
        for error in errors
    ]


def summarize(details: Sequence[ValidationErrorDetail]) -> str:
    return "Validation failed: " + ", ".join(f"{d.field}: {d.message}" for d in details)


def build_validation_response(errors: Sequence[Dict[str, Any]]) -> JSONResponse:
    details = to_details(errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": summarize(details),
            "details": [d.model_dump() for d in details],
        },
    )
