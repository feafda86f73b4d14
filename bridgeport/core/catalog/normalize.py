"""Normalization of the aggregator's ``/available-routes`` payload."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from .models import MalformedShape, ParseResult, Route, RoutesParsed

logger = logging.getLogger(__name__)

# Keys under which the route array has been observed when the payload is an object.
ENVELOPE_KEYS: Sequence[str] = ("routes", "availableRoutes", "data")


def _unwrap(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ENVELOPE_KEYS:
            candidate = payload.get(key)
            if isinstance(candidate, list):
                return candidate
    return None


def parse_routes(payload: Any) -> ParseResult:
    """Normalize a raw payload into routes.

    Accepts a bare array or one of the known envelopes. Individual records that
    fail strict typing are dropped and counted; an unrecognised envelope yields
    ``MalformedShape``.
    """
    records = _unwrap(payload)
    if records is None:
        kind = type(payload).__name__
        keys = sorted(payload.keys())[:10] if isinstance(payload, dict) else []
        return MalformedShape(
            reason=f"Across available-routes: unexpected response shape ({kind}, keys={keys})"
        )

    routes: List[Route] = []
    dropped = 0
    for record in records:
        if not isinstance(record, dict):
            dropped += 1
            continue
        try:
            routes.append(Route.model_validate(record))
        except PydanticValidationError as exc:
            dropped += 1
            logger.debug("Dropping malformed route record: %s", exc.errors(include_url=False))

    return RoutesParsed(routes=tuple(routes), dropped=dropped)
