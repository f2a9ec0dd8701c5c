"""
Response validation -- the single crossing point from model output into
typed domain values.

``parse_and_validate`` decodes text with :mod:`json` and checks the result
against a JSON schema with :mod:`jsonschema`.  Any failure raises
:class:`~genui.errors.ParseError` carrying the raw input.

``parse_partial`` decodes the prefix of a reply that is still streaming.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import jsonschema
import partial_json_parser
from jsonschema.exceptions import best_match

from genui.errors import ParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


def _strip_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_and_validate(schema: dict, raw: Any) -> Any:
    """
    Parse *raw* (text or an already-structured value) and validate it.

    Returns the validated value.  Raises ``ParseError`` if the text is not
    JSON or the value does not match *schema*.
    """
    if raw is None:
        raise ParseError(raw, ValueError("empty response"))

    value = raw
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        try:
            value = json.loads(_strip_fence(text))
        except ValueError as exc:
            logger.warning("Model reply is not valid JSON: %s", exc)
            raise ParseError(raw, exc) from exc

    validator = jsonschema.Draft7Validator(schema)
    error = best_match(validator.iter_errors(value))
    if error is not None:
        logger.warning("Model reply failed schema validation: %s", error.message)
        raise ParseError(raw, error) from error
    return value


def parse_partial(text: str) -> Any:
    """
    Best-effort decode of a JSON object that is still being streamed.

    Anything before the first ``{`` (and a closing code fence) is ignored.
    Open strings and containers are completed by :mod:`partial_json_parser`.
    Returns ``None`` when nothing usable has arrived yet.  The result is
    never validated; use ``parse_and_validate`` on the full reply.
    """
    start = text.find("{")
    if start < 0:
        return None
    body = text[start:].split("```", 1)[0]
    try:
        return partial_json_parser.loads(body)
    except ValueError as exc:
        logger.debug("Partial reply not decodable yet: %s", exc)
        return None
