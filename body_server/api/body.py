"""Body API.

- GET /get/body

Delegates file access to app.state.body_source and only maps results and
failures onto HTTP responses.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from body_server.api.errors import body_error
from body_server.service.body_source import BodyError

router = APIRouter(prefix="/get", tags=["body"])


@router.get("/body")
def get_body(req: Request):
    """Return the JSON value stored in the body file."""
    source = req.app.state.body_source
    logger = req.app.state.logger
    try:
        body = source.load_json()
    except BodyError as e:
        logger.error("error loading body file %s: %s", source.path, e)
        raise body_error(e)
    return Response(content=body, status_code=200, media_type="application/json")
