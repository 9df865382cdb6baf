"""
Translation endpoints.

Every response has the shape `{success, message, data?}`. Checks run in a
fixed order: request body (400), collection configured (400), access (403),
document lookup (404).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autolocale.auth.access import require_access
from autolocale.auth.principal import Principal, get_principal
from autolocale.core.errors import AccessDeniedError, NotFoundError
from autolocale.core.models import TranslationSettings
from autolocale.i18n.generate import GenerateTextRequest
from autolocale.integrations.sentry import capture_exception
from autolocale.plugin import TranslatorPlugin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["translation"])


# =============================================================================
# Request Models
# =============================================================================


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    locale: str | None = None
    codes: list[str] | None = None
    settings: TranslationSettings | None = None
    only_missing: bool | None = Field(default=None, alias="onlyMissing")


class TranslateMissingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    locale: str | None = None
    codes: list[str] | None = None
    settings: TranslationSettings | None = None
    only_missing: bool | None = Field(default=None, alias="onlyMissing")


# =============================================================================
# Helpers
# =============================================================================


def get_plugin(request: Request) -> TranslatorPlugin:
    return request.app.state.plugin


def respond(
    status_code: int,
    message: str,
    data: Any = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "success": status_code < 400,
        "message": message,
    }
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body)


async def read_body(request: Request) -> dict[str, Any]:
    """Parse a JSON object body; anything else reads as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
    )


# =============================================================================
# Routes
# =============================================================================


@router.post("/collections/{collection_slug}/translate")
async def translate_document(
    collection_slug: str,
    request: Request,
    principal: Principal | None = Depends(get_principal),
    plugin: TranslatorPlugin = Depends(get_plugin),
):
    """Translate one document into all (or the given) target locales."""
    try:
        payload = TranslateRequest.model_validate(await read_body(request))
    except ValidationError as e:
        return respond(400, f"Invalid request: {validation_message(e)}")

    if not payload.id or not payload.locale:
        return respond(400, "Missing required fields: id and locale")

    if collection_slug not in plugin.collections:
        return respond(400, f"Collection {collection_slug} is not configured for translation")

    try:
        require_access(principal, plugin.collections, collection_slug)
    except AccessDeniedError as e:
        return respond(403, str(e))

    try:
        report = await plugin.translate_document(
            collection_slug,
            payload.id,
            payload.locale,
            codes=payload.codes,
            settings=payload.settings,
            only_missing=bool(payload.only_missing),
        )
    except NotFoundError as e:
        return respond(404, str(e))
    except Exception as e:
        logger.exception(f"Translation of {collection_slug}/{payload.id} failed")
        capture_exception(e, collection=collection_slug, document_id=payload.id)
        return respond(500, f"Translation failed: {e}")

    if report.was_skipped:
        message = f"Translation skipped: {report.skipped_reason}"
    elif report.failed:
        message = (
            f"Translated to {len(report.succeeded)} locale(s), "
            f"failed for {', '.join(report.failed)}"
        )
    else:
        message = f"Translated to {len(report.succeeded)} locale(s)"
    return respond(200, message, data=report.to_dict())


@router.post("/collections/{collection_slug}/translate-missing")
async def translate_missing(
    collection_slug: str,
    request: Request,
    principal: Principal | None = Depends(get_principal),
    plugin: TranslatorPlugin = Depends(get_plugin),
):
    """Translate every document of a collection, keeping hand-edited values by default."""
    try:
        payload = TranslateMissingRequest.model_validate(await read_body(request))
    except ValidationError as e:
        return respond(400, f"Invalid request: {validation_message(e)}")

    if not payload.locale:
        return respond(400, "Missing required field: locale")

    if collection_slug not in plugin.collections:
        return respond(400, f"Collection {collection_slug} is not configured for translation")

    try:
        require_access(principal, plugin.collections, collection_slug)
    except AccessDeniedError as e:
        return respond(403, str(e))

    only_missing = True if payload.only_missing is None else payload.only_missing
    try:
        bulk = await plugin.translate_collection(
            collection_slug,
            payload.locale,
            codes=payload.codes,
            settings=payload.settings,
            only_missing=only_missing,
        )
    except Exception as e:
        logger.exception(f"Bulk translation of {collection_slug} failed")
        capture_exception(e, collection=collection_slug)
        return respond(500, f"Translation failed: {e}")

    data = bulk.to_dict()
    return respond(
        200,
        f"Translated {bulk.translated} of {data['total']} document(s)",
        data=data,
    )


@router.post("/generate-text")
async def generate_text(
    request: Request,
    principal: Principal | None = Depends(get_principal),
    plugin: TranslatorPlugin = Depends(get_plugin),
):
    """Translate a single piece of text."""
    try:
        payload = GenerateTextRequest.model_validate(await read_body(request))
    except ValidationError as e:
        return respond(400, f"Invalid request: {validation_message(e)}")

    try:
        require_access(principal, plugin.collections, None)
    except AccessDeniedError as e:
        return respond(403, str(e))

    result = await plugin.generate_text(payload)
    if not result.success:
        return respond(500, f"Translation failed: {result.error}")

    return respond(200, "Text translated", data=result.model_dump(by_alias=True))
