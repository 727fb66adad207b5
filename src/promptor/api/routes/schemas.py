import logging
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from ...errors import UnpublishableSchema
from ...placeholders import substitute
from ...schema import Schema, find_schema_issues
from ...store import SchemaStore
from ...utils import format_datetime
from ...validator import missing_required
from ..markdown import render_markdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schemas", tags=["schemas"])


class SchemaSummaryResponse(BaseModel):
    key: str
    title: str
    section_count: int
    updated_at: str


class SchemaListResponse(BaseModel):
    schemas: list[SchemaSummaryResponse]
    total: int


class FormStateRequest(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class GenerateRequest(FormStateRequest):
    render: Literal["text", "html"] = "text"


class ValidateResponse(BaseModel):
    can_generate: bool
    missing: list[str]


class GenerateResponse(BaseModel):
    success: bool = True
    content: str


def get_store(request: Request) -> SchemaStore:
    return request.app.state.store


@router.get("", response_model=SchemaListResponse)
def list_schemas(request: Request):
    timezone = request.app.state.timezone
    summaries = get_store(request).list_schemas()

    return SchemaListResponse(
        schemas=[
            SchemaSummaryResponse(
                key=summary.key,
                title=summary.title,
                section_count=summary.section_count,
                updated_at=format_datetime(summary.updated_at, timezone),
            )
            for summary in summaries
        ],
        total=len(summaries),
    )


@router.get("/{key}")
def get_schema(key: str, request: Request):
    return get_store(request).get(key).to_dict()


@router.put("/{key}")
def save_schema(key: str, payload: dict[str, Any], request: Request):
    try:
        schema = Schema.model_validate(payload)
    except ValidationError as e:
        detail = [
            {"loc": [str(item) for item in error["loc"]], "msg": error["msg"]}
            for error in e.errors()
        ]
        raise HTTPException(status_code=422, detail=detail)

    try:
        get_store(request).save(key, schema)
    except UnpublishableSchema as e:
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Cannot save: template has unresolvable refs or clashing refs",
                "offending": e.offending,
                "issues": [issue.to_dict() for issue in e.issues],
            },
        )

    warnings = [issue.to_dict() for issue in find_schema_issues(schema)]
    return {"success": True, "key": key, "warnings": warnings}


@router.delete("/{key}", status_code=204)
def delete_schema(key: str, request: Request):
    if not get_store(request).delete(key):
        raise HTTPException(status_code=404, detail="Schema not found")
    return Response(status_code=204)


@router.post("/{key}/validate", response_model=ValidateResponse)
def validate_form(key: str, payload: FormStateRequest, request: Request):
    schema = get_store(request).get(key)
    missing = missing_required(schema, payload.values)
    return ValidateResponse(can_generate=not missing, missing=missing)


@router.post("/{key}/generate", response_model=GenerateResponse)
def generate(key: str, payload: GenerateRequest, request: Request):
    schema = get_store(request).get(key)

    missing = missing_required(schema, payload.values)
    if missing:
        return JSONResponse(
            status_code=409,
            content={
                "success": False,
                "error": "Required fields are not filled",
                "missing": missing,
            },
        )

    content = substitute(
        schema.template_text,
        payload.values,
        schema.fragments,
        request.app.state.config.generation.unresolved,
    )
    if payload.render == "html":
        content = render_markdown(content)

    return GenerateResponse(content=content)
