from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

from ...store import SchemaStore

router = APIRouter(prefix="/color-schemes", tags=["color-schemes"])


class ColorSchemeRequest(BaseModel):
    title: str
    colors: dict[str, list[str]]
    created_by: str = ""


class ColorSchemeResponse(BaseModel):
    id: int
    title: str
    colors: dict[str, list[str]]
    created_by: str = ""


class ColorSchemeListResponse(BaseModel):
    color_schemes: list[ColorSchemeResponse] = Field(default_factory=list)


def get_store(request: Request) -> SchemaStore:
    return request.app.state.store


@router.get("", response_model=ColorSchemeListResponse)
def list_color_schemes(request: Request):
    schemes = get_store(request).list_color_schemes()
    return ColorSchemeListResponse(
        color_schemes=[ColorSchemeResponse(**vars(scheme)) for scheme in schemes]
    )


@router.get("/{scheme_id}", response_model=ColorSchemeResponse)
def get_color_scheme(scheme_id: int, request: Request):
    scheme = get_store(request).get_color_scheme(scheme_id)
    if scheme is None:
        raise HTTPException(status_code=404, detail="Color scheme not found")
    return ColorSchemeResponse(**vars(scheme))


@router.post("", response_model=ColorSchemeResponse, status_code=201)
def create_color_scheme(payload: ColorSchemeRequest, request: Request):
    store = get_store(request)
    scheme_id = store.save_color_scheme(
        payload.title, payload.colors, created_by=payload.created_by
    )
    return ColorSchemeResponse(**vars(store.get_color_scheme(scheme_id)))


@router.put("/{scheme_id}", response_model=ColorSchemeResponse)
def update_color_scheme(scheme_id: int, payload: ColorSchemeRequest, request: Request):
    store = get_store(request)
    if store.get_color_scheme(scheme_id) is None:
        raise HTTPException(status_code=404, detail="Color scheme not found")

    store.save_color_scheme(payload.title, payload.colors, scheme_id=scheme_id)
    return ColorSchemeResponse(**vars(store.get_color_scheme(scheme_id)))


@router.delete("/{scheme_id}", status_code=204)
def delete_color_scheme(scheme_id: int, request: Request):
    if not get_store(request).delete_color_scheme(scheme_id):
        raise HTTPException(status_code=404, detail="Color scheme not found")
    return Response(status_code=204)
