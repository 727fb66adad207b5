from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...placeholders import check_publishable, classify

router = APIRouter(prefix="/templates", tags=["templates"])


class HighlightRequest(BaseModel):
    template: str
    known_refs: list[str] = Field(default_factory=list)


class SegmentResponse(BaseModel):
    kind: str
    text: str
    start: int
    end: int
    ref: str | None = None


class HighlightResponse(BaseModel):
    segments: list[SegmentResponse]
    publishable: bool
    offending: list[str]


@router.post("/highlight", response_model=HighlightResponse)
def highlight(payload: HighlightRequest):
    known_refs = set(payload.known_refs)
    check = check_publishable(payload.template, known_refs)

    return HighlightResponse(
        segments=[
            SegmentResponse(**segment.to_dict())
            for segment in classify(payload.template, known_refs)
        ],
        publishable=check.publishable,
        offending=check.offending,
    )
