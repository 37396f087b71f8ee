from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ...summarization import (
    ContentType,
    ContentTypeDetector,
    SummaryFocus,
    SummaryFormat,
    SummaryLength,
    SummaryOptions,
    SummaryResult,
    SummaryService,
)
from ...summarization.models import ContentProfile, TypeCapabilities

logger = logging.getLogger(__name__)

router = APIRouter()


class SummarizeRequest(BaseModel):
    content: str = Field(..., min_length=1)
    url: Optional[str] = None
    mime_type: Optional[str] = None
    content_type: Optional[ContentType] = None
    options: SummaryOptions = Field(default_factory=SummaryOptions)


class ForensicRequest(BaseModel):
    content: str = Field(..., min_length=1)
    url: Optional[str] = None
    mime_type: Optional[str] = None
    content_type: Optional[ContentType] = None
    include_metadata: bool = True


class DetectRequest(BaseModel):
    content: str = ""
    url: Optional[str] = None
    mime_type: Optional[str] = None
    forensic: bool = False


class DetectResponse(BaseModel):
    content_type: ContentType
    profile: ContentProfile
    capabilities: TypeCapabilities


def get_summary_service(request: Request) -> SummaryService:
    service = getattr(request.app.state, "summary_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Summary service not configured")
    return service


def get_detector(request: Request) -> ContentTypeDetector:
    service = getattr(request.app.state, "summary_service", None)
    if service is not None:
        return service.detector
    return ContentTypeDetector()


@router.post("", response_model=SummaryResult)
async def create_summary(
    payload: SummarizeRequest,
    service: SummaryService = Depends(get_summary_service),
) -> SummaryResult:
    logger.info(
        "Summary requested",
        extra={
            "content_length": len(payload.content),
            "url": payload.url,
            "focus": payload.options.focus.value,
        },
    )
    return await service.summarize(
        payload.content,
        payload.options,
        url=payload.url,
        mime_type=payload.mime_type,
        content_type=payload.content_type,
    )


@router.post("/forensic", response_model=SummaryResult)
async def create_forensic_summary(
    payload: ForensicRequest,
    service: SummaryService = Depends(get_summary_service),
) -> SummaryResult:
    logger.info(
        "Forensic analysis requested",
        extra={"content_length": len(payload.content), "url": payload.url},
    )
    return await service.summarize_forensic(
        payload.content,
        url=payload.url,
        mime_type=payload.mime_type,
        content_type=payload.content_type,
        include_metadata=payload.include_metadata,
    )


@router.post("/detect", response_model=DetectResponse)
async def detect_content_type(
    payload: DetectRequest,
    detector: ContentTypeDetector = Depends(get_detector),
) -> DetectResponse:
    if not payload.content and not payload.url and not payload.mime_type:
        raise HTTPException(
            status_code=422, detail="Provide content, url or mime_type"
        )

    if payload.forensic:
        content_type = detector.detect_forensic(
            payload.content, url=payload.url, mime_type=payload.mime_type
        )
    else:
        content_type = detector.detect(
            payload.content, url=payload.url, mime_type=payload.mime_type
        )
    return DetectResponse(
        content_type=content_type,
        profile=detector.profile(payload.content, content_type),
        capabilities=detector.capabilities(content_type),
    )


@router.get("/options")
async def summary_options(
    detector: ContentTypeDetector = Depends(get_detector),
):
    """List the accepted option values and supported content types."""
    return {
        "length": [item.value for item in SummaryLength],
        "format": [item.value for item in SummaryFormat],
        "focus": [item.value for item in SummaryFocus],
        "content_types": [item.value for item in detector.supported_types()],
        "defaults": SummaryOptions().model_dump(mode="json"),
    }
