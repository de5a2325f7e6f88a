from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from schemas.url_schemas import (
    ShortenRequest,
    UrlDeleteResponse,
    UrlErrorResponse,
    UrlListResponse,
    UrlResponse,
)
from services.exceptions import MalformedCodeError
from services.url_service import UrlService

router = APIRouter(prefix="/api", tags=["URL Management"])
redirect_router = APIRouter(tags=["Redirects"])


def get_url_service(request: Request) -> UrlService:
    return request.app.state.url_service


@router.post(
    "/shorten",
    response_model=UrlResponse,
    status_code=201,
    responses={400: {"model": UrlErrorResponse}},
)
async def shorten_url(
    url_request: ShortenRequest,
    service: UrlService = Depends(get_url_service),
) -> UrlResponse:
    mapping = await service.shorten(url_request.url)
    return UrlResponse.from_mapping(mapping)


@router.get("/urls", response_model=UrlListResponse)
async def list_urls(service: UrlService = Depends(get_url_service)) -> UrlListResponse:
    mappings = await service.list_all()
    items = [UrlResponse.from_mapping(mapping) for mapping in mappings]
    return UrlListResponse(items=items, count=len(items))


@router.delete(
    "/urls/{url_id}",
    response_model=UrlDeleteResponse,
    responses={404: {"model": UrlErrorResponse}},
)
async def delete_url(
    url_id: str,
    service: UrlService = Depends(get_url_service),
) -> UrlDeleteResponse:
    await service.delete_by_id(url_id)
    return UrlDeleteResponse(detail="URL deleted successfully", id=url_id)


# Declared after /urls so that path is not read as a short code.
@router.get(
    "/{short_code}",
    responses={400: {"model": UrlErrorResponse}, 404: {"model": UrlErrorResponse}},
)
async def api_redirect_short_code(
    short_code: str,
    service: UrlService = Depends(get_url_service),
):
    try:
        original_url = await service.resolve_and_count(short_code)
    except MalformedCodeError:
        raise HTTPException(status_code=400, detail="Invalid short code format")
    return RedirectResponse(url=original_url, status_code=308)


@redirect_router.get("/{short_code}", responses={404: {"model": UrlErrorResponse}})
async def redirect_short_code(
    short_code: str,
    service: UrlService = Depends(get_url_service),
):
    original_url = await service.resolve_and_count(short_code)
    return RedirectResponse(url=original_url, status_code=308)
