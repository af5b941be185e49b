"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Error handling and HTTP responses
- Delegating to the link registry

Status code mapping:
- Allocation: 201 created, 400 invalid URL/code, 409 code taken
- Redirect: 302 to destination, 404 for malformed or unknown codes
- Delete: 204 removed, 404 unknown
- Database failures: 500 (503 when no free code could be generated)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import LinkCreateRequest, LinkResponse
from app.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidInputError,
    LinkNotFoundError,
    StoreUnavailableError,
)
from app.core.setting import settings
from app.db.session import get_session
from app.services.link_registry import LinkRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

SERVER_ERROR_DETAIL = "Server error"


def get_link_registry(session: AsyncSession = Depends(get_session)) -> LinkRegistry:
    """Dependency building a registry bound to the request's session."""
    return LinkRegistry(
        session,
        code_length=settings.SHORT_CODE_LENGTH,
        max_attempts=settings.ALLOCATION_MAX_ATTEMPTS,
    )


def store_failure(action: str, error: StoreUnavailableError) -> HTTPException:
    logger.error(f"Error {action}: {error}", exc_info=error.original_error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=SERVER_ERROR_DETAIL
    )


@router.post(
    "/api/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short link",
    description="Stores a destination URL under a custom or generated code"
)
async def create_link(
    body: LinkCreateRequest,
    registry: LinkRegistry = Depends(get_link_registry)
) -> LinkResponse:
    """
    Create a new short link.

    An empty or missing code asks the service to generate one.

    Raises:
        HTTPException 400: If destination is missing or invalid, or the code is malformed
        HTTPException 409: If the requested code is already taken
    """
    if not body.destination:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="destination is required"
        )

    try:
        link = await registry.allocate(body.destination, body.code or None)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CodeConflictError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Code already exists")
    except AllocationExhaustedError as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not generate a unique code"
        )
    except StoreUnavailableError as e:
        raise store_failure("creating link", e)

    return LinkResponse.from_link(link, settings.BASE_URL)


@router.get(
    "/api/links",
    response_model=List[LinkResponse],
    summary="List short links",
    description="Returns every link, newest first"
)
async def list_links(
    registry: LinkRegistry = Depends(get_link_registry)
) -> List[LinkResponse]:
    try:
        links = await registry.list_links()
    except StoreUnavailableError as e:
        raise store_failure("listing links", e)

    return [LinkResponse.from_link(link, settings.BASE_URL) for link in links]


@router.get(
    "/api/links/{code}",
    response_model=LinkResponse,
    summary="Get link statistics",
    description="Returns a link with its visit count, without counting a visit"
)
async def get_link_stats(
    code: str,
    registry: LinkRegistry = Depends(get_link_registry)
) -> LinkResponse:
    """
    Raises:
        HTTPException 400: If code format is invalid
        HTTPException 404: If code not found
    """
    try:
        link = await registry.get(code)
    except InvalidInputError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code format")
    except LinkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Code not found")
    except StoreUnavailableError as e:
        raise store_failure("getting link stats", e)

    return LinkResponse.from_link(link, settings.BASE_URL)


@router.delete(
    "/api/links/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a short link"
)
async def delete_link(
    code: str,
    registry: LinkRegistry = Depends(get_link_registry)
) -> Response:
    """
    Raises:
        HTTPException 400: If code format is invalid
        HTTPException 404: If code not found
    """
    try:
        deleted = await registry.delete(code)
    except InvalidInputError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code format")
    except StoreUnavailableError as e:
        raise store_failure("deleting link", e)

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Code not found")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to destination",
    description="Counts the visit and redirects to the link's destination"
)
async def redirect_to_destination(
    code: str,
    registry: LinkRegistry = Depends(get_link_registry)
) -> RedirectResponse:
    """
    Redirect to the destination for a given code.

    Returns:
        RedirectResponse (HTTP 302) to the destination

    Raises:
        HTTPException 404: If the code is malformed or not found
    """
    try:
        link = await registry.resolve(code)
    except (InvalidInputError, LinkNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short URL not found")
    except StoreUnavailableError as e:
        raise store_failure("redirecting", e)

    return RedirectResponse(
        url=link.destination,
        status_code=status.HTTP_302_FOUND
    )
