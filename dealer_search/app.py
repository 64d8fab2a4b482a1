"""
FastAPI application for the Dealer Search service.
Provides REST endpoints for vehicle search, the shopping assistant, dealer lookup and financing.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from anthropic import APIError
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dealer_search import __version__
from dealer_search.assistant import ShoppingAssistant
from dealer_search.config import ConfigurationError, settings
from dealer_search.dealers import list_dealers
from dealer_search.financing import calculate_affordability
from dealer_search.inventory import InventoryFetchError
from dealer_search.logging_config import configure_logging, get_structured_logger
from dealer_search.models import (
    AffordabilityRequest,
    AffordabilityResult,
    CarDetailResponse,
    CarSearchResponse,
    ChatRequest,
    ChatResponse,
    CompareRequest,
    ComparisonResult,
    DealershipInfo,
    DealershipListResponse,
    DescriptionSearchRequest,
    DescriptionSearchResponse,
    ErrorResponse,
    HealthCheck,
    NearbyDealerRequest,
    NearbyDealerResponse,
    SearchFilters,
)
from dealer_search.places import NearbyDealerFinder, PlacesAPIError, PlacesTimeoutError
from dealer_search.search import SearchService
from dealer_search.session import compare_cars

logger = get_structured_logger(__name__)

# Global instances
search_service: Optional[SearchService] = None
shopping_assistant: Optional[ShoppingAssistant] = None
dealer_finder: Optional[NearbyDealerFinder] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    global search_service, shopping_assistant, dealer_finder

    # Startup
    configure_logging()
    search_service = SearchService()
    shopping_assistant = ShoppingAssistant()
    dealer_finder = NearbyDealerFinder()

    logger.info(
        "service_started",
        version=__version__,
        environment=settings.environment,
        inventory_adapter=settings.inventory_adapter
    )

    yield

    # Shutdown
    logger.info("service_stopped")


def get_search_service() -> SearchService:
    global search_service
    if search_service is None:
        search_service = SearchService()
    return search_service


def get_assistant() -> ShoppingAssistant:
    global shopping_assistant
    if shopping_assistant is None:
        shopping_assistant = ShoppingAssistant()
    return shopping_assistant


def get_dealer_finder() -> NearbyDealerFinder:
    global dealer_finder
    if dealer_finder is None:
        dealer_finder = NearbyDealerFinder()
    return dealer_finder


# Initialize FastAPI app
app = FastAPI(
    title="Dealer Search API",
    description="Vehicle search and shopping assistant for Toyota dealerships",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Error Handlers
# ============================================================================

def error_response(status_code: int, error: str, message: str, details: Any = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(InventoryFetchError)
async def inventory_error_handler(request: Request, exc: InventoryFetchError):
    logger.error("inventory_fetch_failed", path=request.url.path, dealer=exc.dealer, status=exc.status)
    return error_response(
        status.HTTP_502_BAD_GATEWAY,
        "inventory_unavailable",
        exc.message,
        {"status": exc.status, "dealer": exc.dealer, "condition": exc.condition, "body": exc.details}
    )


@app.exception_handler(PlacesTimeoutError)
async def places_timeout_handler(request: Request, exc: PlacesTimeoutError):
    return error_response(status.HTTP_504_GATEWAY_TIMEOUT, "places_timeout", str(exc))


@app.exception_handler(PlacesAPIError)
async def places_error_handler(request: Request, exc: PlacesAPIError):
    return error_response(status.HTTP_502_BAD_GATEWAY, "places_error", exc.message, exc.details)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("configuration_error", path=request.url.path, error=str(exc))
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "configuration_error", str(exc))


@app.exception_handler(APIError)
async def text_generation_error_handler(request: Request, exc: APIError):
    logger.error("text_generation_failed", path=request.url.path, error=str(exc))
    return error_response(status.HTTP_502_BAD_GATEWAY, "text_generation_error", "Chat failed", str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    message = errors[0]["msg"].replace("Value error, ", "") if errors else "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, "validation_error", message, errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, "http_error", str(exc.detail))


# ============================================================================
# Health & Status Endpoints
# ============================================================================

@app.get("/api/health", response_model=HealthCheck, tags=["System"])
async def health_check(service: SearchService = Depends(get_search_service)):
    """Check system health and service availability."""
    services = {
        "inventory": await service.adapter.health_check(),
        "text_generation": bool(settings.anthropic_api_key),
        "places": bool(settings.google_places_api_key),
    }

    return HealthCheck(
        status="healthy" if all(services.values()) else "degraded",
        timestamp=datetime.now(),
        version=__version__,
        services=services
    )


# ============================================================================
# Search Endpoints
# ============================================================================

@app.post("/api/search/cars", response_model=CarSearchResponse, tags=["Search"])
async def search_cars(filters: SearchFilters, service: SearchService = Depends(get_search_service)):
    """Search the inventory with structured filters."""
    logger.info("filter_search_requested", filters=filters.model_dump(exclude_none=True, by_alias=True))
    cars, total = await service.search_by_filters(filters)
    return CarSearchResponse(cars=cars, total_results=total)


@app.post("/api/search/prompt", response_model=DescriptionSearchResponse, tags=["Search"])
async def search_by_description(
    request: DescriptionSearchRequest,
    service: SearchService = Depends(get_search_service)
):
    """
    Search with a natural-language description.

    - **description**: What the shopper wants, e.g. "a used hybrid SUV under $30k"
    """
    filters, cars, total = await service.search_by_description(request.description)
    return DescriptionSearchResponse(filters=filters, cars=cars, total_results=total)


@app.get("/api/cars/{car_id}", response_model=CarDetailResponse, tags=["Search"])
async def get_car(car_id: str, service: SearchService = Depends(get_search_service)):
    """Get one car from the current inventory."""
    car = await service.get_car(car_id)
    if car is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    return CarDetailResponse(car=car)


# ============================================================================
# Assistant Endpoints
# ============================================================================

async def open_stream(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Pull the first chunk of a reply stream before any response is sent.

    Errors raised while opening the stream (missing key, upstream API error)
    propagate to the exception handlers instead of truncating a 200 response.
    """
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = ""

    async def replay() -> AsyncIterator[str]:
        if first:
            yield first
        async for chunk in chunks:
            yield chunk

    return replay()


@app.post("/api/chat", response_model=ChatResponse, tags=["Assistant"])
async def chat(
    request: ChatRequest,
    stream: Optional[str] = None,
    assistant: ShoppingAssistant = Depends(get_assistant)
):
    """
    Ask the shopping assistant about the displayed cars.

    Streams plain text when `?stream=1` or `"stream": true` is given.
    """
    should_stream = stream in ("1", "true") or request.stream

    if should_stream:
        chunks = await open_stream(assistant.stream_reply(request.messages, request.cars, request.original_query))
        return StreamingResponse(
            chunks,
            media_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache, no-transform"}
        )

    reply = await assistant.reply(request.messages, request.cars, request.original_query)
    return ChatResponse(reply=reply)


# ============================================================================
# Dealer Endpoints
# ============================================================================

@app.post("/api/dealers", response_model=NearbyDealerResponse, tags=["Dealers"])
async def nearby_dealers(request: NearbyDealerRequest, finder: NearbyDealerFinder = Depends(get_dealer_finder)):
    """Find dealerships of a make near a location."""
    dealers = await finder.find_dealers(request.lat, request.lng, request.make, request.radius_meters)
    return NearbyDealerResponse(dealers=dealers)


@app.get("/api/dealerships", response_model=DealershipListResponse, tags=["Dealers"])
async def dealerships():
    """List the registered dealership inventory sites."""
    return DealershipListResponse(dealers=[
        DealershipInfo(key=dealer.key, display_name=dealer.display_name, domain=dealer.domain)
        for dealer in list_dealers()
    ])


# ============================================================================
# Financing & Comparison Endpoints
# ============================================================================

@app.post("/api/affordability", response_model=AffordabilityResult, tags=["Financing"])
async def affordability(request: AffordabilityRequest):
    """Estimate the monthly payment for a finance or lease deal."""
    return calculate_affordability(request)


@app.post("/api/compare", response_model=ComparisonResult, tags=["Comparison"])
async def compare(request: CompareRequest):
    """Summarize how the compared cars differ."""
    return compare_cars(request.cars)


# Root endpoint
@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Dealer Search API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/api/health"
    }
