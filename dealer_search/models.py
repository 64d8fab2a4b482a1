"""
Pydantic models for API requests, responses, and internal data structures.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanged with the browser client and the LLM in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Filter Models
# ============================================================================

class NumericRange(CamelModel):
    """Inclusive numeric range used for prices and mileage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    min: float = Field(0, ge=0, description="Lower bound (inclusive)")
    max: float = Field(..., ge=0, description="Upper bound (inclusive)")

    @model_validator(mode="before")
    @classmethod
    def order_bounds(cls, data: Any) -> Any:
        """Swap reversed bounds instead of rejecting them."""
        if not isinstance(data, dict):
            return data
        low, high = data.get("min", 0), data.get("max")
        if isinstance(low, (int, float)) and isinstance(high, (int, float)) and low > high:
            data = {**data, "min": high, "max": low}
        return data

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @property
    def span(self) -> float:
        return self.max - self.min


VEHICLE_STATUSES = {"in stock": "In Stock", "in transit": "In Transit", "build phase": "Build Phase"}


class SearchFilters(CamelModel):
    """
    Structured search constraints.
    Every field is optional and an absent field never excludes a vehicle.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore"
    )

    make: Optional[str] = None
    model: Optional[str] = None
    models: Optional[List[str]] = None
    trim: Optional[str] = None
    dealership: Optional[str] = None
    dealerships: Optional[List[str]] = None
    price_range: Optional[NumericRange] = None
    price_ranges: Optional[List[NumericRange]] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    condition: Optional[Literal["new", "used", "both"]] = None
    mileage: Optional[NumericRange] = None
    color: Optional[str] = None
    fuel_type: Optional[Literal["gasoline", "hybrid", "electric"]] = None
    body_style: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    options: Optional[List[str]] = None
    highway_mpg: Optional[float] = Field(None, ge=0)
    city_mpg: Optional[float] = Field(None, ge=0)
    overall_mpg: Optional[float] = Field(None, ge=0)
    interior_material: Optional[str] = None
    engine: Optional[str] = None
    drive_line: Optional[str] = None
    vehicle_status: Optional[Literal["In Stock", "In Transit", "Build Phase"]] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        if isinstance(v, list):
            cleaned = [item.strip() if isinstance(item, str) else item for item in v]
            cleaned = [item for item in cleaned if item not in ("", None)]
            return cleaned or None
        return v

    @field_validator("condition", "fuel_type", mode="before")
    @classmethod
    def lowercase_choice(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "gas":
                return "gasoline"
        return v

    @field_validator("vehicle_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return VEHICLE_STATUSES.get(v.lower(), v)
        return v

    @property
    def preferred_models(self) -> List[str]:
        """Models named by the user, most preferred first."""
        if self.models:
            return list(self.models)
        if self.model:
            return [self.model]
        return []

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


# ============================================================================
# Inventory Models
# ============================================================================

class VehicleListing(CamelModel):
    """Canonical vehicle record normalized from the dealer inventory feed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., description="Listing identifier, unique within one fetch")
    year: int = Field(..., description="Model year")
    make: str = Field("Toyota", description="Vehicle make")
    model: str = Field(..., description="Vehicle model")
    trim: str = Field("", description="Trim level")
    body_style: str = Field("Sedan", description="Body style")
    exterior_color: str = Field("Unknown", description="Exterior color")
    interior_color: str = Field("Unknown", description="Interior color")
    transmission: str = Field("Automatic", description="Transmission type")
    engine: str = Field("Unknown", description="Engine description")
    fuel_type: str = Field("gasoline", description="Normalized fuel type")
    city_mpg: float = Field(0, description="City fuel economy")
    highway_mpg: float = Field(0, description="Highway fuel economy")
    mileage: int = Field(0, description="Odometer reading")
    asking_price: float = Field(0, description="List price (MSRP)")
    internet_price: Optional[float] = Field(None, description="Discounted internet price")
    image_url: Optional[str] = Field(None, description="Primary image URL")
    vin: Optional[str] = Field(None, description="Vehicle Identification Number")
    stock_number: Optional[str] = Field(None, description="Stock/lot number")
    is_new: bool = Field(False, description="Flagged new by the source")
    seats: int = Field(5, description="Seat count")
    dealer: Optional[str] = Field(None, description="Dealer registry key")

    @property
    def price(self) -> float:
        """Discounted price when the feed has one, otherwise the list price."""
        if self.internet_price:
            return self.internet_price
        return self.asking_price

    @property
    def average_mpg(self) -> float:
        return (self.city_mpg + self.highway_mpg) / 2

    @property
    def is_new_condition(self) -> bool:
        return self.is_new or self.mileage < 100


class ScoredCandidate(BaseModel):
    """A listing paired with its score for one ranking pass."""

    listing: VehicleListing
    score: int = Field(..., ge=0)


class CarSpecs(CamelModel):
    transmission: str
    engine: str
    seats: int


def calculate_eco_rating(fuel_type: str, city_mpg: float, highway_mpg: float) -> int:
    """Eco rating on a 1-10 scale from fuel type and average MPG."""
    avg_mpg = (city_mpg + highway_mpg) / 2
    rating = 5

    if fuel_type == "hybrid":
        rating += 2
    elif fuel_type == "electric":
        rating += 3
    elif fuel_type == "diesel":
        rating += 1

    if avg_mpg > 35:
        rating += 2
    elif avg_mpg > 25:
        rating += 1
    elif avg_mpg < 15:
        rating -= 1

    return min(max(rating, 1), 10)


class CarSummary(CamelModel):
    """Vehicle as presented on results, detail and comparison pages."""

    id: str
    name: str
    model: str
    make: str
    price: float
    year: int
    mileage: int
    color: str
    fuel_type: str
    mpg: int
    image_url: str
    specs: CarSpecs
    eco_rating: Optional[int] = None
    is_new: bool
    dealer: Optional[str] = None

    @classmethod
    def from_listing(cls, listing: VehicleListing) -> "CarSummary":
        name = f"{listing.year} {listing.make} {listing.model}"
        if listing.trim:
            name = f"{name} {listing.trim}"

        return cls(
            id=listing.id,
            name=name,
            model=listing.model,
            make=listing.make,
            price=listing.price or 0,
            year=listing.year,
            mileage=listing.mileage,
            color=listing.exterior_color,
            fuel_type=listing.fuel_type,
            mpg=round(listing.average_mpg),
            image_url=listing.image_url or (
                f"/placeholder.svg?height=300&width=400&query={listing.make} {listing.model} {listing.year}"
            ),
            specs=CarSpecs(
                transmission=listing.transmission,
                engine=listing.engine,
                seats=listing.seats or 5
            ),
            eco_rating=calculate_eco_rating(listing.fuel_type, listing.city_mpg, listing.highway_mpg),
            is_new=listing.is_new,
            dealer=listing.dealer
        )


# ============================================================================
# Dealer Models
# ============================================================================

class DealerFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset_shared_vehicle_image_by_one: bool = False


class DealerConfig(BaseModel):
    """Static registry entry for one dealership inventory site."""

    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    site_id: str
    domain: str
    page_id_new: str
    page_id_used: str
    referer_new: str
    referer_used: str
    flags: DealerFlags = Field(default_factory=DealerFlags)

    def page_id(self, condition: Literal["new", "used"]) -> str:
        return self.page_id_new if condition == "new" else self.page_id_used

    def referer(self, condition: Literal["new", "used"]) -> str:
        return self.referer_new if condition == "new" else self.referer_used


class DealershipInfo(CamelModel):
    key: str
    display_name: str
    domain: str


class GeoLocation(BaseModel):
    lat: float
    lng: float


class NearbyDealer(CamelModel):
    """Dealer returned by the places search."""

    name: str
    address: str = ""
    rating: Optional[float] = None
    place_id: Optional[str] = None
    location: Optional[GeoLocation] = None
    is_open: Optional[bool] = None


# ============================================================================
# Search Request/Response Models
# ============================================================================

class DescriptionSearchRequest(CamelModel):
    """Request model for the natural-language search."""

    description: str = Field(..., max_length=2000, description="Free-text vehicle description")

    @field_validator("description")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v


class CarSearchResponse(CamelModel):
    success: bool = True
    cars: List[CarSummary] = Field(default_factory=list)
    total_results: int = Field(..., description="Matches before capping")


class DescriptionSearchResponse(CamelModel):
    success: bool = True
    filters: SearchFilters
    cars: List[CarSummary] = Field(default_factory=list)
    total_results: int = Field(..., description="Ranked matches before diversification")
    message: str = "Filters generated from description"


class CarDetailResponse(CamelModel):
    success: bool = True
    car: CarSummary


# ============================================================================
# Assistant Models
# ============================================================================

class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    """Conversation turn for the shopping assistant."""

    messages: List[ChatMessage] = Field(default_factory=list)
    cars: List[CarSummary] = Field(default_factory=list, description="Cars visible on the results page")
    original_query: str = Field("", description="The user's original description")
    stream: bool = False


class ChatResponse(BaseModel):
    reply: str


# ============================================================================
# Dealer Lookup Models
# ============================================================================

class NearbyDealerRequest(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    make: str = Field(..., description="Vehicle make, e.g. Toyota")
    radius_meters: int = Field(10000, gt=0, le=50000)

    @field_validator("make")
    @classmethod
    def require_make(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("'make' is required")
        return v


class NearbyDealerResponse(CamelModel):
    success: bool = True
    dealers: List[NearbyDealer] = Field(default_factory=list)


class DealershipListResponse(CamelModel):
    success: bool = True
    dealers: List[DealershipInfo] = Field(default_factory=list)


# ============================================================================
# Financing Models
# ============================================================================

class AffordabilityRequest(CamelModel):
    """Inputs for the monthly payment estimate."""

    price: float = Field(..., gt=0, description="Vehicle price")
    down_payment: Optional[float] = Field(None, ge=0, description="Defaults to 10% of price")
    credit_score: int = Field(750, ge=300, le=850)
    loan_type: Literal["finance", "lease"] = "finance"
    loan_term: Optional[int] = Field(None, description="Months; defaults to 60 (finance) or 36 (lease)")

    @model_validator(mode="after")
    def check_terms(self) -> "AffordabilityRequest":
        if self.down_payment is not None and self.down_payment > self.price:
            raise ValueError("Down payment cannot exceed the vehicle price")
        if self.loan_term is not None:
            low, high = (24, 48) if self.loan_type == "lease" else (36, 84)
            if not low <= self.loan_term <= high:
                raise ValueError(f"{self.loan_type} term must be between {low} and {high} months")
        return self


class AffordabilityResult(CamelModel):
    monthly_payment: int
    total_payment: int
    total_interest: int
    interest_rate: float
    residual_value: float
    down_payment: float
    loan_term: int
    loan_type: Literal["finance", "lease"]
    credit_category: str


# ============================================================================
# Comparison Models
# ============================================================================

class CompareRequest(CamelModel):
    cars: List[CarSummary] = Field(default_factory=list)


class ComparisonResult(CamelModel):
    count: int
    cheapest_id: Optional[str] = None
    best_mpg_id: Optional[str] = None
    lowest_mileage_id: Optional[str] = None
    price_spread: float = 0


# ============================================================================
# Health & Error Models
# ============================================================================

class HealthCheck(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"] = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.now, description="Check timestamp")
    version: str = Field(..., description="Application version")
    services: Dict[str, bool] = Field(default_factory=dict, description="Service availability")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Any] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.now, description="Error timestamp")
