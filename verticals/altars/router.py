"""Altar pricing API router.

Endpoints:
- Option and extras listings (cached reads)
- Single-line and whole-order quotes
- Admin cache invalidation after catalogue edits

Rejected quotes (QuoteError) and data-store outages (RepositoryUnavailable)
are rendered by the app-level exception handlers in api.main.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from core.cache.cache_aside import CacheAside
from verticals.altars.cache_keys import AltarCacheKeys
from verticals.altars.models.schemas import (
    ConfigurationOption,
    ExtraItem,
    InvalidateRequest,
    InvalidateResponse,
    OptionKind,
    OrderQuote,
    OrderQuoteRequest,
    Quote,
    QuoteRequest,
)
from verticals.altars.repository import (
    CatalogRepository,
    RuleRepository,
    get_catalog_repository,
    get_rule_repository,
)
from verticals.altars.service import PricingService

router = APIRouter()


# ============================================================================
# Dependencies
# ============================================================================

def get_cache_aside(request: Request) -> CacheAside:
    return request.app.state.cache_aside


def get_pricing_service(
    request: Request,
    catalog: CatalogRepository = Depends(get_catalog_repository),
    rules: RuleRepository = Depends(get_rule_repository),
    cache: CacheAside = Depends(get_cache_aside),
) -> PricingService:
    """One PricingService per request, sharing the process-wide cache."""
    state = request.app.state
    keys: AltarCacheKeys = getattr(state, "cache_keys", None) or AltarCacheKeys()
    config = getattr(state, "config", None)
    return PricingService(
        catalog,
        rules,
        cache,
        keys=keys,
        pricing=config.pricing if config is not None else None,
    )


# ============================================================================
# Catalogue
# ============================================================================

@router.get("/options/{kind}", response_model=list[ConfigurationOption])
async def list_options(kind: str, service: PricingService = Depends(get_pricing_service)):
    """Available options of one kind (thickness / height / width)."""
    try:
        option_kind = OptionKind.parse(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown option kind: {kind}")
    return await service.list_options(option_kind)


@router.get("/extras", response_model=list[ExtraItem])
async def list_extras(
    category: Optional[str] = None,
    service: PricingService = Depends(get_pricing_service),
):
    return await service.list_available_extras(category)


# ============================================================================
# Quotes
# ============================================================================

@router.post("/quote", response_model=Quote)
async def quote(request: QuoteRequest, service: PricingService = Depends(get_pricing_service)):
    return await service.compute_quote(request)


@router.post("/orders/quote", response_model=OrderQuote)
async def quote_order(
    request: OrderQuoteRequest,
    service: PricingService = Depends(get_pricing_service),
):
    """Price every line with the order-wide item count driving the discount tier."""
    return await service.quote_order(request.lines)


# ============================================================================
# Admin
# ============================================================================

@router.post("/admin/invalidate", response_model=InvalidateResponse)
async def invalidate(
    request: InvalidateRequest,
    service: PricingService = Depends(get_pricing_service),
):
    deleted = await service.invalidate(request.entity)
    return InvalidateResponse(entity=request.entity, deleted=deleted)
