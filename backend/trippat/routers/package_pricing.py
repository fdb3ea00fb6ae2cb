"""Package pricing router — detailed quotes, quick estimates, and traveler-mix comparison."""

import logging

from fastapi import APIRouter, Depends

from trippat.dependencies import get_pricing_engine, to_http_exception
from trippat.schemas.pricing import CompareRequest, DetailedPricingRequest, EstimateRequest
from trippat.services.errors import TrippatError
from trippat.services.package_pricing_service import PackagePricingEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{package_id}/detailed")
async def detailed_pricing(
    package_id: str,
    req: DetailedPricingRequest,
    engine: PackagePricingEngine = Depends(get_pricing_engine),
):
    """Full quote with live hotel rates where available."""
    try:
        quote = await engine.calculate_package_pricing(package_id, req.to_domain())
    except TrippatError as e:
        raise to_http_exception(e)
    return quote.to_dict()


@router.post("/{package_id}/estimate")
async def quick_estimate(
    package_id: str,
    req: EstimateRequest,
    engine: PackagePricingEngine = Depends(get_pricing_engine),
):
    try:
        return await engine.get_quick_pricing_estimate(
            package_id, req.travelers.to_domain(), req.currency
        )
    except TrippatError as e:
        raise to_http_exception(e)


@router.post("/{package_id}/compare")
async def compare_configurations(
    package_id: str,
    req: CompareRequest,
    engine: PackagePricingEngine = Depends(get_pricing_engine),
):
    """Price several traveler mixes and recommend the cheapest per person."""
    try:
        return await engine.compare_configurations(
            package_id,
            [t.to_domain() for t in req.configurations],
            req.date_range.to_domain(),
            req.currency,
        )
    except TrippatError as e:
        raise to_http_exception(e)
