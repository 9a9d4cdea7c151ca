"""DCA simulation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies.prices import get_clock, get_price_source
from app.config import get_settings
from app.schemas import (
    ComparisonRequest,
    ComparisonResponse,
    SimulationRequest,
    SimulationResponse,
)
from dca_simulator.clock import Clock
from dca_simulator.engine import PriceSource, calculate_dca, compare_assets
from dca_simulator.errors import (
    ConfigurationError,
    DataAvailabilityError,
    PriceFetchError,
    SimulationError,
)
from dca_simulator.validators import validate_start_date

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(exc: SimulationError) -> HTTPException:
    if isinstance(exc, ConfigurationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, DataAvailabilityError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, PriceFetchError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=exc.to_dict())


def _check_start_date(request: SimulationRequest, clock: Clock) -> None:
    error = validate_start_date(request.start_date, clock.today())
    if error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"stage": "config", "message": "Invalid simulation parameters", "errors": {"startDate": error}},
        )


@router.post("", response_model=SimulationResponse)
async def run_simulation(
    request: SimulationRequest,
    source: PriceSource = Depends(get_price_source),
    clock: Clock = Depends(get_clock),
) -> SimulationResponse:
    """Simulate a DCA plan for a single asset pair."""

    _check_start_date(request, clock)
    forward_only = get_settings().price_match == "forward"
    try:
        result = await calculate_dca(request.to_config(), source, clock=clock, forward_only=forward_only)
    except SimulationError as exc:
        logger.warning("Simulation for %s failed at %s: %s", request.asset_pair, exc.stage, exc.message)
        raise _http_error(exc) from exc
    return SimulationResponse.model_validate(result)


@router.post("/compare", response_model=ComparisonResponse)
async def run_comparison(
    request: ComparisonRequest,
    source: PriceSource = Depends(get_price_source),
    clock: Clock = Depends(get_clock),
) -> ComparisonResponse:
    """Simulate the same DCA plan for up to five asset pairs."""

    _check_start_date(request, clock)
    forward_only = get_settings().price_match == "forward"
    try:
        results = await compare_assets(
            request.to_config(),
            request.asset_pairs,
            source,
            clock=clock,
            forward_only=forward_only,
        )
    except SimulationError as exc:
        logger.warning("Comparison failed at %s: %s", exc.stage, exc.message)
        raise _http_error(exc) from exc
    return ComparisonResponse.model_validate({"results": results})


__all__ = ["run_simulation", "run_comparison"]
