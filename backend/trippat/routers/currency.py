"""Currency router — supported currencies and price conversion for display."""

from fastapi import APIRouter, Depends, Query

from trippat.dependencies import get_currency_service
from trippat.services.currency_service import CurrencyService

router = APIRouter()


@router.get("/supported")
async def supported_currencies(currency: CurrencyService = Depends(get_currency_service)):
    codes = currency.get_supported_currencies()
    return {
        "currencies": [{"code": code, "symbol": currency.get_currency_symbol(code)} for code in codes],
    }


@router.get("/convert")
async def convert_price(
    amount: float = Query(..., ge=0),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str | None = Query(None, alias="to", min_length=3, max_length=3),
    currency: CurrencyService = Depends(get_currency_service),
):
    """Convert a price into the user's currency, with a formatted label."""
    result = await currency.convert_price_to_user_currency(
        amount, from_currency.upper(), to_currency.upper() if to_currency else None
    )
    return {**result, "formatted": currency.format_price(result["price"], result["currency"])}
