from datetime import date

from pydantic import BaseModel, Field

from trippat.services.package_pricing_service import DateRange, PricingRequest, Travelers


class TravelersIn(BaseModel):
    adults: int = Field(2, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)

    def to_domain(self) -> Travelers:
        return Travelers(adults=self.adults, children=self.children, infants=self.infants)


class DateRangeIn(BaseModel):
    start_date: date | None = None
    end_date: date | None = None

    def to_domain(self) -> DateRange:
        return DateRange(start_date=self.start_date, end_date=self.end_date)


class DetailedPricingRequest(BaseModel):
    travelers: TravelersIn = Field(default_factory=TravelersIn)
    date_range: DateRangeIn = Field(default_factory=DateRangeIn)
    currency: str | None = None

    def to_domain(self) -> PricingRequest:
        return PricingRequest(
            travelers=self.travelers.to_domain(),
            date_range=self.date_range.to_domain(),
            currency=self.currency,
        )


class EstimateRequest(BaseModel):
    travelers: TravelersIn = Field(default_factory=TravelersIn)
    currency: str | None = None


class CompareRequest(BaseModel):
    configurations: list[TravelersIn]
    date_range: DateRangeIn = Field(default_factory=DateRangeIn)
    currency: str | None = None
