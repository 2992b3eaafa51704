# sales/services/tax_rates.py

"""
TAX RATE TABLE

Region code -> (HST, GST, PST) rates as Decimal fractions.

Source: settings.TAX_RATES (injected; never hard-coded in the engine).
Unknown or blank regions fall back to settings.DEFAULT_TAX_REGION.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class TaxRates:
    hst: Decimal = Decimal("0")
    gst: Decimal = Decimal("0")
    pst: Decimal = Decimal("0")

    @property
    def combined(self) -> Decimal:
        return self.hst + self.gst + self.pst


def _rate(value, *, region: str, name: str) -> Decimal:
    try:
        rate = Decimal(str(value if value not in (None, "") else "0"))
    except InvalidOperation:
        raise ImproperlyConfigured(f"TAX_RATES[{region}].{name} is not a number")
    if rate < 0:
        raise ImproperlyConfigured(f"TAX_RATES[{region}].{name} cannot be negative")
    return rate


class TaxRateTable:
    def __init__(self, rates: dict, *, default_region: str):
        self._rates = {
            str(region).strip().upper(): TaxRates(
                hst=_rate(row.get("hst"), region=region, name="hst"),
                gst=_rate(row.get("gst"), region=region, name="gst"),
                pst=_rate(row.get("pst"), region=region, name="pst"),
            )
            for region, row in (rates or {}).items()
        }
        self.default_region = (default_region or "").strip().upper()
        if self.default_region not in self._rates:
            raise ImproperlyConfigured(
                f"DEFAULT_TAX_REGION {self.default_region!r} is missing from TAX_RATES"
            )

    @classmethod
    def from_settings(cls) -> "TaxRateTable":
        return cls(
            getattr(settings, "TAX_RATES", {}),
            default_region=getattr(settings, "DEFAULT_TAX_REGION", "ON"),
        )

    def resolve_region(self, region: str | None) -> str:
        key = (region or "").strip().upper()
        return key if key in self._rates else self.default_region

    def rates_for(self, region: str | None) -> TaxRates:
        return self._rates[self.resolve_region(region)]
