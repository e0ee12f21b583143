import math
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, field_validator

from app.core.config import settings

TIER_MULTIPLIERS = {
    "Standard": 1.0,
    "Express": 1.5,
    "Premium": 2.0,
}


class OrderItem(BaseModel):
    fileId: Optional[str] = None
    documentTypeId: Optional[str] = None
    fileName: Optional[str] = None
    tier: Optional[str] = None


class FileItem(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    documentTypeId: Optional[str] = None
    tier: Optional[str] = None


class Calculation(BaseModel):
    """Authoritative server-side breakdown; any numeric field given wins."""
    subtotal: Optional[int] = None
    gstAmount: Optional[int] = None
    totalAmount: Optional[int] = None

    @field_validator("subtotal", "gstAmount", "totalAmount", mode="before")
    @classmethod
    def _numbers_only(cls, value):
        # anything that is not a JSON number is ignored, not coerced
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return round_half_up(value) if isinstance(value, float) else value


@dataclass
class LineItem:
    id: str
    name: str
    price: int
    subtitle: Optional[str] = None
    tier: Optional[str] = None
    udinRequired: bool = False


@dataclass
class PriceBreakdown:
    items: List[LineItem]
    subtotal: int
    gstAmount: int
    totalAmount: int
    taxRate: float

    def to_dict(self) -> Dict:
        return asdict(self)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def tier_multiplier(tier: Optional[str]) -> float:
    return TIER_MULTIPLIERS.get(tier, 1.0)


def stable_item_key(source: str, parts: Iterable) -> str:
    return f"{source}:" + "|".join(str(p) for p in parts if p is not None and p != "")


class PricingService:
    def __init__(self, catalogue: Dict = None, tax_rate: float = None, fallback_unit_price: int = None):
        # catalogue maps document type id -> object with name/base_price/udin_required
        self.catalogue = catalogue or {}
        self.tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate
        self.fallback_unit_price = (
            settings.FALLBACK_UNIT_PRICE if fallback_unit_price is None else fallback_unit_price
        )

    def unit_price(self, document_type_id: Optional[str], tier: Optional[str]) -> int:
        doc = self.catalogue.get(document_type_id)
        if not doc or not doc.base_price:
            return self.fallback_unit_price
        return round_half_up(doc.base_price * tier_multiplier(tier))

    def _line_item(self, key: str, document_type_id, tier, subtitle, default_name) -> LineItem:
        doc = self.catalogue.get(document_type_id)
        return LineItem(
            id=key,
            name=doc.name if doc else (default_name or "Document"),
            subtitle=subtitle,
            price=self.unit_price(document_type_id, tier),
            tier=tier,
            udinRequired=bool(doc and doc.udin_required),
        )

    def build_items(self, order_items: List[OrderItem] = None, files: List[FileItem] = None) -> List[LineItem]:
        """Line items from the current order, falling back to the uploaded files.

        Each item gets a deterministic namespaced id; repeated ids collapse
        into the first occurrence.
        """
        items = []
        if order_items:
            for i, it in enumerate(order_items):
                identity = it.fileId or f"{it.documentTypeId or 'doc'}|{it.fileName or i}|{it.tier or 'Standard'}"
                items.append(self._line_item(
                    stable_item_key("order", [identity]), it.documentTypeId, it.tier, it.fileName, None,
                ))
        elif files:
            for i, f in enumerate(files):
                identity = f.id or f.name or i
                items.append(self._line_item(
                    stable_item_key("file", [identity]), f.documentTypeId, f.tier, f.name, f.name,
                ))

        seen = set()
        unique = []
        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            unique.append(item)
        return unique

    def compute_breakdown(self, items: List[LineItem], calculation: Optional[Calculation] = None) -> PriceBreakdown:
        calculation = calculation or Calculation()

        subtotal = calculation.subtotal
        if subtotal is None:
            subtotal = sum(item.price or 0 for item in items)

        gst_amount = calculation.gstAmount
        if gst_amount is None:
            gst_amount = round_half_up(subtotal * self.tax_rate)

        total_amount = calculation.totalAmount
        if total_amount is None:
            total_amount = subtotal + gst_amount

        return PriceBreakdown(
            items=items,
            subtotal=subtotal,
            gstAmount=gst_amount,
            totalAmount=total_amount,
            taxRate=self.tax_rate,
        )
