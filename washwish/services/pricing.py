"""Price tables and the order pricing calculator.

All prices are whole rupees, so the normal pricing path never rounds.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, NamedTuple, Optional

from washwish.errors import ValidationError
from washwish.models.order import DeliveryOption, SpecialTreatment

CLOTH_PRICES: Dict[str, int] = {
    "shirt": 100, "tshirt": 80, "pants": 120, "jeans": 100, "shorts": 70,
    "suit": 400, "blazer": 250, "coat": 300,
    "saree": 200, "salwar": 150, "lehenga": 500, "kurta": 120, "sherwani": 400,
    "dress": 180, "skirt": 100,
    "bedsheet": 150, "pillowcover": 50, "blanket": 200, "comforter": 250,
    "curtain": 180, "towel": 80, "bathrobe": 150,
    "wedding": 800, "leather": 600,
    "tie": 60, "scarf": 80, "dupatta": 100, "jacket": 250,
}

# Unknown garment types are priced here instead of being rejected
DEFAULT_UNIT_PRICE = 100

DELIVERY_CHARGES: Dict[DeliveryOption, int] = {
    DeliveryOption.REGULAR: 0,
    DeliveryOption.EXPRESS: 100,
    DeliveryOption.SAME_DAY: 200,
}

TREATMENT_CHARGES: Dict[SpecialTreatment, int] = {
    SpecialTreatment.STAIN_REMOVAL: 50,
    SpecialTreatment.ODOR_REMOVAL: 40,
    SpecialTreatment.ANTIBACTERIAL: 30,
    SpecialTreatment.SANITIZATION: 60,
    SpecialTreatment.WATERPROOFING: 80,
    SpecialTreatment.WRINKLE_FREE: 40,
}


class ItemPricing(NamedTuple):
    unit_price: int
    line_total: int


class OrderPricing(NamedTuple):
    subtotal: int
    delivery_charge: int
    treatment_charge: int
    total_amount: int


def round_half_up(amount) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def unit_price_for(item_type: str) -> int:
    return CLOTH_PRICES.get((item_type or "").strip().lower(), DEFAULT_UNIT_PRICE)


def compute_item_pricing(item_type: str, quantity: int) -> ItemPricing:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be at least 1", field="quantity")
    unit_price = unit_price_for(item_type)
    return ItemPricing(unit_price=unit_price, line_total=unit_price * quantity)


def delivery_charge_for(option: Optional[str]) -> int:
    if option is None:
        return 0
    try:
        return DELIVERY_CHARGES[DeliveryOption(option)]
    except ValueError:
        raise ValidationError(f"Unknown delivery option '{option}'", field="delivery_option")


def unique_treatments(treatments: Optional[Iterable[str]]) -> List[SpecialTreatment]:
    """Parses treatments, keeping the first occurrence of each."""
    seen: List[SpecialTreatment] = []
    for raw in treatments or []:
        try:
            treatment = SpecialTreatment(raw)
        except ValueError:
            raise ValidationError(f"Unknown special treatment '{raw}'", field="special_treatments")
        if treatment not in seen:
            seen.append(treatment)
    return seen


def treatment_charge_for(treatments: Optional[Iterable[str]]) -> int:
    return sum(TREATMENT_CHARGES[t] for t in unique_treatments(treatments))


def _item_field(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name)


def compute_order_pricing(items, delivery_option=None, treatments=None) -> OrderPricing:
    subtotal = sum(
        compute_item_pricing(_item_field(item, "type"), _item_field(item, "quantity")).line_total
        for item in items
    )
    delivery_charge = delivery_charge_for(delivery_option)
    treatment_charge = treatment_charge_for(treatments)
    return OrderPricing(
        subtotal=subtotal,
        delivery_charge=delivery_charge,
        treatment_charge=treatment_charge,
        total_amount=subtotal + delivery_charge + treatment_charge,
    )


def price_catalog() -> dict:
    return {
        "items": dict(CLOTH_PRICES),
        "default_unit_price": DEFAULT_UNIT_PRICE,
        "delivery_options": {option.value: fee for option, fee in DELIVERY_CHARGES.items()},
        "special_treatments": {t.value: fee for t, fee in TREATMENT_CHARGES.items()},
    }
