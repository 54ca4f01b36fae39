# app/domain/services/industry_config.py
"""
Industry-based feature gating.

Each business picks an industry in its settings; the industry decides which
modules the front end shows.  Unknown industries fall back to ``general``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any


class Industry(str, Enum):
    GENERAL = "general"
    RETAIL = "retail"
    RESTAURANT = "restaurant"
    FREELANCER = "freelancer"
    MANUFACTURING = "manufacturing"
    SERVICES = "services"


@dataclass(frozen=True)
class IndustryFeatures:
    # core
    show_inventory: bool
    show_pos: bool
    show_table_billing: bool
    show_rental_module: bool
    # procurement
    show_purchase_orders: bool
    show_suppliers: bool
    show_purchases: bool
    # sales
    show_quotations: bool
    show_recurring_invoices: bool
    show_delivery_challan: bool
    # financial
    show_gst_toggle: bool
    show_itr_module: bool
    show_advance_tax: bool
    # ui
    simplified_ui: bool
    default_module: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


FEATURE_FLAGS = tuple(f.name for f in fields(IndustryFeatures) if f.type in (bool, "bool"))

INDUSTRY_FEATURES: dict[Industry, IndustryFeatures] = {
    Industry.GENERAL: IndustryFeatures(
        show_inventory=True, show_pos=True, show_table_billing=False, show_rental_module=True,
        show_purchase_orders=True, show_suppliers=True, show_purchases=True,
        show_quotations=True, show_recurring_invoices=True, show_delivery_challan=True,
        show_gst_toggle=False, show_itr_module=False, show_advance_tax=False,
        simplified_ui=False, default_module="/dashboard",
    ),
    Industry.RETAIL: IndustryFeatures(
        show_inventory=True, show_pos=True, show_table_billing=False, show_rental_module=False,
        show_purchase_orders=True, show_suppliers=True, show_purchases=True,
        show_quotations=False, show_recurring_invoices=False, show_delivery_challan=True,
        show_gst_toggle=False, show_itr_module=False, show_advance_tax=False,
        simplified_ui=False, default_module="/pos",
    ),
    Industry.RESTAURANT: IndustryFeatures(
        show_inventory=True, show_pos=True, show_table_billing=True, show_rental_module=False,
        show_purchase_orders=True, show_suppliers=True, show_purchases=True,
        show_quotations=False, show_recurring_invoices=False, show_delivery_challan=False,
        show_gst_toggle=False, show_itr_module=False, show_advance_tax=False,
        simplified_ui=False, default_module="/tables",
    ),
    # purchases stay on for expense tracking
    Industry.FREELANCER: IndustryFeatures(
        show_inventory=False, show_pos=False, show_table_billing=False, show_rental_module=False,
        show_purchase_orders=False, show_suppliers=False, show_purchases=True,
        show_quotations=True, show_recurring_invoices=True, show_delivery_challan=False,
        show_gst_toggle=True, show_itr_module=True, show_advance_tax=True,
        simplified_ui=True, default_module="/dashboard",
    ),
    Industry.MANUFACTURING: IndustryFeatures(
        show_inventory=True, show_pos=False, show_table_billing=False, show_rental_module=False,
        show_purchase_orders=True, show_suppliers=True, show_purchases=True,
        show_quotations=True, show_recurring_invoices=False, show_delivery_challan=True,
        show_gst_toggle=False, show_itr_module=False, show_advance_tax=False,
        simplified_ui=False, default_module="/dashboard",
    ),
    Industry.SERVICES: IndustryFeatures(
        show_inventory=False, show_pos=False, show_table_billing=False, show_rental_module=False,
        show_purchase_orders=False, show_suppliers=True, show_purchases=True,
        show_quotations=True, show_recurring_invoices=True, show_delivery_challan=False,
        show_gst_toggle=True, show_itr_module=True, show_advance_tax=True,
        simplified_ui=True, default_module="/dashboard",
    ),
}

INDUSTRY_DISPLAY_NAMES = {
    Industry.GENERAL: "General Business",
    Industry.RETAIL: "Retail & E-commerce",
    Industry.RESTAURANT: "Restaurant & Food Service",
    Industry.FREELANCER: "Freelancer & Professional Services",
    Industry.MANUFACTURING: "Manufacturing",
    Industry.SERVICES: "Service Business",
}


def _resolve(industry: Industry | str | None) -> Industry:
    try:
        return Industry(industry)
    except ValueError:
        return Industry.GENERAL


def get_industry_features(industry: Industry | str | None) -> IndustryFeatures:
    return INDUSTRY_FEATURES[_resolve(industry)]


def is_feature_enabled(industry: Industry | str | None, feature: str) -> bool:
    """Whether a boolean feature flag is on.  Unknown flag names are off."""
    if feature not in FEATURE_FLAGS:
        return False
    return bool(getattr(get_industry_features(industry), feature))


def industry_display_name(industry: Industry | str | None) -> str:
    return INDUSTRY_DISPLAY_NAMES[_resolve(industry)]


def available_industries() -> list[dict[str, str]]:
    return [{"value": i.value, "label": INDUSTRY_DISPLAY_NAMES[i]} for i in Industry]
