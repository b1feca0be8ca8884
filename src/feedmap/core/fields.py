from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Target(str, Enum):
    ROOT = "root"
    SEO = "seo"
    INVENTORY_ITEM = "inventoryItem"


@dataclass(frozen=True)
class Placement:
    target: Target
    key: str

    @property
    def location(self) -> str:
        if self.target is Target.ROOT:
            return self.key
        return f"{self.target.value}.{self.key}"


class StandardField(str, Enum):
    TITLE = "title"
    DESCRIPTION_HTML = "descriptionHtml"
    VENDOR = "vendor"
    HANDLE = "handle"
    PRODUCT_TYPE = "productType"
    TAGS = "tags"
    STATUS = "status"
    SEO_TITLE = "seo.title"
    SEO_DESCRIPTION = "seo.description"
    PUBLISHED_AT = "publishedAt"
    REQUIRES_SELLING_PLAN = "requiresSellingPlan"
    TEMPLATE_SUFFIX = "templateSuffix"
    SKU = "sku"
    BARCODE = "barcode"
    PRICE = "price"
    COMPARE_AT_PRICE = "compareAtPrice"
    WEIGHT = "weight"
    WEIGHT_UNIT = "weightUnit"
    INVENTORY_POLICY = "inventoryPolicy"
    INVENTORY_QUANTITY = "inventoryQuantity"
    INVENTORY_MANAGEMENT = "inventoryManagement"
    TAXABLE = "taxable"
    TAX_CODE = "taxCode"
    HARMONIZED_SYSTEM_CODE = "harmonizedSystemCode"
    REQUIRES_SHIPPING = "requiresShipping"
    COST = "inventoryItem.cost"

    @property
    def constant(self) -> str:
        return f"FIELD_{self.name}"

    @property
    def placement(self) -> Placement:
        return FIELD_PLACEMENT[self]

    @classmethod
    def lookup(cls, name: Any) -> Optional["StandardField"]:
        """Find a field by enum member, field id (``seo.title``) or constant (``FIELD_SEO_TITLE``)."""
        if isinstance(name, StandardField):
            return name
        if not isinstance(name, str):
            return None
        if name.startswith("FIELD_"):
            return cls.__members__.get(name[len("FIELD_"):])
        try:
            return cls(name)
        except ValueError:
            return None


FIELD_PLACEMENT: Dict[StandardField, Placement] = {
    StandardField.TITLE: Placement(Target.ROOT, "title"),
    StandardField.DESCRIPTION_HTML: Placement(Target.ROOT, "bodyHtml"),
    StandardField.VENDOR: Placement(Target.ROOT, "vendor"),
    StandardField.PRODUCT_TYPE: Placement(Target.ROOT, "productType"),
    StandardField.TAGS: Placement(Target.ROOT, "tags"),
    StandardField.STATUS: Placement(Target.ROOT, "status"),
    StandardField.HANDLE: Placement(Target.ROOT, "handle"),
    StandardField.PUBLISHED_AT: Placement(Target.ROOT, "publishedAt"),
    StandardField.REQUIRES_SELLING_PLAN: Placement(Target.ROOT, "requiresSellingPlan"),
    StandardField.TEMPLATE_SUFFIX: Placement(Target.ROOT, "templateSuffix"),
    StandardField.SEO_TITLE: Placement(Target.SEO, "title"),
    StandardField.SEO_DESCRIPTION: Placement(Target.SEO, "description"),
    StandardField.SKU: Placement(Target.INVENTORY_ITEM, "sku"),
    StandardField.BARCODE: Placement(Target.INVENTORY_ITEM, "barcode"),
    StandardField.PRICE: Placement(Target.INVENTORY_ITEM, "price"),
    StandardField.COMPARE_AT_PRICE: Placement(Target.INVENTORY_ITEM, "compareAtPrice"),
    StandardField.WEIGHT: Placement(Target.INVENTORY_ITEM, "weight"),
    StandardField.WEIGHT_UNIT: Placement(Target.INVENTORY_ITEM, "weightUnit"),
    StandardField.INVENTORY_POLICY: Placement(Target.INVENTORY_ITEM, "inventoryPolicy"),
    StandardField.INVENTORY_QUANTITY: Placement(Target.INVENTORY_ITEM, "inventoryQuantity"),
    StandardField.INVENTORY_MANAGEMENT: Placement(Target.INVENTORY_ITEM, "inventoryManagement"),
    StandardField.TAXABLE: Placement(Target.INVENTORY_ITEM, "taxable"),
    StandardField.TAX_CODE: Placement(Target.INVENTORY_ITEM, "taxCode"),
    StandardField.HARMONIZED_SYSTEM_CODE: Placement(Target.INVENTORY_ITEM, "harmonizedSystemCode"),
    StandardField.REQUIRES_SHIPPING: Placement(Target.INVENTORY_ITEM, "requiresShipping"),
    StandardField.COST: Placement(Target.INVENTORY_ITEM, "cost"),
}

OPTIONAL_FIELDS: Tuple[StandardField, ...] = tuple(f for f in StandardField if f is not StandardField.TITLE)

METAFIELD_TYPES: Tuple[str, ...] = (
    "single_line_text_field",
    "multi_line_text_field",
    "json_string",
    "number_integer",
    "number_decimal",
    "boolean",
    "url",
    "date",
    "date_time",
    "color",
    "weight",
    "volume",
    "dimension",
    "rating",
    "list.single_line_text_field",
    "list.multi_line_text_field",
    "list.number_integer",
    "list.number_decimal",
    "list.boolean",
    "list.url",
    "list.date",
    "list.date_time",
    "list.json_string",
)

DEFAULT_NAMESPACE = "custom"
DEFAULT_METAFIELD_TYPE = METAFIELD_TYPES[0]
