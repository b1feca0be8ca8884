from feedmap.core import MappingSpecBuilder, ProductTransformer, EngineConfig

record = {
    "id": "3100000025",
    "title": "DURACELL Alkaline Plus 3LR12 | MN1203",
    "sku": "3100000025",
    "ean": "5000394146235",
    "description": "DURACELL Alkaline Plus 3LR12 | MN1203 - 4.5 V - 5400 mAh Battery",
    "tags": ["Batterij", "3LR12"],
    "weight": 0.17,
    "price": 2.82,
    "brand": "Duracell",
    "in_stock": False,
    "properties": [
        {"prop_code": "BAT_TYPE", "prop_name": "Battery type:", "prod_value": "Alkaline Plus"},
        {"prop_code": "BAT_EXEC", "prop_name": "Battery model:", "prod_value": "Special"},
    ],
}

spec = (
    MappingSpecBuilder()
    .title("title")
    .fields({
        "FIELD_VENDOR": "brand",
        "FIELD_DESCRIPTION_HTML": "description",
        "FIELD_TAGS": "tags",
        "FIELD_SKU": "sku",
        "FIELD_BARCODE": "ean",
        "FIELD_PRICE": "price",
        "FIELD_WEIGHT": "weight",
    })
    .single("in_stock", "in_stock", type="boolean")
    .dynamic("properties", "prop_code", "prod_value", namespace="specifications")
    .build()
)

transformer = ProductTransformer(spec, config=EngineConfig())

print(transformer.transform(record))
print(transformer.to_dataframe([record]).T)
