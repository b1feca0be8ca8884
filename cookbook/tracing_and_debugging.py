import logging

from feedmap.core import MappingSpecBuilder, ProductTransformer, EngineConfig, StandardField

def main():
    logging.basicConfig(level=logging.DEBUG)

    record = {
        "name": "Widget A",
        "brand": "Acme",
        "price": 3.5,
        "specs": [
            {"code": "COLOR", "value": "red"},
            {"code": "SIZE"},
        ],
    }

    spec = (
        MappingSpecBuilder()
        .title("name")
        .fields({"vendor": "brand", "price": "price", "barcode": "ean"})
        .single("material", "material")
        .dynamic("specs", "code", "value", namespace="specifications")
        .build()
        .activate_field(StandardField.TAGS)
    )

    transformer = ProductTransformer(
        spec,
        config=EngineConfig(trace_enabled=True, logger=logging.getLogger("feedmap.cookbook")),
    )
    transformer.transform(record)

    trace = transformer.trace(record)
    print(trace["title"])
    for field_id, node in trace["fields"].items():
        print(f"{field_id:>10} -> {node['target']:<22} {node['status']}")
    for node in trace["metafields"]:
        print(node)


if __name__ == "__main__":
    main()
