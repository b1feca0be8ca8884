from feedmap.core import (
    MappingSpec, StandardField,
    extract, discover_options, revalidate,
    PreviewNavigator, truncate_preview, is_extraction_error,
)

document = {
    "feed": {
        "generated": "2024-07-01T12:00:00Z",
        "products": [
            {"name": "Widget A", "brand": "Acme", "price": 3.5, "ean": "4006381333931"},
            {"name": "Widget B", "brand": "Acme", "price": 4.0, "ean": "4006381333948"},
            {"name": "Widget C", "brand": "Globex", "price": 10},
        ],
    }
}

# mapping saved against an older version of the feed
spec = MappingSpec(
    title_key="title",
    optional_field_keys={StandardField.VENDOR: "brand", StandardField.BARCODE: "gtin"},
    active_optional_fields=(StandardField.VENDOR, StandardField.BARCODE),
)

for path in ("feed.products[7]", "feed.generated", "feed.products"):
    result = extract(document, path)
    if is_extraction_error(result):
        print(f"{path}: {result.message}")
        continue

    print(f"{path}: {result.record_count} records")
    print("options:", [o.value for o in discover_options(result)])

    reconciled = revalidate(spec, result)
    for warning in reconciled.stale:
        print(f"cleared stale key {warning.key!r} at {warning.location}")

    spec = reconciled.spec.with_field(StandardField.BARCODE, "ean")
    print(truncate_preview(result.value, limit=200))

    nav = PreviewNavigator.of(result)
    while True:
        print(f"[{nav.index + 1}/{nav.total}]", nav.render(spec))
        if not nav.can_next:
            break
        nav = nav.next()
