from feedmap.core import MappingSpec, MappingError, validate_mapping

def main():
    persisted = {
        "mapping": {
            "title": "name",
            "vendor": "brand",
            "seo": {"title": "seo_title", "keywords": "kw"},
            "inventoryItem": {"cost": "purchase_price"},
        },
        "metafieldMappings": [
            {
                "mappingType": "single",
                "sourceKey": "material",
                "metafieldNamespace": "custom",
                "metafieldType": "single_line_text_field",
            },
            {
                "mappingType": "dynamic_from_array",
                "sourceKey": "properties",
                "metafieldNamespace": "specifications",
                "arrayKeySource": "prop_code",
                "arrayValueSource": "prod_value",
                "metafieldType": "single_line_text_field",
            },
        ],
    }

    ok, errors = validate_mapping(persisted)
    print("valid:", ok)
    for e in errors:
        print(" -", e)

    try:
        MappingSpec.from_dict(persisted)
    except MappingError as e:
        print(e)

    del persisted["mapping"]["seo"]["keywords"]
    persisted["metafieldMappings"][0]["metafieldKey"] = "material"
    spec = MappingSpec.from_dict(persisted)
    print(spec.to_dict())


if __name__ == "__main__":
    main()
