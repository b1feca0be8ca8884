import logging
import sys

from feedmap.core import (
    MappingSpec, ProductTransformer, EngineConfig,
    extract, revalidate, is_extraction_error,
)
from feedmap.core.io import write_products_csv
from feedmap.transport.ftp import FtpConfig, FtpDocumentSource, FtpTransportError

def main():
    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("feedmap.cookbook")

    credentials = {"host": "ftp.example.com", "port": 21, "user": "feed", "password": "secret"}
    persisted = {
        "mapping": {
            "title": "title",
            "vendor": "brand",
            "descriptionHtml": "description",
            "sku": "sku",
            "barcode": "ean",
            "price": "price",
        },
        "metafieldMappings": [
            {
                "mappingType": "dynamic_from_array",
                "sourceKey": "properties",
                "metafieldNamespace": "specifications",
                "arrayKeySource": "prop_code",
                "arrayValueSource": "prod_value",
                "metafieldType": "single_line_text_field",
            }
        ],
    }

    source = FtpDocumentSource(FtpConfig(max_retries=2))
    try:
        status = source.test_connection(credentials)
        if not status["success"]:
            log.error("Cannot connect: %s", status["error"])
            sys.exit(1)

        for entry in source.list_files(credentials, "/export"):
            print(entry)

        document = source.download(credentials, "/export/productdata.json")
    except FtpTransportError as e:
        log.error("Download failed: %s", e)
        sys.exit(1)
    finally:
        source.close()

    extracted = extract(document, "products")
    if is_extraction_error(extracted):
        log.error(extracted.message)
        sys.exit(1)

    reconciled = revalidate(MappingSpec.from_dict(persisted), extracted)
    for warning in reconciled.stale:
        log.warning("Source key %r no longer present (%s)", warning.key, warning.location)

    transformer = ProductTransformer(reconciled.spec, config=EngineConfig(logger=log))
    written = write_products_csv(transformer, extracted.records, "products.csv", batch_size=500)
    print(f"Wrote {written} products")


if __name__ == "__main__":
    main()
