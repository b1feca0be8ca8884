import logging

from feedmap.core import MappingSpec, discover_options, extract, review_suggestions
from feedmap.rest.client import IntegrationApiClient
from feedmap.rest.exceptions import FeedmapClientError
from feedmap.rest.models import ConnectionSettings, IntegrationRecord
from feedmap.rest.suggest import SuggestionClient

logging.basicConfig(level=logging.INFO)
log = logging.getLogger("feedmap.examples")


def main():
    document = {
        "products": [
            {
                "title": "DURACELL Alkaline Plus 3LR12",
                "brand": "Duracell",
                "price": 2.82,
                "properties": [{"prop_code": "BAT_TYPE", "prod_value": "Alkaline Plus"}],
            }
        ]
    }

    extracted = extract(document, "products")
    options = discover_options(extracted)
    sample = extracted.records[0]

    try:
        with SuggestionClient() as ai:
            suggestion = ai.suggest_mappings(sample)
    except FeedmapClientError as e:
        log.warning("No AI suggestions: %s", e)
        suggestion = {}

    review = review_suggestions(MappingSpec(), suggestion, options, sample=sample, logger=log)
    for rejected in review.rejected:
        print(f"Skipped {rejected.section}: {rejected.reason}")

    record = IntegrationRecord.from_spec(
        review.spec,
        id="duracell-feed",
        name="Duracell supplier feed",
        credentials=ConnectionSettings(
            ftp_host="ftp.example.com",
            ftp_user="feed",
            ftp_password="secret",
            file_path="/export/products.json",
            data_path="products",
        ),
    )

    try:
        with IntegrationApiClient() as client:
            saved = client.save_config(record)
            print(f"Saved configuration {saved.id}")

            result = client.sync(saved.id)
            print(f"Sync: success={result.success} processed={result.processed_records}")

            for cfg in client.list_configs():
                print(cfg.id, cfg.name, cfg.sync_frequency)

    except FeedmapClientError as e:
        print(f"API error: {e}")


if __name__ == "__main__":
    main()
