import json
import os
from typing import Any, Dict, Optional

import httpx

from ..core import StandardField
from .exceptions import FeedmapClientError, FeedmapHTTPError, FeedmapRateLimitError, FeedmapValidationError

DEFAULT_OPENAI_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
SAMPLE_CHAR_LIMIT = 50_000

FIELD_CONSTANTS_PLACEHOLDER = "{{FIELD_CONSTANTS}}"

DEFAULT_MAPPING_SYSTEM_PROMPT = """
You are a data mapping assistant for e-commerce product integrations. Analyze the sample JSON record
provided by the user and suggest how its fields map onto the target product schema. Try to map every
field of the source data.

Use the EXACT key names of the source data. Keys are case-sensitive; never invent or rename keys.

Answer with a single JSON object of this structure:
{
  "titleKey": "<source key for the product title>",
  "optionalFieldKeys": {
    "FIELD_VENDOR": "<source key>",
    "FIELD_PRICE": "<source key>"
  },
  "metafieldMappings": [
    {
      "mappingType": "single",
      "sourceKey": "<source key>",
      "metafieldNamespace": "custom",
      "metafieldKey": "<metafield key>",
      "metafieldType": "single_line_text_field"
    },
    {
      "mappingType": "dynamic_from_array",
      "sourceKey": "<source key holding an array of objects>",
      "metafieldNamespace": "specifications",
      "arrayKeySource": "<key inside each element naming the metafield>",
      "arrayValueSource": "<key inside each element holding the value>",
      "metafieldType": "single_line_text_field"
    }
  ]
}

Standard field constants (for optionalFieldKeys):
{{FIELD_CONSTANTS}}

Guidelines:
1. titleKey is required. Pick the most likely product name.
2. Map source keys to the FIELD_* constants above wherever a field matches.
3. Values without a standard field become "single" metafield mappings.
4. Arrays of objects with a name/value layout (e.g. [{"prop_code": "COLOR", "prod_value": "Red"}])
   become "dynamic_from_array" mappings; name the namespace after the array's purpose.
5. Arrays of plain values become "single" mappings with metafieldType "json_string".
6. Suggest metafield types from the values: single_line_text_field or multi_line_text_field for text,
   number_integer or number_decimal for numbers, boolean, url, date or date_time, json_string for
   nested structures, list.single_line_text_field for lists.
7. Group related metafields under a shared namespace.
8. The whole answer must be valid JSON.
"""


def build_system_prompt(template: str = DEFAULT_MAPPING_SYSTEM_PROMPT) -> str:
    """Inject the ``FIELD_*`` constants (one ``* id (CONSTANT)`` line each) into ``template``."""
    lines = "\n".join(f"* {f.value} ({f.constant})" for f in StandardField if f is not StandardField.TITLE)
    return template.replace(FIELD_CONSTANTS_PLACEHOLDER, lines)


class SuggestionClient:
    """
    Requests mapping suggestions from an OpenAI-compatible chat completion API.

    The returned dict is untrusted; pass it through
    :func:`feedmap.core.review_suggestions` before using it.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_OPENAI_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def suggest_mappings(self, sample: Any, system_prompt: Optional[str] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise FeedmapClientError("API key missing. Set OPENAI_API_KEY or pass api_key.")

        if not isinstance(sample, (dict, list)):
            raise FeedmapClientError("Invalid data sample provided for AI mapping.")

        sample_text = json.dumps(sample, indent=2, ensure_ascii=False)
        if len(sample_text) > SAMPLE_CHAR_LIMIT:
            raise FeedmapClientError("Data sample is too large for AI processing. Try with a smaller sample.")

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt or build_system_prompt()},
                {
                    "role": "user",
                    "content": (
                        f"Here is a sample of the data:\n\n```json\n{sample_text}\n```\n\n"
                        "Please provide the suggested mappings based on the system prompt instructions."
                    ),
                },
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
        }

        url = f"{self.base_url}/chat/completions"
        try:
            response = self._client.post(url, json=body, headers={"Authorization": f"Bearer {self.api_key}"})

            if response.status_code == 429:
                raise FeedmapRateLimitError("Rate limit exceeded. Please retry later.")

            if not response.is_success:
                raise FeedmapHTTPError(f"Unexpected status code: {response.status_code}")

            try:
                content = response.json()["choices"][0]["message"]["content"]
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise FeedmapValidationError(f"Invalid response format: {e}")

            if not content:
                raise FeedmapValidationError("Empty completion returned.")

            try:
                suggestion = json.loads(content)
            except ValueError as e:
                raise FeedmapValidationError(f"Completion is not valid JSON: {e}")

            if not isinstance(suggestion, dict):
                raise FeedmapValidationError("Completion must be a JSON object.")
            return suggestion

        except httpx.RequestError as e:
            raise FeedmapClientError(f"Request failed: {e}") from e

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
