from typing import Union, Dict, Any, List, Optional

import httpx

from .exceptions import FeedmapClientError, FeedmapHTTPError, FeedmapRateLimitError, FeedmapValidationError
from .models import IntegrationRecord, SyncRequest, SyncResponse, DeleteResponse

DEFAULT_BASE_URL = "http://localhost:3000/api"


class IntegrationApiClient:
    """
    Client for the integration configuration API.

    Example:
        >>> from feedmap.rest.client import IntegrationApiClient
        >>> with IntegrationApiClient() as client:
        ...     saved = client.save_config(IntegrationRecord.from_spec(spec, id="1", name="Supplier feed"))
        ...     client.sync(saved.id)
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def save_config(self, record: Union[IntegrationRecord, Dict[str, Any]]) -> IntegrationRecord:
        data = self._request("POST", "/products/configs", json=self._payload(record))
        return self._parse(IntegrationRecord, data)

    def list_configs(self) -> List[IntegrationRecord]:
        data = self._request("GET", "/products/configs")
        # the API answers either with a bare list or with {"data": [...]}
        if isinstance(data, dict) and "data" in data:
            data = data["data"]
        if not isinstance(data, list):
            raise FeedmapValidationError("Invalid response format: expected a list of configurations")
        return [self._parse(IntegrationRecord, item) for item in data]

    def update_config(self, config_id: str, record: Union[IntegrationRecord, Dict[str, Any]]) -> IntegrationRecord:
        data = self._request("PUT", f"/products/configs/{config_id}", json=self._payload(record))
        return self._parse(IntegrationRecord, data)

    def delete_config(self, config_id: str) -> DeleteResponse:
        data = self._request("DELETE", f"/products/configs/{config_id}")
        return self._parse(DeleteResponse, data)

    def sync(self, config_id: str) -> SyncResponse:
        req = SyncRequest(config_id=config_id)
        data = self._request("POST", "/products/sync", json=req.model_dump(by_alias=True))
        return self._parse(SyncResponse, data)

    @staticmethod
    def _payload(record: Union[IntegrationRecord, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(record, dict):
            record = IntegrationRecord(**record)
        return record.to_payload()

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except Exception as e:
            raise FeedmapValidationError(f"Invalid response format: {e}")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, **kwargs)

            if response.status_code == 429:
                raise FeedmapRateLimitError("Rate limit exceeded. Please retry later.")

            if not response.is_success:
                raise FeedmapHTTPError(f"Unexpected status code: {response.status_code}")

            try:
                return response.json()
            except ValueError as e:
                raise FeedmapValidationError(f"Invalid response format: {e}")

        except httpx.RequestError as e:
            raise FeedmapClientError(f"Request failed: {e}") from e

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
