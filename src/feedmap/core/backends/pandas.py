from typing import List, Dict, Any

import pandas as pd


def flatten_product(product: Dict[str, Any]) -> Dict[str, Any]:
    row: Dict[str, Any] = {}
    for key, value in product.items():
        if key in ("seo", "inventoryItem") and isinstance(value, dict):
            for sub, sub_value in value.items():
                row[f"{key}.{sub}"] = sub_value
        elif key == "metafields" and isinstance(value, list):
            for mf in value:
                row[f"metafields.{mf.get('namespace')}.{mf.get('key')}"] = mf.get("value")
        else:
            row[key] = value
    return row


class DataFrameBackend:
    def to_dataframe(self, products: List[Dict[str, Any]]) -> Any:
        raise NotImplementedError


class PandasBackend(DataFrameBackend):
    def to_dataframe(self, products: List[Dict[str, Any]]) -> pd.DataFrame:
        if not products:
            return pd.DataFrame()
        return pd.DataFrame([flatten_product(p) for p in products])
