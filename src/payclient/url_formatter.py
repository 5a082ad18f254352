"""
UrlFormatter module for resolving path templates and query strings
"""

from enum import Enum
from typing import Dict, Any, List, Tuple
from urllib.parse import urlencode, quote


class UrlFormatter:
    """Builds absolute request URLs from path templates and parameters"""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def format_url(self, path_template: str, path_params: Dict[str, str],
                   query_params: Dict[str, Any]) -> str:
        """
        Substitute path parameters and append the encoded query string

        Args:
            path_template: Path containing `:name` placeholders
            path_params: Literal values for each placeholder
            query_params: Query parameters in declaration order, None values skipped

        Returns:
            Absolute URL string
        """
        path = path_template
        # Longest names first so ':id' never clobbers part of ':identity'
        for name in sorted(path_params, key=len, reverse=True):
            path = path.replace(f":{name}", str(path_params[name]))

        if not path.startswith('/'):
            path = f"/{path}"

        url = f"{self.base_url}{path}"
        pairs = self.flatten_query_params(query_params)
        if pairs:
            url = f"{url}?{urlencode(pairs, quote_via=quote)}"
        return url

    @classmethod
    def flatten_query_params(cls, query_params: Dict[str, Any]) -> List[Tuple[str, str]]:
        """
        Turn query parameters into ordered key/value string pairs

        Lists are joined with commas and nested mappings become `key[sub]` pairs,
        e.g. {'created_at': {'gte': '2024-01-01'}} -> [('created_at[gte]', '2024-01-01')]
        """
        pairs = []
        for key, value in query_params.items():
            if value is None:
                continue
            if isinstance(value, dict):
                nested = {f"{key}[{sub_key}]": sub_value for sub_key, sub_value in value.items()}
                pairs.extend(cls.flatten_query_params(nested))
            else:
                pairs.append((key, cls._format_value(value)))
        return pairs

    @classmethod
    def _format_value(cls, value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, Enum):
            return value.to_wire() if hasattr(value, 'to_wire') else str(value.value)
        if isinstance(value, (list, tuple)):
            return ','.join(cls._format_value(item) for item in value)
        return str(value)
