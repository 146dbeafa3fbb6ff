"""OpenDART disclosure API client.

Uses the public OpenDART REST endpoints (certification key required):
  - fnlttSinglAcnt.json  — single-company key accounts (BS / IS headline rows)

One attempt per call, no retry.  Transport failures are logged and folded
into an OpenDartResponse with status "900" so callers handle them the same
way as an error status reported by OpenDART itself.
"""

from __future__ import annotations

import logging

import requests

from dart_insight.models import OpenDartResponse

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Constants
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_BASE_URL = "https://opendart.fss.or.kr/api"
SINGLE_ACCOUNT_PATH = "/fnlttSinglAcnt.json"

# OpenDART status codes
STATUS_OK = "000"
STATUS_NO_DATA = "013"
STATUS_UNDEFINED_ERROR = "900"

TRANSPORT_ERROR_MESSAGE = "API 호출 중 오류가 발생했습니다."


# ═══════════════════════════════════════════════════════════════════════════
#  OpenDART Client
# ═══════════════════════════════════════════════════════════════════════════

class OpenDartClient:
    """HTTP client for the OpenDART financial statement API."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request_json(self, path: str, params: dict[str, str]) -> dict:
        """GET an endpoint and return parsed JSON.  Raises on HTTP errors."""
        query = {"crtfc_key": self.api_key, **params}
        resp = requests.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_financial_data(
        self,
        corp_code: str,
        bsns_year: str,
        reprt_code: str = "11011",
    ) -> OpenDartResponse:
        """Fetch key accounts for one company, business year and report.

        Args:
            corp_code: 8-digit OpenDART company code
            bsns_year: 4-digit business year
            reprt_code: 11011 annual, 11012 half-year, 11013 Q1, 11014 Q3
        """
        params = {"corp_code": corp_code, "bsns_year": bsns_year, "reprt_code": reprt_code}
        try:
            data = OpenDartResponse.model_validate(self._request_json(SINGLE_ACCOUNT_PATH, params))
        except (requests.RequestException, ValueError) as exc:
            # ValueError covers both undecodable JSON and pydantic validation errors
            log.warning("OpenDART request failed for %s/%s/%s: %s", corp_code, bsns_year, reprt_code, exc)
            return OpenDartResponse(status=STATUS_UNDEFINED_ERROR, message=TRANSPORT_ERROR_MESSAGE)

        if not data.ok:
            log.info("OpenDART status %s for %s/%s: %s", data.status, corp_code, bsns_year, data.message)
        return data


# ═══════════════════════════════════════════════════════════════════════════
#  Module-level singleton
# ═══════════════════════════════════════════════════════════════════════════

_client: OpenDartClient | None = None


def get_dart_client() -> OpenDartClient:
    """Get or create the shared OpenDartClient singleton.

    Reads OPENDART_API_KEY / OPENDART_BASE_URL from config.
    """
    global _client
    if _client is None:
        from dart_insight.config import get_config
        config = get_config()
        if not config.opendart_api_key:
            log.warning("OPENDART_API_KEY is not set — OpenDART will reject requests")
        _client = OpenDartClient(
            api_key=config.opendart_api_key,
            base_url=config.opendart_base_url,
            timeout=config.opendart_timeout,
        )
    return _client
