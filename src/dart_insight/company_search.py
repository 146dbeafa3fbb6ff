"""In-memory company directory built from the OpenDART corp-code list."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from dart_insight.models import Company

log = logging.getLogger(__name__)


class CompanyDirectory:
    """Lazy-loaded list of companies with substring search.

    The JSON file is read on first use.  A missing or unreadable file is
    logged and treated as an empty directory so search keeps answering.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._companies: list[Company] | None = None

    @property
    def companies(self) -> list[Company]:
        if self._companies is None:
            self._companies = self._load()
        return self._companies

    def _load(self) -> list[Company]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            companies = [Company.model_validate(entry) for entry in raw]
        except (OSError, ValueError) as exc:
            log.error("Failed to load company data from %s: %s", self.path, exc)
            return []
        log.info("Loaded %d companies from %s", len(companies), self.path)
        return companies

    def search(self, query: str, limit: int = 10) -> tuple[list[Company], int]:
        """Match Korean/English names (case-insensitive) or stock code.

        Returns the first *limit* matches and the total match count.
        """
        term = query.strip().lower()
        if not term:
            return [], 0
        matches = [
            c for c in self.companies
            if term in c.corp_name.lower()
            or term in c.corp_eng_name.lower()
            or term in c.stock_code
        ]
        return matches[:limit], len(matches)

    def find_by_code(self, corp_code: str) -> Company | None:
        """Exact corp_code lookup."""
        code = corp_code.strip()
        return next((c for c in self.companies if c.corp_code == code), None)


_directory: CompanyDirectory | None = None


def get_company_directory() -> CompanyDirectory:
    """Get or create the shared CompanyDirectory (COMPANIES_PATH from config)."""
    global _directory
    if _directory is None:
        from dart_insight.config import get_config
        _directory = CompanyDirectory(get_config().companies_path)
    return _directory
