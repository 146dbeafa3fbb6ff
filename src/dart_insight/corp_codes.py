"""Convert OpenDART's CORPCODE.xml into the companies.json search file.

CORPCODE.xml (unzipped from the corpCode.xml endpoint) looks like::

    <result>
      <list>
        <corp_code>00126380</corp_code>
        <corp_name>삼성전자</corp_name>
        <corp_eng_name>SAMSUNG ELECTRONICS CO,.LTD</corp_eng_name>
        <stock_code>005930</stock_code>
        <modify_date>20230110</modify_date>
      </list>
      ...
    </result>

Unlisted companies carry a blank stock_code.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pandas as pd

from dart_insight.models import Company

log = logging.getLogger(__name__)

_COLUMNS = ("corp_code", "corp_name", "corp_eng_name", "stock_code", "modify_date")


def read_corp_codes(xml_path: str | Path) -> list[Company]:
    """Parse CORPCODE.xml.  Codes stay strings so leading zeros survive."""
    df = pd.read_xml(xml_path, xpath=".//list", parser="etree", dtype=str)
    for col in _COLUMNS:
        if col not in df.columns:
            df[col] = ""
    df = df[list(_COLUMNS)].fillna("")
    df = df.apply(lambda s: s.str.strip())
    return [Company(**row) for row in df.to_dict(orient="records")]


def convert_corp_codes(xml_path: str | Path, output_path: str | Path) -> list[Company]:
    """Read CORPCODE.xml and write the companies JSON array to *output_path*."""
    companies = read_corp_codes(xml_path)

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps([c.model_dump() for c in companies], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    log.info("Wrote %d companies to %s", len(companies), out)
    return companies
