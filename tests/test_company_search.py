"""Tests for the company directory."""

import json

import pytest

from dart_insight.company_search import CompanyDirectory


COMPANIES = [
    {"corp_code": "00126380", "corp_name": "삼성전자", "corp_eng_name": "SAMSUNG ELECTRONICS CO,.LTD",
     "stock_code": "005930", "modify_date": "20230110"},
    {"corp_code": "00164742", "corp_name": "현대자동차", "corp_eng_name": "Hyundai Motor Company",
     "stock_code": "005380", "modify_date": "20230106"},
    {"corp_code": "00126371", "corp_name": "삼성전기", "corp_eng_name": "SAMSUNG ELECTRO-MECHANICS CO., LTD.",
     "stock_code": "009150", "modify_date": "20221230"},
    {"corp_code": "00434003", "corp_name": "다코", "corp_eng_name": "",
     "stock_code": "", "modify_date": "20170630"},
]


@pytest.fixture
def directory(tmp_path):
    path = tmp_path / "companies.json"
    path.write_text(json.dumps(COMPANIES, ensure_ascii=False), encoding="utf-8")
    return CompanyDirectory(path)


def test_search_korean_name(directory):
    matches, total = directory.search("삼성")
    assert [c.corp_name for c in matches] == ["삼성전자", "삼성전기"]
    assert total == 2


def test_search_english_name_case_insensitive(directory):
    matches, _ = directory.search("hyundai")
    assert [c.corp_code for c in matches] == ["00164742"]


def test_search_stock_code(directory):
    matches, _ = directory.search("005930")
    assert matches[0].corp_name == "삼성전자"


def test_search_limit_caps_results_not_total(directory):
    matches, total = directory.search("samsung", limit=1)
    assert len(matches) == 1
    assert total == 2


def test_search_trims_query(directory):
    matches, _ = directory.search("  다코  ")
    assert matches[0].corp_code == "00434003"


def test_search_blank_query(directory):
    assert directory.search("   ") == ([], 0)


def test_missing_file_is_empty_directory(tmp_path):
    directory = CompanyDirectory(tmp_path / "nope.json")
    assert directory.companies == []
    assert directory.search("삼성") == ([], 0)


def test_invalid_json_is_empty_directory(tmp_path):
    path = tmp_path / "companies.json"
    path.write_text("{not json", encoding="utf-8")
    assert CompanyDirectory(path).companies == []


def test_file_is_loaded_once(directory):
    first = directory.companies
    directory.path.unlink()
    assert directory.companies is first


def test_find_by_code(directory):
    assert directory.find_by_code("00164742").corp_name == "현대자동차"
    assert directory.find_by_code(" 00126380 ").corp_name == "삼성전자"
    assert directory.find_by_code("99999999") is None
