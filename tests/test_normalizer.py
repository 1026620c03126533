import pytest

from core.column_mapping.normalizer import normalize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Agent Name", "agent name"),
        ("agent_name", "agent name"),
        ("  CPU_Count ", "cpu count"),
        ("memoryLimit", "memory limit"),
        ("AIModel", "ai model"),
        ("auto-start", "auto start"),
        ("Env Vars", "environment vars"),
        ("Mem Limit", "memory limit"),
        ("working_dir", "working directory"),
        ("Qty", "quantity"),
    ],
)
def test_normalize_text(raw, expected):
    assert normalize(raw).text == expected


def test_normalize_is_deterministic():
    assert normalize("Memory MB") == normalize("Memory MB")
    assert normalize("Memory MB").compact == "memorymb"


def test_blank_header_is_empty():
    token = normalize("   ")
    assert token.is_empty
    assert token.is_placeholder


@pytest.mark.parametrize("raw", ["Column 1", "col_2", "123", "Unnamed: 0", "Field 3"])
def test_generic_headers_are_placeholders(raw):
    assert normalize(raw).is_placeholder


@pytest.mark.parametrize("raw", ["Name", "Column Count", "Field Name"])
def test_meaningful_headers_are_not_placeholders(raw):
    assert not normalize(raw).is_placeholder


def test_contains_requires_contiguous_tokens():
    assert normalize("Max Memory MB").contains(normalize("memory mb"))
    assert not normalize("memory and mb").contains(normalize("memory mb"))
    assert not normalize("memory").contains(normalize("memory limit"))
