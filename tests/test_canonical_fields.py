import pytest

from core.column_mapping import (
    CanonicalField,
    FieldRegistry,
    InvalidRegistryError,
    ValueShape,
    get_registry,
    load_registry,
)


def test_bundled_registry(registry):
    assert registry.version == "2025.1"
    assert registry.keys == [
        "name", "model", "workspace", "tags", "memoryLimit", "cpuCores", "autoStart", "environment",
    ]
    assert registry.required_keys == ["name", "model", "workspace"]
    assert registry.get("memoryLimit").shape == ValueShape.NUMERIC
    assert "tags" in registry
    assert "labels" not in registry


def test_registry_is_loaded_once():
    assert get_registry() is get_registry()


def test_key_is_first_normalized_alias(registry):
    memory = registry.get("memoryLimit")
    assert memory.normalized_aliases[0].text == "memory limit"
    # "memoryLimit" and "memory limit" collapse into one alias
    assert [a.text for a in memory.normalized_aliases].count("memory limit") == 1


def test_synonym_duplicating_alias_is_dropped():
    canonical = CanonicalField(key="tags", aliases=("tags", "labels"), synonyms=("Labels", "categories"))
    assert [s.text for s in canonical.normalized_synonyms] == ["categories"]


def test_to_dict_lists_fields(registry):
    data = registry.to_dict()
    assert data["version"] == "2025.1"
    assert data["fields"][0]["key"] == "name"
    assert data["fields"][0]["required"] is True


def test_empty_registry_rejected():
    with pytest.raises(InvalidRegistryError):
        FieldRegistry([])


def test_duplicate_keys_rejected():
    fields = [CanonicalField(key="name", aliases=("name",)), CanonicalField(key="name", aliases=("title",))]
    with pytest.raises(InvalidRegistryError, match="Duplicate"):
        FieldRegistry(fields)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"version": "x"},
        {"fields": ["name"]},
        {"fields": [{"aliases": ["name"]}]},
        {"fields": [{"key": "name", "aliases": []}]},
        {"fields": [{"key": "name", "aliases": ["name"], "synonyms": "title"}]},
        {"fields": [{"key": "name", "aliases": ["name", 3]}]},
        {"fields": [{"key": "name", "aliases": ["name"], "shape": "colour"}]},
    ],
)
def test_from_dict_rejects_invalid_entries(data):
    with pytest.raises(InvalidRegistryError):
        FieldRegistry.from_dict(data)


def test_load_registry_from_file(tmp_path):
    path = tmp_path / "fields.yaml"
    path.write_text(
        "version: test\n"
        "fields:\n"
        "  - key: title\n"
        "    required: true\n"
        "    aliases: [title, heading]\n"
        "    synonyms: [caption]\n",
        encoding="utf-8",
    )
    registry = load_registry(path)
    assert registry.version == "test"
    assert registry.required_keys == ["title"]
    assert registry.get("title").shape == ValueShape.TEXT


def test_load_registry_malformed_yaml(tmp_path):
    path = tmp_path / "fields.yaml"
    path.write_text("fields: [\n", encoding="utf-8")
    with pytest.raises(InvalidRegistryError):
        load_registry(path)


def test_load_registry_missing_file(tmp_path):
    with pytest.raises(InvalidRegistryError):
        load_registry(tmp_path / "missing.yaml")
