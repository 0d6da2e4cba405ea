"""Unit tests for core/registry.py"""

import pytest

from modcontent.core.blocks import validate_blocks_for_write
from modcontent.core.registry import SECTION_KEYS, default_registry, load_registry, make_module


def test_default_registry_knows_builtin_modules():
    registry = default_registry()
    assert registry.is_known_module("big-and-bulky")
    assert registry.is_known_module("store-replenishments")
    assert not registry.is_known_module("unknown-module")


@pytest.mark.parametrize("key", SECTION_KEYS)
def test_default_registry_section_keys(key):
    assert default_registry().is_known_section_key(key)


def test_default_registry_rejects_other_keys():
    assert not default_registry().is_known_section_key("appendix")


def test_default_fallback_blocks_are_valid():
    """Every configured fallback block passes strict validation."""
    for module in default_registry().modules:
        for section in module.sections.values():
            assert validate_blocks_for_write(section.blocks) is not None


def test_make_module_maps_underscored_keys():
    module = make_module("m", "M", end_vision=["a"], roadmap=["b"])
    assert module.sections["end-vision"].blocks == [{"type": "bullets", "items": ["a"]}]
    assert module.sections["progress"].blocks == []
    assert module.sections["roadmap"].label == "Roadmap"


# --- load_registry ---

def test_load_registry_from_yaml(tmp_path):
    path = tmp_path / "modules.yaml"
    path.write_text(
        "modules:\n"
        "  - slug: alpha\n"
        "    title: Alpha\n"
        "    sections:\n"
        "      end-vision:\n"
        "        label: End vision\n"
        "        blocks:\n"
        "          - type: prose\n"
        "            content: Configured\n"
    )
    registry = load_registry(path)
    assert registry.is_known_module("alpha")
    assert registry.is_known_section_key("roadmap")
    assert registry.get_module("alpha").sections["end-vision"].blocks[0]["content"] == "Configured"


def test_load_registry_custom_section_keys(tmp_path):
    path = tmp_path / "modules.yaml"
    path.write_text("section_keys: [summary]\nmodules:\n  - slug: alpha\n    title: Alpha\n")
    registry = load_registry(path)
    assert registry.is_known_section_key("summary")
    assert not registry.is_known_section_key("end-vision")


@pytest.mark.parametrize("text", [
    "modules: [unclosed\n",
    "title: no modules here\n",
    "modules:\n  - title: missing slug\n",
    "",
])
def test_load_registry_invalid(tmp_path, text):
    """Malformed YAML or a bad catalogue shape raises ValueError."""
    path = tmp_path / "modules.yaml"
    path.write_text(text)
    with pytest.raises(ValueError, match="Invalid registry file"):
        load_registry(path)
