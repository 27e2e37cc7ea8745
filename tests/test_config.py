from __future__ import annotations

import logging
from pathlib import Path

import pytest

from aware_bundle.config import configure_logging, load_config, resolve_options
from aware_bundle.errors import ConfigError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "bundle.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_yaml_config_uses_option_aliases(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "export: Lib\n"
        "global-require: true\n"
        "cache-method: hash\n"
        "replaced:\n"
        "  jquery: window.jQuery\n"
        "exclude: '/fixtures/'\n",
    )

    options = resolve_options(path)

    assert options.export_name == "Lib"
    assert options.global_require is True
    assert options.cache_method == "hash"
    assert options.replaced == {"jquery": "window.jQuery"}
    assert options.exclude == ["/fixtures/"]


def test_overrides_merge_with_file_values(tmp_path: Path) -> None:
    path = _write(tmp_path, "export: Lib\nreplaced:\n  a: window.a\nexclude:\n  - one\n")

    options = resolve_options(path, {"export": "Other", "replaced": {"b": "window.b"}, "exclude": ["two"]})

    assert options.export_name == "Other"
    assert options.replaced == {"a": "window.a", "b": "window.b"}
    assert options.exclude == ["one", "two"]


def test_empty_config_gives_defaults(tmp_path: Path) -> None:
    options = resolve_options(_write(tmp_path, ""))

    assert options.export_name is None
    assert options.jobs == 1


@pytest.mark.parametrize("text", ["- just\n- a list\n", "export: [unclosed\n", "unknown-option: 1\n", "jobs: 0\n"])
def test_invalid_config_is_a_config_error(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        resolve_options(_write(tmp_path, text))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml")


def test_verbose_logging_level() -> None:
    configure_logging(verbose=True)
    assert logging.getLogger().level == logging.INFO
    configure_logging(verbose=False)
    assert logging.getLogger().level == logging.WARNING


def test_single_string_exclude_override_is_one_pattern(tmp_path: Path) -> None:
    path = _write(tmp_path, "exclude:\n  - /one/\n")

    options = resolve_options(path, {"exclude": "/two/"})

    assert options.exclude == ["/one/", "/two/"]
