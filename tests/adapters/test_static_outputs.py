from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib_tenant_routing.adapters.stack_outputs.static import StaticOutputReader
from lib_tenant_routing.domain.errors import ConfigInvalid, StackHasNoOutputs, StackNotFound


def test_reader_serves_copies(tmp_path: Path) -> None:
    reader = StaticOutputReader({"acme---service": {"PublicId": "abc"}})
    outputs = reader.get_outputs("acme---service")
    outputs["PublicId"] = "changed"
    assert reader.get_outputs("acme---service") == {"PublicId": "abc"}


def test_reader_reports_missing_and_empty_stacks() -> None:
    reader = StaticOutputReader({"empty": {}})
    with pytest.raises(StackNotFound, match="missing"):
        reader.get_outputs("missing")
    with pytest.raises(StackHasNoOutputs, match="empty"):
        reader.get_outputs("empty")


def test_from_json_file_stringifies_values(tmp_path: Path) -> None:
    path = tmp_path / "outputs.json"
    path.write_text(json.dumps({"acme---service": {"PublicId": "abc", "Port": 443}}), encoding="utf-8")
    reader = StaticOutputReader.from_json_file(path)
    assert reader.get_outputs("acme---service") == {"PublicId": "abc", "Port": "443"}


@pytest.mark.parametrize(
    ("content", "message"),
    [
        (None, "not found"),
        ("{invalid", "Invalid JSON"),
        ('{"acme---service": ["PublicId"]}', "must map stack names"),
        ('["acme---service"]', "must map stack names"),
    ],
)
def test_from_json_file_rejects_bad_files(tmp_path: Path, content: str | None, message: str) -> None:
    path = tmp_path / "outputs.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigInvalid, match=message):
        StaticOutputReader.from_json_file(path)
