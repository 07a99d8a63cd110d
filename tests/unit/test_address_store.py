# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from pathlib import Path

import pytest

from core.exceptions import AddressMissingError
from storage.address_store import AddressStore


def test_missing_file_reads_as_unset(tmp_path: Path) -> None:
    store = AddressStore(path=str(tmp_path / "settings.json"))
    assert store.get_address() is None
    assert store.get_item("anything") is None


def test_address_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    AddressStore(path=str(path)).set_address(" 192.168.1.100 ")

    assert AddressStore(path=str(path)).get_address() == "192.168.1.100"
    assert json.loads(path.read_text(encoding="utf-8")) == {"ws_ip": "192.168.1.100"}


@pytest.mark.parametrize("address", ["", "  ", None])
def test_blank_address_is_rejected(tmp_path: Path, address) -> None:
    store = AddressStore(path=str(tmp_path / "settings.json"))

    with pytest.raises(AddressMissingError):
        store.set_address(address)

    assert not (tmp_path / "settings.json").exists()


def test_other_keys_are_preserved(tmp_path: Path) -> None:
    store = AddressStore(path=str(tmp_path / "settings.json"))
    store.set_item("theme", "dark")
    store.set_address("10.0.0.5")
    store.set_address("10.0.0.6")

    assert store.get_item("theme") == "dark"
    assert store.get_address() == "10.0.0.6"

    store.remove_item("theme")
    assert store.get_item("theme") is None


def test_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    store = AddressStore(path=str(path))
    assert store.get_address() is None

    store.set_address("10.0.0.5")
    assert store.get_address() == "10.0.0.5"


def test_non_object_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('["10.0.0.5"]', encoding="utf-8")

    assert AddressStore(path=str(path)).get_address() is None


def test_custom_key(tmp_path: Path) -> None:
    store = AddressStore(path=str(tmp_path / "settings.json"), address_key="host")
    store.set_address("10.0.0.5")
    assert store.get_item("host") == "10.0.0.5"
