# tests/unit/test_regenerate_mappings.py

import json

from filmshare.jobs.regenerate_mappings import main, regenerate
from filmshare.repositories.mapping_repository import CatalogRepository, MappingRepository


def _write_catalog(path, keys):
    path.write_text(json.dumps({"films": [{"filmKey": key} for key in keys]}), encoding="utf-8")


def test_first_run_assigns_codes_in_sorted_order(tmp_path):
    catalog = tmp_path / "films.json"
    _write_catalog(catalog, ["flow-2024", "anora-2024"])
    mappings = tmp_path / "film-key-mappings.json"

    registry, new_keys = regenerate(CatalogRepository(str(catalog)), MappingRepository(str(mappings)))

    assert new_keys == ["anora-2024", "flow-2024"]
    assert registry.encode("anora-2024") == "aaa"
    assert registry.encode("flow-2024") == "aab"
    assert MappingRepository(str(mappings)).load().encode("flow-2024") == "aab"


def test_existing_codes_never_move(tmp_path, mappings_file):
    before = MappingRepository(str(mappings_file)).load().to_document()
    catalog = tmp_path / "films.json"
    _write_catalog(catalog, ["zama-2017", "anora-2024", "aftersun-2022"])

    registry, new_keys = regenerate(CatalogRepository(str(catalog)), MappingRepository(str(mappings_file)))

    assert new_keys == ["aftersun-2022", "zama-2017"]
    for film_key, code in before["filmKeyToCode"].items():
        assert registry.encode(film_key) == code
    assert registry.encode("aftersun-2022") == "aag"
    assert registry.encode("zama-2017") == "aah"


def test_rerun_is_a_no_op(tmp_path):
    catalog = tmp_path / "films.json"
    _write_catalog(catalog, ["flow-2024"])
    mappings = tmp_path / "film-key-mappings.json"
    regenerate(CatalogRepository(str(catalog)), MappingRepository(str(mappings)))

    _, new_keys = regenerate(CatalogRepository(str(catalog)), MappingRepository(str(mappings)))

    assert new_keys == []


def test_main_exit_codes(tmp_path):
    catalog = tmp_path / "films.json"
    _write_catalog(catalog, ["flow-2024"])
    mappings = tmp_path / "film-key-mappings.json"
    assert main(["--catalog", str(catalog), "--mappings", str(mappings)]) == 0

    mappings.write_text("{not json", encoding="utf-8")
    assert main(["--catalog", str(catalog), "--mappings", str(mappings)]) == 1

    assert main(["--catalog", str(tmp_path / "missing.json"), "--mappings", str(tmp_path / "m.json")]) == 1
