import json

import geojsonville.convert_files as convert_files_module
from geojsonville.convert_files import convert_files, main


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_convert_files_writes_one_geojson_per_input(tmp_path):
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    input_path.mkdir()
    _write(input_path / "point.json", {"x": 1, "y": 2})
    _write(input_path / "features.json", {"features": [{"attributes": {"OBJECTID": 1, "name": "Zürich"}}]})
    (input_path / "notes.txt").write_text("ignored", encoding="utf-8")

    converted, failed = convert_files(str(input_path), str(output_path))

    assert converted == ["features.json", "point.json"]
    assert failed == []
    assert json.loads((output_path / "point.json").read_text(encoding="utf-8")) == {
        "type": "Point", "coordinates": [1, 2]
    }
    features = json.loads((output_path / "features.json").read_text(encoding="utf-8"))
    assert features["features"][0]["properties"]["name"] == "Zürich"
    assert not (output_path / "notes.txt").exists()


def test_convert_files_skips_unreadable_files(tmp_path):
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    input_path.mkdir()
    (input_path / "broken.json").write_text("{not json", encoding="utf-8")
    _write(input_path / "envelope.json", {"xmin": 0, "ymin": 0, "xmax": 1, "ymax": 1})

    converted, failed = convert_files(str(input_path), str(output_path))

    assert converted == ["envelope.json"]
    assert failed == ["broken.json"]
    assert not (output_path / "broken.json").exists()


def test_convert_files_creates_missing_directories(tmp_path):
    input_path = tmp_path / "in"
    output_path = tmp_path / "out"

    assert convert_files(str(input_path), str(output_path)) == ([], [])
    assert input_path.is_dir()
    assert output_path.is_dir()


def test_main_exit_status(tmp_path, monkeypatch):
    monkeypatch.setattr(convert_files_module, "configure_logging", lambda loglevel: None)
    input_path = tmp_path / "input"
    input_path.mkdir()
    _write(input_path / "a.json", {"x": 1, "y": 2})
    args = ["--input", str(input_path), "--output", str(tmp_path / "output")]

    assert main(args) == 0

    (input_path / "b.json").write_text("[", encoding="utf-8")
    assert main(args) == 1


def test_convert_files_skips_malformed_geometry(tmp_path):
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    input_path.mkdir()
    _write(input_path / "a.json", {"paths": 5})
    _write(input_path / "b.json", {"x": 1, "y": 2})

    converted, failed = convert_files(str(input_path), str(output_path))

    assert converted == ["a.json", "b.json"]
    assert failed == []
    assert json.loads((output_path / "a.json").read_text(encoding="utf-8")) == {}
    assert json.loads((output_path / "b.json").read_text(encoding="utf-8")) == {
        "type": "Point", "coordinates": [1, 2]
    }


def test_convert_files_continues_after_conversion_error(tmp_path, monkeypatch):
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    input_path.mkdir()
    _write(input_path / "a.json", {"x": 1, "y": 2})
    _write(input_path / "b.json", {"x": 3, "y": 4})
    calls = []
    convert = convert_files_module.convert

    def failing_convert(esri_json, id_attribute=None):
        calls.append(esri_json)
        if len(calls) == 1:
            raise TypeError("unexpected")
        return convert(esri_json, id_attribute)

    monkeypatch.setattr(convert_files_module, "convert", failing_convert)

    converted, failed = convert_files(str(input_path), str(output_path))

    assert converted == ["b.json"]
    assert failed == ["a.json"]
