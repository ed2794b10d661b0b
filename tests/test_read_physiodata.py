import csv

import pytest

from physiodata.classes.loaders import StaticLabels
from physiodata.pipeline import convert as build
from physiodata.read_physiodata import convert, main


def test_export_to_csv(raw_tsv, created, tmp_path):
    physio = tmp_path / "ecg_eda.physioData"
    build(
        raw_tsv,
        physio,
        fs=4,
        label_loader=StaticLabels(events=[(0.5, "go"), (1.0, "stop")]),
        created=created,
    )
    csv_path = tmp_path / "export.csv"

    labels_path = convert(str(physio), str(csv_path))

    with open(csv_path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["t_s", "ECG", "EDA"]
    assert len(rows) == 6
    assert [float(v) for v in rows[2]] == [0.25, 0.05, 0.06]

    with open(labels_path, newline="") as f:
        label_rows = list(csv.reader(f))
    assert labels_path == str(tmp_path / "export_labels.csv")
    assert label_rows == [["t", "Labels"], ["0.5", "go"], ["1.0", "stop"]]


def test_export_without_seconds(raw_tsv, created, tmp_path):
    physio = tmp_path / "ecg_eda.physioData"
    build(raw_tsv, physio, created=created)
    csv_path = tmp_path / "export.csv"

    convert(str(physio), str(csv_path), add_seconds=False)

    with open(csv_path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["ECG", "EDA"]
    assert [float(v) for v in rows[1]] == [0.1, 0.2]


def test_cli_default_output(raw_tsv, created, tmp_path, capsys):
    physio = tmp_path / "ecg_eda.physioData"
    build(raw_tsv, physio, created=created)

    main([str(physio)])

    assert (tmp_path / "ecg_eda.csv").exists()
    assert (tmp_path / "ecg_eda_labels.csv").exists()
    out = capsys.readouterr().out
    assert f"Wrote: {tmp_path / 'ecg_eda.csv'}" in out
    assert f"Wrote: {tmp_path / 'ecg_eda_labels.csv'}" in out


def test_cli_missing_input(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.physioData")])

    assert str(excinfo.value.code).startswith("Error:")
    assert not (tmp_path / "missing.csv").exists()
