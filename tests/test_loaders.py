import numpy as np
import pytest

from physiodata.classes.builder import build_epoch_table
from physiodata.classes.errors import FormatError
from physiodata.classes.loaders import (
    EpochFileLoader,
    LabelFileLoader,
    RawSampleLoader,
    StaticEpochs,
    StaticLabels,
    load_raw_samples,
)


def test_load_raw_samples_names_columns(raw_tsv):
    df = load_raw_samples(raw_tsv, channel_names=("ECG", "EDA"))

    assert list(df.columns) == ["ECG", "EDA"]
    assert len(df) == 5
    np.testing.assert_allclose(df["ECG"].iloc[:2], [0.1, 0.05])
    np.testing.assert_allclose(df["EDA"].iloc[:2], [0.2, 0.06])


def test_load_raw_samples_default_names(raw_tsv):
    df = load_raw_samples(raw_tsv)

    assert list(df.columns) == ["Var1", "Var2"]


def test_load_raw_samples_other_delimiter(tmp_path):
    path = tmp_path / "raw.csv"
    path.write_text("1,2,3\n4,5,6\n")

    df = load_raw_samples(path, delimiter=",", channel_names=("a", "b", "c"))

    assert df.shape == (2, 3)


def test_column_count_mismatch(raw_tsv):
    with pytest.raises(FormatError, match="found 2 columns, expected 3"):
        load_raw_samples(raw_tsv, channel_names=("ECG", "EDA", "RESP"))


def test_non_numeric_cell(tmp_path):
    path = tmp_path / "raw.tsv"
    path.write_text("0.1\t0.2\n0.3\toops\n")

    with pytest.raises(FormatError, match="'oops' at row 2, column 2"):
        load_raw_samples(path, channel_names=("ECG", "EDA"))


def test_empty_file(tmp_path):
    path = tmp_path / "raw.tsv"
    path.write_text("")

    with pytest.raises(FormatError, match="no samples"):
        load_raw_samples(path)


def test_ragged_rows(tmp_path):
    path = tmp_path / "raw.tsv"
    path.write_text("1\t2\n3\t4\t5\n")

    with pytest.raises(FormatError, match="column layout"):
        load_raw_samples(path)


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_raw_samples(tmp_path / "nope.tsv")


def test_raw_sample_loader(raw_tsv):
    ws = RawSampleLoader(path=raw_tsv, channel_names=("ECG", "EDA")).load()

    assert set(ws) == {"raw"}
    assert ws["raw"].shape == (5, 2)


def test_label_file_loader(tmp_path):
    path = tmp_path / "labels.tsv"
    path.write_text("30\tStart Baseline\n60\tNA\n70.5\t3\n")

    ws = LabelFileLoader(path=path).load()

    assert ws["label_events"] == [(30.0, "Start Baseline"), (60.0, "NA"), (70.5, "3")]


def test_label_file_loader_empty_file(tmp_path):
    path = tmp_path / "labels.tsv"
    path.write_text("")

    assert LabelFileLoader(path=path).load() == {"label_events": []}


def test_label_file_loader_bad_timestamp(tmp_path):
    path = tmp_path / "labels.tsv"
    path.write_text("30\tStart\nlater\tEnd\n")

    with pytest.raises(FormatError, match="'later' at row 2, column 1"):
        LabelFileLoader(path=path).load()


def test_label_file_loader_wrong_width(tmp_path):
    path = tmp_path / "labels.tsv"
    path.write_text("30\tStart\textra\n")

    with pytest.raises(FormatError, match="2 columns"):
        LabelFileLoader(path=path).load()


def test_epoch_file_loader(tmp_path):
    path = tmp_path / "epochs.tsv"
    path.write_text(
        "epochName\tstartTime\tendTime\tcondition\tgroup\n"
        "Trial 1\t80\t95\tA\t1\n"
        "Trial 2\t100\t115.5\tB\t1\n"
    )

    ws = EpochFileLoader(path=path).load()

    assert ws["epoch_rows"] == [
        {"epochName": "Trial 1", "startTime": 80, "endTime": 95.0, "condition": "A", "group": 1},
        {"epochName": "Trial 2", "startTime": 100, "endTime": 115.5, "condition": "B", "group": 1},
    ]


def test_static_loaders_copy_input():
    rows = [{"epochName": "a", "startTime": 0, "endTime": 1}]

    ws = StaticEpochs(rows=rows).load()
    ws["epoch_rows"][0]["epochName"] = "changed"

    assert rows[0]["epochName"] == "a"
    assert StaticLabels(events=((1, "x"),)).load() == {"label_events": [(1, "x")]}


def test_undecodable_raw_file(tmp_path):
    path = tmp_path / "raw.tsv"
    path.write_bytes(b"0.1\t0.2\n\xff\xfe\t0.3\n")

    with pytest.raises(FormatError, match="not a delimited text file"):
        load_raw_samples(path, channel_names=("ECG", "EDA"))


def test_undecodable_label_and_epoch_files(tmp_path):
    labels = tmp_path / "labels.tsv"
    labels.write_bytes(b"30\tStart\n60\t\xff\xfe\n")
    epochs = tmp_path / "epochs.tsv"
    epochs.write_bytes(b"epochName\tstartTime\tendTime\n\xff\xfe\t0\t1\n")

    with pytest.raises(FormatError, match="not a delimited text file"):
        LabelFileLoader(path=labels).load()
    with pytest.raises(FormatError, match="not a delimited text file"):
        EpochFileLoader(path=epochs).load()


def test_epoch_file_loader_keeps_numeric_looking_names(tmp_path):
    path = tmp_path / "epochs.tsv"
    path.write_text("epochName\tstartTime\tendTime\n1\t0\t1\n2\t1\t2\n")

    rows = EpochFileLoader(path=path).load()["epoch_rows"]
    epochs = build_epoch_table(rows)

    assert list(epochs.data["epochName"]) == ["1", "2"]
