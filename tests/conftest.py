from datetime import datetime

import matplotlib

matplotlib.use("Agg")

import pytest

RAW_ROWS = [
    (0.1, 0.2),
    (0.05, 0.06),
    (0.07, 0.08),
    (-0.02, 0.09),
    (0.3, 0.1),
]


@pytest.fixture
def raw_tsv(tmp_path):
    path = tmp_path / "ecg_eda.tsv"
    path.write_text("".join(f"{ecg}\t{eda}\n" for ecg, eda in RAW_ROWS))
    return path


@pytest.fixture
def created():
    return datetime(2024, 3, 5, 14, 7, 9)
