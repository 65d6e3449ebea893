import pytest

from bank_marketing.src.data.check_data import main as check_data_main
from bank_marketing.src.data.load import BANK_COLUMNS, dataset_status, load_bank_data

from conftest import N_DUPLICATES, N_ROWS


def test_load_semicolon_file(bank_csv):
    df = load_bank_data(data_dir=bank_csv)
    assert df.shape == (N_ROWS + N_DUPLICATES, len(BANK_COLUMNS))
    assert list(df.columns) == BANK_COLUMNS


def test_load_falls_back_to_detected_delimiter(tmp_path, bank_frame):
    bank_frame.to_csv(tmp_path / "bank-full.csv", sep=",", index=False)
    df = load_bank_data(data_dir=tmp_path)
    assert df.shape[1] == len(BANK_COLUMNS)
    assert df["job"].iloc[0] == "unknown"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bank_data(data_dir=tmp_path)


def test_missing_column_raises(tmp_path, bank_frame):
    bank_frame.rename(columns={"poutcome": "outcome"}).to_csv(tmp_path / "bank-full.csv", sep=";", index=False)
    with pytest.raises(KeyError, match="poutcome"):
        load_bank_data(data_dir=tmp_path)


def test_too_few_columns_raises(tmp_path, bank_frame):
    bank_frame[["age", "y"]].to_csv(tmp_path / "bank-full.csv", sep=";", index=False)
    with pytest.raises(ValueError):
        load_bank_data(data_dir=tmp_path)


def test_dataset_status(tmp_path, bank_csv):
    assert dataset_status(bank_csv)[0] is True
    exists, path = dataset_status(tmp_path)
    assert exists is False
    assert path.name == "bank-full.csv"


def test_check_data_cli(bank_csv, tmp_path, capsys):
    assert check_data_main(["--data-dir", str(bank_csv)]) == 0
    out = capsys.readouterr().out
    assert "Rows: 403" in out
    assert "poutcome" in out

    assert check_data_main(["--data-dir", str(tmp_path / "empty")]) == 1
