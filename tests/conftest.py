from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAVVYCAN_HEADER = "Time Stamp,ID,Extended,Dir,Bus,LEN,D1,D2,D3,D4,D5,D6,D7,D8"


@pytest.fixture
def fixtures_dir():
    """Directory holding static CSV/JSON fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def savvycan_log():
    """SavvyCAN log (with Dir column): 5 rows on 2 buses, one 0.78s gap."""
    return FIXTURES_DIR / "savvycan_log.csv"


@pytest.fixture
def plain_log():
    """Same rows as savvycan_log without the Dir column."""
    return FIXTURES_DIR / "plain_log.csv"


@pytest.fixture
def write_can_csv(tmp_path):
    """Factory writing a CAN CSV log with a SavvyCAN header and the given rows."""
    def _write(rows, name="can_log.csv", header=SAVVYCAN_HEADER):
        path = tmp_path / name
        lines = [header] + list(rows)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
