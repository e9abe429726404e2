import pytest


@pytest.fixture
def write_trace(tmp_path):
    """Write rows (lists of fields) to a csv and return its path."""
    def _write(rows, name="trace.csv"):
        path = tmp_path / name
        path.write_text("".join(",".join(r) + "\n" for r in rows))
        return str(path)
    return _write
