import pytest

from simload.schema import Schema, optional, required
from simload.trace import CollectingSink


@pytest.fixture
def write_file(tmp_path):
    """Write bytes or text to a file under tmp_path and return its path."""

    def _write(content, name="input.csv"):
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return str(path)

    return _write


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def notes_schema():
    return Schema("patient", (required("patient_id"), optional("note_")))


@pytest.fixture(scope="session")
def prefect_harness():
    """Run flows against a throwaway Prefect backend."""
    from prefect.testing.utilities import prefect_test_harness

    with prefect_test_harness():
        yield
