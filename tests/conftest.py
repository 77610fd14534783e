import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def isolated_log_file(tmp_path, monkeypatch):
    """Keep CLI test runs from writing into the user's cache directory."""
    monkeypatch.setattr("worldclock.core.logger.LOG_FILE", tmp_path / "worldclock.log")
    yield
    # Drop sinks bound to CliRunner's temporary streams
    logger.remove()
