from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from worldclock.cli import app
from worldclock.core.errors import DownloadError
from worldclock.core.types import City
from worldclock.core.validators import ValidationError

runner = CliRunner()

BERLIN = City("Berlin", "DE", "Europe/Berlin", 3426354)
BERLINETTA = City("Berlinetta", "US", "America/Denver", 1500)


def make_core(cities=None, results=None, load_error=None):
    config = MagicMock()
    config.cities = cities if cities is not None else [{"name": "Local", "timezone": "Europe/Berlin"}]
    catalog = MagicMock()
    catalog.load_synchronously.return_value = load_error
    catalog.search.return_value = results or []
    return config, catalog


class TestCLI:
    @patch("worldclock.cli._init_core")
    def test_version(self, mock_init):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "worldclock v" in result.stdout
        mock_init.assert_not_called()

    @patch("worldclock.cli._init_core")
    def test_search(self, mock_init):
        """Test search command with results."""
        config, catalog = make_core(results=[BERLIN, BERLINETTA])
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["search", "berlin", "--limit", "5"])
        assert result.exit_code == 0
        assert "Results (2)" in result.stdout
        assert "1. Berlin, DE (Europe/Berlin)" in result.stdout
        assert "2. Berlinetta, US (America/Denver)" in result.stdout
        catalog.search.assert_called_once_with("berlin", 5)

    @patch("worldclock.cli._init_core")
    def test_search_no_results(self, mock_init):
        mock_init.return_value = make_core(results=[])

        result = runner.invoke(app, ["search", "zzz"])
        assert result.exit_code == 0
        assert "No cities found" in result.stdout

    @patch("worldclock.cli._init_core")
    def test_search_catalog_failure(self, mock_init):
        """A failed database load exits with an error."""
        mock_init.return_value = make_core(load_error=DownloadError("offline"))

        result = runner.invoke(app, ["search", "berlin"])
        assert result.exit_code == 1
        assert "Error loading city database" in result.output

    @patch("worldclock.cli._init_core")
    def test_list(self, mock_init):
        """Test list command sorts cities west to east."""
        mock_init.return_value = make_core(
            cities=[
                {"name": "Tokyo", "timezone": "Asia/Tokyo"},
                {"name": "New York", "timezone": "America/New_York"},
            ]
        )

        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "Configured cities (2)" in result.stdout
        assert result.stdout.index("New York") < result.stdout.index("Tokyo")
        assert "UTC+09:00" in result.stdout

    @patch("worldclock.cli._init_core")
    def test_add(self, mock_init):
        """Test add command picks the requested result."""
        config, catalog = make_core(results=[BERLIN, BERLINETTA])
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["add", "berlin", "--index", "2"])
        assert result.exit_code == 0
        assert "Added Berlinetta" in result.stdout
        config.add_city.assert_called_once_with("Berlinetta", "America/Denver")
        config.save.assert_called_once()

    @patch("worldclock.cli._init_core")
    def test_add_invalid_index(self, mock_init):
        config, catalog = make_core(results=[BERLIN])
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["add", "berlin", "--index", "3"])
        assert result.exit_code == 1
        assert "Valid range: 1-1" in result.output
        config.add_city.assert_not_called()

    @patch("worldclock.cli._init_core")
    def test_add_no_results(self, mock_init):
        mock_init.return_value = make_core(results=[])

        result = runner.invoke(app, ["add", "zzz"])
        assert result.exit_code == 1
        assert "No cities found" in result.output

    @patch("worldclock.cli._init_core")
    def test_add_duplicate(self, mock_init):
        config, catalog = make_core(results=[BERLIN])
        config.add_city.side_effect = ValidationError("city 'Berlin' is already configured")
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["add", "berlin"])
        assert result.exit_code == 1
        assert "already configured" in result.output
        config.save.assert_not_called()

    @patch("worldclock.cli.get_system_timezone", return_value="Europe/Berlin")
    @patch("worldclock.cli._init_core")
    def test_remove(self, mock_init, mock_tz):
        config, catalog = make_core(
            cities=[
                {"name": "Local", "timezone": "Europe/Berlin"},
                {"name": "Tokyo", "timezone": "Asia/Tokyo"},
            ]
        )
        config.delete_cities.return_value = 1
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["remove", "Tokyo"])
        assert result.exit_code == 0
        assert "Removed 1 city" in result.stdout
        config.delete_cities.assert_called_once_with(["Tokyo"])
        config.save.assert_called_once()

    @patch("worldclock.cli.get_system_timezone", return_value="Europe/Berlin")
    @patch("worldclock.cli._init_core")
    def test_remove_protected(self, mock_init, mock_tz):
        config, catalog = make_core()
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["remove", "Local"])
        assert result.exit_code == 1
        assert "protected" in result.output
        config.delete_cities.assert_not_called()

    @patch("worldclock.cli.get_system_timezone", return_value="Europe/Berlin")
    @patch("worldclock.cli._init_core")
    def test_local(self, mock_init, mock_tz):
        """Test local command names the largest city of the system timezone."""
        config, catalog = make_core()
        catalog.find_best_for_timezone.return_value = BERLIN
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["local"])
        assert result.exit_code == 0
        assert "Europe/Berlin (Berlin, DE)" in result.stdout
        catalog.find_best_for_timezone.assert_called_once_with("Europe/Berlin")

    @patch("worldclock.cli.get_system_timezone", return_value="Etc/UTC")
    @patch("worldclock.cli._init_core")
    def test_local_without_city(self, mock_init, mock_tz):
        config, catalog = make_core()
        catalog.find_best_for_timezone.return_value = None
        mock_init.return_value = (config, catalog)

        result = runner.invoke(app, ["local"])
        assert result.exit_code == 0
        assert "System timezone: Etc/UTC" in result.stdout

    @patch("worldclock.cli.GeoNamesFetcher")
    def test_cache_clear(self, mock_fetcher_cls):
        mock_fetcher_cls.return_value.clear_cache.return_value = True

        result = runner.invoke(app, ["cache", "clear"])
        assert result.exit_code == 0
        assert "Cached city database removed" in result.stdout

    @patch("worldclock.cli.GeoNamesFetcher")
    def test_cache_clear_nothing(self, mock_fetcher_cls):
        mock_fetcher_cls.return_value.clear_cache.return_value = False

        result = runner.invoke(app, ["cache", "clear"])
        assert result.exit_code == 0
        assert "Nothing to remove" in result.stdout

    @patch("worldclock.cli.GeoNamesFetcher")
    def test_cache_info(self, mock_fetcher_cls):
        fetcher = mock_fetcher_cls.return_value
        fetcher.url = "http://example.invalid/cities15000.zip"
        fetcher.dataset_path = "/tmp/cities15000.txt"
        fetcher.is_cached.return_value = False

        result = runner.invoke(app, ["cache", "info"])
        assert result.exit_code == 0
        assert "Not downloaded" in result.stdout


class TestInitCore:
    def test_config_error_exits(self, tmp_path):
        path = tmp_path / "worldclock.yaml"
        path.write_text("cities: [unclosed", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(path), "list"])
        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_list_real_config(self, tmp_path):
        path = tmp_path / "worldclock.yaml"
        path.write_text("cities:\n  - name: Tokyo\n    timezone: Asia/Tokyo\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(path), "list"])
        assert result.exit_code == 0
        assert "Tokyo" in result.stdout
