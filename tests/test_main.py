"""Tests for the API server entry point."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from driver_scan.main import main
from driver_scan.utils.config import AppConfig, ServerConfig


class TestMain:
    """Tests for the main entry point."""

    @patch("driver_scan.main.uvicorn")
    @patch("driver_scan.main.load_config")
    def test_runs_on_configured_address(
        self, mock_load: MagicMock, mock_uvicorn: MagicMock
    ) -> None:
        mock_load.return_value = AppConfig(server=ServerConfig(host="127.0.0.1", port=9000))

        main()

        _, kwargs = mock_uvicorn.run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9000

    def test_server_defaults(self) -> None:
        cfg = ServerConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8000

    def test_bundled_config_has_server_section(self, project_root: Path) -> None:
        text = (project_root / "configs" / "config.yaml").read_text(encoding="utf-8")
        assert "server:" in text
