import json
import os
import tempfile
import unittest
from unittest.mock import patch

from pulsecheck import main as main_mod
from pulsecheck.core.exceptions import MetricsServerError


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        patcher = patch.object(main_mod, "setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _config(self, data):
        path = os.path.join(self.tmp.name, "config.json")
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        return path

    def test_parse_args(self):
        args = main_mod.parse_args(["--config", "targets.json", "--metrics-port", "9200"])
        self.assertEqual(args.config, "targets.json")
        self.assertEqual(args.metrics_port, 9200)

    def test_config_error_exits_non_zero(self):
        missing = os.path.join(self.tmp.name, "missing.json")
        with patch.object(main_mod, "Supervisor") as mock_supervisor:
            code = main_mod.main(["--config", missing, "--no-metrics-server"])
        self.assertEqual(code, 1)
        mock_supervisor.assert_not_called()

    @patch.object(main_mod, "MetricsManager")
    def test_runs_until_schedulers_stop(self, mock_mm):
        path = self._config({"apis": []})
        code = main_mod.main(["--config", path, "--no-metrics-server"])
        self.assertEqual(code, 0)
        mock_mm.assert_called_once()

    @patch.object(main_mod, "MetricsServer")
    @patch.object(main_mod, "MetricsManager")
    def test_metrics_server_stopped_on_exit(self, mock_mm, mock_server_cls):
        path = self._config({"apis": []})
        code = main_mod.main(["--config", path, "--metrics-port", "9300"])
        self.assertEqual(code, 0)
        mock_server_cls.assert_called_once_with(mock_mm.return_value, main_mod.Config.METRICS_HOST, 9300)
        mock_server_cls.return_value.start.assert_called_once()
        mock_server_cls.return_value.stop.assert_called_once()


    @patch.object(main_mod, "Supervisor")
    @patch.object(main_mod, "MetricsServer")
    @patch.object(main_mod, "MetricsManager")
    def test_metrics_server_failure_exits_non_zero(self, mock_mm, mock_server_cls, mock_supervisor):
        mock_server_cls.return_value.start.side_effect = MetricsServerError("port taken")
        path = self._config({"apis": []})
        code = main_mod.main(["--config", path])
        self.assertEqual(code, 1)
        mock_supervisor.assert_not_called()


if __name__ == "__main__":
    unittest.main()
