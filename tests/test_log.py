import re
from unittest.mock import patch

from idle_restart.log import SYSLOG_TAG, log


def test_console_line_is_timestamped(capsys):
    with patch("subprocess.run") as mock_run:
        log("Inside maintenance window, proceeding.", syslog=False)

    out = capsys.readouterr().out
    assert re.match(r"^\[\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\] Inside maintenance window, proceeding\.$", out.strip())
    mock_run.assert_not_called()


def test_syslog_copy(capsys):
    with patch("subprocess.run") as mock_run:
        log("Server is not empty.")

    mock_run.assert_called_once_with(["logger", "-t", SYSLOG_TAG, "Server is not empty."], check=False)


def test_missing_logger_binary_is_ignored(capsys):
    with patch("subprocess.run", side_effect=FileNotFoundError("logger")):
        log("Sleeping for 10 seconds.")

    assert "Sleeping for 10 seconds." in capsys.readouterr().out
