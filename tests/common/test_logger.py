import logging

from grandpass.core.logger import LogFormatter, get_logger


def _record(level, msg="Scan processed", name="grandpass.scanner.service"):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_console_lines_use_operator_labels():
    formatter = LogFormatter()

    assert formatter.format(_record(logging.INFO)) == "[OK] Scan processed"
    assert formatter.format(_record(logging.WARNING, "Lookup failed")) == "[WARNING] Lookup failed"
    assert formatter.format(_record(logging.ERROR, "Backend unreachable")) == "[ERROR] Backend unreachable"


def test_file_lines_carry_timestamp_and_logger_name():
    line = LogFormatter(timestamped=True).format(_record(logging.INFO))

    assert line.startswith("[INFO] ")
    assert line.endswith(" - grandpass.scanner.service - Scan processed")


def test_module_loggers_hang_off_the_app_logger():
    assert get_logger().name == "grandpass"
    assert get_logger("grandpass.visits.service").name == "grandpass.visits.service"
    assert get_logger("kiosk").name == "grandpass.kiosk"
