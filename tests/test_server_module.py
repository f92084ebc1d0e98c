import logging
from logging.handlers import RotatingFileHandler

import pytest
from flask import Flask

from cavegen.server import _configure_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)


def test_configure_logging_writes_to_instance_folder(tmp_path, restore_root_logging):
    app = Flask("cavegen_logging_test", instance_path=str(tmp_path / "instance"))
    path = _configure_logging(app)
    assert path.endswith("cavegen.log")
    handlers = restore_root_logging.handlers
    assert any(isinstance(h, RotatingFileHandler) for h in handlers)
    assert len(handlers) == 2
    # Reconfiguring does not stack handlers
    _configure_logging(app)
    assert len(restore_root_logging.handlers) == 2
    logging.getLogger("cavegen.test").info("hello from test")
    for h in restore_root_logging.handlers:
        h.flush()
    assert "hello from test" in (tmp_path / "instance" / "cavegen.log").read_text(encoding="utf-8")
