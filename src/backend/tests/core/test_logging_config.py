"""
Tests for structured logging setup.
"""

import json

import structlog

from core.logging_config import configure_logging


class TestConfigureLogging:
    """Tests for configure_logging."""

    def teardown_method(self):
        configure_logging(is_development=True, log_level="DEBUG")

    def test_json_renderer_in_production(self):
        """Test production output is one JSON object per event."""
        configure_logging(is_development=False, log_level="INFO")

        renderer = structlog.get_config()["processors"][-1]

        assert isinstance(renderer, structlog.processors.JSONRenderer)
        rendered = renderer(None, "info", {"event": "vote_submitted", "records_saved": 2})
        assert json.loads(rendered) == {"event": "vote_submitted", "records_saved": 2}

    def test_key_value_renderer_in_development(self):
        """Test development output is key=value with the event first."""
        configure_logging(is_development=True, log_level="DEBUG")

        renderer = structlog.get_config()["processors"][-1]

        assert isinstance(renderer, structlog.processors.KeyValueRenderer)
        assert renderer(None, "info", {"records_saved": 2, "event": "vote_submitted"}).startswith(
            "event='vote_submitted'"
        )

    def test_shared_processors_add_level_and_timestamp(self):
        """Test every event is stamped before rendering."""
        configure_logging(is_development=True)

        processors = structlog.get_config()["processors"]

        assert structlog.stdlib.add_log_level in processors
        assert any(isinstance(p, structlog.processors.TimeStamper) for p in processors)
