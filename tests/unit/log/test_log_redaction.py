"""Tests for share token redaction in access logs."""

import logging

from notevault.logging import ShareTokenFilter, redact_share_tokens

TOKEN = "Zk3xQ0b9pLm2Rt7sVw1yA4cE6gH8jK5nP0qS2uX9zB1"


def test_redacts_token_in_path():
    assert redact_share_tokens(f"/api/v1/shared/{TOKEN}") == "/api/v1/shared/Zk3xQ0..."


def test_keeps_query_and_other_paths():
    assert redact_share_tokens(f"/api/v1/shared/{TOKEN}?x=1") == "/api/v1/shared/Zk3xQ0...?x=1"
    assert redact_share_tokens("/api/v1/shares/5") == "/api/v1/shares/5"


def test_filter_rewrites_access_record_args():
    record = logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "GET", f"/api/v1/shared/{TOKEN}", "1.1", 200),
        exc_info=None,
    )
    assert ShareTokenFilter().filter(record)
    assert record.args[2] == "/api/v1/shared/Zk3xQ0..."
    assert TOKEN not in record.getMessage()
