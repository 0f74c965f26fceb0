"""Tests for the shared HTTP client pool."""

from textgen_providers.base.http import close_all_clients, get_httpx_client


def test_pool_reuses_clients_per_purpose():
    a = get_httpx_client("chat")
    assert get_httpx_client("chat") is a  # nosec B101
    assert get_httpx_client("probe") is not a  # nosec B101


def test_close_all_clients_resets_pool():
    before = get_httpx_client("chat")
    close_all_clients()
    assert before.is_closed  # nosec B101
    after = get_httpx_client("chat")
    assert after is not before and not after.is_closed  # nosec B101
