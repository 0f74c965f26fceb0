from __future__ import annotations

import pytest

from textgen_providers.base.models import ProviderConfig
from textgen_providers.base.vendor import Vendor
from textgen_providers.persistence.interfaces import SettingsRecord
from textgen_providers.persistence.sqlite import UnitOfWorkSqlite, migrate


def _record(**overrides):
    values = dict(
        api_base=None,
        selected_provider_name="B",
        streaming_enabled=False,
        auto_save_enabled=True,
        word_limit=300,
        temperature=1.25,
        max_tokens=0,
        timeout_seconds=30,
        use_streaming=False,
    )
    values.update(overrides)
    return SettingsRecord(**values)


def test_round_trip_preserves_order_and_fields(raw_conn):
    migrate(raw_conn)
    providers = [
        ProviderConfig(name="B", vendor="zhipu", api_key="k", base_url="https://open.bigmodel.cn", default_model="glm-4.6"),
        ProviderConfig(name="A", vendor="custom", base_url="http://localhost:1234"),
    ]
    with UnitOfWorkSqlite(raw_conn) as uow:
        uow.settings.put(_record())
        uow.providers.replace_all(providers)

    uow = UnitOfWorkSqlite(raw_conn)
    assert uow.settings.get() == _record()
    loaded = uow.providers.list_all()
    assert loaded == providers
    assert loaded[1].vendor is Vendor.CUSTOM
    assert uow.providers.count() == 2


def test_settings_get_returns_none_before_first_write(raw_conn):
    migrate(raw_conn)
    assert UnitOfWorkSqlite(raw_conn).settings.get() is None


def test_put_overwrites_singleton_row(raw_conn):
    migrate(raw_conn)
    with UnitOfWorkSqlite(raw_conn) as uow:
        uow.settings.put(_record())
    with UnitOfWorkSqlite(raw_conn) as uow:
        uow.settings.put(_record(word_limit=900, api_base="https://proxy.local"))
    assert raw_conn.execute("SELECT COUNT(*) FROM settings").fetchone()[0] == 1
    got = UnitOfWorkSqlite(raw_conn).settings.get()
    assert (got.word_limit, got.api_base) == (900, "https://proxy.local")


def test_unit_of_work_rolls_back_on_error(raw_conn):
    migrate(raw_conn)
    with UnitOfWorkSqlite(raw_conn) as uow:
        uow.providers.replace_all([ProviderConfig(name="keep")])

    with pytest.raises(RuntimeError):
        with UnitOfWorkSqlite(raw_conn) as uow:
            uow.providers.replace_all([ProviderConfig(name="x"), ProviderConfig(name="y")])
            raise RuntimeError("abort")

    assert [p.name for p in UnitOfWorkSqlite(raw_conn).providers.list_all()] == ["keep"]
    assert not raw_conn.in_transaction
