import socket

import redis
from fastapi.testclient import TestClient

import access_counter.__main__ as entry
import access_counter.adapters.redis_store as redis_store_mod
from access_counter.adapters.memory import MemoryStore
from access_counter.adapters.redis_store import RedisStore
from access_counter.api.main import build_store, create_app
from access_counter.config import Settings
from access_counter.credentials import ResolvedCredential


class RefusingRedis:
    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def ping(self):
        raise redis.exceptions.ConnectionError("Connection refused")

    def incr(self, name):
        raise redis.exceptions.ConnectionError("Connection refused")

    def close(self):
        pass


def test_lifespan_wires_context(settings, tmp_path):
    (tmp_path / "redis-config").write_text("vault-pw\n")
    store = MemoryStore()
    app = create_app(settings=settings, store=store, environ={"REDIS_PASSWORD": "env-pw"})
    with TestClient(app) as client:
        ctx = client.app.state.ctx
        assert ctx.settings is settings
        assert ctx.credential == ResolvedCredential(value="vault-pw", source="file")
        assert ctx.store is store
    assert app.state.ctx is None


def test_startup_survives_unreachable_redis(monkeypatch, settings):
    created = []

    def factory(**kwargs):
        client = RefusingRedis(**kwargs)
        created.append(client)
        return client

    monkeypatch.setattr(redis_store_mod.redis, "Redis", factory)
    app = create_app(settings=settings, environ={"REDIS_PASSWORD": "env-pw"})
    with TestClient(app) as client:
        assert client.get("/healthz").text == "OK"
        r = client.get("/data")
        assert r.status_code == 500
        assert r.text == "Error connecting to database"
    assert created[0].kwargs["password"] == "env-pw"
    assert created[0].kwargs["host"] == "localhost"
    assert created[0].kwargs["port"] == 6379


def test_startup_with_no_password(settings):
    store = MemoryStore()
    with TestClient(create_app(settings=settings, store=store, environ={})) as client:
        assert client.app.state.ctx.credential.value == ""
        assert client.get("/data").text == "Access count: 1"


def test_build_store_selects_backend():
    cred = ResolvedCredential(value="pw", source="env")
    s = build_store(Settings(redis_addr="cache:6390"), cred)
    assert isinstance(s, RedisStore)
    assert (s.host, s.port, s.password, s.db) == ("cache", 6390, "pw", 0)
    assert (s.connect_timeout, s.socket_timeout) == (5.0, 3.0)
    assert isinstance(build_store(Settings(store_backend="memory"), cred), MemoryStore)


def test_bind_failure_exits_nonzero(monkeypatch, caplog):
    busy = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    busy.bind(("127.0.0.1", 0))
    busy.listen(1)
    port = busy.getsockname()[1]
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", str(port))
    try:
        assert entry.main() == 1
    finally:
        busy.close()
    assert "Server failed to start" in caplog.text


def test_bind_listener_returns_listening_socket():
    sock = entry.bind_listener("127.0.0.1", 0)
    try:
        host, port = sock.getsockname()
        assert host == "127.0.0.1"
        assert port > 0
    finally:
        sock.close()


def test_build_store_passes_configured_timeouts():
    cred = ResolvedCredential(value="", source="none")
    settings = Settings.from_env({"REDIS_CONNECT_TIMEOUT": "1.5", "REDIS_SOCKET_TIMEOUT": "0.5"})
    s = build_store(settings, cred)
    assert (s.connect_timeout, s.socket_timeout) == (1.5, 0.5)


def test_startup_ping_logs_unreachable_store(settings, caplog):
    store = MemoryStore()
    store.set_available(False)
    with TestClient(create_app(settings=settings, store=store, environ={})) as client:
        assert client.get("/healthz").status_code == 200
    assert "Could not connect to Redis" in caplog.text
