from types import SimpleNamespace
from fastapi import FastAPI, Depends, Request
from fastapi.testclient import TestClient
from bundlestore.utils.rate_limit import optional_rate_limit, rate_limit_health_info
from bundlestore.utils.security import COOKIE_NAME

def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.get("/limitedA", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_a():
        return {"ok": True}

    @app.get("/limitedB", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_b():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app

def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=2))
    codes = [client.get("/limitedA").status_code for _ in range(3)]
    assert codes == [200, 200, 429]

def test_rate_limit_is_per_path_and_session(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_make_app(times=1))
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedB").status_code == 200
    assert client.get("/limitedA").status_code == 429
    client.cookies.set(COOKIE_NAME, "some-session")
    assert client.get("/limitedA").status_code == 200

def test_rate_limit_disabled_flag_allows_everything():
    app = _make_app(times=1)
    app.state.rate_limit_enabled = False
    client = TestClient(app)
    assert all(client.get("/limitedA").status_code == 200 for _ in range(5))

def test_limiter_failure_does_not_block(monkeypatch):
    # fastapi-limiter non initialisé (pas de Redis): la requête passe
    app = _make_app(times=1)
    app.state.rate_limit_enabled = True
    client = TestClient(app)
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedA").status_code == 200

def test_health_info(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    app = _make_app()
    app.state.rate_limit_enabled = True
    info = TestClient(app).get("/rl_info").json()
    assert info["enabled"] is True
    assert info["backend"] in ("memory", "redis")

def test_fallback_store_drops_idle_keys(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    clock = [1000.0]
    monkeypatch.setattr("bundlestore.utils.rate_limit.time", SimpleNamespace(time=lambda: clock[0]))
    app = _make_app(times=1, seconds=60)
    client = TestClient(app)

    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedA").status_code == 429
    assert len(app.state._rl_store) == 1

    clock[0] += 61
    assert client.get("/limitedB").status_code == 200
    assert [k for k in app.state._rl_store if k.endswith("/limitedA")] == []
    assert len(app.state._rl_store) == 1
