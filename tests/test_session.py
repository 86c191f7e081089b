from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from trackmykid.routes import DASHBOARD, HOME, LOGIN, Navigator
from trackmykid.session import FileStorage, MemoryStorage, SessionContext, decode_jwt_payload


def _jwt(payload: dict[str, object]) -> str:
    body = base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=").decode()
    return f"header.{body}.sig"


def test_file_storage_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    storage = FileStorage(path)
    assert storage.get("token") is None

    storage.set("token", "abc")
    storage.set("theme", "dark")
    storage.remove("missing")

    assert FileStorage(path).get("token") == "abc"
    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark", "token": "abc"}

    storage.remove("token")
    assert FileStorage(path).get("token") is None


def test_file_storage_ignores_corrupt_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert FileStorage(path).get("token") is None
    assert "unreadable state file" in caplog.text


def test_durable_token_takes_precedence() -> None:
    context = SessionContext(
        durable=MemoryStorage({"token": "durable"}),
        session=MemoryStorage({"token": "session"}),
    )
    assert context.token == "durable"

    context.durable.remove("token")
    assert context.token == "session"


def test_store_token_respects_remember() -> None:
    context = SessionContext()
    context.store_token("short")
    assert context.session.get("token") == "short"
    assert context.durable.get("token") is None

    context.store_token("long", remember=True)
    assert context.durable.get("token") == "long"

    context.clear_tokens()
    assert context.token == ""
    assert not context.is_authenticated


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"id": 7}, 7),
        ({"userId": "12"}, 12),
        ({"sub": 3.0}, 3),
        ({"uid": "abc"}, None),
        ({"role": "admin"}, None),
    ],
)
def test_auth_user_id_from_jwt(payload: dict[str, object], expected: int | None) -> None:
    context = SessionContext(durable=MemoryStorage({"token": _jwt(payload)}))
    assert context.auth_user_id() == expected


def test_auth_user_id_without_jwt() -> None:
    assert SessionContext().auth_user_id() is None
    assert SessionContext(durable=MemoryStorage({"token": "opaque"})).auth_user_id() is None
    assert decode_jwt_payload("a.!!!.c") is None
    assert decode_jwt_payload(f"a.{base64.urlsafe_b64encode(b'[1]').decode()}.c") is None


def test_theme_toggle_persists(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    context = SessionContext(durable=FileStorage(path))
    assert context.theme == "light"

    assert context.toggle_theme() == "dark"
    assert SessionContext(durable=FileStorage(path)).theme == "dark"

    with pytest.raises(ValueError):
        context.set_theme("blue")  # type: ignore[arg-type]


def test_navigator_history() -> None:
    navigator = Navigator()
    assert navigator.current == HOME

    navigator.navigate(DASHBOARD)
    navigator.navigate(LOGIN)

    assert navigator.current == LOGIN
    assert navigator.history == [DASHBOARD, LOGIN]
    navigator.history.clear()
    assert navigator.history == [DASHBOARD, LOGIN]
