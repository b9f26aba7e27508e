import json

import pytest

from kg_common import telemetry
from kg_common.result import ApiResult
from kg_common.tooling import InstrumentConfig, instrument_async_tool, sanitize_args_for_log


@pytest.fixture()
def telemetry_on(monkeypatch, tmp_path):
    monkeypatch.setenv("KG_DISABLE_TELEMETRY", "0")
    monkeypatch.setenv("KG_TELEMETRY_DIR", str(tmp_path / "tele"))
    return tmp_path / "tele" / telemetry.TELEMETRY_FILE


def test_log_event_appends_redacted_jsonl(telemetry_on):
    telemetry.log_event(
        "tool",
        "create_entities",
        {"args": {"arguments": {"entities": []}, "headers": {"Authorization": "Bearer abc"}, "api_key": "k"}},
        ok=True,
        ms=12,
        corr_id="cid-1",
    )

    rec = json.loads(telemetry_on.read_text(encoding="utf-8").splitlines()[-1])
    assert rec["name"] == "create_entities"
    assert rec["corr_id"] == "cid-1"
    assert rec["ok"] is True and rec["ms"] == 12
    assert rec["args"]["args"]["headers"]["Authorization"] == "Bearer ***redacted***"
    assert rec["args"]["args"]["api_key"] == "***redacted***"


def test_disabled_telemetry_writes_nothing(monkeypatch, tmp_path):
    monkeypatch.setenv("KG_TELEMETRY_DIR", str(tmp_path / "tele"))
    telemetry.log_event("tool", "read_graph", {})
    assert not (tmp_path / "tele").exists()


def test_telemetry_recent_is_bounded_and_skips_garbage(telemetry_on):
    for i in range(5):
        telemetry.log_event("tool", f"t{i}", {}, corr_id=str(i))
    with telemetry_on.open("a", encoding="utf-8") as f:
        f.write("{not json\n")

    recent = telemetry.telemetry_recent(3)
    assert [r["name"] for r in recent] == ["t3", "t4"]


def test_sanitize_args_for_log():
    assert sanitize_args_for_log({"token": "x", "query": "q"}) == {"token": "***redacted***", "query": "q"}


@pytest.mark.asyncio
async def test_instrumented_handler_logs_outcome_and_contains_exceptions(telemetry_on):
    @instrument_async_tool(InstrumentConfig(kind="tool", name="boom"))
    async def boom(client, arguments):
        raise ValueError("kaboom")

    @instrument_async_tool(InstrumentConfig(kind="tool", name="fine"))
    async def fine(client, arguments):
        return ApiResult.success({"ok": True})

    bad = await boom(object(), {"query": "x"})
    good = await fine(object(), {})

    assert bad.error["error"]["code"] == "unknown_error"
    assert good.ok

    records = telemetry.telemetry_recent(10)
    assert [(r["name"], r["ok"]) for r in records] == [("boom", False), ("fine", True)]
    assert records[0]["args"]["args"] == {"arguments": {"query": "x"}}
    assert records[0]["args"]["error"]["code"] == "unknown_error"
    assert records[0]["corr_id"] != records[1]["corr_id"]
