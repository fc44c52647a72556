# tests/e2e/test_json_lines_to_appinsights.py
"""End-to-end tests: newline-delimited JSON log output -> LogTransport.run() -> fake ingestion."""

import io
import json

import pytest

from loginsights import SeverityLevel, compose, track_trace_and_exception
from loginsights.testing import FakeApplicationInsights

pytestmark = pytest.mark.e2e

PINO_OUTPUT = "\n".join(
    json.dumps(line)
    for line in [
        {"level": 30, "time": 1_706_616_000_000, "pid": 7, "hostname": "web-1", "msg": "started", "port": 8080},
        {"level": 40, "time": 1_706_616_001_000, "pid": 7, "hostname": "web-1", "msg": "slow request", "ms": 950},
        {
            "level": 50,
            "time": 1_706_616_002_000,
            "pid": 7,
            "hostname": "web-1",
            "msg": "request failed",
            "err": {
                "type": "TypeError",
                "message": "bar",
                "stack": "TypeError: bar\n    at handler (/srv/app/routes.js:42:11)\n    at /srv/app/server.js:10:3",
            },
        },
    ]
)


class TestPullIntake:
    def test_log_file_is_shipped_in_order(self, connection_string: str, fake_ai: FakeApplicationInsights) -> None:
        expected = fake_ai.expect(4)
        transport = compose(track=track_trace_and_exception, connectionString=connection_string)

        written = transport.run(io.StringIO(PINO_OUTPUT))

        assert written == 3
        assert transport.terminated is True
        items = [item.body for item in expected.result()]
        assert [item["data"]["baseType"] for item in items] == [
            "MessageData",
            "MessageData",
            "MessageData",
            "ExceptionData",
        ]
        assert [item["time"] for item in items[:3]] == [
            "2024-01-30T12:00:00.000Z",
            "2024-01-30T12:00:01.000Z",
            "2024-01-30T12:00:02.000Z",
        ]
        assert items[0]["data"]["baseData"]["properties"] == {"port": "8080"}
        assert items[1]["data"]["baseData"]["severityLevel"] == SeverityLevel.WARNING

        exception = items[3]["data"]["baseData"]["exceptions"][0]
        assert exception["typeName"] == "TypeError"
        assert exception["parsedStack"][0]["fileName"] == "/srv/app/routes.js"
        assert exception["parsedStack"][0]["method"] == "handler"
