import httpx
import pytest

from skillhub.integrations.event_directory import (
    EventCapacitySnapshot,
    HttpEventDirectory,
    SqlEventDirectory,
    parse_capacity,
)
from skillhub.services.errors import InvalidEventCapacity, TransientError


@pytest.mark.parametrize("raw, expected", [("30", 30), (" 7 ", 7), ("0", 0), (12, 12), (0, 0)])
def test_parse_capacity_accepts_non_negative_integers(raw, expected):
    assert parse_capacity(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "3.5", "-1", -1, True, None, 2.0, "²"])
def test_parse_capacity_rejects_invalid_values(raw):
    with pytest.raises(InvalidEventCapacity):
        parse_capacity(raw)


class TestSqlEventDirectory:

    def test_found(self, store, add_event):
        add_event("evt-1", capacity="25")
        directory = SqlEventDirectory(store.session_factory)
        assert directory.get_event("evt-1") == EventCapacitySnapshot(event_id="evt-1", raw_capacity="25")

    def test_missing(self, store):
        assert SqlEventDirectory(store.session_factory).get_event("missing") is None


def _directory(handler) -> HttpEventDirectory:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpEventDirectory("http://events.test/", client=client)


class TestHttpEventDirectory:

    def test_found(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"id": "evt-1", "name": "Knife skills", "capacity": "12"})

        assert _directory(handler).get_event("evt-1") == EventCapacitySnapshot(event_id="evt-1", raw_capacity="12")
        assert seen == ["/api/events/evt-1"]

    def test_not_found(self):
        directory = _directory(lambda request: httpx.Response(404, json={"error": "Event not found"}))
        assert directory.get_event("missing") is None

    def test_server_error_is_transient(self):
        directory = _directory(lambda request: httpx.Response(500, json={"error": "Internal server error"}))
        with pytest.raises(TransientError):
            directory.get_event("evt-1")

    def test_network_error_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TransientError):
            _directory(handler).get_event("evt-1")

    def test_invalid_capacity_is_kept_raw_until_needed(self):
        directory = _directory(lambda request: httpx.Response(200, json={"id": "evt-1", "capacity": "NaN"}))

        event = directory.get_event("evt-1")

        assert event.raw_capacity == "NaN"
        with pytest.raises(InvalidEventCapacity):
            event.capacity

    def test_non_json_body_is_transient(self):
        directory = _directory(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(TransientError):
            directory.get_event("evt-1")

    @pytest.mark.parametrize("body", [["evt-1", "12"], "evt-1", 12, None])
    def test_non_object_json_body_is_transient(self, body):
        directory = _directory(lambda request: httpx.Response(200, json=body))
        with pytest.raises(TransientError):
            directory.get_event("evt-1")


def test_snapshot_capacity_is_parsed_on_access():
    assert EventCapacitySnapshot(event_id="evt-1", raw_capacity=" 8 ").capacity == 8
    with pytest.raises(InvalidEventCapacity):
        EventCapacitySnapshot(event_id="evt-1", raw_capacity="lots").capacity
