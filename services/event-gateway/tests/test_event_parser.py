"""
Tests for turning requests into CloudEvents.
"""
import json

import pytest

from gateway_service.services.event_parser import (
    EventParsingError,
    parse_media_type,
    parse_request,
)


def test_parse_media_type():
    assert parse_media_type("application/json; charset=utf-8") == "application/json"
    assert parse_media_type("Text/Plain") == "text/plain"
    assert parse_media_type(None) == "application/octet-stream"


class TestLegacyMode:
    """Requests carrying an Event header."""
    
    def test_json_payload(self):
        event = parse_request(
            "POST",
            {"Event": "user.created", "Content-Type": "application/json"},
            b'{"name": "Max"}',
        )
        
        assert event.event_type == "user.created"
        assert event.content_type == "application/json"
        assert event.data == {"name": "Max"}
        assert event.extensions["eventgateway"]["transformed"] is True
    
    def test_text_payload(self):
        event = parse_request("POST", {"Event": "note.added", "Content-Type": "text/plain"}, b"hello")
        assert event.data == "hello"
    
    def test_cloudevent_body_is_used_as_is(self):
        body = json.dumps({
            "eventType": "user.created",
            "cloudEventsVersion": "0.1",
            "source": "/crm",
            "eventID": "1234",
            "data": {"name": "Max"},
        }).encode()
        event = parse_request("POST", {"Event": "user.created", "Content-Type": "application/json"}, body)
        
        assert event.source == "/crm"
        assert event.event_id == "1234"
        assert event.data == {"name": "Max"}


class TestStructuredMode:
    """Requests with an application/cloudevents+json body."""
    
    def test_valid_event(self):
        body = json.dumps({
            "eventType": "user.created",
            "cloudEventsVersion": "0.1",
            "source": "/crm",
            "eventID": "abc",
            "contentType": "application/json",
            "data": {"id": 1},
        }).encode()
        event = parse_request("POST", {"Content-Type": "application/cloudevents+json"}, body)
        
        assert event.event_type == "user.created"
        assert event.event_id == "abc"
        assert event.data == {"id": 1}
    
    def test_invalid_json(self):
        with pytest.raises(EventParsingError):
            parse_request("POST", {"Content-Type": "application/cloudevents+json"}, b"{nope")
    
    def test_missing_attributes(self):
        with pytest.raises(EventParsingError):
            parse_request(
                "POST",
                {"Content-Type": "application/cloudevents+json"},
                b'{"eventType": "user.created"}',
            )


class TestBinaryMode:
    """Requests carrying CE-* headers."""
    
    def test_headers_become_attributes(self):
        headers = {
            "CE-EventType": "user.created",
            "CE-CloudEventsVersion": "0.1",
            "CE-Source": "/crm",
            "CE-EventID": "42",
            "CE-EventTime": "2018-04-05T17:31:00Z",
            "CE-X-Region": "eu",
            "Content-Type": "application/json",
        }
        event = parse_request("POST", headers, b'{"name": "Max"}')
        
        assert event.event_type == "user.created"
        assert event.event_id == "42"
        assert event.event_time.year == 2018
        assert event.extensions == {"region": "eu"}
        assert event.data == {"name": "Max"}


class TestHTTPRequestEvents:
    """Requests without event information."""
    
    def test_request_is_described(self):
        event = parse_request(
            "get",
            {"Content-Type": "application/json", "X-Trace": "1"},
            b"",
            path="/users/1",
            host="localhost:4000",
            query=[("tag", "a"), ("tag", "b"), ("page", "2")],
        )
        
        assert event.event_type == "http.request"
        assert event.data["method"] == "GET"
        assert event.data["path"] == "/users/1"
        assert event.data["host"] == "localhost:4000"
        assert event.data["query"] == {"tag": ["a", "b"], "page": ["2"]}
        assert event.data["headers"]["X-Trace"] == "1"
        assert event.data["body"] is None
    
    def test_json_body_is_decoded(self):
        event = parse_request(
            "POST", {"Content-Type": "application/json"}, b'{"name": "Max"}', path="/users"
        )
        assert event.data["body"] == {"name": "Max"}
