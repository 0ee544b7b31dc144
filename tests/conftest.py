"""
Shared fixtures for YLE Live tests.

Raw payload factories mirror the shape of the YLE programs API responses.
"""
import pytest

from yletv.services import crypto_service


TEST_SECRET = "0123456789abcdef"


def make_service(service_id, fi=None, sv=None):
    title = {}
    if fi is not None:
        title["fi"] = fi
    if sv is not None:
        title["sv"] = sv
    return {"id": service_id, "type": "TVChannel", "title": title}


def make_event(status="currently", event_type="OnDemandPublication", available=True, media_id="M1"):
    return {
        "temporalStatus": status,
        "type": event_type,
        "media": {"id": media_id, "available": available},
    }


def make_schedule_entry(
    entry_id,
    service_id,
    content_id="X1",
    title=None,
    description=None,
    events=None,
    image_id=None,
    cover_image_id=None,
    start="2026-10-17T18:00:00+03:00",
    end="2026-10-17T19:00:00+03:00",
):
    content = {
        "id": content_id,
        "title": title if title is not None else {"fi": f"Ohjelma {entry_id}"},
        "description": description if description is not None else {"fi": "Kuvaus"},
        "publicationEvent": events if events is not None else [],
    }
    if image_id is not None:
        content["image"] = {"id": image_id}
    if cover_image_id is not None:
        content["partOfSeries"] = {"id": "S1", "coverImage": {"id": cover_image_id}}
    return {
        "id": entry_id,
        "service": {"id": service_id},
        "content": content,
        "startTime": start,
        "endTime": end,
    }


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def encrypted_url(secret):
    return crypto_service.encrypt("https://yletv.example/stream/master.m3u8", secret, iv=bytes(range(16)))
