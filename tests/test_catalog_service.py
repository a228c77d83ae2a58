from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from pinna.core.errors import ErrorCode, FetchFailed, UploadError
from pinna.models.capture_model import CapturedImage, ImageEncoding
from pinna.models.places_model import LoadStatus
from pinna.repos.catalog_repo import CatalogRepository
from pinna.services.Catalog_service import CatalogService

BASE_URL = "https://catalog.test"

PLACES_PAYLOAD = [
    {"id": "p-1", "title": "Harbour", "latitude": 57.79241, "longitude": 11.99581, "description": "Boats"},
    {"id": "p-2", "title": "Bridge", "latitude": 57.70, "longitude": 11.90},
]


def _repo(handler, **kwargs) -> CatalogRepository:
    return CatalogRepository(base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_refresh_loads_and_normalizes_places():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/places"
        return httpx.Response(200, json=PLACES_PAYLOAD)

    catalog = CatalogService(_repo(handler))
    assert catalog.status == LoadStatus.LOADING

    places = await catalog.refresh()

    assert catalog.status == LoadStatus.LOADED
    assert [p.id for p in places] == ["p-1", "p-2"]
    assert places[0].description == "Boats"
    assert places[1].description is None
    assert catalog.get("p-2").title == "Bridge"
    assert catalog.get("missing") is None


@pytest.mark.asyncio
async def test_refresh_skips_malformed_records_and_duplicate_ids():
    payload = [
        {"id": "p-1", "title": "First", "latitude": 1.0, "longitude": 2.0},
        {"id": "p-1", "title": "Duplicate", "latitude": 3.0, "longitude": 4.0},
        {"title": "No id", "latitude": 1.0, "longitude": 1.0},
        {"id": "p-3", "title": "No coordinates"},
        {"id": "p-4", "title": "Bad latitude", "latitude": "north", "longitude": 1.0},
        "not-a-record",
        {"id": 5, "title": "Numeric id", "lat": 5.5, "lng": 6.5, "image": "https://img.test/5.jpg"},
    ]

    catalog = CatalogService(_repo(lambda request: httpx.Response(200, json=payload)))
    places = await catalog.refresh()

    assert [p.id for p in places] == ["p-1", "5"]
    assert places[0].title == "First"
    assert places[1].latitude == 5.5
    assert places[1].photo == "https://img.test/5.jpg"


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_snapshot():
    responses = [
        httpx.Response(200, json=PLACES_PAYLOAD),
        httpx.Response(503, text="down"),
    ]

    catalog = CatalogService(_repo(lambda request: responses.pop(0)))
    first = await catalog.refresh()

    with pytest.raises(FetchFailed) as exc_info:
        await catalog.refresh()

    assert exc_info.value.details == {"status_code": 503}
    assert catalog.status == LoadStatus.FAILED
    assert catalog.places == first
    assert catalog.last_error is exc_info.value


@pytest.mark.asyncio
async def test_failed_first_refresh_leaves_empty_snapshot():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    catalog = CatalogService(_repo(handler))
    with pytest.raises(FetchFailed):
        await catalog.refresh()

    assert catalog.places == ()
    assert catalog.status == LoadStatus.FAILED


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>oops</html>", json.dumps({"places": []}).encode()])
async def test_refresh_rejects_non_list_bodies(body: bytes):
    catalog = CatalogService(_repo(lambda request: httpx.Response(200, content=body)))
    with pytest.raises(FetchFailed) as exc_info:
        await catalog.refresh()
    assert exc_info.value.code == ErrorCode.FETCH_FAILED


@pytest.mark.asyncio
async def test_concurrent_refreshes_are_serialized():
    in_flight = 0
    max_in_flight = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, max_in_flight
        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, json=PLACES_PAYLOAD)

    catalog = CatalogService(_repo(handler))
    await asyncio.gather(catalog.refresh(), catalog.refresh(), catalog.refresh())

    assert max_in_flight == 1
    assert len(catalog.places) == 2


@pytest.mark.asyncio
async def test_multipart_upload_carries_all_fields():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"title": "Harbour", "id": "p-9"})

    repo = _repo(handler, upload_mode="multipart")
    body = await repo.upload_place(
        CapturedImage(data=b"jpeg-bytes"), lat=57.8, lng=12.0, title="Harbour", description="Boats",
    )

    assert body["title"] == "Harbour"
    assert seen["path"] == "/save"
    assert seen["content_type"].startswith("multipart/form-data")
    for fragment in (b'name="image"', b"jpeg-bytes", b'name="lat"', b"57.8", b'name="lng"', b'name="title"', b"Boats"):
        assert fragment in seen["body"]


@pytest.mark.asyncio
async def test_json_upload_sends_base64_image():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["json"] = json.loads(request.content)
        return httpx.Response(201, json={"title": "Harbour"})

    repo = _repo(handler, upload_mode="json")
    image = CapturedImage(data="anBlZy1ieXRlcw==", encoding=ImageEncoding.BASE64)
    await repo.upload_place(image, lat=57.8, lng=12.0, title="Harbour", description="Boats")

    assert seen["path"] == "/upload"
    assert seen["json"] == {
        "image": "anBlZy1ieXRlcw==",
        "lat": 57.8,
        "lng": 12.0,
        "title": "Harbour",
        "description": "Boats",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"ok": True}),
        httpx.Response(200, json=["Harbour"]),
    ],
)
async def test_upload_failures_raise_upload_error(response: httpx.Response):
    repo = _repo(lambda request: response)
    with pytest.raises(UploadError):
        await repo.upload_place(CapturedImage(data=b"x"), lat=1.0, lng=2.0, title="t", description="d")


def test_unknown_upload_mode_is_rejected():
    with pytest.raises(ValueError):
        CatalogRepository(base_url=BASE_URL, upload_mode="ftp")


def test_captured_image_encodings_convert_both_ways():
    raw = CapturedImage(data=b"jpeg-bytes")
    encoded = CapturedImage(data=raw.as_base64(), encoding=ImageEncoding.BASE64)
    assert encoded.as_bytes() == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_zero_is_a_valid_place_id():
    payload = [
        {"id": 0, "title": "Origin", "latitude": 0.0, "longitude": 0.0},
        {"_id": 0, "title": "Duplicate origin", "latitude": 1.0, "longitude": 1.0},
    ]

    catalog = CatalogService(_repo(lambda request: httpx.Response(200, json=payload)))
    places = await catalog.refresh()

    assert [p.id for p in places] == ["0"]
    assert places[0].title == "Origin"
    assert catalog.get("0").latitude == 0.0
