"""Pipeline RPC routes: status codes, envelopes and the X-User-Id identity header."""

from uuid import uuid4

from tradehub.models import Meetup, User


async def test_list_pipelines(client):
    res = await client.get("/api/v1/pipelines")
    assert res.status_code == 200
    names = {p["name"] for p in res.json()["pipelines"]}
    assert names == {
        "createOffer", "acceptOffer", "declineOffer",
        "expireListing", "completeMeetup", "sendMessage",
    }


async def test_unknown_pipeline_is_404(client):
    res = await client.post(
        "/api/v1/pipelines/deleteEverything", json={},
        headers={"X-User-Id": str(uuid4())},
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


async def test_missing_user_header_is_401(client):
    res = await client.post("/api/v1/pipelines/createOffer", json={"listingId": str(uuid4())})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_malformed_user_header_is_401(client):
    res = await client.post(
        "/api/v1/pipelines/createOffer", json={},
        headers={"X-User-Id": "not-a-uuid"},
    )
    assert res.status_code == 401


async def test_invalid_input_envelope(client):
    res = await client.post(
        "/api/v1/pipelines/createOffer", json={"cashAmount": -5},
        headers={"X-User-Id": str(uuid4())},
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert set(error["data"]["fields"]) == {"listingId", "cashAmount"}
    assert error["context"]["pipeline"] == "createOffer"


async def test_unparseable_body_is_invalid_input(client):
    res = await client.post(
        "/api/v1/pipelines/createOffer", content=b"{not json",
        headers={"X-User-Id": str(uuid4()), "Content-Type": "application/json"},
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert error["data"]["fields"] == ["payload"]


async def test_self_offer_is_403(client, seed):
    owner = await seed.user()
    listing = await seed.listing(owner)
    res = await client.post(
        "/api/v1/pipelines/createOffer",
        json={"listingId": str(listing.id), "cashAmount": 1},
        headers={"X-User-Id": str(owner.id)},
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "SELF_OFFER"


async def test_create_then_accept_over_http(client, seed, notifier):
    owner, offerer = await seed.user("Ash"), await seed.user("Brock")
    listing = await seed.listing(owner)

    created = await client.post(
        "/api/v1/pipelines/createOffer",
        json={"listingId": str(listing.id), "cashAmount": 10},
        headers={"X-User-Id": str(offerer.id)},
    )
    assert created.status_code == 200
    offer_id = created.json()["offer_id"]

    accepted = await client.post(
        "/api/v1/pipelines/acceptOffer",
        json={"offerId": offer_id, "listingId": str(listing.id)},
        headers={"X-User-Id": str(owner.id)},
    )
    assert accepted.status_code == 200
    body = accepted.json()
    assert body["declined_offer_count"] == 0
    assert {"match_id", "conversation_id"} <= set(body)

    again = await client.post(
        "/api/v1/pipelines/acceptOffer",
        json={"offerId": offer_id, "listingId": str(listing.id)},
        headers={"X-User-Id": str(owner.id)},
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_TRANSITION"
    assert len(notifier.sent) == 2


async def test_complete_meetup_over_http(client, seed):
    a, b = await seed.user("Ash"), await seed.user("Brock")
    match, _ = await seed.match(a, b)
    meetup = await seed.meetup(match)

    for user, both in ((a, False), (b, True)):
        res = await client.post(
            "/api/v1/pipelines/completeMeetup",
            json={"meetupId": str(meetup.id)},
            headers={"X-User-Id": str(user.id)},
        )
        assert res.status_code == 200
        assert res.json()["both_completed"] is both

    assert (await seed.get(Meetup, meetup.id)).status == "completed"
    assert (await seed.get(User, a.id)).total_trades == 1
