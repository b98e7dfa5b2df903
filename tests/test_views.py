"""
Tests for the channel profile, watch history and tweet feed views
"""

from datetime import timedelta

from tests.conftest import USERS_API


async def test_channel_profile_without_subscribers(client, make_user):
    await make_user("carol")

    response = await client.get(f"{USERS_API}/c/carol")

    assert response.status_code == 200, response.text
    channel = response.json()["data"]
    assert channel["username"] == "carol"
    assert channel["subscribers_count"] == 0
    assert channel["channels_subscribed_to_count"] == 0
    assert channel["is_subscribed"] is False
    assert set(channel) == {
        "id",
        "full_name",
        "username",
        "subscribers_count",
        "channels_subscribed_to_count",
        "is_subscribed",
        "avatar",
        "cover_image",
        "email"
    }


async def test_channel_profile_counts_and_viewer_subscription(client, make_user, make_subscription, auth_headers):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    await make_subscription(bob, alice)
    await make_subscription(carol, alice)
    await make_subscription(alice, bob)

    response = await client.get(f"{USERS_API}/c/ALICE")
    channel = response.json()["data"]
    assert channel["subscribers_count"] == 2
    assert channel["channels_subscribed_to_count"] == 1
    assert channel["is_subscribed"] is False

    response = await client.get(f"{USERS_API}/c/alice", headers=await auth_headers("bob"))
    assert response.json()["data"]["is_subscribed"] is True

    response = await client.get(f"{USERS_API}/c/bob", headers=await auth_headers("carol"))
    assert response.json()["data"]["is_subscribed"] is False


async def test_channel_profile_not_found(client):
    response = await client.get(f"{USERS_API}/c/nobody")

    assert response.status_code == 404
    assert response.json()["message"] == "Channel does not exist"


async def test_watch_history_in_watch_order_with_owner(client, make_user, make_video, auth_headers):
    bob = await make_user("bob")
    first = await make_video(bob, "first")
    second = await make_video(bob, "second")
    await make_user("alice", watch_history=[str(second.id), "not-a-uuid", str(first.id), str(second.id)])

    response = await client.get(f"{USERS_API}/history", headers=await auth_headers("alice"))

    assert response.status_code == 200, response.text
    history = response.json()["data"]
    assert [video["title"] for video in history] == ["second", "first"]
    assert history[0]["owner"] == {
        "id": str(bob.id),
        "full_name": "Bob",
        "username": "bob",
        "avatar": "https://media.test/bob.png"
    }


async def test_watch_history_empty(client, make_user, auth_headers):
    await make_user("alice")

    response = await client.get(f"{USERS_API}/history", headers=await auth_headers("alice"))

    assert response.status_code == 200
    assert response.json()["data"] == []


async def test_tweet_feed_pages(client, make_user, make_tweets):
    alice = await make_user("alice")
    await make_tweets(alice, 12)

    response = await client.get(f"{USERS_API}/get-feed-tweets/1")
    assert response.status_code == 200, response.text
    page = response.json()["data"]
    assert [tweet["content"] for tweet in page] == [f"tweet {i}" for i in range(11, 1, -1)]
    assert page[0]["owner"]["username"] == "alice"
    assert "owner_id" not in page[0]

    response = await client.get(f"{USERS_API}/get-feed-tweets/2")
    assert [tweet["content"] for tweet in response.json()["data"]] == ["tweet 1", "tweet 0"]

    response = await client.get(f"{USERS_API}/get-feed-tweets/3")
    assert response.status_code == 200
    assert response.json()["data"] == []


async def test_tweet_feed_rejects_page_zero(client):
    response = await client.get(f"{USERS_API}/get-feed-tweets/0")

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_tweet_feed_rejects_non_numeric_page(client):
    response = await client.get(f"{USERS_API}/get-feed-tweets/first")

    assert response.status_code == 422
    body = response.json()
    assert body["statusCode"] == 422
    assert body["errors"]


async def test_tweet_feed_page_beyond_any_offset(client, make_user, make_tweets):
    alice = await make_user("alice")
    await make_tweets(alice, 3)

    response = await client.get(f"{USERS_API}/get-feed-tweets/1000000000000000000")

    assert response.status_code == 200, response.text
    assert response.json()["data"] == []


async def test_tweet_feed_pages_do_not_overlap_on_equal_timestamps(client, make_user, make_tweets):
    alice = await make_user("alice")
    tweets = await make_tweets(alice, 12, spacing=timedelta(0))

    seen = []
    for page in (1, 2):
        response = await client.get(f"{USERS_API}/get-feed-tweets/{page}")
        seen.extend(tweet["id"] for tweet in response.json()["data"])

    assert len(seen) == 12
    assert set(seen) == {str(tweet.id) for tweet in tweets}
