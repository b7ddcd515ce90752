import uuid

from tests.conftest import API, publish


def stored_names(storage):
    media = storage.base_dir / "media"
    return {p.name for p in media.iterdir()} if media.exists() else set()


async def test_publish_video(client, make_user, storage, tmp_path):
    ann = await make_user("ann")
    before = stored_names(storage)

    resp = await publish(client, ann["headers"], title=" Intro ", description="Hello")
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Video uploaded successfully"
    video = body["data"]
    assert video["title"] == "Intro"
    assert video["ownerId"] == ann["id"]
    assert video["views"] == 0
    assert video["isPublished"] is True
    assert video["videoFile"].endswith(".mp4")
    assert video["thumbnail"].endswith(".png")
    assert len(stored_names(storage) - before) == 2
    assert list((tmp_path / "temp").iterdir()) == []


async def test_publish_requires_title_and_files(client, make_user, tmp_path):
    ann = await make_user("ann")

    resp = await publish(client, ann["headers"], title="  ")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Title and Description are required"

    resp = await client.post(
        f"{API}/videos",
        data={"title": "t", "description": "d"},
        files={"videoFile": ("v.mp4", b"video", "video/mp4")},
        headers=ann["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Thumbnail is required"

    resp = await client.post(
        f"{API}/videos",
        data={"title": "t", "description": "d"},
        files={"thumbnail": ("t.png", b"thumb", "image/png")},
        headers=ann["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "videoFile is required"

    # temp files never outlive a rejected request
    assert list((tmp_path / "temp").iterdir()) == []


async def test_publish_upload_failure_is_internal_error(client, make_user, storage, monkeypatch):
    ann = await make_user("ann")

    def broken_upload(local_path, public_id):
        raise OSError("storage offline")

    monkeypatch.setattr(storage, "upload", broken_upload)
    resp = await publish(client, ann["headers"])
    assert resp.status_code == 500
    assert resp.json()["message"] == "Error while uploading thumbnail"
    assert resp.json()["success"] is False


async def test_get_video_counts_views_and_embeds_owner(client, make_user):
    ann = await make_user("ann")
    video_id = (await publish(client, ann["headers"])).json()["data"]["id"]

    await client.get(f"{API}/videos/{video_id}")
    resp = await client.get(f"{API}/videos/{video_id}")
    assert resp.status_code == 200
    video = resp.json()["data"]
    assert video["views"] == 2
    assert video["owner"]["username"] == "ann"
    assert "password" not in video["owner"]


async def test_get_unknown_video(client):
    resp = await client.get(f"{API}/videos/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Video not found"


async def test_unpublished_video_visible_to_owner_only(client, make_user):
    ann = await make_user("ann")
    bob = await make_user("bob")
    video_id = (await publish(client, ann["headers"])).json()["data"]["id"]

    resp = await client.patch(f"{API}/videos/{video_id}/toggle-publish", headers=ann["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["isPublished"] is False

    assert (await client.get(f"{API}/videos/{video_id}", headers=bob["headers"])).status_code == 404
    assert (await client.get(f"{API}/videos/{video_id}")).status_code == 404
    assert (await client.get(f"{API}/videos/{video_id}", headers=ann["headers"])).status_code == 200

    resp = await client.patch(f"{API}/videos/{video_id}/toggle-publish", headers=ann["headers"])
    assert resp.json()["data"]["isPublished"] is True


async def test_update_video(client, make_user, storage):
    ann = await make_user("ann")
    video = (await publish(client, ann["headers"])).json()["data"]
    old_thumb = video["thumbnail"].rsplit("/", 1)[-1]

    resp = await client.patch(
        f"{API}/videos/{video['id']}",
        data={"title": "Renamed"},
        files={"thumbnail": ("new.png", b"new-thumb", "image/png")},
        headers=ann["headers"],
    )
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["title"] == "Renamed"
    assert updated["description"] == video["description"]
    assert updated["thumbnail"] != video["thumbnail"]
    names = stored_names(storage)
    assert old_thumb not in names
    assert updated["thumbnail"].rsplit("/", 1)[-1] in names


async def test_update_video_requires_a_change(client, make_user):
    ann = await make_user("ann")
    video_id = (await publish(client, ann["headers"])).json()["data"]["id"]
    resp = await client.patch(f"{API}/videos/{video_id}", data={"title": " "}, headers=ann["headers"])
    assert resp.status_code == 400


async def test_only_owner_can_modify(client, make_user):
    ann = await make_user("ann")
    bob = await make_user("bob")
    video_id = (await publish(client, ann["headers"])).json()["data"]["id"]

    resp = await client.patch(f"{API}/videos/{video_id}", data={"title": "Mine"}, headers=bob["headers"])
    assert resp.status_code == 403
    assert (await client.delete(f"{API}/videos/{video_id}", headers=bob["headers"])).status_code == 403
    resp = await client.patch(f"{API}/videos/{video_id}/toggle-publish", headers=bob["headers"])
    assert resp.status_code == 403


async def test_delete_video_removes_stored_files(client, make_user, storage):
    ann = await make_user("ann")
    video = (await publish(client, ann["headers"])).json()["data"]
    files = {video["videoFile"].rsplit("/", 1)[-1], video["thumbnail"].rsplit("/", 1)[-1]}
    assert files <= stored_names(storage)

    resp = await client.delete(f"{API}/videos/{video['id']}", headers=ann["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == video["id"]
    assert not files & stored_names(storage)
    assert (await client.get(f"{API}/videos/{video['id']}")).status_code == 404


async def test_deleted_video_drops_out_of_watch_history(client, make_user):
    ann = await make_user("ann")
    bob = await make_user("bob")
    video_id = (await publish(client, ann["headers"])).json()["data"]["id"]
    await client.get(f"{API}/videos/{video_id}", headers=bob["headers"])

    await client.delete(f"{API}/videos/{video_id}", headers=ann["headers"])
    resp = await client.get(f"{API}/users/watch-history", headers=bob["headers"])
    assert resp.json()["data"] == []


async def test_list_videos_paginates_and_filters(client, make_user):
    ann = await make_user("ann")
    bob = await make_user("bob")
    for i in range(3):
        await publish(client, ann["headers"], title=f"ann cooking {i}")
    await publish(client, bob["headers"], title="bob gaming")
    hidden = (await publish(client, ann["headers"], title="ann draft")).json()["data"]["id"]
    await client.patch(f"{API}/videos/{hidden}/toggle-publish", headers=ann["headers"])

    resp = await client.get(f"{API}/videos", params={"page": 1, "limit": 2})
    assert resp.status_code == 200
    page = resp.json()["data"]
    assert page["totalDocs"] == 4
    assert page["totalPages"] == 2
    assert len(page["docs"]) == 2

    resp = await client.get(f"{API}/videos", params={"query": "cooking", "sortBy": "title", "sortType": "asc"})
    titles = [v["title"] for v in resp.json()["data"]["docs"]]
    assert titles == ["ann cooking 0", "ann cooking 1", "ann cooking 2"]

    resp = await client.get(f"{API}/videos", params={"userId": ann["id"]})
    assert resp.json()["data"]["totalDocs"] == 3

    # owners see their own unpublished videos
    resp = await client.get(f"{API}/videos", params={"userId": ann["id"]}, headers=ann["headers"])
    assert resp.json()["data"]["totalDocs"] == 4


async def test_list_videos_rejects_unknown_sort(client):
    resp = await client.get(f"{API}/videos", params={"sortBy": "password"})
    assert resp.status_code == 400


async def test_failed_video_upload_removes_uploaded_thumbnail(client, make_user, storage, monkeypatch, tmp_path):
    ann = await make_user("ann")
    upload = storage.upload

    def video_store_offline(local_path, public_id):
        if str(local_path).endswith(".mp4"):
            raise OSError("video store offline")
        return upload(local_path, public_id)

    monkeypatch.setattr(storage, "upload", video_store_offline)
    before = stored_names(storage)

    resp = await publish(client, ann["headers"])

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error while uploading video file"
    assert stored_names(storage) == before
    assert list((tmp_path / "temp").iterdir()) == []


async def test_search_treats_wildcards_literally(client, make_user):
    ann = await make_user("ann")
    for title in ("100% real", "1000 real", "snake_case", "snakeXcase"):
        await publish(client, ann["headers"], title=title)

    resp = await client.get(f"{API}/videos", params={"query": "100%"})
    assert [v["title"] for v in resp.json()["data"]["docs"]] == ["100% real"]

    resp = await client.get(f"{API}/videos", params={"query": "snake_case"})
    assert [v["title"] for v in resp.json()["data"]["docs"]] == ["snake_case"]
