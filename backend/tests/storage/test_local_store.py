import pytest

from budget_manager.storage import local_store
from budget_manager.storage.exceptions import ObjectStoreException
from budget_manager.storage.local_store import LocalObjectStore


@pytest.mark.asyncio
async def test_upload_writes_file_and_returns_public_url(tmp_path):
    store = LocalObjectStore(root_dir=str(tmp_path), bucket="budget-images", public_base_url="http://localhost:8000/")
    url = await store.upload("Photo.JPG", b"jpeg-bytes", "image/jpeg")

    assert url.startswith("http://localhost:8000/static/budget-images/")
    assert url.endswith(".jpg")
    name = url.rsplit("/", 1)[-1]
    assert (tmp_path / "budget-images" / name).read_bytes() == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_upload_uses_random_names(tmp_path):
    store = LocalObjectStore(root_dir=str(tmp_path), bucket="b", public_base_url="http://x")
    first = await store.upload("a.png", b"1")
    second = await store.upload("a.png", b"2")
    assert first != second


@pytest.mark.asyncio
async def test_upload_failure(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    store = LocalObjectStore(root_dir=str(blocker), bucket="b", public_base_url="http://x")
    with pytest.raises(ObjectStoreException):
        await store.upload("a.png", b"1")


@pytest.mark.asyncio
async def test_upload_writes_in_threadpool(tmp_path, mocker):
    spy = mocker.spy(local_store, "run_in_threadpool")
    store = LocalObjectStore(root_dir=str(tmp_path), bucket="b", public_base_url="http://x")
    await store.upload("a.png", b"1")
    assert spy.call_count == 1
    assert spy.call_args.args[0] is local_store._write_file
