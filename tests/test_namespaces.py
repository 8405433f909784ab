import pytest

from repository.namespaces import NamespaceManager
from util.enums import KeyKind


def test_keys_follow_prefix_kind_discriminator():
    ns = NamespaceManager("crawl")
    assert ns.key_for_visit(42) == "crawl:r:42"
    assert ns.key_for_cookie("example.com") == "crawl:c:example.com"
    assert ns.key_for_queue() == "crawl:q"


def test_visit_key_accepts_full_uint64_range():
    ns = NamespaceManager("crawl")
    assert ns.key_for_visit(0) == "crawl:r:0"
    assert ns.key_for_visit(2**64 - 1) == f"crawl:r:{2**64 - 1}"


@pytest.mark.parametrize("bad", [-1, 2**64])
def test_visit_key_rejects_ids_outside_uint64(bad):
    with pytest.raises(ValueError):
        NamespaceManager("crawl").key_for_visit(bad)


def test_patterns_cover_every_registered_kind():
    patterns = NamespaceManager("crawl").patterns()
    assert set(patterns) == set(KeyKind)
    assert patterns[KeyKind.VISIT] == "crawl:r:*"
    assert patterns[KeyKind.COOKIE] == "crawl:c:*"
    assert patterns[KeyKind.QUEUE] == "crawl:q"


@pytest.mark.asyncio
async def test_clear_all_removes_every_kind(fake_redis, namespace):
    await fake_redis.incr(namespace.key_for_visit(1))
    await fake_redis.incr(namespace.key_for_visit(2))
    await fake_redis.set(namespace.key_for_cookie("a.com"), b"x=1")
    await fake_redis.sadd(namespace.key_for_queue(), b"req")

    deleted = await namespace.clear_all(fake_redis)

    assert deleted == 4
    assert fake_redis.data == {}


@pytest.mark.asyncio
async def test_clear_all_leaves_other_prefixes_alone(fake_redis, namespace):
    other = NamespaceManager("other")
    await fake_redis.set(other.key_for_cookie("a.com"), b"keep")
    await fake_redis.incr(other.key_for_visit(1))
    await fake_redis.set(namespace.key_for_cookie("a.com"), b"drop")

    await namespace.clear_all(fake_redis)

    assert await fake_redis.get(other.key_for_cookie("a.com")) == b"keep"
    assert await fake_redis.get(other.key_for_visit(1)) == b"1"
    assert await fake_redis.get(namespace.key_for_cookie("a.com")) is None


@pytest.mark.asyncio
async def test_clear_all_on_empty_namespace(fake_redis, namespace):
    assert await namespace.clear_all(fake_redis) == 0


@pytest.mark.asyncio
async def test_clear_all_wraps_store_failure(fake_redis, namespace):
    from util.errors import ConnectivityError

    fake_redis.fail_on.add("delete")
    with pytest.raises(ConnectivityError):
        await namespace.clear_all(fake_redis)


@pytest.mark.parametrize("prefix", ["a:c", "job*", "job?", "job[1]", "job]", "job\\x"])
def test_prefix_with_separator_or_glob_is_rejected(prefix):
    with pytest.raises(ValueError):
        NamespaceManager(prefix)


@pytest.mark.parametrize("prefix", ["a:c", "job[1]"])
def test_storage_config_rejects_unsafe_prefix(prefix):
    from pydantic import ValidationError

    from model.storage import StorageConfig

    with pytest.raises(ValidationError):
        StorageConfig(prefix=prefix)


@pytest.mark.asyncio
async def test_clear_all_does_not_reach_into_longer_prefix(fake_redis):
    short, longer = NamespaceManager("a"), NamespaceManager("ac")
    await fake_redis.incr(longer.key_for_visit(1))
    await fake_redis.set(longer.key_for_cookie("x.com"), b"keep")
    await fake_redis.incr(short.key_for_visit(1))

    await short.clear_all(fake_redis)

    assert await fake_redis.get(longer.key_for_visit(1)) == b"1"
    assert await fake_redis.get(longer.key_for_cookie("x.com")) == b"keep"
    assert await fake_redis.get(short.key_for_visit(1)) is None
