import gc

import pytest

from paladin.channel import Channel, ChannelFactory, ChannelType, LeaseGuard, Publisher


class RecordingChannel(Channel):
    def __init__(self):
        self.releases = 0

    async def close(self):
        return None

    async def sender(self):
        return RecordingPublisher()

    async def receiver(self):
        return numbers([])

    def release(self):
        self.releases += 1


class RecordingPublisher(Publisher):
    def __init__(self):
        self.sent = []
        self.closed = False

    async def publish(self, payload):
        self.sent.append(payload)

    async def close(self):
        self.closed = True


async def numbers(values):
    for value in values:
        yield value


def test_channel_type_members_are_distinct():
    assert ChannelType(ChannelType.EXACTLY_ONCE.value) is ChannelType.EXACTLY_ONCE
    assert ChannelType(ChannelType.BROADCAST.value) is ChannelType.BROADCAST
    assert ChannelType.EXACTLY_ONCE is not ChannelType.BROADCAST
    assert set(ChannelType) == {ChannelType.EXACTLY_ONCE, ChannelType.BROADCAST}


def test_abstract_bases_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Channel()
    with pytest.raises(TypeError):
        ChannelFactory()
    with pytest.raises(TypeError):
        Publisher()


@pytest.mark.asyncio
async def test_guard_iterates_over_pipe():
    channel = RecordingChannel()
    guard = LeaseGuard(channel, numbers([1, 2, 3]))
    collected = [value async for value in guard]
    assert collected == [1, 2, 3]
    guard.release()


def test_release_happens_once():
    channel = RecordingChannel()
    guard = LeaseGuard(channel, object())
    guard.release()
    guard.release()
    assert channel.releases == 1


def test_context_manager_releases_on_exit():
    channel = RecordingChannel()
    with LeaseGuard(channel, object()) as guard:
        assert channel.releases == 0
    assert channel.releases == 1
    guard.release()
    assert channel.releases == 1


def test_guard_releases_when_collected():
    channel = RecordingChannel()
    guard = LeaseGuard(channel, object())
    del guard
    gc.collect()
    assert channel.releases == 1


@pytest.mark.asyncio
async def test_attribute_access_forwards_to_pipe():
    channel = RecordingChannel()
    publisher = RecordingPublisher()
    with LeaseGuard(channel, publisher) as guard:
        await guard.publish("hello")
        await guard.close()
        assert guard.pipe is publisher
    assert publisher.sent == ["hello"]
    assert publisher.closed is True


def test_missing_attribute_raises():
    channel = RecordingChannel()
    pipe = object()
    with LeaseGuard(channel, pipe) as guard:
        with pytest.raises(AttributeError) as info:
            guard.does_not_exist
        assert "does_not_exist" in str(info.value)
        assert guard.pipe is pipe
    assert channel.releases == 1