import string

from paladin.common import get_random_routing_key


def test_routing_key_has_five_characters():
    assert len(get_random_routing_key()) == 5


def test_routing_key_is_ascii_alphanumeric():
    allowed = set(string.ascii_letters + string.digits)
    for _ in range(200):
        key = get_random_routing_key()
        assert set(key) <= allowed


def test_routing_keys_vary():
    keys = {get_random_routing_key() for _ in range(100)}
    assert len(keys) > 1