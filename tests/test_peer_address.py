from realtime.consumers import peer_address


def test_peer_address_prefers_forwarded_for():
    scope = {"headers": [(b"x-forwarded-for", b" 192.0.2.8 , 10.0.0.1")], "client": ("10.0.0.1", 5000)}
    assert peer_address(scope) == "192.0.2.8"


def test_peer_address_can_ignore_forwarded_for():
    scope = {"headers": [(b"x-forwarded-for", b"192.0.2.8")], "client": ("10.0.0.1", 5000)}
    assert peer_address(scope, trust_forwarded_for=False) == "10.0.0.1"


def test_peer_address_unknown():
    assert peer_address({"headers": []}) == ""
    assert peer_address({"headers": [(b"x-forwarded-for", b" , ")], "client": None}) == ""
