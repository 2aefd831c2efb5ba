from sns_functions.notifications.channels import DEFAULT_CHANNEL, resolve_channel


def test_explicit_channel_wins() -> None:
    assert resolve_channel("x", "like") == "x"
    assert resolve_channel("x", "unknown") == "x"
    assert resolve_channel("x", None) == "x"


def test_channel_from_type() -> None:
    assert resolve_channel(None, "like") == "like_channel"
    assert resolve_channel(None, "comment") == "comment_channel"
    assert resolve_channel(None, "follow") == "follow_channel"
    assert resolve_channel(None, "message") == "message_channel"
    assert resolve_channel(None, "post") == "post_channel"


def test_channel_falls_back_to_default() -> None:
    assert resolve_channel(None, "unknown") == "general_channel"
    assert resolve_channel(None, None) == "general_channel"
    assert resolve_channel("", "") == DEFAULT_CHANNEL


def test_non_string_type_uses_default() -> None:
    assert resolve_channel(None, ["like"]) == DEFAULT_CHANNEL
    assert resolve_channel(None, {"kind": "like"}) == DEFAULT_CHANNEL
    assert resolve_channel(None, 7) == DEFAULT_CHANNEL
    assert resolve_channel("promo_channel", ["like"]) == "promo_channel"
