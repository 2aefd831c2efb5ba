from sns_functions.auth.profile_sync import merge_profile


def test_naver_fields_take_priority() -> None:
    auth_user = {"email": "old@example.com", "user_metadata": {"full_name": "Old Name", "avatar_url": "old.png"}}
    naver = {"name": "New Name", "email": "new@naver.com", "profile_image": "new.png"}

    assert merge_profile(auth_user, naver) == {
        "name": "New Name",
        "email": "new@naver.com",
        "profile_image_url": "new.png",
        "provider": "naver",
    }


def test_metadata_fills_gaps() -> None:
    auth_user = {"email": "jin@example.com", "user_metadata": {"name": "Jin", "avatar_url": "jin.png"}}

    assert merge_profile(auth_user, None) == {
        "name": "Jin",
        "email": "jin@example.com",
        "profile_image_url": "jin.png",
        "provider": "naver",
    }


def test_name_falls_back_to_email_then_default() -> None:
    assert merge_profile({"email": "mina@example.com"}, None)["name"] == "mina"

    fallback = merge_profile({}, None)
    assert fallback["name"] == "User"
    assert fallback["email"] == ""
    assert fallback["profile_image_url"] is None
