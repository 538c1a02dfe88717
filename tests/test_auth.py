import pytest

from conftest import PROFILE
from danceup.blobs import ImageUpload
from danceup.errors import AuthError, StoreError, ValidationError
from danceup.store import STUDIO_OWNERS


def test_sign_up_creates_profile_and_session(auth, store):
    owner = auth.sign_up("Ana@Example.com", "secret1", "secret1", dict(PROFILE, instagram="@stepup"))

    assert owner.email == "ana@example.com"
    assert owner.display_name == "ana"
    profile = store.get(STUDIO_OWNERS, owner.uid, owner.uid).data
    assert profile["studio_name"] == "Step Up Studio"
    assert profile["access_level"] == "studio_owner"
    assert profile["social_media"]["instagram"] == "@stepup"
    assert auth.session_from_token(owner.token).uid == owner.uid


@pytest.mark.parametrize("password,confirm,message", [
    ("secret1", "secret2", "Passwords do not match"),
    ("abc", "abc", "Password must be at least 6 characters"),
])
def test_sign_up_password_rules(auth, password, confirm, message):
    with pytest.raises(AuthError, match=message):
        auth.sign_up("ana@example.com", password, confirm, dict(PROFILE))


def test_sign_up_requires_profile_fields(auth):
    with pytest.raises(ValidationError, match="Please fill in all required fields"):
        auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE, studio_name=""))


def test_sign_up_rejects_unknown_state(auth):
    with pytest.raises(ValidationError):
        auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE, state="ZZ"))


def test_sign_up_rejects_duplicate_email(auth, owner):
    with pytest.raises(AuthError, match="Email already in use"):
        auth.sign_up("ANA@example.com", "secret9", "secret9", dict(PROFILE))


def test_sign_up_survives_image_upload_failure(auth, store, blobs, monkeypatch):
    def broken_write(path, data):
        raise StoreError("Failed to upload image")

    monkeypatch.setattr(blobs, "write", broken_write)
    image = ImageUpload("studio.png", "image/png", b"\x89PNG")
    owner = auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE), image=image)

    assert store.get(STUDIO_OWNERS, owner.uid, owner.uid).data["studio_image_url"] == ""


def test_sign_up_stores_studio_image(auth, store):
    image = ImageUpload("studio.png", "image/png", b"\x89PNG")
    owner = auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE), image=image)
    url = store.get(STUDIO_OWNERS, owner.uid, owner.uid).data["studio_image_url"]
    assert url == f"/blobs/studio-images/{owner.uid}"


def test_sign_in(auth, owner):
    session = auth.sign_in("ana@example.com", "secret1")
    assert session.uid == owner.uid

    with pytest.raises(AuthError, match="Invalid email or password"):
        auth.sign_in("ana@example.com", "wrong-pass")
    with pytest.raises(AuthError, match="Invalid email or password"):
        auth.sign_in("nobody@example.com", "secret1")


def test_sign_out_voids_existing_tokens(auth, owner):
    second = auth.sign_in("ana@example.com", "secret1")
    auth.sign_out(owner)

    for token in (owner.token, second.token):
        with pytest.raises(AuthError):
            auth.session_from_token(token)
    assert auth.session_from_token(auth.sign_in("ana@example.com", "secret1").token).uid == owner.uid


def test_tampered_token_is_rejected(auth, owner):
    with pytest.raises(AuthError, match="Invalid session"):
        auth.session_from_token(owner.token + "x")
    with pytest.raises(AuthError, match="Not signed in"):
        auth.session_from_token("")


def test_failed_profile_write_does_not_lock_the_email(auth, store, monkeypatch):
    def down(*args, **kwargs):
        raise StoreError("Could not save to studio_owners")

    with monkeypatch.context() as m:
        m.setattr(store, "set", down)
        with pytest.raises(StoreError):
            auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE))

    with pytest.raises(AuthError, match="Invalid email or password"):
        auth.sign_in("ana@example.com", "secret1")

    owner = auth.sign_up("ana@example.com", "secret1", "secret1", dict(PROFILE))
    assert store.get(STUDIO_OWNERS, owner.uid, owner.uid) is not None
