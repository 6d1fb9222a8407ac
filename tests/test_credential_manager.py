import pytest
from keyring.errors import KeyringError

from mpv_danmaku.utils import credential_manager


@pytest.fixture
def fake_keyring(monkeypatch, tmp_path):
    store = {}
    monkeypatch.setattr(credential_manager, "get_credentials_filepath", lambda: tmp_path / "credentials.json")
    monkeypatch.setattr(credential_manager.keyring, "get_password", lambda service, user: store.get((service, user)))
    monkeypatch.setattr(credential_manager.keyring, "set_password",
                        lambda service, user, value: store.__setitem__((service, user), value))
    return store


def test_missing_file_gives_anonymous_credentials(fake_keyring):
    assert credential_manager.load_credentials() == {'APP_ID': '', 'APP_SECRET': ''}


def test_saved_credentials_are_encrypted(fake_keyring, tmp_path):
    assert credential_manager.save_credentials(" my-id ", "my-secret")

    raw = (tmp_path / "credentials.json").read_bytes()
    assert b"my-secret" not in raw

    config = credential_manager.load_auth_config(use_system_proxy=False)
    assert (config.app_id, config.app_secret, config.use_system_proxy) == ("my-id", "my-secret", False)


def test_empty_credentials_are_not_saved(fake_keyring, tmp_path):
    assert not credential_manager.save_credentials("id", "  ")
    assert not (tmp_path / "credentials.json").exists()


def test_corrupted_file_is_removed(fake_keyring, tmp_path):
    path = tmp_path / "credentials.json"
    path.write_bytes(b"garbage")

    assert credential_manager.load_credentials() == {'APP_ID': '', 'APP_SECRET': ''}
    assert not path.exists()


def test_unavailable_keyring_falls_back_to_anonymous(monkeypatch, tmp_path):
    path = tmp_path / "credentials.json"
    path.write_bytes(b"something")
    monkeypatch.setattr(credential_manager, "get_credentials_filepath", lambda: path)

    def broken(*args):
        raise KeyringError("no backend")

    monkeypatch.setattr(credential_manager.keyring, "get_password", broken)

    assert credential_manager.load_credentials() == {'APP_ID': '', 'APP_SECRET': ''}
    assert path.exists()
