import pytest

from bookstore.credentials import CredentialStore


@pytest.fixture
def token_store(tmp_path):
    store = CredentialStore(str(tmp_path / "auth" / "token"))
    store.set_token("secret-token")
    return store
