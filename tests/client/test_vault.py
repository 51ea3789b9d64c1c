"""Tests for the Vault HTTP client."""

import pytest

from consulio.client.vault import VaultAuthError, VaultClient, VaultError
from consulio.core.config import VaultConfig

BASE = "http://vault:8200"


class TestVaultClient:
    """Tests for VaultClient."""

    def test_connect_with_token(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should validate the token without logging in."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/auth/token/lookup-self", json={"data": {"id": "s.abc"}}
        )

        client = VaultClient.connect(VaultConfig(address=BASE, token="s.abc"))
        client.close()

        request = httpx_mock.get_request()
        assert request.headers["X-Vault-Token"] == "s.abc"

    def test_connect_with_ldap(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should log in through LDAP and use the returned token."""
        httpx_mock.add_response(
            method="POST",
            url=f"{BASE}/v1/auth/ldap/login/alice",
            json={"auth": {"client_token": "s.ldap"}},
        )
        httpx_mock.add_response(
            url=f"{BASE}/v1/auth/token/lookup-self", json={"data": {"id": "s.ldap"}}
        )

        config = VaultConfig(
            address=BASE, auth_type="ldap", username="alice", password="pw"
        )
        with VaultClient.connect(config) as client:
            assert client.token == "s.ldap"

        lookup = httpx_mock.get_requests()[-1]
        assert lookup.headers["X-Vault-Token"] == "s.ldap"

    def test_connect_without_credentials(self) -> None:
        """Should fail when neither a token nor a login is configured."""
        with pytest.raises(VaultAuthError, match="token"):
            VaultClient.connect(VaultConfig(address=BASE))

    def test_login_requires_password(self) -> None:
        """Should refuse to log in without a password."""
        config = VaultConfig(address=BASE, auth_type="userpass", username="alice")
        with pytest.raises(VaultAuthError, match="password"):
            VaultClient.connect(config)

    def test_login_rejected(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should raise VaultAuthError when Vault rejects the credentials."""
        httpx_mock.add_response(
            method="POST", url=f"{BASE}/v1/auth/userpass/login/alice", status_code=403
        )

        config = VaultConfig(
            address=BASE, auth_type="userpass", username="alice", password="bad"
        )
        with pytest.raises(VaultAuthError):
            VaultClient.connect(config)

    def test_list_mounts(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return mounts with a type."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/sys/mounts",
            json={
                "request_id": "abc",
                "data": {
                    "kv/": {"type": "kv", "options": {"version": "2"}},
                    "sys/": {"type": "system"},
                },
            },
        )

        with VaultClient(VaultConfig(address=BASE, token="t")) as client:
            mounts = client.list_mounts()

        assert set(mounts) == {"kv/", "sys/"}
        assert mounts["kv/"]["type"] == "kv"

    def test_list(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return listed keys."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/kv/metadata/devops/?list=true",
            json={"data": {"keys": ["app/", "db"]}},
        )

        with VaultClient(VaultConfig(address=BASE, token="t")) as client:
            assert client.list("kv/metadata/devops/") == ["app/", "db"]

    def test_list_not_found(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return None when nothing is listed at the path."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/kv/metadata/devops/db?list=true", status_code=404
        )

        with VaultClient(VaultConfig(address=BASE, token="t")) as client:
            assert client.list("kv/metadata/devops/db") is None

    def test_read(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should return the secret's data."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/kv/data/devops/db",
            json={"data": {"data": {"host": "db.internal"}, "metadata": {}}},
        )

        with VaultClient(VaultConfig(address=BASE, token="t")) as client:
            data = client.read("kv/data/devops/db")

        assert data == {"data": {"host": "db.internal"}, "metadata": {}}

    def test_read_error(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should include Vault's error messages."""
        httpx_mock.add_response(
            url=f"{BASE}/v1/kv/data/devops/db",
            status_code=500,
            json={"errors": ["internal error"]},
        )

        with VaultClient(VaultConfig(address=BASE, token="t")) as client:
            with pytest.raises(VaultError, match="internal error"):
                client.read("kv/data/devops/db")
