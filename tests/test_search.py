"""Tests for keyvault.vault.search — query compile, candidate fetch, filter."""

from unittest.mock import patch

import pytest

from keyvault import vault
from keyvault.query import QuerySyntaxError, SecretRecord
from keyvault.vault.search import search_secrets

RECORDS = [
    SecretRecord("proj", "api_token", {"service": "billing", "env": "prod"}),
    SecretRecord("proj", "db_password", {"service": "postgres", "env": "prod"}),
    SecretRecord("proj", "db_password_staging", {"service": "postgres", "env": "staging"}),
]


@pytest.fixture
def candidates():
    with patch("keyvault.vault.search.fetch_candidates", return_value=list(RECORDS)) as m:
        yield m


class TestSearchSecrets:
    def test_filters_candidates(self, candidates):
        results = search_secrets("proj", "service:postgres -staging")
        assert [r.secret_key for r in results] == ["db_password"]
        candidates.assert_called_once_with("proj", None)

    def test_empty_query_returns_all(self, candidates):
        assert search_secrets("proj", None) == RECORDS
        assert search_secrets("proj", "  ") == RECORDS

    def test_key_contains_passed_to_fetch(self, candidates):
        search_secrets("proj", "env:prod", key_contains="db")
        candidates.assert_called_once_with("proj", "db")

    def test_syntax_error_skips_fetch(self, candidates):
        with pytest.raises(QuerySyntaxError) as exc:
            search_secrets("proj", "env:")
        assert exc.value.position == 4
        candidates.assert_not_called()

    def test_no_matches(self, candidates):
        assert search_secrets("proj", "secret_key:redis*") == []


class TestVaultFacade:
    def test_search(self, candidates):
        results = vault.search("proj", "env:staging")
        assert [r.secret_key for r in results] == ["db_password_staging"]

    def test_get_set_delete_delegate(self):
        with (
            patch("keyvault.vault.get_secret", return_value="v") as get,
            patch("keyvault.vault.upsert_secret") as upsert,
            patch("keyvault.vault.delete_secret", return_value=True) as delete,
        ):
            assert vault.get("proj", "k") == "v"
            vault.set("proj", "k", {"a": 1})
            assert vault.delete("proj", "k") is True

        get.assert_called_once_with("proj", "k")
        upsert.assert_called_once_with("proj", "k", {"a": 1})
        delete.assert_called_once_with("proj", "k")
