"""Unit tests for directory sync wire names."""

import pytest

from dirsync import schemas
from dirsync.schemas.directory_sync import wire_alias


@pytest.mark.parametrize(
    "field_name, alias",
    [
        ("use_tls", "useTLS"),
        ("base_dn", "baseDN"),
        ("bind_dn", "bindDN"),
        ("server_address", "serverAddress"),
        ("users_count", "usersCount"),
        ("ldap_url", "ldapUrl"),
        ("port", "port"),
    ],
)
def test_wire_alias(field_name, alias):
    assert wire_alias(field_name) == alias


def test_request_reads_use_tls():
    request = schemas.ConnectionTestRequest.model_validate(
        {
            "serverAddress": "dc01.acme.com",
            "domain": "acme.com",
            "adminUsername": "svc-sync",
            "adminPassword": "s3cret",
            "port": 636,
            "useTLS": True,
        }
    )

    assert request.use_tls is True
    assert request.endpoint.url == "ldaps://dc01.acme.com:636"


def test_result_dumps_directory_acronyms():
    result = schemas.ConnectionTestResult(
        success=True,
        base_dn="DC=acme,DC=com",
        bind_dn="svc-sync@acme.com",
        ldap_url="ldap://dc01.acme.com:389",
    )

    dumped = result.model_dump(by_alias=True)

    assert dumped["baseDN"] == "DC=acme,DC=com"
    assert dumped["bindDN"] == "svc-sync@acme.com"
    assert dumped["usersCount"] == 0
