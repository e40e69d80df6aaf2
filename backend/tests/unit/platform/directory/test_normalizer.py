"""Unit tests for EntryNormalizer and the DN helpers."""

import pytest

from dirsync.platform.directory.normalizer import (
    EntryNormalizer,
    base_dn_from_domain,
    domain_from_base_dn,
)
from dirsync.platform.directory.types import DirectoryIdentity

BASE_DN = "DC=acme,DC=com"


@pytest.fixture
def normalizer() -> EntryNormalizer:
    return EntryNormalizer(BASE_DN)


class TestDomainHelpers:
    def test_domain_from_base_dn(self):
        assert domain_from_base_dn("DC=acme,DC=com") == "acme.com"

    def test_domain_ignores_non_dc_components(self):
        assert domain_from_base_dn("OU=Staff, dc=corp,DC=acme,DC=com") == "corp.acme.com"

    def test_domain_keeps_case(self):
        assert domain_from_base_dn("DC=Acme,DC=COM") == "Acme.COM"

    def test_base_dn_from_domain(self):
        assert base_dn_from_domain("corp.acme.com") == "DC=corp,DC=acme,DC=com"

    def test_base_dn_from_domain_trims_dots(self):
        assert base_dn_from_domain(" acme.com. ") == "DC=acme,DC=com"


class TestSkipRules:
    @pytest.mark.parametrize(
        "entry",
        [
            {},
            {"mail": "nobody@acme.com"},
            {"sAMAccountName": ""},
            {"sAMAccountName": "WKS01$"},
            {"sAMAccountName": "krbtgt"},
            {"sAMAccountName": "Guest"},
            {"sAMAccountName": "DefaultAccount"},
            {"sAMAccountName": "old-guest-user"},
        ],
    )
    def test_entry_is_skipped(self, normalizer, entry):
        assert normalizer.normalize(entry) is None

    def test_skip_reason_names_the_rule(self):
        assert EntryNormalizer.skip_reason(None) == "missing account name"
        assert EntryNormalizer.skip_reason("WKS01$") == "machine account"
        assert EntryNormalizer.skip_reason("KRBTGT") == "system account"
        assert EntryNormalizer.skip_reason("jdoe") is None


class TestEmailDerivation:
    def test_mail_wins_over_principal_name(self, normalizer):
        identity = normalizer.normalize(
            {
                "sAMAccountName": "jdoe",
                "mail": "john.doe@acme.com",
                "userPrincipalName": "jdoe@corp.acme.com",
            }
        )
        assert identity.email == "john.doe@acme.com"

    def test_principal_name_when_no_mail(self, normalizer):
        identity = normalizer.normalize(
            {"sAMAccountName": "jdoe", "userPrincipalName": "jdoe@corp.acme.com"}
        )
        assert identity.email == "jdoe@corp.acme.com"

    def test_email_attribute_is_a_mail_fallback(self, normalizer):
        identity = normalizer.normalize({"uid": "jdoe", "email": "jd@acme.com"})
        assert identity.email == "jd@acme.com"

    def test_synthesized_from_base_dn(self, normalizer):
        identity = normalizer.normalize({"sAMAccountName": "jdoe"})
        assert identity.email == "jdoe@acme.com"


class TestNormalize:
    def test_acme_example(self, normalizer):
        entries = [
            {"sAMAccountName": "jdoe", "mail": "jdoe@acme.com"},
            {"sAMAccountName": "WKS01$"},
        ]
        identities = [i for i in map(normalizer.normalize, entries) if i is not None]
        assert identities == [
            DirectoryIdentity(account_name="jdoe", email="jdoe@acme.com", display_name="jdoe")
        ]

    def test_display_name_priority(self, normalizer):
        assert (
            normalizer.normalize(
                {"sAMAccountName": "jdoe", "displayName": "John Doe", "cn": "jdoe-cn"}
            ).display_name
            == "John Doe"
        )
        assert normalizer.normalize({"sAMAccountName": "jdoe", "cn": "J. Doe"}).display_name == (
            "J. Doe"
        )

    def test_uid_is_an_account_name_fallback(self, normalizer):
        assert normalizer.normalize({"uid": "asmith"}).account_name == "asmith"

    def test_attribute_names_are_case_insensitive(self, normalizer):
        identity = normalizer.normalize({"samaccountname": "jdoe", "MAIL": "jdoe@acme.com"})
        assert identity.email == "jdoe@acme.com"

    def test_is_deterministic(self, normalizer):
        entry = {"sAMAccountName": "jdoe", "userPrincipalName": "jdoe@acme.com"}
        assert normalizer.normalize(entry) == normalizer.normalize(dict(entry))


class TestSample:
    def test_missing_values_become_na(self, normalizer):
        sample = normalizer.sample({"sAMAccountName": "WKS01$"})
        assert (sample.cn, sample.username, sample.email) == ("N/A", "WKS01$", "N/A")

    def test_sample_prefers_cn(self, normalizer):
        sample = normalizer.sample(
            {"cn": "John Doe", "displayName": "Johnny", "uid": "jdoe", "mail": "jdoe@acme.com"}
        )
        assert (sample.cn, sample.username, sample.email) == ("John Doe", "jdoe", "jdoe@acme.com")
