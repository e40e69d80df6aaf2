"""Directory entry normalization.

Turns one raw entry (attribute -> first value) into a ``DirectoryIdentity`` or
skips it. Pure and deterministic: the same attributes always give the same
result.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from dirsync.platform.directory.types import DirectoryIdentity, RawEntry

SYSTEM_ACCOUNT_MARKERS = ("krbtgt", "guest", "defaultaccount")
MACHINE_ACCOUNT_SUFFIX = "$"
NOT_AVAILABLE = "N/A"


def domain_from_base_dn(base_dn: str) -> str:
    """Join the DC components of a DN with dots.

    ``DC=acme,DC=com`` -> ``acme.com``. Non-DC components are ignored.
    """
    parts = []
    for component in base_dn.split(","):
        component = component.strip()
        if component[:3].lower() == "dc=":
            parts.append(component[3:])
    return ".".join(parts)


def base_dn_from_domain(domain: str) -> str:
    """``acme.com`` -> ``DC=acme,DC=com``."""
    return ",".join(f"DC={label}" for label in domain.strip().strip(".").split(".") if label)


@dataclass(frozen=True)
class SampleUser:
    """Preview of one entry for the connection test."""

    cn: str
    username: str
    email: str


class EntryNormalizer:
    """Maps raw directory entries to DirectoryIdentity values.

    Skip rules, in order:
      1. no account name (``sAMAccountName``, else ``uid``)
      2. account name ends with ``$`` (machine account)
      3. account name contains a system account marker, case-insensitively

    Email priority: ``mail`` (else ``email``), then ``userPrincipalName``,
    then ``<account>@<domain of base DN>``.
    """

    def __init__(self, base_dn: str):
        """Bind the normalizer to the base DN used for synthesized emails."""
        self.base_dn = base_dn
        self.domain = domain_from_base_dn(base_dn)

    @staticmethod
    def _folded(entry: RawEntry) -> Dict[str, str]:
        # LDAP attribute names are case-insensitive
        return {name.lower(): value for name, value in entry.items() if value}

    @staticmethod
    def _pick(attrs: Dict[str, str], *names: str) -> Optional[str]:
        for name in names:
            value = attrs.get(name.lower())
            if value:
                return value
        return None

    @staticmethod
    def skip_reason(account_name: Optional[str]) -> Optional[str]:
        """Why an account name is excluded, or None when it is kept."""
        if not account_name:
            return "missing account name"
        if account_name.endswith(MACHINE_ACCOUNT_SUFFIX):
            return "machine account"
        lowered = account_name.lower()
        if any(marker in lowered for marker in SYSTEM_ACCOUNT_MARKERS):
            return "system account"
        return None

    def normalize(self, entry: RawEntry) -> Optional[DirectoryIdentity]:
        """Return the identity for ``entry``, or None when a skip rule applies."""
        attrs = self._folded(entry)
        account_name = self._pick(attrs, "sAMAccountName", "uid")
        if self.skip_reason(account_name) is not None:
            return None

        email = (
            self._pick(attrs, "mail", "email", "userPrincipalName")
            or f"{account_name}@{self.domain}"
        )
        display_name = self._pick(attrs, "displayName", "cn") or account_name
        return DirectoryIdentity(account_name=account_name, email=email, display_name=display_name)

    def sample(self, entry: RawEntry) -> SampleUser:
        """Preview an entry without applying skip rules."""
        attrs = self._folded(entry)
        return SampleUser(
            cn=self._pick(attrs, "cn", "displayName") or NOT_AVAILABLE,
            username=self._pick(attrs, "sAMAccountName", "uid") or NOT_AVAILABLE,
            email=self._pick(attrs, "mail", "userPrincipalName") or NOT_AVAILABLE,
        )
