"""
Domain name normalization and splitting.

Order placement needs the second-level label and the suffix of a domain
as separate values. The split point is the first dot, so multi-label
suffixes such as 'co.uk' stay intact.
"""

import re
from dataclasses import dataclass

import idna

from .enums import DomainNameErrorCode
from .exceptions import ValidationError


# Control characters, whitespace and symbols never valid in a host name
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)


@dataclass
class SplitDomain:
    """A domain split at its first dot."""

    name: str  # Normalized full domain
    label: str  # Second-level label, e.g. 'example'
    suffix: str  # Everything after the first dot, e.g. 'co.uk'


def normalize_domain(raw_domain: str) -> str:
    """
    Normalize a domain: trim, lowercase, drop a trailing dot.

    Internationalized names are checked with IDNA 2008 but returned in
    their Unicode form.

    Raises:
        ValidationError: If the input is empty or not a valid host name
    """
    if not raw_domain or not raw_domain.strip():
        raise ValidationError(
            code=DomainNameErrorCode.EMPTY_INPUT.value,
            message="Domain input is empty",
            details={"raw_input": raw_domain},
        )

    domain = raw_domain.strip().lower().rstrip(".")

    if FORBIDDEN_CHARS_PATTERN.search(domain):
        raise ValidationError(
            code=DomainNameErrorCode.FORBIDDEN_CHARS.value,
            message=f"Domain {raw_domain} contains forbidden characters",
            details={
                "raw_input": raw_domain,
                "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
            },
        )

    if any(ord(c) > 127 for c in domain):
        try:
            idna.encode(domain, uts46=True)
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainNameErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": raw_domain, "idna_error": str(e)},
            )

    return domain


def split_domain(raw_domain: str) -> SplitDomain:
    """
    Split a domain into label and suffix at the first dot.

    Raises:
        ValidationError: If the domain is invalid or has no suffix
    """
    domain = normalize_domain(raw_domain)
    label, _, suffix = domain.partition(".")

    if not label or not suffix:
        raise ValidationError(
            code=DomainNameErrorCode.MISSING_SUFFIX.value,
            message=f"Domain {raw_domain} has no extension",
            details={"raw_input": raw_domain},
        )

    return SplitDomain(name=domain, label=label, suffix=suffix)
