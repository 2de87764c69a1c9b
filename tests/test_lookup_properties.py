"""
Property-based tests for reference data lookups and domain splitting.

Uses Hypothesis for property-based testing of the first-match country and
extension lookups and of the first-dot domain split used for orders.
"""

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from neostrada_registrar.domain_name import normalize_domain, split_domain
from neostrada_registrar.enums import DomainNameErrorCode
from neostrada_registrar.exceptions import ValidationError
from neostrada_registrar.models import Country, Extension
from neostrada_registrar.registrar import (
    find_country_by_code,
    find_country_by_id,
    find_extension,
)


code_strategy = st.sampled_from(["NL", "BE", "DE", "FR", "GB"])

label_strategy = st.text(
    alphabet=string.ascii_lowercase + string.digits,
    min_size=1,
    max_size=20,
)


@st.composite
def country_list_strategy(draw) -> list[Country]:
    """Generate country lists that may contain duplicate codes and ids."""
    size = draw(st.integers(min_value=0, max_value=10))
    return [
        Country(
            country_id=str(draw(st.integers(min_value=1, max_value=5))),
            code=draw(code_strategy),
        )
        for _ in range(size)
    ]


class TestFirstMatchProperty:
    """
    Property: lookups return the first matching record in iteration order.
    """

    @given(countries=country_list_strategy(), code=code_strategy)
    @settings(max_examples=100)
    def test_country_by_code_first_match(self, countries: list[Country], code: str) -> None:
        found = find_country_by_code(countries, code)
        matches = [c for c in countries if c.code == code]

        if matches:
            assert found is matches[0]
        else:
            assert found is None

    @given(countries=country_list_strategy(), country_id=st.integers(min_value=1, max_value=5))
    @settings(max_examples=100)
    def test_country_by_id_first_match(self, countries: list[Country], country_id: int) -> None:
        found = find_country_by_id(countries, str(country_id))
        matches = [c for c in countries if c.country_id == str(country_id)]

        if matches:
            assert found is matches[0]
        else:
            assert found is None

    @given(
        extensions=st.lists(
            st.builds(
                Extension,
                extension_id=st.integers(min_value=1, max_value=99).map(str),
                extension=st.sampled_from(["nl", "com", "co.uk", "eu"]),
            ),
            max_size=10,
        ),
        suffix=st.sampled_from(["nl", "com", "co.uk", "eu"]),
    )
    @settings(max_examples=100)
    def test_extension_first_match(self, extensions: list[Extension], suffix: str) -> None:
        found = find_extension(extensions, suffix)
        matches = [e for e in extensions if e.extension == suffix]

        if matches:
            assert found is matches[0]
        else:
            assert found is None

    def test_country_code_case_insensitive(self) -> None:
        countries = [Country(country_id="1", code="NL")]
        assert find_country_by_code(countries, " nl ") is countries[0]

    def test_empty_country_code_never_matches(self) -> None:
        countries = [Country(country_id="1", code="")]
        assert find_country_by_code(countries, "") is None
        assert find_country_by_code(countries, None) is None

    def test_null_country_code_normalized(self) -> None:
        countries = [
            Country.from_api({"country_id": 99, "code": None}),
            Country.from_api({"country_id": 1, "code": " NL "}),
        ]
        assert countries[0].code == ""
        assert find_country_by_code(countries, "NL") is countries[1]

    def test_extension_leading_dot_ignored(self) -> None:
        extensions = [Extension.from_api({"extension_id": 3, "extension": ".nl"})]
        assert find_extension(extensions, ".NL").extension_id == "3"


class TestDomainSplitProperty:
    """
    Property: domains split at the first dot; the suffix keeps all labels.
    """

    @given(
        label=label_strategy,
        suffix_labels=st.lists(label_strategy, min_size=1, max_size=3),
    )
    @settings(max_examples=100)
    def test_split_at_first_dot(self, label: str, suffix_labels: list[str]) -> None:
        suffix = ".".join(suffix_labels)
        split = split_domain(f"{label}.{suffix}")

        assert split.label == label
        assert split.suffix == suffix
        assert split.name == f"{label}.{suffix}"

    def test_normalization(self) -> None:
        split = split_domain("  Example.CO.UK. ")
        assert split.name == "example.co.uk"
        assert split.label == "example"
        assert split.suffix == "co.uk"

    def test_international_name_kept_in_unicode(self) -> None:
        assert normalize_domain("Bücher.de") == "bücher.de"

    @pytest.mark.parametrize("raw, code", [
        ("", DomainNameErrorCode.EMPTY_INPUT),
        ("   ", DomainNameErrorCode.EMPTY_INPUT),
        ("exa mple.nl", DomainNameErrorCode.FORBIDDEN_CHARS),
        ("example", DomainNameErrorCode.MISSING_SUFFIX),
        (".nl", DomainNameErrorCode.MISSING_SUFFIX),
    ])
    def test_invalid_domains_rejected(self, raw: str, code: DomainNameErrorCode) -> None:
        with pytest.raises(ValidationError) as excinfo:
            split_domain(raw)
        assert excinfo.value.code == code.value
