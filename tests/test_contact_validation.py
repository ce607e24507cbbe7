"""
Unit tests for contact post-validation.
"""
import pytest

from firmscout.research.contact_validation import (
    email_matches_domain,
    linkedin_slug_matches,
    post_validate_contact,
    validate_email,
    validate_phone,
)
from firmscout.research.types import Contact, Strictness


class TestLinkedInSlug:

    @pytest.mark.unit
    def test_name_token_in_slug(self):
        assert linkedin_slug_matches(
            "https://www.linkedin.com/in/janeqsmith-123", "Jane Q. Smith"
        )

    @pytest.mark.unit
    @pytest.mark.parametrize("url", [
        "https://www.linkedin.com/company/acme",
        "https://linkedin.com/in/janeqsmith",
        "https://uk.linkedin.com/in/janeqsmith",
        "https://www.linkedin.com/in/someoneelse",
        "not a url",
        "",
    ])
    def test_rejected(self, url):
        assert not linkedin_slug_matches(url, "Jane Q. Smith")

    @pytest.mark.unit
    def test_short_tokens_ignored(self):
        # 'li' and 'wu' are too short to count as evidence
        assert not linkedin_slug_matches("https://www.linkedin.com/in/liwu", "Li Wu")


class TestEmailAndPhone:

    @pytest.mark.unit
    def test_domain_match(self):
        assert email_matches_domain("jane@acme.com", "acme.com")
        assert email_matches_domain("jane@EU.Acme.com", "acme.com")
        assert not email_matches_domain("jane@notacme.com", "acme.com")
        assert not email_matches_domain("jane@gmail.com", "acme.com")
        assert not email_matches_domain("jane@acme.com", None)

    @pytest.mark.unit
    def test_validate_email(self):
        assert validate_email("jane@acme.com") == (True, None)
        assert validate_email("jane@gmail.com")[0] is False
        assert validate_email("jane-at-acme")[0] is False

    @pytest.mark.unit
    @pytest.mark.parametrize("phone,valid", [
        ("(212) 555-0100", True),
        ("+44 20 7946 0958", True),
        ("1-212-555-0100", True),
        ("555-0100", False),
        ("call the office", False),
    ])
    def test_validate_phone(self, phone, valid):
        assert validate_phone(phone)[0] is valid


class TestPostValidate:

    @pytest.mark.unit
    def test_strict_accepts_good_details(self):
        check = post_validate_contact(
            "jane@acme.com",
            "https://www.linkedin.com/in/janeqsmith-123",
            "+1 212 555 0100",
            contact_name="Jane Q. Smith",
            firm_domain="acme.com",
        )

        assert check.email == "jane@acme.com"
        assert check.linked_in == "https://www.linkedin.com/in/janeqsmith-123"
        assert check.contact_number == "+1 212 555 0100"
        assert check.rejected == []

    @pytest.mark.unit
    def test_strict_blanks_bad_details(self):
        check = post_validate_contact(
            "jane@gmail.com",
            "https://www.linkedin.com/company/acme",
            "ext. 12",
            contact_name="Jane Q. Smith",
            firm_domain="acme.com",
        )

        assert (check.email, check.linked_in, check.contact_number) == ("", "", "")
        assert len(check.rejected) == 3

    @pytest.mark.unit
    def test_values_in_use_by_other_contacts_blanked(self):
        others = [
            Contact(contact_name="Jane Q. Smith"),
            Contact(contact_name="Bob Jones", email="JANE@acme.com"),
        ]

        check = post_validate_contact(
            "jane@acme.com", "", "", contact_name="Jane Q. Smith",
            firm_domain="acme.com", existing_contacts=others, own_index=0,
        )

        assert check.email == ""

    @pytest.mark.unit
    def test_own_slot_not_counted_as_in_use(self):
        existing = [Contact(contact_name="Jane Q. Smith", email="jane@acme.com")]

        check = post_validate_contact(
            "jane@acme.com", "", "", contact_name="Jane Q. Smith",
            firm_domain="acme.com", existing_contacts=existing, own_index=0,
        )

        assert check.email == "jane@acme.com"

    @pytest.mark.unit
    def test_basic_only_checks_duplicates(self):
        others = [Contact(contact_name="Bob", linked_in="https://www.linkedin.com/in/bob")]

        check = post_validate_contact(
            "jane@gmail.com",
            "https://www.linkedin.com/in/bob",
            "ext. 12",
            contact_name="Jane Q. Smith",
            firm_domain="acme.com",
            existing_contacts=others,
            strictness=Strictness.BASIC,
        )

        assert check.email == "jane@gmail.com"
        assert check.linked_in == ""
        assert check.contact_number == "ext. 12"

    @pytest.mark.unit
    def test_strict_without_firm_domain_rejects_personal_email(self):
        check = post_validate_contact(
            "jane@gmail.com", "", "", contact_name="Jane", firm_domain=None
        )
        assert check.email == ""
