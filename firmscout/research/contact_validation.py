"""
Contact validation utilities for generated contact details.
Rejected values are blanked, never raised.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from firmscout.research.types import Contact, Strictness

logger = logging.getLogger(__name__)


# Personal email providers that should be rejected for business contacts
PERSONAL_EMAIL_PROVIDERS = {
    'gmail.com', 'yahoo.com', 'hotmail.com', 'outlook.com', 'aol.com',
    'icloud.com', 'me.com', 'mac.com', 'live.com', 'msn.com',
    'protonmail.com', 'protonmail.ch', 'mail.com', 'yandex.com'
}

LINKEDIN_HOST = 'www.linkedin.com'
LINKEDIN_PROFILE_PREFIX = '/in/'

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(email: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate email address for business contact use.

    Returns:
        (is_valid, error_message)
    """
    if not email:
        return False, "Email is empty"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    domain = email.split('@')[1].lower()
    if domain in PERSONAL_EMAIL_PROVIDERS:
        return False, f"Personal email provider ({domain}) not allowed for business contacts"

    return True, None


def validate_phone(phone: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate phone number and check for reasonable business phone format.

    Returns:
        (is_valid, error_message)
    """
    if not phone:
        return False, "Phone is empty"

    # Remove common formatting characters
    cleaned = re.sub(r'[\s\-\(\)\.]', '', phone)

    if cleaned.startswith('+'):
        # International format: + followed by 7-15 digits
        if re.match(r'^\+\d{7,15}$', cleaned):
            return True, None
        return False, "Invalid international phone format"

    # US/Canada: 10 digits, or 11 starting with 1
    if re.match(r'^1?\d{10}$', cleaned):
        return True, None
    return False, "Invalid phone format (expected 10-digit US/Canada or international +format)"


def email_matches_domain(email: str, domain: Optional[str]) -> bool:
    """True when the email's domain is the firm domain or one of its subdomains."""
    if not email or not domain or '@' not in email:
        return False
    email_domain = email.rsplit('@', 1)[1].strip().lower()
    domain = domain.lower()
    return email_domain == domain or email_domain.endswith('.' + domain)


def linkedin_slug_matches(url: Optional[str], full_name: Optional[str]) -> bool:
    """
    Check a LinkedIn profile URL against a person's name.

    Accepted only when the host is exactly www.linkedin.com, the path starts
    with /in/, and the slug contains a name token longer than 2 characters.
    """
    if not url or not full_name:
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    if parts.hostname != LINKEDIN_HOST or not parts.path.startswith(LINKEDIN_PROFILE_PREFIX):
        return False

    slug = parts.path[len(LINKEDIN_PROFILE_PREFIX):].lower()
    tokens = re.split(r'[\s.,]+', full_name.lower())
    return any(len(t) > 2 and t in slug for t in tokens)


@dataclass
class ContactCheck:
    """Accepted contact details plus the reasons anything was blanked."""

    email: str = ""
    linked_in: str = ""
    contact_number: str = ""
    rejected: List[str] = field(default_factory=list)


def _values_in_use(contacts: Sequence[Contact], own_index: Optional[int]):
    emails, linkedins = set(), set()
    for index, contact in enumerate(contacts):
        if index == own_index:
            continue
        if contact.email:
            emails.add(contact.email.strip().lower())
        if contact.linked_in:
            linkedins.add(contact.linked_in.strip().lower())
    return emails, linkedins


def post_validate_contact(
    email: Optional[str],
    linked_in: Optional[str],
    contact_number: Optional[str],
    contact_name: str,
    firm_domain: Optional[str],
    existing_contacts: Sequence[Contact] = (),
    own_index: Optional[int] = None,
    strictness: Strictness = Strictness.STRICT,
) -> ContactCheck:
    """
    Post-validate generated details for one contact.

    Both levels blank empty values and values already used by another
    contact of the firm (own_index is excluded from that check). STRICT also
    requires a matching LinkedIn slug, an email on the firm domain (or a
    business email when the firm domain is unknown) and a well-formed phone.
    """
    result = ContactCheck()
    emails_in_use, linkedins_in_use = _values_in_use(existing_contacts, own_index)
    strict = strictness == Strictness.STRICT

    email = (email or "").strip()
    if email:
        if email.lower() in emails_in_use:
            result.rejected.append(f"email {email} already used by another contact")
        elif strict and firm_domain and not email_matches_domain(email, firm_domain):
            result.rejected.append(f"email {email} is not on {firm_domain}")
        elif strict and not firm_domain and not validate_email(email)[0]:
            result.rejected.append(f"email {email}: {validate_email(email)[1]}")
        else:
            result.email = email

    linked_in = (linked_in or "").strip()
    if linked_in:
        if linked_in.lower() in linkedins_in_use:
            result.rejected.append(f"linkedIn {linked_in} already used by another contact")
        elif strict and not linkedin_slug_matches(linked_in, contact_name):
            result.rejected.append(f"linkedIn {linked_in} does not match {contact_name!r}")
        else:
            result.linked_in = linked_in

    contact_number = (contact_number or "").strip()
    if contact_number:
        is_valid, error = validate_phone(contact_number)
        if strict and not is_valid:
            result.rejected.append(f"contactNumber {contact_number}: {error}")
        else:
            result.contact_number = contact_number

    if result.rejected:
        logger.info(f"Blanked {len(result.rejected)} field(s) for {contact_name!r}: {result.rejected}")
    return result
