"""
Tests for profile completeness and destination.
"""

from electro.modules.accounts.completeness import (
    Destination,
    has_basic_info,
    has_documents,
    is_profile_complete,
    resolve_destination,
)
from electro.modules.accounts.schemas import BusinessAccount, IndividualAccount, parse_account


def _individual(**overrides):
    data = {
        "id": "u1",
        "email": "user@example.com",
        "firstName": "Ali",
        "lastName": "Demir",
        "isEmailVerified": True,
        "accountType": "individual",
    }
    data.update(overrides)
    return parse_account(data)


class TestIndividual:
    """Individual accounts need only basic info."""

    def test_complete_with_basic_info(self):
        account = _individual()
        assert has_basic_info(account) is True
        assert is_profile_complete(account) is True

    def test_unverified_email_is_incomplete(self):
        assert is_profile_complete(_individual(isEmailVerified=False)) is False

    def test_missing_last_name_is_incomplete(self):
        assert is_profile_complete(_individual(lastName="")) is False

    def test_never_has_documents(self):
        assert has_documents(_individual()) is False

    def test_missing_account_type_parses_as_individual(self):
        account = parse_account({"id": "u1"})
        assert isinstance(account, IndividualAccount)


class TestBusiness:
    """Business accounts also need a company name and documents."""

    def test_without_documents_is_incomplete(self, business_doc):
        account = parse_account(business_doc())

        assert isinstance(account, BusinessAccount)
        assert has_documents(account) is False
        assert is_profile_complete(account) is False

    def test_with_document_is_complete(self, business_doc, license_doc):
        account = parse_account(business_doc(documents=[license_doc]))

        assert has_documents(account) is True
        assert is_profile_complete(account) is True

    def test_without_company_name_is_incomplete(self, business_doc, license_doc):
        account = parse_account(business_doc(companyName="", documents=[license_doc]))
        assert is_profile_complete(account) is False


class TestDestination:
    """Where the user goes next."""

    def test_no_profile_goes_to_setup(self):
        assert is_profile_complete(None) is False
        assert resolve_destination(None) is Destination.SETUP

    def test_complete_individual_goes_home(self):
        assert resolve_destination(_individual()) is Destination.HOME

    def test_unapproved_business_waits_for_approval(self, business_doc, license_doc):
        account = parse_account(business_doc(documents=[license_doc]))
        assert resolve_destination(account) is Destination.PENDING_APPROVAL

    def test_approval_not_required_goes_home(self, business_doc, license_doc):
        account = parse_account(business_doc(documents=[license_doc]))
        assert resolve_destination(account, require_approval=False) is Destination.HOME

    def test_approved_business_goes_home(self, business_doc, license_doc):
        account = parse_account(business_doc(isApproved=True, documents=[license_doc]))
        assert resolve_destination(account) is Destination.HOME
