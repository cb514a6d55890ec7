import pytest

from careshare.core.errors import InvalidPhoneError
from careshare.database.seed import SENIORS, VOLUNTEERS
from careshare.services.phone_service import PhoneNormalizer


@pytest.fixture
def phones():
    return PhoneNormalizer("US")


@pytest.mark.parametrize("raw", [
    "(212) 736-5000",
    "212-736-5000",
    "212.736.5000",
    "2127365000",
    "+1 212 736 5000",
    "1 (212) 736-5000",
])
def test_us_formats_normalize_to_same_e164(phones, raw):
    assert phones.normalize(raw) == "+12127365000"


def test_international_number_keeps_country_code(phones):
    assert phones.normalize("+33 1 42 68 53 00") == "+33142685300"


@pytest.mark.parametrize("raw", ["", None, "12345", "not a phone", "+1 000 000 0000"])
def test_invalid_numbers_return_none(phones, raw):
    assert phones.normalize(raw) is None


def test_require_raises_invalid_phone(phones):
    with pytest.raises(InvalidPhoneError) as exc_info:
        phones.require("555")

    assert exc_info.value.code == "INVALID_PHONE"
    assert exc_info.value.message == "Invalid phone number format."


def test_fallback_handles_eleven_digit_north_american_numbers():
    assert PhoneNormalizer._fallback("1-516-477-0955") == "+15164770955"
    assert PhoneNormalizer._fallback("516 477 0955") == "+15164770955"
    assert PhoneNormalizer._fallback("+49 (30) 1234567") == "+49301234567"
    assert PhoneNormalizer._fallback("abc") is None


@pytest.mark.parametrize("raw", [row["phone_number"] for row in SENIORS + VOLUNTEERS])
def test_demo_numbers_normalize_to_themselves(phones, raw):
    assert phones.normalize(raw) == raw


def test_unassigned_area_code_is_still_accepted(phones):
    assert phones.normalize("(555) 867-5309") == "+15558675309"
    assert phones.require("555-867-5309") == "+15558675309"
