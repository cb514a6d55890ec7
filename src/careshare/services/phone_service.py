import logging
import re
from typing import Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneMetadata, PhoneNumber, PhoneNumberFormat

from careshare.core.errors import InvalidPhoneError

logger = logging.getLogger(__name__)

NON_DIGITS = re.compile(r"\D+")


class PhoneNormalizer:
    """Normalize caller-supplied phone numbers to E.164"""

    def __init__(self, default_region: str = "US"):
        self.default_region = default_region

    def normalize(self, phone: Optional[str]) -> Optional[str]:
        if not phone:
            return None
        try:
            number = phonenumbers.parse(phone, self.default_region)
        except NumberParseException as e:
            logger.debug(f"phonenumbers could not parse '{phone}': {str(e)}")
            return self._fallback(phone)

        if self._is_plausible(number):
            return phonenumbers.format_number(number, PhoneNumberFormat.E164)
        return None

    def require(self, phone: Optional[str]) -> str:
        normalized = self.normalize(phone)
        if not normalized:
            raise InvalidPhoneError()
        return normalized

    @staticmethod
    def _is_plausible(number: PhoneNumber) -> bool:
        """Possible length and the region's general number pattern; no per-type ranges"""
        if not phonenumbers.is_possible_number(number):
            return False
        region = phonenumbers.region_code_for_country_code(number.country_code)
        metadata = PhoneMetadata.metadata_for_region_or_calling_code(number.country_code, region)
        if metadata is None or metadata.general_desc is None or not metadata.general_desc.national_number_pattern:
            return False
        national = phonenumbers.national_significant_number(number)
        return re.fullmatch(metadata.general_desc.national_number_pattern, national) is not None

    @staticmethod
    def _fallback(phone: Optional[str]) -> Optional[str]:
        """Naive North American normalization for input the parser rejects"""
        digits = NON_DIGITS.sub("", phone or "")
        if len(digits) == 11 and digits.startswith("1"):
            return f"+{digits}"
        if len(digits) == 10:
            return f"+1{digits}"
        if phone and phone.startswith("+") and 8 <= len(digits) <= 15:
            return f"+{digits}"
        return None
