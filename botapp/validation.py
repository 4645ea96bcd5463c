"""
Validation utility functions
Handles parsing of /schedule and /cancel arguments
"""
from tracking import t

from typing import Iterable, Optional, Tuple
import re
from datetime import date, datetime

from infrastructure import constants

_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


class ValidationHelpers:
    """Collection of validation helper functions"""

    @staticmethod
    def validate_date(raw: str) -> Tuple[bool, Optional[date], str]:
        """
        Validate a yyyy-MM-dd date
        Returns: (is_valid, parsed_date, error_message)
        """
        t('botapp.validation.ValidationHelpers.validate_date')
        try:
            parsed = datetime.strptime(raw.strip(), constants.DATE_FORMAT).date()
        except ValueError:
            return False, None, "Invalid date format. Use yyyy-MM-dd"
        return True, parsed, ""

    @staticmethod
    def validate_time(raw: str) -> Tuple[bool, str]:
        """
        Validate an HH:mm time
        Returns: (is_valid, normalized_time_or_error_message)
        """
        t('botapp.validation.ValidationHelpers.validate_time')
        match = _TIME_PATTERN.match(raw.strip())
        if not match:
            return False, "Invalid time format. Use HH:mm"
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return False, "Invalid time format. Use HH:mm"
        return True, f"{hour:02d}:{minute:02d}"

    @staticmethod
    def validate_court(raw: str, available_courts: Iterable[int]) -> Tuple[bool, Optional[int], str]:
        """
        Validate a court number against the configured courts
        Returns: (is_valid, court_number, error_message)
        """
        t('botapp.validation.ValidationHelpers.validate_court')
        courts = sorted(available_courts)
        listing = ', '.join(str(court) for court in courts)
        try:
            court_number = int(raw.strip())
        except ValueError:
            return False, None, f"Invalid court number. Available courts: {listing}"
        if court_number not in courts:
            return False, None, f"Invalid court number. Available courts: {listing}"
        return True, court_number, ""

    @staticmethod
    def validate_booking_id(raw: str) -> Tuple[bool, Optional[int], str]:
        """
        Validate a numeric booking id
        Returns: (is_valid, booking_id, error_message)
        """
        t('botapp.validation.ValidationHelpers.validate_booking_id')
        try:
            return True, int(raw.strip().lstrip('#')), ""
        except ValueError:
            return False, None, "Invalid booking ID"
