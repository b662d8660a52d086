"""
Booking reference allocation.

A booking reference is the short code customers see on their receipt and
type into the status page, e.g. ``K7Q2ZD``. References are drawn at random
and checked against the references already stored on booking records.

The check and the later insert of the booking are separate steps, so two
concurrent allocations may both accept the same candidate. Uniqueness is
only guaranteed when the ``booking_id`` column carries a unique constraint;
in that case the losing insert fails with
``DuplicateBookingReferenceError``.
"""

import logging
import secrets
from typing import Awaitable, Callable, Optional

from utils.constants import (
    BOOKING_REFERENCE_ALPHABET,
    BOOKING_REFERENCE_LENGTH,
    DEFAULT_REFERENCE_MAX_ATTEMPTS,
)
from utils.exceptions import BookingReferenceExhaustedError

logger = logging.getLogger(__name__)

ExistsCheck = Callable[[str], Awaitable[bool]]
CandidateSource = Callable[[], str]


def generate_candidate() -> str:
    """Draw a random reference, each symbol independently and uniformly."""
    return "".join(
        secrets.choice(BOOKING_REFERENCE_ALPHABET)
        for _ in range(BOOKING_REFERENCE_LENGTH)
    )


def is_valid_booking_reference(value: Optional[str]) -> bool:
    """Check that value has the shape of a booking reference."""
    if not value or not isinstance(value, str):
        return False
    return len(value) == BOOKING_REFERENCE_LENGTH and all(
        ch in BOOKING_REFERENCE_ALPHABET for ch in value
    )


def normalize_booking_reference(value: str) -> str:
    """Strip whitespace, a leading ``#`` and upper-case user input."""
    return value.strip().lstrip("#").upper()


class BookingReferenceAllocator:
    """
    Allocates booking references that are free at the time of the check.

    Args:
        exists: Async callable answering "is this reference already used?"
        next_candidate: Callable producing a new candidate reference
        max_attempts: Number of candidates to try before giving up
    """

    def __init__(
        self,
        exists: ExistsCheck,
        next_candidate: CandidateSource = generate_candidate,
        max_attempts: int = DEFAULT_REFERENCE_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._exists = exists
        self._next_candidate = next_candidate
        self.max_attempts = max_attempts

    async def allocate(self) -> str:
        """
        Return a reference not present in the namespace.

        Errors from the existence check propagate unchanged; only a
        collision leads to another attempt.

        Raises:
            BookingReferenceExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self._next_candidate()
            if not await self._exists(candidate):
                if attempt > 1:
                    logger.debug(
                        f"Allocated booking reference after {attempt} attempts"
                    )
                return candidate
            logger.debug(f"Booking reference collision on attempt {attempt}")

        logger.error(
            f"Booking reference namespace exhausted after {self.max_attempts} attempts"
        )
        raise BookingReferenceExhaustedError(self.max_attempts)
