# fitstudy/services/booking/errors.py
from typing import Union

from fitstudy.schemas.booking import BookingResult, CancelResult


class BookingRejected(Exception):
    """
    Raised inside a transactional unit to abandon it with an expected outcome.

    Raising rolls the unit back and releases any row locks taken so far; the
    service then hands ``result`` to the caller unchanged.
    """

    def __init__(self, result: Union[BookingResult, CancelResult]):
        super().__init__(result.message)
        self.result = result
