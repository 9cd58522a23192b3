"""
Booking errors.

Each error is a DRF ``APIException`` so views can let it propagate and the
project exception handler renders ``{"ok": false, "error": {...}}`` with
the matching HTTP status and machine code.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class BookingError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Booking request rejected.'
    default_code = 'booking_error'


class PatientNotFound(BookingError):
    default_detail = 'Patient not found. Please create the patient record first.'
    default_code = 'patient_not_found'


class PastSlot(BookingError):
    default_detail = 'Cannot schedule an appointment in the past.'
    default_code = 'past_slot'


class SlotAlreadyBooked(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This time slot is already booked. Please select a different time.'
    default_code = 'slot_already_booked'


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Appointment not found.'
    default_code = 'not_found'


class NotReschedulable(BookingError):
    default_detail = 'Appointment cannot be rescheduled in its current status.'
    default_code = 'not_reschedulable'


class NotSwappable(BookingError):
    default_detail = 'Cannot swap appointments with current status.'
    default_code = 'not_swappable'


class MissingFields(BookingError):
    default_detail = 'Required fields are missing.'
    default_code = 'missing_fields'


class InvalidTime(BookingError):
    default_detail = 'Time must look like "10:30 AM".'
    default_code = 'invalid_time'


class SlotNotOffered(BookingError):
    default_detail = 'This time slot is not offered on the selected date.'
    default_code = 'slot_not_offered'


class OutsideBookingWindow(BookingError):
    default_detail = 'Date is outside the advance booking window.'
    default_code = 'outside_booking_window'


class InvalidTransition(BookingError):
    default_detail = 'Status change not allowed.'
    default_code = 'invalid_transition'


class StoreFailure(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Failed to save appointment changes.'
    default_code = 'store_failure'


class InvalidDate(BookingError):
    default_detail = 'Date must be in YYYY-MM-DD format.'
    default_code = 'invalid_date'
