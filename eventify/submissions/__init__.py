"""
Feature 'submissions': image upload + domain write with compensation.
"""

from .base import AssetSubmission, LoggingNotifier, Notifier, SubmissionResult, SubmissionState
from .payloads import prepare_event_payload, prepare_feedback_payload, prepare_vendor_payload
from .vendors import VendorSubmission
from .events import EventSubmission
from .feedback import FeedbackSubmission

__all__ = [
    "AssetSubmission",
    "SubmissionState",
    "SubmissionResult",
    "Notifier",
    "LoggingNotifier",
    "prepare_vendor_payload",
    "prepare_event_payload",
    "prepare_feedback_payload",
    "VendorSubmission",
    "EventSubmission",
    "FeedbackSubmission",
]
