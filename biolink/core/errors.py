"""Exceptions métier levées par les services, traduites en réponses HTTP dans main.py"""

from fastapi import status


class BioLinkError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSlugError(BioLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class SlugTakenError(BioLinkError):
    status_code = status.HTTP_409_CONFLICT


class PlanLimitError(BioLinkError):
    # fonctionnalité réservée au plan Pro ou quota Free atteint
    status_code = status.HTTP_403_FORBIDDEN


class InvalidOrderError(BioLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidWebhookError(BioLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class BillingNotConfiguredError(BioLinkError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
