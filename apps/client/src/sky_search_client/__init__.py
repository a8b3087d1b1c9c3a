"""Async client and session state for the Sky Scrapper flight-data API."""

from .errors import (
    AuthenticationError,
    ConfigurationMissing,
    EmptyPayload,
    ErrorKind,
    GatewayError,
    InvalidArgument,
    MalformedPayload,
    ProviderReportedFailure,
    SkySearchError,
)
from .flight_client import FlightDataClient
from .gateway import Endpoint, HttpGateway
from .result import Err, Ok, Result
from .session import OperationKind, OperationState, SearchSession

__all__ = [
    "AuthenticationError",
    "ConfigurationMissing",
    "EmptyPayload",
    "Endpoint",
    "Err",
    "ErrorKind",
    "FlightDataClient",
    "GatewayError",
    "HttpGateway",
    "InvalidArgument",
    "MalformedPayload",
    "Ok",
    "OperationKind",
    "OperationState",
    "ProviderReportedFailure",
    "Result",
    "SearchSession",
    "SkySearchError",
]
