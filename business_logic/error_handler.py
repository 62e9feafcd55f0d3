"""
Error taxonomy and user feedback for the marketing report workflow.

This module defines the exceptions raised by the AI-facing services and the
centralized handler that turns them into user-friendly notifications.
"""

import logging
from typing import Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
import openai

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = (401, 403)


class MarketerError(Exception):
    """Base class for errors surfaced to the UI as user-visible text."""

    user_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class AuthMissing(MarketerError):
    """No usable credential and no interactive way to obtain one."""

    user_message = "API Key is missing. Please provide it via settings or select a project."


class CredentialUpdated(MarketerError):
    """The credential was just changed interactively; the caller must resubmit."""

    user_message = "API Key updated. Please try generating again."


class GenerationFailed(MarketerError):
    """The upstream AI call failed for a reason other than authentication."""

    user_message = "The AI service failed to generate a response."


class MalformedResponse(MarketerError):
    """The upstream text could not be parsed as the expected report shape."""

    user_message = "Failed to parse AI response as JSON."


class NoImageProduced(MarketerError):
    """The image call succeeded but returned no usable image payload."""

    user_message = "No image generated."


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better classification."""
    AUTH_ERROR = "auth_error"
    API_ERROR = "api_error"
    DATA_ERROR = "data_error"
    NETWORK_ERROR = "network_error"
    SYSTEM_ERROR = "system_error"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    retry_possible: bool = False
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


def is_auth_error(error: Exception) -> bool:
    """
    Detect authentication/authorization-shaped failures.

    Matches on the SDK error kind, an embedded HTTP status code, or a
    message that mentions the API key or a 403.
    """
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True

    status_code = getattr(error, "status_code", None)
    if status_code is None:
        response = getattr(error, "response", None)
        status_code = getattr(response, "status_code", None)
    if status_code in AUTH_STATUS_CODES:
        return True

    message = str(error)
    return "API_KEY" in message or "403" in message


class ErrorHandler:
    """
    Centralized error handling and user feedback system.

    Maps the error taxonomy and raw SDK failures onto user-facing
    notifications.
    """

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Classify an error and return appropriate ErrorInfo.

        Args:
            error: The exception to classify
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, AuthMissing):
            return ErrorInfo(
                category=ErrorCategory.AUTH_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"No credential available in {context}",
                user_message=str(error),
                suggested_action="Set OPENAI_API_KEY or enter a key in the sidebar.",
                retry_possible=False
            )

        if isinstance(error, CredentialUpdated):
            return ErrorInfo(
                category=ErrorCategory.AUTH_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"Credential updated during {context}",
                user_message=str(error),
                suggested_action="Submit the request again.",
                retry_possible=True
            )

        if isinstance(error, MalformedResponse):
            # The raw payload is logged by the generator, never shown
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Malformed AI response in {context}: {str(error)}",
                user_message=MalformedResponse.user_message,
                technical_details=str(error),
                suggested_action="Try again, or switch to a different model tier.",
                retry_possible=True
            )

        if isinstance(error, NoImageProduced):
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"No image returned in {context}",
                user_message=str(error),
                suggested_action="Try again or adjust the image prompt.",
                retry_possible=True
            )

        if isinstance(error, GenerationFailed):
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"AI generation failed in {context}: {str(error)}",
                user_message=str(error),
                technical_details=str(error),
                suggested_action="Please try again. If the problem persists, check the service status.",
                retry_possible=True
            )

        if isinstance(error, (openai.APIConnectionError, ConnectionError, TimeoutError)):
            return ErrorInfo(
                category=ErrorCategory.NETWORK_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Network error in {context}: {str(error)}",
                user_message="Cannot reach the AI service. Please check your internet connection.",
                technical_details=str(error),
                suggested_action="Check your internet connection and try again.",
                retry_possible=True
            )

        if isinstance(error, openai.OpenAIError):
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"OpenAI API error in {context}: {str(error)}",
                user_message="An error occurred while communicating with the AI service.",
                technical_details=str(error),
                suggested_action="Please try again. If the problem persists, contact support.",
                retry_possible=True
            )

        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Unexpected error in {context}: {str(error)}",
            user_message=str(error) or "An unexpected error occurred.",
            technical_details=str(error),
            suggested_action="Try again. If the problem persists, contact support with the error details.",
            retry_possible=True
        )

    def create_user_notification(self, error_info: ErrorInfo) -> Dict[str, Any]:
        """
        Create a user-friendly notification from error information.

        Args:
            error_info: Structured error information

        Returns:
            Dictionary with notification data for UI display
        """
        notification_type_map = {
            ErrorSeverity.INFO: "info",
            ErrorSeverity.WARNING: "warning",
            ErrorSeverity.ERROR: "error",
            ErrorSeverity.CRITICAL: "error"
        }

        notification = {
            'type': notification_type_map[error_info.severity],
            'title': self._get_error_title(error_info),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
            'retry_possible': error_info.retry_possible
        }

        if error_info.suggested_action:
            notification['action'] = error_info.suggested_action

        return notification

    def _get_error_title(self, error_info: ErrorInfo) -> str:
        title_map = {
            ErrorCategory.AUTH_ERROR: "API Key Required",
            ErrorCategory.API_ERROR: "AI Service Error",
            ErrorCategory.DATA_ERROR: "Response Error",
            ErrorCategory.NETWORK_ERROR: "Connection Error",
            ErrorCategory.SYSTEM_ERROR: "System Error"
        }

        return title_map.get(error_info.category, "Error")

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Log error information for monitoring and debugging.

        Args:
            error_info: Structured error information
            context: Additional context
        """
        log_message = f"{context}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)


# Global error handler instance
error_handler = ErrorHandler()
