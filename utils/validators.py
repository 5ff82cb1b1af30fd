"""
============================================================================
GUILD STATUS BOT - VALIDATORS UTILITY
============================================================================
Validation functions for hosts, ports and label templates supplied
through slash commands.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import ipaddress
from typing import Any, Dict, List, Optional, Tuple

import validators as external_validators

from config.constants import Limits, ProtocolVariant
from exceptions import InvalidHostError, InvalidPortError, InvalidTemplateError
from utils.logger import get_logger


logger = get_logger("Validators")


# ============================================================================
# HOST VALIDATORS
# ============================================================================

class HostValidator:
    """
    Hostname and IP address validation.
    """

    @staticmethod
    def is_valid_domain(domain: str) -> bool:
        """
        Check if domain is valid.

        Args:
            domain: Domain to validate

        Returns:
            True if valid, False otherwise
        """
        try:
            result = external_validators.domain(domain)
            return result is True
        except Exception as e:
            logger.debug(f"Domain validation error: {e}")
            return False

    @staticmethod
    def is_valid_ip(ip: str) -> bool:
        """
        Check if IP address is valid.

        Args:
            ip: IP address to validate

        Returns:
            True if valid, False otherwise
        """
        try:
            ipaddress.ip_address(ip)
            return True
        except ValueError:
            return False

    @staticmethod
    def is_valid_host(host: str) -> bool:
        return (
            HostValidator.is_valid_ip(host)
            or HostValidator.is_valid_domain(host)
            or host == "localhost"
        )

    @staticmethod
    def split_host_port(value: str) -> Tuple[str, Optional[int]]:
        """
        Split ``host:port`` into its parts.

        Bare IPv6 literals contain several colons and are returned
        unchanged; ``[::1]:25565`` is understood.
        """
        value = value.strip()

        if value.startswith("["):
            end = value.find("]")
            if end != -1:
                host = value[1:end]
                rest = value[end + 1:]
                if rest.startswith(":") and rest[1:].isdigit():
                    return host, int(rest[1:])
                return host, None

        if value.count(":") == 1:
            host, _, port = value.partition(":")
            if port.isdigit():
                return host, int(port)

        return value, None

    @staticmethod
    def normalize(host: Any) -> str:
        """
        Trim and validate a host, raising InvalidHostError.
        """
        if not isinstance(host, str) or not host.strip():
            raise InvalidHostError(host=host, reason="empty")

        host = host.strip().rstrip(".").lower()

        if len(host) > Limits.MAX_HOST_LENGTH:
            raise InvalidHostError(host=host, reason="too_long")

        if not HostValidator.is_valid_host(host):
            raise InvalidHostError(host=host, reason="invalid_domain")

        return host


# ============================================================================
# DATA VALIDATORS
# ============================================================================

class DataValidator:
    """
    General data validation utilities.
    """

    @staticmethod
    def is_valid_port(port: Any) -> bool:
        """
        Check if port number is valid.

        Args:
            port: Port to validate

        Returns:
            True if valid, False otherwise
        """
        if isinstance(port, bool):
            return False
        try:
            port = int(port)
            return Limits.MIN_PORT <= port <= Limits.MAX_PORT
        except (ValueError, TypeError):
            return False

    @staticmethod
    def resolve_port(port: Optional[Any], protocol: ProtocolVariant) -> int:
        """Return *port* validated, or the protocol's default port."""
        if port is None:
            return protocol.default_port
        if not DataValidator.is_valid_port(port):
            raise InvalidPortError(port=port)
        return int(port)


class TemplateValidator:
    """
    Label template validation.
    """

    @staticmethod
    def validate(template: Optional[str], field: str) -> List[str]:
        errors = []
        if template is None:
            return errors
        if not template.strip():
            errors.append(f"{field} must not be empty")
        elif len(template) > Limits.MAX_TEMPLATE_LENGTH:
            errors.append(f"{field} must be at most {Limits.MAX_TEMPLATE_LENGTH} characters")
        return errors


# ============================================================================
# VALIDATION RESULT CLASS
# ============================================================================

class ValidationResult:
    """
    Class to hold validation results with detailed information.
    """

    def __init__(self, is_valid: bool, message: str = "", errors: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.message = message
        self.errors = errors or []

    def __bool__(self):
        """Allow using result as boolean."""
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return f"Valid: {self.message}"
        errors_str = ", ".join(self.errors) if self.errors else "Unknown error"
        return f"Invalid: {self.message} - {errors_str}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "message": self.message,
            "errors": self.errors
        }


# ============================================================================
# COMPREHENSIVE VALIDATOR
# ============================================================================

class ServerValidator:
    """
    Validation of a complete ``/addserver`` request.
    """

    @staticmethod
    def validate_templates(
        online_name: Optional[str] = None,
        offline_name: Optional[str] = None,
    ) -> ValidationResult:
        errors = []
        errors += TemplateValidator.validate(online_name, "Online label")
        errors += TemplateValidator.validate(offline_name, "Offline label")

        if errors:
            return ValidationResult(
                is_valid=False,
                message="Label validation failed",
                errors=errors
            )

        return ValidationResult(is_valid=True, message="Labels are valid")

    @staticmethod
    def validate_new_server(
        host: str,
        protocol: ProtocolVariant,
        port: Optional[Any] = None,
        online_name: Optional[str] = None,
        offline_name: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Validate all aspects of a new server.

        Accepts ``host:port`` in *host* when no explicit port is given.

        Returns:
            The normalized ``(host, port)`` pair

        Raises:
            InvalidHostError, InvalidPortError, InvalidTemplateError
        """
        if isinstance(host, str) and port is None:
            host, port = HostValidator.split_host_port(host)

        normalized_host = HostValidator.normalize(host)
        resolved_port = DataValidator.resolve_port(port, protocol)

        result = ServerValidator.validate_templates(online_name, offline_name)
        if not result:
            raise InvalidTemplateError(errors=result.errors)

        return normalized_host, resolved_port


# ============================================================================
# END OF VALIDATORS MODULE
# ============================================================================
