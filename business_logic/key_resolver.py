"""
API key resolution.

The same static bundle is deployed two ways: built locally with the key in
``.env`` (build-time), or served by the edge service which substitutes the
key into the page after serving (runtime). The resolver prefers whichever is
actually populated. A key the user picks interactively overrides both.
"""

import logging
from typing import Optional

from config.settings import config_manager, RUNTIME_KEY_PLACEHOLDER
from .error_handler import AuthMissing

logger = logging.getLogger(__name__)


class KeyResolver:
    """Pure two-tier credential lookup: runtime value first, then build-time."""

    def __init__(self, runtime_key: Optional[str] = None,
                 build_time_key: Optional[str] = None,
                 placeholder: str = RUNTIME_KEY_PLACEHOLDER):
        self.runtime_key = runtime_key
        self.build_time_key = build_time_key
        self.placeholder = placeholder

    @classmethod
    def from_config(cls) -> "KeyResolver":
        return cls(
            runtime_key=config_manager.get_runtime_api_key(),
            build_time_key=config_manager.get_build_time_api_key(),
        )

    def _runtime_usable(self) -> bool:
        if not self.runtime_key or not self.runtime_key.strip():
            return False
        return self.runtime_key != self.placeholder

    def source(self) -> Optional[str]:
        """Name of the tier that would be used: 'runtime', 'build_time' or None."""
        if self._runtime_usable():
            return "runtime"
        if self.build_time_key and self.build_time_key.strip():
            return "build_time"
        return None

    def resolve(self) -> Optional[str]:
        """Return the credential to use, or None when neither tier applies."""
        source = self.source()
        if source == "runtime":
            logger.debug("Using runtime API key")
            return self.runtime_key
        if source == "build_time":
            logger.debug("Using build-time API key")
            return self.build_time_key
        logger.warning("No API key found in runtime or build-time configuration")
        return None


class CredentialSelector:
    """
    Interactive credential-selection collaborator.

    Implementations let the user pick or enter a key (the Streamlit UI
    provides one). The default implementation has nothing to offer, and
    opening it does nothing.
    """

    def has_selected_key(self) -> bool:
        return self.selected_key() is not None

    def selected_key(self) -> Optional[str]:
        return None

    def open_select_key(self) -> None:
        pass


def require_credential(key_resolver: KeyResolver,
                       credential_selector: Optional[CredentialSelector] = None) -> str:
    """
    Resolve a credential for an AI call.

    A key chosen through the selector wins over the configured runtime and
    build-time keys, so a replacement for a rejected key is used on the next
    call. The selector is opened once when nothing resolves at all.

    Raises:
        AuthMissing: If no credential resolves and no selector can supply one
    """
    def _lookup() -> Optional[str]:
        if credential_selector is not None:
            selected = credential_selector.selected_key()
            if selected:
                logger.debug("Using selected API key")
                return selected
        return key_resolver.resolve()

    key = _lookup()
    if key is None and credential_selector is not None:
        credential_selector.open_select_key()
        key = _lookup()

    if key is None:
        raise AuthMissing()
    return key
