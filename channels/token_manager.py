"""
Access token lifecycle for token-based notification channels.
"""

import enum
import logging
import time
from typing import Callable, Optional, Tuple

from utils.exceptions import TokenRefreshError

DEFAULT_EXPIRY_MARGIN = 60


class TokenState(enum.Enum):
    UNSET = 'unset'
    VALID = 'valid'
    EXPIRED = 'expired'


class AccessTokenManager:
    """
    Caches a short-lived access token and refreshes it on demand.

    The token is treated as expired ``expiry_margin`` seconds before the
    lifetime reported by the issuer runs out.
    """

    def __init__(
        self,
        refresh: Callable[[], Tuple[str, float]],
        expiry_margin: float = DEFAULT_EXPIRY_MARGIN,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            refresh: Callable returning (access_token, expires_in_seconds);
                raises TokenRefreshError on failure
            expiry_margin: Seconds subtracted from the reported lifetime
            clock: Monotonic time source
        """
        self._refresh = refresh
        self.expiry_margin = expiry_margin
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._invalidated = False
        self.logger = logging.getLogger('AccessTokenManager')

    @property
    def state(self) -> TokenState:
        if self._token is None:
            return TokenState.UNSET
        if self._invalidated or self._clock() >= self._expires_at:
            return TokenState.EXPIRED
        return TokenState.VALID

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def get_token(self) -> str:
        """
        Return a valid token, refreshing it first if needed.

        Raises:
            TokenRefreshError: the refresh call failed
        """
        if self.state is not TokenState.VALID:
            self.refresh()
        return self._token

    def refresh(self) -> str:
        previous_state = self.state
        try:
            token, expires_in = self._refresh()
        except TokenRefreshError:
            self._expire()
            raise
        except Exception as e:
            self._expire()
            raise TokenRefreshError(f"Token refresh failed: {e}") from e

        if not token:
            self._expire()
            raise TokenRefreshError("Token endpoint returned an empty token")

        lifetime = max(float(expires_in) - self.expiry_margin, 0.0)
        self._token = token
        self._expires_at = self._clock() + lifetime
        self._invalidated = False
        self.logger.info(
            f"Access token refreshed ({previous_state.value} -> valid, "
            f"usable for {lifetime:.0f}s)"
        )
        return token

    def invalidate(self) -> None:
        """Mark the current token as expired, e.g. after the API rejected it."""
        if self._token is not None:
            self._invalidated = True

    def _expire(self) -> None:
        if self._token is not None:
            self._invalidated = True
        self._expires_at = 0.0
