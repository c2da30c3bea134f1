"""
Pwned Passwords range API client.

Implements the k-anonymity range lookup: only the first 5 characters of the
SHA-1 hash of a password are ever sent to the API. The password and the
full hash never leave this process.
"""

import asyncio
import hashlib
import logging

import aiohttp

from pwsentry.exceptions import BreachServiceUnavailable

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 5


def hash_password_sha1(password: str) -> tuple[str, str]:
    """Split the upper-case SHA-1 hex digest of a password.

    Args:
        password: Password to hash (NOT stored or logged)

    Returns:
        Tuple of (prefix, suffix). The prefix is always 5 characters.
    """
    digest = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    return digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:]


def parse_range_response(body: str, suffix: str) -> int:
    """Find the breach count for a hash suffix in a range response.

    Args:
        body: Response body, one ``SUFFIX:COUNT`` pair per line
        suffix: Locally computed hash suffix

    Returns:
        Breach count, or 0 when the suffix is absent
    """
    suffix = suffix.strip().upper()

    for line in body.splitlines():
        if ":" not in line:
            continue
        hash_suffix, _, count = line.partition(":")
        if hash_suffix.strip().upper() == suffix:
            try:
                return int(count.strip())
            except ValueError:
                logger.warning("Malformed count in range response line")
                return 0

    return 0


class HIBPClient:
    """Client for the Pwned Passwords range API.

    The session is shared by concurrent lookups. There is no rate limiting
    state; the range API does not require it.
    """

    PWNED_PASSWORDS_API = "https://api.pwnedpasswords.com/range"

    DEFAULT_USER_AGENT = "pwsentry-password-security/1.0"
    DEFAULT_TIMEOUT = 5.0  # seconds

    def __init__(
        self,
        range_api_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        add_padding: bool = False,
    ):
        """Initialize range API client.

        Args:
            range_api_url: Range endpoint (default: Pwned Passwords)
            user_agent: User-Agent header for requests
            timeout: Total request timeout in seconds (default: 5.0)
            add_padding: Ask the API to pad responses with zero-count entries
        """
        self.range_api_url = (range_api_url or self.PWNED_PASSWORDS_API).rstrip("/")
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.add_padding = add_padding
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HIBPClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def fetch_range(self, prefix: str) -> str:
        """Fetch all hash suffixes sharing a 5-character prefix.

        Args:
            prefix: First 5 characters of the SHA-1 hash

        Returns:
            Raw response body of ``SUFFIX:COUNT`` lines

        Raises:
            ValueError: If prefix is not 5 hex characters
            BreachServiceUnavailable: On timeout, network error, non-2xx status
                or a body that is not valid text
        """
        prefix = prefix.upper()
        if len(prefix) != PREFIX_LENGTH or any(c not in "0123456789ABCDEF" for c in prefix):
            raise ValueError(f"Hash prefix must be {PREFIX_LENGTH} hex characters")

        session = await self._ensure_session()

        headers = {"User-Agent": self.user_agent}
        if self.add_padding:
            headers["Add-Padding"] = "true"

        url = f"{self.range_api_url}/{prefix}"
        logger.debug(f"Querying range API for prefix {prefix}")

        try:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise BreachServiceUnavailable(
                        f"Range API returned HTTP {response.status}",
                        status=response.status,
                    )
                return await response.text()

        except asyncio.TimeoutError as e:
            raise BreachServiceUnavailable(
                f"Range API request timed out after {self.timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise BreachServiceUnavailable(f"Range API request failed: {e}") from e
        except UnicodeDecodeError as e:
            raise BreachServiceUnavailable(f"Range API returned an undecodable body: {e}") from e
