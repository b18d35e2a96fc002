"""OAuth 1.0a HMAC-SHA1 request signing (two-legged, consumer key only)."""

import base64
import hashlib
import hmac
import secrets
import string
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
_NONCE_ALPHABET = string.ascii_lowercase + string.digits


def percent_encode(value: object) -> str:
    """Percent-encode per RFC 3986, leaving only unreserved characters."""
    return quote(str(value), safe="~")


def generate_nonce(length: int = 11) -> str:
    """Return a random alphanumeric nonce."""
    return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(length))


def normalize_parameters(params: Mapping[str, object]) -> str:
    """Encode, sort by encoded key and join parameters into one string."""
    encoded = sorted(
        (percent_encode(key), percent_encode(value)) for key, value in params.items()
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def signature_base_string(method: str, url: str, params: Mapping[str, object]) -> str:
    """Build the string that gets signed."""
    return "&".join(
        [
            method.upper(),
            percent_encode(url),
            percent_encode(normalize_parameters(params)),
        ]
    )


def sign_request(  # noqa: PLR0913
    method: str,
    url: str,
    params: Mapping[str, object],
    consumer_key: str,
    consumer_secret: str,
    nonce: str | None = None,
    timestamp: str | int | None = None,
) -> dict[str, str]:
    """Return the OAuth parameters for a request, including its signature."""
    if timestamp is None:
        timestamp = int(time.time())
    oauth_params = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": str(timestamp),
        "oauth_version": OAUTH_VERSION,
    }
    merged = {key: str(value) for key, value in params.items()}
    merged.update(oauth_params)
    base_string = signature_base_string(method, url, merged)
    signing_key = f"{percent_encode(consumer_secret)}&"
    digest = hmac.new(
        signing_key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1
    ).digest()
    oauth_params["oauth_signature"] = base64.b64encode(digest).decode("ascii")
    return oauth_params


@dataclass
class RequestSigner:
    """Signs outbound calls with a fixed set of consumer credentials."""

    consumer_key: str
    consumer_secret: str
    clock: Callable[[], float] = field(default=time.time)
    nonce_factory: Callable[[], str] = field(default=generate_nonce)

    def oauth_params(
        self, method: str, url: str, params: Mapping[str, object]
    ) -> dict[str, str]:
        """Return only the OAuth parameters for the request."""
        return sign_request(
            method,
            url,
            params,
            consumer_key=self.consumer_key,
            consumer_secret=self.consumer_secret,
            nonce=self.nonce_factory(),
            timestamp=int(self.clock()),
        )

    def sign(
        self, method: str, url: str, params: Mapping[str, object]
    ) -> dict[str, str]:
        """Return the request parameters merged with the signed OAuth ones."""
        signed = {key: str(value) for key, value in params.items()}
        signed.update(self.oauth_params(method, url, params))
        return signed
