"""Request signing for authenticated Codeforces API methods."""

import hashlib
import random
import time
from typing import Any, Callable, Mapping


def _random_prefix() -> str:
    return f"{random.randint(0, 999_999):06d}"


class SignedRequestBuilder:
    """Adds ``apiKey``, ``time`` and ``apiSig`` to API parameters.

    The signature is ``rand + sha512_hex(f"{rand}/{method}?{params}#{secret}")``
    where ``params`` are all parameters (including ``apiKey`` and ``time``)
    sorted by name and joined as ``k=v`` pairs with ``&``.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        clock: Callable[[], float] = time.time,
        rand: Callable[[], str] = _random_prefix,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self._clock = clock
        self._rand = rand

    @staticmethod
    def canonical_string(method: str, params: Mapping[str, Any], rand: str, secret: str) -> str:
        pairs = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return f"{rand}/{method}?{pairs}#{secret}"

    def signature(self, method: str, params: Mapping[str, Any], rand: str) -> str:
        """Compute ``apiSig`` for already complete parameters."""
        payload = self.canonical_string(method, params, rand, self.api_secret)
        digest = hashlib.sha512(payload.encode("utf-8")).hexdigest()
        return f"{rand}{digest}"

    def sign(self, method: str, params: Mapping[str, Any]) -> dict[str, str]:
        """Return a new parameter dict with authentication fields added."""
        signed = {key: str(value) for key, value in params.items()}
        signed["apiKey"] = self.api_key
        signed["time"] = str(int(self._clock()))
        signed["apiSig"] = self.signature(method, signed, self._rand())
        return signed
