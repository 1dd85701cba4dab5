"""Human-readable tag generation."""

import secrets
import string
from datetime import datetime

from gestao_demandas.utils.dates import utc_now

TAG_PREFIX = "DEM"
_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_tag(now: datetime | None = None) -> str:
    """Return a tag like ``DEM-1717171717171-k3j9x0a2b``.

    The middle part is the creation time in epoch milliseconds, the suffix is
    random base-36. Uniqueness is enforced by the store, not here.
    """
    moment = now or utc_now()
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{TAG_PREFIX}-{millis}-{suffix}"
