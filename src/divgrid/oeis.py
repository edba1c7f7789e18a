"""
OEIS lookup

Resolves an A-number into an ordered list of integers plus a display name.
The offline catalog (data/oeis_builtin.toml) is consulted first; anything
else is fetched from oeis.org in the internal text format on a single
background worker, handed back as a Future so callers can poll without
blocking.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

import requests

from divgrid.dataio import is_oeis_id, load_builtin_sequences, normalize_oeis_id
from divgrid.runtime import CFG

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://oeis.org/search"
_DATA_TAGS = ("%S", "%T", "%U")
_NAME_TAG = "%N"


class SequenceUnavailable(Exception):
    """The collaborator could not produce the requested sequence."""


@dataclass(frozen=True)
class ResolvedSequence:
    identifier: str
    name: str
    values: tuple[int, ...]

    @property
    def link(self) -> str:
        return f"https://oeis.org/{self.identifier}"


class SequenceSource(Protocol):
    def fetch(self, identifier: str) -> Future[ResolvedSequence]:
        ...


def _completed(result: ResolvedSequence | None = None, error: Exception | None = None) -> Future[ResolvedSequence]:
    fut: Future[ResolvedSequence] = Future()
    if error is not None:
        fut.set_exception(error)
    else:
        fut.set_result(result)
    return fut


# ------------------------ text format ------------------------


def _split_tagged(line: str) -> tuple[str, str | None, str]:
    """'%S A000045 0,1,1' -> ('%S', 'A000045', '0,1,1')."""
    tag, _, rest = line.partition(" ")
    rest = rest.strip()
    first, _, tail = rest.partition(" ")
    if is_oeis_id(first):
        return tag, first.upper(), tail.strip()
    return tag, None, rest


def parse_oeis_text(text: str, identifier: str | None = None) -> ResolvedSequence:
    """
    Parse the OEIS internal format: %S/%T/%U carry the terms, %N the name.

    When identifier is given, only lines tagged with that A-number are used.
    Non-numeric terms are skipped; no terms at all raises SequenceUnavailable.
    """
    want = identifier.upper() if identifier else None
    chunks: list[str] = []
    name = ""
    seen_id = want

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line.startswith("%"):
            continue
        tag, line_id, payload = _split_tagged(line)
        if want and line_id and line_id != want:
            continue
        if tag in _DATA_TAGS:
            chunks.append(payload)
            seen_id = seen_id or line_id
        elif tag == _NAME_TAG and not name:
            name = payload
            seen_id = seen_id or line_id

    values: list[int] = []
    for token in ",".join(chunks).split(","):
        token = token.strip()
        if not token:
            continue
        try:
            values.append(int(token))
        except ValueError:
            logger.debug("skipping non-numeric OEIS term %r", token)
            continue

    ident = seen_id or "?"
    if not values:
        raise SequenceUnavailable(f"{ident}: no sequence data found")
    return ResolvedSequence(identifier=ident, name=name or ident, values=tuple(values))


# ------------------------ sources ------------------------


class BuiltinCatalog:
    """Offline sequences shipped with the package (workspace copy wins)."""

    def __init__(self, entries: dict[str, dict] | None = None):
        self._entries = load_builtin_sequences() if entries is None else entries

    def __contains__(self, identifier: str) -> bool:
        return self.get(identifier) is not None

    def identifiers(self) -> list[str]:
        return sorted(self._entries)

    def get(self, identifier: str) -> ResolvedSequence | None:
        entry = self._entries.get((identifier or "").strip().upper())
        if entry is None:
            return None
        return ResolvedSequence(
            identifier=identifier.strip().upper(),
            name=entry["name"],
            values=tuple(entry["values"]),
        )


class OeisClient:
    """Single-attempt HTTP lookup against oeis.org (fmt=text)."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None,
                 session: requests.Session | None = None):
        self.base_url = base_url or CFG("OEIS.BASE_URL", DEFAULT_BASE_URL)
        self.timeout = float(timeout if timeout is not None else CFG("OEIS.TIMEOUT_S", 10))
        self.session = session or requests.Session()
        self.logger = logging.getLogger(f"{__name__}.OeisClient")

    def fetch_text(self, identifier: str) -> str:
        try:
            response = self.session.get(
                self.base_url,
                params={"q": f"id:{identifier}", "fmt": "text"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.warning(f"OEIS lookup for {identifier} failed: {e}")
            raise SequenceUnavailable(f"{identifier}: {e}") from e
        return response.text

    def fetch(self, identifier: str) -> ResolvedSequence:
        self.logger.info(f"Fetching {identifier} from {self.base_url}")
        resolved = parse_oeis_text(self.fetch_text(identifier), identifier)
        self.logger.info(f"{identifier}: {len(resolved.values)} terms ({resolved.name})")
        return resolved

    def close(self) -> None:
        self.session.close()


class OeisResolver:
    """
    SequenceSource backed by the offline catalog and, when allowed, oeis.org.

    Catalog hits and validation failures come back as already-completed
    futures; network lookups run on one worker thread.
    """

    def __init__(self, catalog: BuiltinCatalog | None = None, client: OeisClient | None = None,
                 *, allow_network: bool | None = None):
        self.catalog = catalog if catalog is not None else BuiltinCatalog()
        self._client = client
        if allow_network is None:
            allow_network = bool(CFG("OEIS.ALLOW_NETWORK", True))
        self.allow_network = allow_network
        self._executor: ThreadPoolExecutor | None = None

    @property
    def client(self) -> OeisClient:
        if self._client is None:
            self._client = OeisClient()
        return self._client

    def fetch(self, identifier: str) -> Future[ResolvedSequence]:
        try:
            ident = normalize_oeis_id(identifier)
        except ValueError as e:
            return _completed(error=SequenceUnavailable(str(e)))

        builtin = self.catalog.get(ident)
        if builtin is not None:
            logger.debug("%s resolved from the offline catalog", ident)
            return _completed(builtin)

        if not self.allow_network:
            return _completed(error=SequenceUnavailable(
                f"{ident} is not in the offline catalog and network lookups are disabled"
            ))

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oeis")
        return self._executor.submit(self.client.fetch, ident)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        if self._client is not None:
            self._client.close()

    def __enter__(self) -> OeisResolver:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
