"""
IPFS HTTP API client.
One method per daemon endpoint; every call builds a URL, performs one
blocking exchange through the session's transport and decodes the reply.
"""

from __future__ import annotations
import io
import json
import logging
from enum import Enum
from typing import Any, BinaryIO, Dict, Iterable, List, Mapping, Optional, Sequence

from .domain.errors import IpfsError, VerificationFailed
from .domain.interfaces.transport import Transport
from .domain.models.request import EndpointRequest, Param
from .domain.models.upload import FilePart
from .domain.services.reply_folds import collect_lines, find_peer_addresses, merge_added_files
from .domain.services.response_decoder import decode, require_field, require_path
from .domain.services.url_builder import UrlBuilder
from .infrastructure.config.settings import ClientSettings, get_settings
from .infrastructure.http.transport import RequestsTransport


Json = Any


class PinRmMode(Enum):
    """Whether pin/rm also unpins everything below the object."""
    RECURSIVE = "recursive"
    NON_RECURSIVE = "non_recursive"


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


class IpfsClient:
    """Client for the HTTP API of one IPFS daemon."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5001,
        timeout: str = "",
        protocol: str = "http://",
        api_path: str = "/api/v0",
        verbose: bool = False,
        transport: Optional[Transport] = None,
        logger: Optional[logging.Logger] = None
    ):
        """Initialize a client session.

        Args:
            host: Daemon host name
            port: Daemon API port
            timeout: Server-side timeout sent with every call (e.g. "20s"); empty for none
            protocol: "http://" or "https://"
            api_path: Path prefix in front of endpoint names
            verbose: Trace every request/response of the default transport
            transport: Transport to own instead of a new RequestsTransport
            logger: Logger to use instead of the module logger
        """
        self.url_prefix = f"{protocol}{host}:{port}{api_path}"
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._transport: Transport = transport if transport is not None else RequestsTransport(verbose=verbose)
        self._urls = UrlBuilder(self._transport.url_encode)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        transport: Optional[Transport] = None
    ) -> IpfsClient:
        """Create a client from ClientSettings (the global settings by default)."""
        s = settings or get_settings()
        return cls(
            host=s.host,
            port=s.port,
            timeout=s.timeout,
            protocol=s.protocol,
            api_path=s.api_path,
            verbose=s.verbose,
            transport=transport,
        )

    @property
    def transport(self) -> Transport:
        return self._transport

    # ---------------- Session lifecycle ----------------

    def __copy__(self) -> IpfsClient:
        # A copy never shares the transport: in-flight/abort state is per session
        other = self.__class__.__new__(self.__class__)
        other.__dict__.update(self.__dict__)
        other._transport = self._transport.clone()
        other._urls = UrlBuilder(other._transport.url_encode)
        return other

    def __deepcopy__(self, memo: Dict[int, Any]) -> IpfsClient:
        return self.__copy__()

    def clone(self) -> IpfsClient:
        """Return an independent session with a cloned transport."""
        return self.__copy__()

    def close(self) -> None:
        """Release the transport's resources."""
        close = getattr(self._transport, 'close', None)
        if callable(close):
            close()

    def __enter__(self) -> IpfsClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- Cancellation ----------------

    def abort(self) -> None:
        """Interrupt the request in flight on this session.

        May be called from another thread. The interrupted call raises
        RequestAborted, and later calls are refused until reset().
        """
        self._transport.abort_in_flight()

    def reset(self) -> None:
        """Make the session usable again after abort()."""
        self._transport.reset_after_abort()

    # ---------------- Node ----------------

    def id(self) -> Json:
        """Identity of the daemon node."""
        return self._fetch_json("id")

    def version(self) -> Json:
        return self._fetch_json("version")

    # ---------------- Config ----------------

    def config_get(self, key: str = "") -> Json:
        """Get one config entry, or the whole config when key is empty.

        {"Key": "Datastore", "Value": {"GCPeriod": "1h", ...}} is reduced to
        its Value.
        """
        if not key:
            return self._fetch_json("config/show")
        return require_field(self._fetch_json("config", [("arg", key)]), "Value")

    def config_set(self, key: str, value: Json) -> None:
        """Set a config entry; value is sent as JSON text."""
        self._fetch_json("config", [("arg", key), ("arg", json.dumps(value))])

    def config_replace(self, config: Json) -> None:
        """Replace the whole daemon config."""
        self._fetch("config/replace", files=[FilePart.from_contents("new_config.json", json.dumps(config))])

    # ---------------- Routing ----------------

    def dht_find_peer(self, peer_id: str) -> List[Json]:
        """Addresses of a peer, from the routing system."""
        body = self._fetch("routing/findpeer", [("arg", peer_id)])
        return find_peer_addresses(body, peer_id)

    def dht_find_provs(self, cid: str) -> List[Json]:
        """All routing reply lines for providers of cid, in arrival order."""
        return collect_lines(self._fetch("routing/findprovs", [("arg", cid)]))

    # ---------------- Blocks ----------------

    def block_get(self, block_id: str, sink: BinaryIO) -> None:
        """Write the raw block into sink."""
        self._fetch_into("block/get", [("arg", block_id)], sink)

    def block_put(self, block: FilePart) -> Json:
        """Store a raw block; returns its stat ({"Key": ..., "Size": ...})."""
        return self._fetch_json("block/put", files=[block])

    def block_stat(self, block_id: str) -> Json:
        return self._fetch_json("block/stat", [("arg", block_id)])

    # ---------------- Files ----------------

    def files_get(self, path: str, sink: BinaryIO) -> None:
        """Write the contents of an IPFS path into sink."""
        self._fetch_into("cat", [("arg", path)], sink)

    def files_add(self, files: Sequence[FilePart]) -> List[Dict[str, Any]]:
        """Add files; returns [{"path": ..., "hash": ..., "size": ...}, ...]."""
        body = self._fetch("add", [("progress", "true")], files=files)
        return merge_added_files(body)

    def files_ls(self, path: str) -> Json:
        return self._fetch_json("file/ls", [("arg", path)])

    # ---------------- Keys ----------------

    def key_gen(self, key_name: str, key_type: str = "rsa", key_size: int = 2048) -> str:
        """Generate a key pair; returns the new key's Id."""
        reply = self._fetch_json("key/gen", [
            ("arg", key_name),
            ("type", key_type),
            ("size", str(int(key_size))),
        ])
        return require_field(reply, "Id")

    def key_list(self) -> List[Json]:
        return require_field(self._fetch_json("key/list"), "Keys")

    def key_rm(self, key_name: str) -> None:
        self._fetch("key/rm", [("arg", key_name)])

    def key_rename(self, old_key: str, new_key: str) -> None:
        self._fetch("key/rename", [("arg", old_key), ("arg", new_key)])

    # ---------------- Naming ----------------

    def name_publish(
        self,
        object_id: str,
        key_name: str = "self",
        options: Optional[Mapping[str, Any]] = None
    ) -> str:
        """Publish object_id under key_name; returns the published name.

        Each option (e.g. {"lifetime": "24h", "allow-offline": True}) is sent
        as an extra query parameter.
        """
        params: List[Param] = [("arg", object_id), ("key", key_name)]
        for name, value in (options or {}).items():
            params.append((name, _flag(value) if isinstance(value, bool) else str(value)))
        return require_field(self._fetch_json("name/publish", params), "Name")

    def name_resolve(self, name_id: str) -> str:
        """Resolve a name to the path it points at."""
        return require_field(self._fetch_json("name/resolve", [("arg", name_id)]), "Path")

    # ---------------- DAG ----------------

    def dag_export(self, cid: str, sink: BinaryIO) -> None:
        """Write the DAG below cid into sink as a CAR archive."""
        self._fetch_into("dag/export", [("arg", cid), ("progress", "false")], sink)

    def dag_import(self, data: FilePart, pin: bool = True) -> str:
        """Import a CAR archive; returns the root CID."""
        reply = self._fetch_json("dag/import", [("pin-roots", _flag(pin))], files=[data])
        return require_path(reply, "Root", "Cid", "/")

    def dag_put(self, value: Json, pin: bool = False) -> str:
        """Store a JSON value as a DAG node; returns its CID."""
        part = FilePart.from_contents("file", json.dumps(value))
        reply = self._fetch_json("dag/put", [("pin", _flag(pin))], files=[part])
        return require_path(reply, "Cid", "/")

    def dag_get(self, path: str) -> Json:
        return self._fetch_json("dag/get", [("arg", path)])

    def dag_resolve(self, path: str) -> Json:
        return self._fetch_json("dag/resolve", [("arg", path)])

    def dag_stat(self, root_id: str) -> Json:
        return self._fetch_json("dag/stat", [("arg", root_id), ("progress", "false")])

    # ---------------- Pinning ----------------

    def pin_add(self, object_id: str) -> None:
        """Pin an object; fails unless the daemon reports it as pinned."""
        reply = self._fetch_json("pin/add", [("arg", object_id)])
        pins = require_field(reply, "Pins")
        if not isinstance(pins, list) or object_id not in pins:
            raise VerificationFailed(
                f'Request to pin "{object_id}" got a result that does not contain it as pinned',
                reply,
            )

    def pin_ls(self, object_id: Optional[str] = None) -> Json:
        """List pinned objects, or the pin state of one object."""
        params: List[Param] = [("arg", object_id)] if object_id else []
        return self._fetch_json("pin/ls", params)

    def pin_rm(self, object_id: str, mode: PinRmMode = PinRmMode.RECURSIVE) -> None:
        recursive = _flag(mode is PinRmMode.RECURSIVE)
        self._fetch_json("pin/rm", [("arg", object_id), ("recursive", recursive)])

    # ---------------- Stats ----------------

    def stats_bw(self) -> Json:
        return self._fetch_json("stats/bw")

    def stats_repo(self) -> Json:
        return self._fetch_json("stats/repo")

    # ---------------- Swarm ----------------

    def swarm_addrs(self) -> Json:
        return self._fetch_json("swarm/addrs")

    def swarm_connect(self, peer: str) -> None:
        self._fetch_json("swarm/connect", [("arg", peer)])

    def swarm_disconnect(self, peer: str) -> None:
        self._fetch_json("swarm/disconnect", [("arg", peer)])

    def swarm_peers(self) -> Json:
        return self._fetch_json("swarm/peers")

    # ---------------- Internal helpers ----------------

    def _url(self, path: str, params: Iterable[Param] = ()) -> str:
        return self._urls.build(EndpointRequest.build(self.url_prefix, path, params, self.timeout))

    def _fetch_into(
        self,
        path: str,
        params: Iterable[Param],
        sink: BinaryIO,
        files: Sequence[FilePart] = ()
    ) -> None:
        url = self._url(path, params)
        try:
            self._transport.fetch(url, list(files), sink)
        except IpfsError as e:
            self.logger.debug(f"{path} failed: {e}")
            raise

    def _fetch(self, path: str, params: Iterable[Param] = (), files: Sequence[FilePart] = ()) -> bytes:
        body = io.BytesIO()
        self._fetch_into(path, params, body, files)
        return body.getvalue()

    def _fetch_json(self, path: str, params: Iterable[Param] = (), files: Sequence[FilePart] = ()) -> Json:
        return decode(self._fetch(path, params, files))
