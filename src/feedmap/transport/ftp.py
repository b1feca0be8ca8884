from __future__ import annotations
import ftplib
import io
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from ..core.io import decode_document
from ..rest.models import FtpCredentials

T = TypeVar("T")

Credentials = Union[FtpCredentials, Dict[str, Any]]

_PASSWORD_ERROR = re.compile(r"password.*wrong|wrong.*password", re.IGNORECASE)


class FtpTransportError(Exception):
    """Raised when an FTP operation fails after all attempts."""


@dataclass
class FtpConfig:
    max_retries: int = 1
    retry_delay: float = 1.0
    timeout: float = 30.0
    pool_size: int = 2
    max_idle: float = 300.0
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("feedmap.ftp"))


@dataclass(eq=False)
class PooledConnection:
    ftp: Any
    host: str
    user: str
    in_use: bool = True
    last_used: float = 0.0


def _as_credentials(credentials: Credentials) -> FtpCredentials:
    if isinstance(credentials, FtpCredentials):
        return credentials
    return FtpCredentials(**credentials)


def _close(ftp: Any) -> None:
    try:
        ftp.quit()
    except ftplib.all_errors:
        ftp.close()


class FtpConnectionPool:
    """
    Small pool of logged-in FTP sessions keyed by ``(host, user)``.

    At most ``pool_size`` sessions are kept; sessions opened beyond that are
    closed on release. Idle sessions are checked with ``PWD`` before reuse.
    """

    def __init__(
        self,
        config: Optional[FtpConfig] = None,
        *,
        factory: Optional[Callable[[FtpCredentials, float], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config if config is not None else FtpConfig()
        self._factory = factory or self._connect
        self._clock = clock
        self._pool: List[PooledConnection] = []

    @staticmethod
    def _connect(creds: FtpCredentials, timeout: float) -> ftplib.FTP:
        ftp = ftplib.FTP(timeout=timeout)
        try:
            ftp.connect(creds.host, creds.port or 21)
            ftp.login(creds.user, creds.password)
        except ftplib.all_errors:
            ftp.close()
            raise
        return ftp

    def __len__(self) -> int:
        return len(self._pool)

    def acquire(self, credentials: Credentials) -> PooledConnection:
        creds = _as_credentials(credentials)
        log = self.config.logger

        for conn in self._pool:
            if conn.in_use or conn.host != creds.host or conn.user != creds.user:
                continue
            conn.in_use = True
            try:
                conn.ftp.pwd()
                log.debug("Reusing FTP connection for %s", creds.host)
                return conn
            except ftplib.all_errors:
                log.debug("Stale FTP connection for %s, opening a new one", creds.host)
                self.discard(conn)
                break

        log.info("Opening FTP connection to %s:%s", creds.host, creds.port or 21)
        ftp = self._factory(creds, self.config.timeout)
        conn = PooledConnection(ftp=ftp, host=creds.host, user=creds.user, last_used=self._clock())
        if len(self._pool) < self.config.pool_size:
            self._pool.append(conn)
        return conn

    def release(self, conn: PooledConnection) -> None:
        if conn in self._pool:
            conn.in_use = False
            conn.last_used = self._clock()
        else:
            _close(conn.ftp)

    def discard(self, conn: PooledConnection) -> None:
        if conn in self._pool:
            self._pool.remove(conn)
        _close(conn.ftp)

    def sweep(self) -> int:
        """Close idle connections unused for longer than ``max_idle``; returns how many were closed."""
        now = self._clock()
        expired = [c for c in self._pool if not c.in_use and now - c.last_used > self.config.max_idle]
        for conn in expired:
            self.discard(conn)
        return len(expired)

    def close_all(self) -> None:
        for conn in list(self._pool):
            self.discard(conn)


class FtpDocumentSource:
    """
    Read-only access to product documents on an FTP server.

    Example:
        >>> source = FtpDocumentSource()
        >>> doc = source.download({"host": "ftp.example.com", "user": "feed", "password": "..."}, "/products.json")
    """

    def __init__(
        self,
        config: Optional[FtpConfig] = None,
        *,
        pool: Optional[FtpConnectionPool] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config if config is not None else FtpConfig()
        self.pool = pool if pool is not None else FtpConnectionPool(self.config)
        self._sleep = sleep

    def download(self, credentials: Credentials, remote_path: str) -> Any:
        def op(ftp: Any) -> bytes:
            buf = io.BytesIO()
            ftp.retrbinary(f"RETR {remote_path}", buf.write)
            return buf.getvalue()

        return decode_document(self._with_retry(op, credentials))

    def list_files(self, credentials: Credentials, remote_path: str = "/") -> List[Dict[str, Any]]:
        def op(ftp: Any) -> List[Dict[str, Any]]:
            try:
                entries = list(ftp.mlsd(remote_path, facts=["type", "size", "modify"]))
            except ftplib.error_perm:
                # server without MLSD
                return [{"name": name, "type": "file", "size": None, "modifiedAt": None} for name in ftp.nlst(remote_path)]

            out = []
            for name, facts in entries:
                kind = facts.get("type", "file")
                if kind in ("cdir", "pdir"):
                    continue
                size = facts.get("size")
                out.append({
                    "name": name,
                    "type": "directory" if kind == "dir" else "file",
                    "size": int(size) if size is not None else None,
                    "modifiedAt": _parse_modify(facts.get("modify")),
                })
            return out

        return self._with_retry(op, credentials)

    def test_connection(self, credentials: Credentials) -> Dict[str, Any]:
        try:
            self._with_retry(lambda ftp: True, credentials)
        except FtpTransportError as e:
            self.config.logger.info("Connection test failed: %s", e)
            return {"success": False, "error": str(e)}
        return {"success": True, "error": None}

    def close(self) -> None:
        self.pool.close_all()

    def _with_retry(self, operation: Callable[[Any], T], credentials: Credentials) -> T:
        attempts = self.config.max_retries + 1
        log = self.config.logger
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            conn: Optional[PooledConnection] = None
            try:
                conn = self.pool.acquire(credentials)
                result = operation(conn.ftp)
                self.pool.release(conn)
                return result
            except ftplib.all_errors as e:
                if conn is not None:
                    self.pool.discard(conn)
                if _is_login_failure(e):
                    # no retry on bad credentials, the server may lock the account
                    raise FtpTransportError(f"FTP login failed: {e}") from e
                last_error = e
                log.warning("FTP operation failed (attempt %d/%d): %s", attempt, attempts, e)
                if attempt < attempts:
                    self._sleep(self.config.retry_delay)

        raise FtpTransportError(f"FTP operation failed after {attempts} attempts: {last_error}") from last_error


def _is_login_failure(error: BaseException) -> bool:
    msg = str(error)
    if isinstance(error, ftplib.error_perm) and msg.startswith("530"):
        return True
    return bool(_PASSWORD_ERROR.search(msg))


def _parse_modify(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S").isoformat()
    except ValueError:
        return value
