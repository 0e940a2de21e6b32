#!/usr/bin/env python3
"""Spotify to YouTube playlist sync - entry point"""

import fcntl
import logging
import os
import sys
import time
from pathlib import Path

from sp2yt.auth.authorizer import ConsoleAuthorizer
from sp2yt.auth.store import JsonFileCredentialStore
from sp2yt.auth.tokens import TokenManager
from sp2yt.clients.spotify import SpotifyClient
from sp2yt.clients.youtube import YouTubeAPIError, YouTubeClient
from sp2yt.config import SyncConfig
from sp2yt.core.models import AuthError, ConfigError, CreateError, SourceError
from sp2yt.core.status import format_summary, write_failure_status, write_running_status, write_status
from sp2yt.core.sync_engine import SyncEngine

STALE_LOCK_SECONDS = 1800

logger = logging.getLogger(__name__)


def setup_logging(data_dir: Path) -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.FileHandler(data_dir / "sp2yt.log", encoding="utf-8"),
            logging.StreamHandler()
        ]
    )


def acquire_lock(lock_file: Path) -> int | None:
    try:
        # A lock older than 30 min is most likely orphaned
        if lock_file.exists():
            age = time.time() - lock_file.stat().st_mtime
            if age > STALE_LOCK_SECONDS:
                logger.warning(f"Removing stale lock file (age: {age:.0f}s)")
                lock_file.unlink(missing_ok=True)

        fd = os.open(str(lock_file), os.O_CREAT | os.O_RDWR)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            os.close(fd)
            return None
        os.write(fd, f"{os.getpid()}\n".encode())
        return fd
    except OSError as e:
        logger.warning(f"Could not create lock file: {e}")
        return None


def release_lock(fd: int, lock_file: Path) -> None:
    try:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
        lock_file.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Lock release failed: {e}")


def build_engine(config: SyncConfig) -> SyncEngine:
    store = JsonFileCredentialStore(config.data_dir / "credentials.json")
    tokens = TokenManager(
        store,
        ConsoleAuthorizer(),
        timeout=config.request_timeout,
        reauthorize_on_refresh_failure=config.reauthorize_on_refresh_failure,
    )
    return SyncEngine(
        tokens,
        source_factory=lambda token: SpotifyClient(token, timeout=config.request_timeout),
        destination_factory=lambda token: YouTubeClient(token, timeout=config.request_timeout),
    )


def main() -> int:
    try:
        config = SyncConfig.from_env()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(str(e))
        return 1

    setup_logging(config.data_dir)
    status_file = config.data_dir / "sync_status.json"
    lock_file = config.data_dir / ".sync.lock"

    lock_fd = acquire_lock(lock_file)
    if lock_fd is None:
        logger.warning("Another sync running, exiting")
        return 0

    try:
        write_running_status(status_file)
        report = build_engine(config).run(config)
        write_status(report, status_file)
        print(f"\nSync complete\n{format_summary(report)}")
        return 0

    except (AuthError, CreateError, SourceError, YouTubeAPIError) as e:
        logger.error(f"Sync failed: {e}")
        write_failure_status(str(e), status_file)
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        write_failure_status(f"Unexpected error: {e}", status_file)
        return 1
    finally:
        release_lock(lock_fd, lock_file)


if __name__ == "__main__":
    sys.exit(main())
