"""
Content fingerprint generation for submitted files.
"""

import asyncio
import hashlib
import time

from loguru import logger

from importacoes.exceptions import FingerprintError
from importacoes.observability import observe_fingerprint_duration


def fingerprint(content: bytes) -> str:
    """SHA-256 lowercase hex digest over the whole byte content."""
    return hashlib.sha256(content).hexdigest()


async def fingerprint_content(content: bytes, file_name: str = None) -> str:
    """
    Hash content that was already read, off the event loop.

    The caller uploads the same buffer it hashes, so the digest always
    describes the bytes the server receives.

    Raises:
        FingerprintError: the content could not be hashed
    """
    started = time.perf_counter()
    try:
        digest = await asyncio.to_thread(fingerprint, content)
    except (TypeError, ValueError, MemoryError) as e:
        logger.warning(f"Could not fingerprint {file_name}: {e}")
        raise FingerprintError(file_name=file_name, original_exception=e)
    finally:
        observe_fingerprint_duration(time.perf_counter() - started)

    logger.debug(f"Fingerprint for {file_name}: {digest}")
    return digest
