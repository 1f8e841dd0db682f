"""
Extraction Client for the PDF-to-text webhook

Posts an uploaded PDF to the extraction webhook (multipart field `file`)
and picks the extracted text out of the JSON reply.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

import httpx

logger = logging.getLogger(__name__)

# Message shown to users for every upstream failure
EXTRACTION_FAILED_MESSAGE = "فشل رفع الملف — يرجى التحقق من إعدادات خدمة الاستخراج"


class ExtractionError(Exception):
    """Upload, transport or response-decoding failure."""


def _field(name: str) -> Callable[[Any], Optional[str]]:
    def extract(data: Any) -> Optional[str]:
        if isinstance(data, dict):
            value = data.get(name)
            if value:
                return value if isinstance(value, str) else str(value)
        return None
    return extract


def _json_dump(data: Any) -> Optional[str]:
    return json.dumps(data, ensure_ascii=False, indent=2)


# First non-empty result wins
TEXT_EXTRACTORS: List[Tuple[str, Callable[[Any], Optional[str]]]] = [
    ("resultText", _field("resultText")),
    ("statusText", _field("statusText")),
    ("message", _field("message")),
    ("json", _json_dump),
]


def pick_text(data: Any) -> str:
    """
    Choose the display text from a decoded webhook reply.

    Args:
        data: Decoded JSON body

    Returns:
        resultText, else statusText, else message, else the JSON dump
    """
    for name, extractor in TEXT_EXTRACTORS:
        text = extractor(data)
        if text:
            logger.debug(f"Extraction text taken from '{name}'")
            return text
    return ""


class ExtractionClient:
    """HTTP client for the extraction webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            webhook_url: Endpoint accepting multipart `file` uploads
            timeout: Seconds before giving up (None waits indefinitely)
            transport: Custom httpx transport (tests use MockTransport)
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    def extract(self, content: bytes, filename: str = "document.pdf") -> str:
        """
        Upload PDF bytes and return the extracted text.

        Raises:
            ExtractionError: transport failure or a body that is not JSON
        """
        files = {"file": (filename, content, "application/pdf")}
        logger.info(f"Uploading {filename} ({len(content) / 1024:.1f} KB) to extraction webhook")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.webhook_url, files=files)
        except httpx.HTTPError as e:
            logger.error(f"Extraction upload failed: {e}")
            raise ExtractionError(str(e)) from e

        if response.is_error:
            logger.warning(f"Extraction webhook answered HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Extraction webhook returned non-JSON body: {e}")
            raise ExtractionError("response is not valid JSON") from e

        text = pick_text(data)
        logger.info(f"✓ Extraction completed ({len(text)} chars)")
        return text

    def extract_file(self, path: Union[str, Path]) -> str:
        path = Path(path)
        return self.extract(path.read_bytes(), path.name)
