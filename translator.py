"""
Google Translate lookup - uses the public web endpoint through requests
"""
import logging

import requests

from config import DEFAULT_TRANSLATE_URL

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    pass


def translate(text: str, target_language: str, url: str = DEFAULT_TRANSLATE_URL,
              timeout: float = 10) -> str:
    """
    Translate text into the target language.

    Args:
        text: The text to translate (source language is auto-detected)
        target_language: Language code to translate into (es, fr, sl, ...)

    Returns:
        The translated text

    Raises:
        TranslationError: lookup failed or the response could not be read
    """
    try:
        response = requests.get(
            url,
            params={
                "client": "gtx",
                "sl": "auto",
                "tl": target_language,
                "dt": "t",
                "q": text,
            },
            headers={
                "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
            },
            timeout=timeout
        )
        response.raise_for_status()
        data = response.json()
    except requests.JSONDecodeError as e:
        logger.warning("Translation response was not JSON: %s", e)
        raise TranslationError(f"unreadable response: {e}") from e
    except requests.RequestException as e:
        logger.warning("Translation request failed: %s", e)
        raise TranslationError(str(e)) from e

    # [[["hola", "hello", ...], ["mundo", "world", ...]], None, "en", ...]
    try:
        segments = data[0]
        translated = "".join(segment[0] for segment in segments if segment and segment[0])
    except (TypeError, IndexError, KeyError) as e:
        raise TranslationError(f"unexpected response shape: {e}") from e

    if not translated:
        raise TranslationError("empty translation")
    return translated
