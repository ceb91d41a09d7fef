"""
Carrier detection based on tracking code format
"""

import re
from dataclasses import dataclass
from typing import Optional, Set

from .models import Carrier

MIN_CODE_LENGTH = 8
MAX_CODE_LENGTH = 30

# Correios (UPU S10): 2 letters + 9 digits + 2 letters, e.g. LB123456789BR
_CORREIOS_RE = re.compile(r"^[A-Z]{2}\d{9}[A-Z]{2}$")
_CORREIOS_IN_TEXT_RE = re.compile(r"\b[A-Z]{2}\d{9}[A-Z]{2}\b")
_GENERIC_IN_TEXT_RE = re.compile(r"\b[A-Z0-9\-]{8,}\b")


@dataclass(frozen=True)
class CarrierGuess:
    """Result of classifying a raw string."""
    carrier: Carrier
    code: str  # trimmed, uppercased input

    @property
    def is_known(self) -> bool:
        return self.carrier is not Carrier.UNKNOWN


def looks_like_correios(code: str) -> bool:
    """Check the Correios shape, ignoring case and surrounding whitespace."""
    return _CORREIOS_RE.match(code.strip().upper()) is not None


def classify(text: str) -> CarrierGuess:
    """
    Guess the carrier from a tracking code.

    Args:
        text: Raw tracking code as typed or pasted by the user

    Returns:
        CarrierGuess; carrier is Carrier.UNKNOWN when nothing matches
    """
    code = (text or "").strip().upper()

    if _CORREIOS_RE.match(code):
        return CarrierGuess(Carrier.CORREIOS, code)

    # Prefix heuristics only apply to plausible codes
    if MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH:
        if code.startswith("TBA"):
            return CarrierGuess(Carrier.AMAZON_LOGISTICS, code)
        if code.startswith("SE"):
            return CarrierGuess(Carrier.SHOPEE_EXPRESS, code)
        return CarrierGuess(Carrier.OTHER, code)

    return CarrierGuess(Carrier.UNKNOWN, code)


def normalize_tracking_code(text: str) -> Optional[str]:
    """
    Normalize a tracking code (trim, uppercase).

    Returns:
        Normalized code, or None if the text is not a plausible tracking code
    """
    guess = classify(text)
    return guess.code if guess.is_known else None


def extract_candidates(free_text: str) -> Set[str]:
    """
    Find tracking codes in arbitrary text (shared notes, forwarded emails).

    Args:
        free_text: Text to scan

    Returns:
        Set of uppercased candidate codes
    """
    text = (free_text or "").upper()
    found: Set[str] = set()

    for match in _CORREIOS_IN_TEXT_RE.finditer(text):
        found.add(match.group(0))

    for match in _GENERIC_IN_TEXT_RE.finditer(text):
        token = match.group(0).strip("-")
        if MIN_CODE_LENGTH <= len(token) <= MAX_CODE_LENGTH:
            found.add(token)

    return found


def carrier_from_slug(slug: Optional[str]) -> Carrier:
    """Map an aggregator carrier slug or name to a Carrier."""
    if not isinstance(slug, str) or not slug:
        return Carrier.OTHER
    slug = slug.lower()
    if "correios" in slug:
        return Carrier.CORREIOS
    if "amazon" in slug:
        return Carrier.AMAZON_LOGISTICS
    if "shopee" in slug:
        return Carrier.SHOPEE_EXPRESS
    return Carrier.OTHER
