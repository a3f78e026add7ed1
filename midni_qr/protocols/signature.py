"""
MiDNI QR Signature Verifier

Resolves the issuer certificate named by the header's certificate reference
and verifies the ECDSA P-256 / SHA-256 signature over the signed region.

Every trust failure is a boolean outcome: an unknown reference, a malformed
certificate, a signature that is not 64 bytes or a mismatch all yield False.

Author: MiDNI QR Project
Date: October 2026
"""

import logging
from typing import Mapping, Optional

from .core.crypto import public_key_from_certificate, verify_signature_ecdsa_sha256
from .core.errors import InvalidSignatureEncodingError


class SignatureVerifier:
    """ECDSA verifier bound to a logger; stateless across calls."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("midni_qr.signature")

    def verify(
        self,
        signed_region: bytes,
        signature: bytes,
        certificate_reference: str,
        certificate_store: Mapping,
    ) -> bool:
        """
        Verify the payload signature.

        Args:
            signed_region: data[0:signature_tag_offset] exactly as captured
            signature: Raw r || s signature bytes
            certificate_reference: Reference from the header (any case)
            certificate_store: reference (lowercase hex) -> PEM certificate

        Returns:
            bool: True only if the signature verifies under the referenced
            certificate
        """
        reference = certificate_reference.lower()
        pem = _lookup(certificate_store, reference)
        if pem is None:
            self.logger.warning(f"Certificate {reference} not found in trust store, signature not verified")
            return False

        try:
            public_key = public_key_from_certificate(pem)
        except ValueError as e:
            self.logger.warning(f"Unusable certificate {reference}: {e}")
            return False

        try:
            valid = verify_signature_ecdsa_sha256(signed_region, signature, public_key)
        except InvalidSignatureEncodingError as e:
            self.logger.warning(f"Invalid signature encoding: {e}")
            return False

        if valid:
            self.logger.info(f"Signature verified with certificate {reference}")
        else:
            self.logger.warning(f"Signature mismatch for certificate {reference}")
        return valid


def _lookup(certificate_store: Mapping, reference: str):
    lookup = getattr(certificate_store, "lookup", None)
    if lookup is not None:
        return lookup(reference)
    return certificate_store.get(reference)


def verify_signature(
    signed_region: bytes,
    signature: bytes,
    certificate_reference: str,
    certificate_store: Mapping,
) -> bool:
    """Module-level shortcut for SignatureVerifier().verify(...)."""
    return SignatureVerifier().verify(signed_region, signature, certificate_reference, certificate_store)
