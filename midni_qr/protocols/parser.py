"""
MiDNI QR Parser

Orchestrates the decoding pipeline for one scanned payload:

    header -> field table -> result mapping (text + photo) -> signature

The photo decode and the signature verification are independent of each
other. With QRParserConfig.concurrent_pipeline they run on a two-worker
thread pool; the signature flag is written into the result only after both
have completed.

Author: MiDNI QR Project
Date: October 2026
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Tuple, Union

from midni_qr.config import DEFAULT_PARSER_CONFIG, QRParserConfig
from midni_qr.utils.logger import QRLogger
from midni_qr.utils.metrics import MetricsCollector, get_metrics_collector

from .core.errors import QRPayloadError
from .field_table import ExtractionResult, FieldTable, extract_field_table
from .header import DocumentHeader, decode_header
from .mapper import ParsedDocument, map_photo, map_text_fields
from .photo import DecodedPhoto, Jpeg2000Codec
from .signature import SignatureVerifier


class DniQrParser:
    """
    Decoder for MiDNI QR payloads.

    One parser can be reused for any number of payloads; it keeps no
    per-payload state. The certificate store is resolved lazily from the
    configuration (bundled trust anchors or MIDNI_TRUST_STORE_DIR) unless
    one is given.
    """

    def __init__(
        self,
        config: Optional[QRParserConfig] = None,
        certificate_store: Optional[Mapping] = None,
        image_codec: Optional[Jpeg2000Codec] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.config = config or DEFAULT_PARSER_CONFIG
        self.logger = QRLogger.for_component("parser", self.config.log_level)
        self.verifier = SignatureVerifier(QRLogger.for_component("signature", self.config.log_level))
        self.image_codec = image_codec or Jpeg2000Codec()
        self.metrics = metrics or get_metrics_collector()
        self._certificate_store = certificate_store

    @property
    def certificate_store(self) -> Mapping:
        if self._certificate_store is None:
            from midni_qr.managers.trust_store_manager import TrustStoreManager

            self._certificate_store = TrustStoreManager.from_config(self.config)
        return self._certificate_store

    def parse(
        self,
        data: Union[bytes, bytearray, memoryview],
        certificate_store: Optional[Mapping] = None,
    ) -> ParsedDocument:
        """
        Decode and verify a raw payload.

        Args:
            data: Raw bytes read from the QR symbol
            certificate_store: Overrides the parser's store for this call

        Returns:
            ParsedDocument with signature_verified set

        Raises:
            QRPayloadError: On malformed input (see core.errors)
        """
        payload = bytes(data)
        store = certificate_store if certificate_store is not None else self.certificate_store
        start = time.perf_counter()

        try:
            header = decode_header(payload)
            if header.verification_kind is None:
                self.logger.warning(f"Unknown verification kind 0x{header.verification_kind_byte:02X}")
            self.logger.debug(
                f"Header: country={header.issuing_country} signer={header.signer_id} "
                f"reference={header.certificate_reference} fields at {header.field_table_offset}"
            )

            extraction = extract_field_table(payload, header.field_table_offset)
            self.logger.debug(
                f"Extracted {len(extraction.fields)} fields, state={extraction.state.name}"
            )
            if extraction.fields.unknown_tags():
                self.logger.debug(
                    "Unknown tags kept raw: "
                    + ", ".join(f"0x{t:02X}" for t in extraction.fields.unknown_tags())
                )

            document = map_text_fields(header, extraction.fields, self.logger)
            photo, verified = self._photo_and_signature(header, extraction, store)
        except QRPayloadError as e:
            self.metrics.record_parse("failed", _elapsed_ms(start), error=type(e).__name__)
            self.logger.error(f"Payload rejected: {e}")
            raise

        document.photo = photo
        document.signature_verified = verified

        if not extraction.has_signature:
            outcome = "unsigned"
        else:
            outcome = "verified" if verified else "unverified"
        self.metrics.record_parse(outcome, _elapsed_ms(start))
        self.logger.info(
            f"Parsed payload of {len(payload)} bytes "
            f"({outcome}, kind={header.verification_kind.label if header.verification_kind else '?'})"
        )
        return document

    def _photo_and_signature(
        self,
        header: DocumentHeader,
        extraction: ExtractionResult,
        store: Mapping,
    ) -> Tuple[Optional[DecodedPhoto], bool]:
        if not self.config.concurrent_pipeline:
            photo = self._decode_photo(extraction.fields)
            try:
                verified = self._verify(header, extraction, store)
            except Exception:
                _release(photo)
                raise
            return photo, verified

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="midni_qr") as pool:
            photo_future = pool.submit(self._decode_photo, extraction.fields)
            verify_future = pool.submit(self._verify, header, extraction, store)
            try:
                verified = verify_future.result()
            except Exception:
                if photo_future.exception() is None:
                    _release(photo_future.result())
                raise
            photo = photo_future.result()
        return photo, verified

    def _decode_photo(self, fields: FieldTable) -> Optional[DecodedPhoto]:
        photo = map_photo(
            fields,
            require_photo=self.config.require_photo,
            codec=self.image_codec,
            temp_dir=self.config.photo_temp_dir,
        )
        if photo is not None:
            self.logger.debug(
                f"Photo {photo.width}x{photo.height}, {photo.component_count} components"
            )
        return photo

    def _verify(self, header: DocumentHeader, extraction: ExtractionResult, store: Mapping) -> bool:
        if not extraction.has_signature:
            self.logger.warning("Payload carries no signature field, marking as not verified")
            return False
        return self.verifier.verify(
            extraction.signed_region,
            extraction.signature,
            header.certificate_reference,
            store,
        )


def _release(photo: Optional[DecodedPhoto]) -> None:
    if photo is not None:
        photo.release()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def parse_qr_payload(
    data: Union[bytes, bytearray, memoryview],
    certificate_store: Optional[Mapping] = None,
    config: Optional[QRParserConfig] = None,
) -> ParsedDocument:
    """Parse one payload with a throwaway DniQrParser."""
    return DniQrParser(config=config, certificate_store=certificate_store).parse(data)
