"""
MiDNI QR Payload Inspector

Decodifica un payload QR MiDNI salvato su file e ne stampa header, campi e
stato della firma.

Usage:
    midni-qr-inspect payload.bin
    midni-qr-inspect payload.b64 --base64 --json
    midni-qr-inspect payload.bin --trust-store certs/ --save-photo photo.png

Exit codes: 0 firma valida, 1 errore di input, 2 payload non valido,
3 firma non verificata.

Author: MiDNI QR Project
Date: October 2026
"""

import argparse
import base64
import binascii
import json
import logging
import sys
from dataclasses import replace
from binascii import hexlify
from pathlib import Path
from typing import List, Optional

from midni_qr.config import QRParserConfig
from midni_qr.managers.trust_store_manager import TrustStoreManager
from midni_qr.protocols.core.errors import QRPayloadError
from midni_qr.protocols.core.types import FieldTag
from midni_qr.protocols.field_table import extract_field_table
from midni_qr.protocols.header import decode_header
from midni_qr.protocols.parser import DniQrParser
from midni_qr.utils.logger import QRLogger


def format_bytes(data: bytes, max_length: int = 32) -> str:
    """Formatta bytes in esadecimale con troncamento"""
    if len(data) <= max_length:
        return hexlify(data).decode('ascii')
    return hexlify(data[:max_length]).decode('ascii') + f"... ({len(data)} bytes total)"


def read_payload(path: Path, is_base64: bool) -> bytes:
    """
    Read a payload file.

    Raises:
        ValueError: If --base64 was given and the file is not valid base64
    """
    data = path.read_bytes()
    if not is_base64:
        return data
    try:
        return base64.b64decode(b"".join(data.split()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def print_field_table(payload: bytes) -> None:
    """Stampa la tabella TLV grezza (tag, nome, lunghezza, valore)"""
    header = decode_header(payload)
    extraction = extract_field_table(payload, header.field_table_offset)

    print("Campi TLV:")
    for tag, value in extraction.fields.items():
        name = FieldTag(tag).name if FieldTag.is_known(tag) else "UNKNOWN"
        print(f"  0x{tag:02X} {name:<18} {len(value):>5} bytes  {format_bytes(value, 24)}")
    if extraction.has_signature:
        print(f"  0xFF {'SIGNATURE':<18} {len(extraction.signature):>5} bytes  "
              f"(signed region: {len(extraction.signed_region)} bytes)")
    else:
        print("  (nessun campo firma)")


def print_document(document, payload: bytes) -> None:
    header = document.header
    print(f"\n{'='*70}")
    print(f"  MiDNI QR PAYLOAD ({len(payload)} bytes)")
    print(f"{'='*70}")
    print(f"Paese emittente:   {header.issuing_country}")
    print(f"Firmatario:        {header.signer_id}")
    print(f"Certificato:       {header.certificate_reference}")
    print(f"Data emissione:    {header.issuance_date.isoformat()}")
    print(f"Data firma:        {header.signature_date.isoformat()}")
    kind = header.verification_kind.label if header.verification_kind else f"0x{header.verification_kind_byte:02X}"
    print(f"Tipo verifica:     {kind}")
    print(f"Categoria:         {header.document_category}")
    print(f"{'-'*70}")
    print_field_table(payload)
    print(f"{'-'*70}")

    for key, value in document.to_dict().items():
        if key in ("header", "photo"):
            continue
        print(f"{key:<22} {value}")

    if document.photo is not None:
        print(f"{'photo':<22} {document.photo.width}x{document.photo.height} "
              f"({document.photo.component_count} components, {len(document.photo.image_bytes)} bytes PNG)")

    print(f"{'='*70}")
    status = "VALIDA" if document.signature_verified else "NON VERIFICATA"
    print(f"Firma: {status}")
    print(f"{'='*70}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midni-qr-inspect",
        description="Decode and verify a MiDNI QR payload file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", type=Path, help="Payload file (raw bytes, or base64 with --base64)")
    parser.add_argument("--base64", action="store_true", help="File contains base64 text")
    parser.add_argument("--trust-store", type=Path, metavar="DIR",
                        help="Directory of PEM issuer certificates (default: bundled anchors)")
    parser.add_argument("--json", action="store_true", help="Print the decoded document as JSON")
    parser.add_argument("--save-photo", type=Path, metavar="PATH", help="Write the photo as PNG")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point"""
    args = build_parser().parse_args(argv)

    if not args.file.exists():
        print(f"File non trovato: {args.file}", file=sys.stderr)
        return 1

    try:
        payload = read_payload(args.file, args.base64)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    config = QRParserConfig.from_env()
    if args.json:
        # Solo il documento JSON su stdout
        config = replace(config, log_level=logging.ERROR)
        QRLogger.set_all_levels(logging.ERROR)

    if args.trust_store is not None:
        try:
            store = TrustStoreManager.load_directory(args.trust_store)
        except FileNotFoundError as e:
            print(str(e), file=sys.stderr)
            return 1
    else:
        store = TrustStoreManager.from_config(config)

    try:
        document = DniQrParser(config=config, certificate_store=store).parse(payload)
    except QRPayloadError as e:
        print(f"Payload non valido ({type(e).__name__}): {e}", file=sys.stderr)
        return 2

    with document:
        if args.save_photo is not None and document.photo is not None:
            args.save_photo.write_bytes(document.photo.image_bytes)

        if args.json:
            print(json.dumps(document.to_dict(), indent=2, ensure_ascii=False))
        else:
            print_document(document, payload)

    return 0 if document.signature_verified else 3


if __name__ == "__main__":
    sys.exit(main())
