"""
MiDNI QR Managers

- trust_store_manager: Issuer certificate stores (bundled or on-disk)
"""

from .trust_store_manager import CertificateStore, TrustStoreManager

__all__ = ['CertificateStore', 'TrustStoreManager']
