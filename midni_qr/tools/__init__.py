# Command-line tools for MiDNI QR
