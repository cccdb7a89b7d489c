"""QR Code encoding with console rendering, and WS2812 LED helpers."""

__version__ = "0.1.0"
__all__ = ["segments", "ecc", "qrcode", "console", "ws2812"]