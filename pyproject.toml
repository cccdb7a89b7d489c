[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmkit"
version = "0.1.0"
description = "QR Code generation with console rendering, plus WS2812 LED pulse encoding and colour helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["qrcode", "qr", "reed-solomon", "ws2812", "led", "hsv", "console"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rmkit-qr = "rmkit.console:main"

[tool.hatch.build.targets.wheel]
packages = ["rmkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
