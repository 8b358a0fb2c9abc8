from __future__ import annotations

# GH / API operations
GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0

# Local toolchain
INSTALL_TIMEOUT_SECONDS = 20 * 60.0
BUILD_TIMEOUT_SECONDS = 30 * 60.0
