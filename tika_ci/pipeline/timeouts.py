from __future__ import annotations

# Local git operations (describe)
GIT_TIMEOUT_SECONDS = 30.0

# Multi-platform builds run under QEMU emulation and are slow
BUILD_TIMEOUT_SECONDS = 3 * 60 * 60.0

# Emulator install, builder creation
SETUP_TIMEOUT_SECONDS = 10 * 60.0

# docker run / inspect / rm / login
DOCKER_TIMEOUT_SECONDS = 2 * 60.0
