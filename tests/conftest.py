"""Pytest configuration: ensure env vars and import path are set early.

This runs before any tests, so modules can import without local path hacks.
Also load .env before setting defaults so real values are used when present.
"""
from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Ensure repository root is on sys.path for local package imports
sys.path.append(str(Path(__file__).resolve().parents[1]))

load_dotenv(override=False)

# Keep test logs out of the working tree
os.environ.setdefault("BOT_ROUTER_LOG_DIR", tempfile.mkdtemp(prefix="bot-router-logs-"))
os.environ.setdefault("BOT_ROUTER_LOG_TO_FILE", "true")
os.environ.setdefault("BOT_ROUTER_LOG_LEVEL", "debug")
