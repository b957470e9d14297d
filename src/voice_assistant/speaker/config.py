"""Configuration constants for speaker identification."""

import os

# Identification
DEFAULT_IDENTIFICATION_THRESHOLD = 0.5  # cosine distance; accept strictly below
FOLLOW_UP_THRESHOLD_OVERRIDE = 0.8  # looser boundary while a follow-up window is open

# Enrollment
REQUIRED_ENROLLMENT_SAMPLES = 8
ADAPTIVE_THRESHOLD_FLOOR = 0.25
ADAPTIVE_THRESHOLD_CEILING = 0.55
ADAPTIVE_THRESHOLD_STDDEV_FACTOR = 2.0

# Embedding model
DEFAULT_MODEL_VERSION = "resemblyzer-v1"
EMBEDDING_DIM = 256
MIN_EMBEDDING_SAMPLES = 8000  # 0.5 seconds at 16kHz

# Storage Configuration
DEFAULT_SPEAKER_DB_PATH = os.path.expanduser("~/.local-voice-assistant/speakers.db")
DEFAULT_WAL_MODE = True

# Database Schema Version
SCHEMA_VERSION = 1
