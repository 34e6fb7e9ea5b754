"""
LogScope - Log Normalization and Tiered Anomaly Classification

Detects the format of arbitrary log files, normalizes every line into a
common record, and scores each record for security risk with a cascade of
OpenAI, Hugging Face zero-shot and a deterministic rule engine.
"""

__version__ = "1.0.0"
