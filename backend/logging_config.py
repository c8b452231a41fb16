"""
MelonScope Logging Configuration - Color-Coded Console Logs

Provides:
- ColorFormatter: ANSI color-coded log output
- Helper functions: log_message_in, log_message_out, log_llm, log_image
- setup_logging(): Configure application logging

Usage:
    from logging_config import setup_logging, log_message_in, log_llm
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "User question", provider="groq", stream=True)
"""

import logging
import sys
from typing import Optional, Sequence

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - incoming message
    "MSG_OUT": "\033[92m",  # Green - outgoing response
    "IMAGE": "\033[95m",  # Magenta - image generation
    "LLM": "\033[94m",  # Blue - LLM operations
    "ERROR": "\033[91m",  # Red - errors
    "WARN": "\033[33m",  # Orange/Yellow - warnings
    "DEBUG": "\033[90m",  # Gray - debug info
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["DEBUG"],
        logging.INFO: COLORS["RESET"],
        logging.WARNING: COLORS["WARN"],
        logging.ERROR: COLORS["ERROR"],
        logging.CRITICAL: COLORS["ERROR"] + COLORS["BOLD"],
    }

    def format(self, record: logging.LogRecord) -> str:
        # Apply level-based color
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["RESET"])

        # Format: timestamp [LEVEL] message (no module name for compactness)
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]

        formatted = (
            f"{COLORS['DIM']}{timestamp}{COLORS['RESET']} "
            f"[{color}{level}{COLORS['RESET']}] "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure colored logging for the application."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter())

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# =============================================================================
# COLORED LOG HELPER FUNCTIONS
# =============================================================================


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log incoming user message.

    Args:
        logger: Logger instance
        message: User message text
        **context: Additional context (provider, model, stream, etc.)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"{COLORS['MSG_IN']}>>> MESSAGE{COLORS['RESET']} {preview} [{ctx}]")


def log_message_out(
    logger: logging.Logger,
    kind: str,
    models_used: Optional[Sequence[str]] = None,
    duration_ms: int = 0,
) -> None:
    """Log outgoing response.

    Args:
        logger: Logger instance
        kind: Reply shape ('buffered', 'stream' or 'composite')
        models_used: Models invoked for this reply
        duration_ms: Total orchestration time
    """
    models = ", ".join(models_used) if models_used else "none"
    logger.info(
        f"{COLORS['MSG_OUT']}<<< RESPONSE{COLORS['RESET']} "
        f"{kind} models=[{models}] total={duration_ms}ms"
    )


def log_llm(
    logger: logging.Logger,
    state: str,
    model: str = "",
    duration_ms: int = 0,
) -> None:
    """Log LLM call.

    Args:
        logger: Logger instance
        state: 'start' or 'end'
        model: Model name
        duration_ms: Call duration in milliseconds (for end state)
    """
    if state == "start":
        logger.info(f"{COLORS['LLM']}>>> LLM{COLORS['RESET']} calling {model}")
    else:
        logger.info(f"{COLORS['LLM']}<<< LLM{COLORS['RESET']} {model} completed in {duration_ms}ms")


def log_image(
    logger: logging.Logger,
    state: str,
    model: str = "",
    duration_ms: int = 0,
) -> None:
    """Log image generation call.

    Args:
        logger: Logger instance
        state: 'start' or 'end'
        model: Image model id
        duration_ms: Call duration in milliseconds (for end state)
    """
    if state == "start":
        logger.info(f"{COLORS['IMAGE']}>>> IMAGE{COLORS['RESET']} generating with {model}")
    else:
        logger.info(f"{COLORS['IMAGE']}<<< IMAGE{COLORS['RESET']} {model} completed in {duration_ms}ms")
